#!/usr/bin/env python3
"""
Generator Base Class
====================
Common interface for every name engine:

- learn(sample_set): grow the model from samples, all-or-nothing per set
- generate(state, rng): sample one name into a caller-owned GenerationState
- validate(): raise ValidationError if the model breaks an invariant

Plus the helpers the engines share: snapshot/restore transactions for
batch learning and cumulative-weight selection.
"""

import copy
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterable, Iterator

from ..core import GenerationState, LearnError
from ..sample import SampleSet

logger = logging.getLogger(__name__)


# =============================================================================
# Weighted Selection
# =============================================================================

def pick_weighted(weights: Iterable[int], total: int, rng) -> int:
    """
    Pick an index proportional to its weight by cumulative scan.

    ``total`` must equal ``sum(weights)`` and be positive. Falls back to
    index 0 if the weights undershoot the total.
    """
    roll = rng.randrange(total)
    for i, weight in enumerate(weights):
        if roll < weight:
            return i
        roll -= weight
    return 0


# =============================================================================
# Base Class
# =============================================================================

class PartGenerator(ABC):
    """
    Abstract base class for learnable name engines.

    Engines keep their whole model in instance attributes so a deep copy of
    ``__dict__`` is a complete snapshot.
    """

    # Engine label used in ValidationError.kind
    kind: str = 'generator'

    @abstractmethod
    def learn(self, sample_set: SampleSet) -> None:
        """Learn every sample in the set or none of them."""
        pass

    @abstractmethod
    def generate(self, state: GenerationState, rng) -> str:
        """Write one name into ``state.result_str`` and return it."""
        pass

    @abstractmethod
    def validate(self) -> None:
        """Raise ValidationError if the model is inconsistent."""
        pass

    def generate_many(self, count: int, state: GenerationState, rng) -> Iterator[str]:
        """Yield ``count`` names, reusing one state."""
        for _ in range(count):
            yield self.generate(state, rng)

    @contextmanager
    def transaction(self):
        """
        Snapshot the model and restore it if a LearnError escapes.

        The snapshot is a deep copy of the whole engine, which is cheap for
        graphs of a few hundred nodes.
        """
        snapshot = copy.deepcopy(self.__dict__)
        try:
            yield
        except LearnError as e:
            self.__dict__.clear()
            self.__dict__.update(snapshot)
            logger.warning(f"{self.kind}: learn batch rolled back: {e}")
            raise


__all__ = [
    'PartGenerator',
    'pick_weighted',
]
