#!/usr/bin/env python3
"""
Word List Engine
================
Weighted choice from a list of learned words. Not a generator in the
statistical sense, but some name parts (titles, places) are best filled
from a fixed list.

Entries with a weight above one are kept at the front of the list. A roll
past their combined weight maps directly onto one of the weight-one
entries behind them, so picking from long lists of singletons is O(1).
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from ..core import GenerationState, LearnError, LearnErrorCode, ValidationError
from ..sample import Sample, SampleSet, WeightedWord, Word
from .base_generator import PartGenerator

logger = logging.getLogger(__name__)


@dataclass
class WordEntry:
    word: str
    weight: int = 1


class WordList(PartGenerator):
    """Weighted word list."""

    kind = 'generators::WordList'

    def __init__(self):
        self._entries: List[WordEntry] = []
        self._lookup: Dict[str, int] = {}
        self.one_cutoff_index = 0
        self.one_cutoff_weight = 0
        self.total_weight = 0

    @property
    def entries(self) -> List[WordEntry]:
        return list(self._entries)

    def generate(self, state: GenerationState, rng) -> str:
        if self.total_weight == 0:
            state.result_str = ''
            return state.result_str

        state.result_str = self._pick(rng.randrange(self.total_weight))
        return state.result_str

    def _pick(self, roll: int) -> str:
        if roll >= self.one_cutoff_weight:
            return self._entries[self.one_cutoff_index + roll - self.one_cutoff_weight].word

        for entry in self._entries:
            if roll < entry.weight:
                return entry.word
            roll -= entry.weight
        return ''

    def learn(self, sample_set: SampleSet) -> None:
        with self.transaction():
            for sample in sample_set.samples:
                self.learn_one(sample)

        logger.debug(f"WordList: {len(self._entries)} words, total weight {self.total_weight}")

    def learn_one(self, sample: Sample) -> None:
        if isinstance(sample, Word):
            word, weight = sample.text, 1
        elif isinstance(sample, WeightedWord):
            word, weight = sample.text, sample.weight
        else:
            raise LearnError(
                LearnErrorCode.WRONG_SAMPLE_KIND,
                "Incorrect sample type. Must be Word",
                sample,
            )

        if weight < 1:
            raise LearnError(
                LearnErrorCode.INVALID_WEIGHT,
                f"Word weight must be positive ({weight} provided)",
                sample,
            )

        self._add(word, weight)

    def _add(self, word: str, weight: int):
        self.total_weight += weight

        index = self._lookup.get(word)
        if index is None:
            index = len(self._entries)
            self._entries.append(WordEntry(word, weight))
            self._lookup[word] = index
            if weight > 1:
                self._promote(index)
            return

        entry = self._entries[index]
        if entry.weight > 1:
            entry.weight += weight
            self.one_cutoff_weight += weight
        else:
            entry.weight += weight
            self._promote(index)

    def _promote(self, index: int):
        """Move a freshly multi-weight entry to the end of the front partition."""
        cutoff = self.one_cutoff_index
        entries = self._entries
        if index != cutoff:
            entries[cutoff], entries[index] = entries[index], entries[cutoff]
            self._lookup[entries[cutoff].word] = cutoff
            self._lookup[entries[index].word] = index

        self.one_cutoff_index += 1
        self.one_cutoff_weight += entries[cutoff].weight

    def rebuild(self):
        """Re-derive the partition and totals from the entries."""
        entries = self._entries
        self._entries = []
        self._lookup = {}
        self.one_cutoff_index = 0
        self.one_cutoff_weight = 0
        self.total_weight = 0

        for entry in entries:
            self._add(entry.word, entry.weight)

    def validate(self) -> None:
        if sum(e.weight for e in self._entries) != self.total_weight:
            raise ValidationError(self.kind, "total_weight is not accurate.")

        front = self._entries[:self.one_cutoff_index]
        back = self._entries[self.one_cutoff_index:]
        if sum(e.weight for e in front) != self.one_cutoff_weight:
            raise ValidationError(self.kind, "one_cutoff_weight is not accurate.")
        if any(e.weight < 2 for e in front) or any(e.weight != 1 for e in back):
            raise ValidationError(self.kind, "entries are not partitioned by weight.")

        for index, entry in enumerate(self._entries):
            if self._lookup.get(entry.word) != index:
                raise ValidationError(self.kind, "word lookup is out of date.")


__all__ = [
    'WordList',
    'WordEntry',
]
