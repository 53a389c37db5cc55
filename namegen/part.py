#!/usr/bin/env python3
"""
Name Parts
==========
A NamePart gives one engine a name and routes learn/generate/validate to
it. Validation errors raised by the engine are relabelled with the part
name so a host holding many parts can tell them apart.
"""

from typing import Dict, Iterable, Optional, Sequence

from .core import GenerationState, LearnError, LearnErrorCode, ValidationError, require_state
from .generators import GrammarEngine, MarkovEngine, PartGenerator, WordList, new_rng
from .sample import SampleSet


class NamePart:
    """A named engine."""

    def __init__(self, name: str, generator: PartGenerator):
        self.name = name
        self.generator = generator

    @classmethod
    def markov(cls, name: str, tokens: Sequence[str] = (),
               lrs: bool = False, lrm: bool = False, lre: bool = False,
               rtf: bool = False) -> 'NamePart':
        return cls(name, MarkovEngine(tokens, lrs=lrs, lrm=lrm, lre=lre, rtf=rtf))

    @classmethod
    def cfgrammar(cls, name: str, subtokens: Sequence[str] = (),
                  rlf: bool = False, ral: bool = False) -> 'NamePart':
        return cls(name, GrammarEngine(subtokens, rlf=rlf, ral=ral))

    @classmethod
    def wordlist(cls, name: str) -> 'NamePart':
        return cls(name, WordList())

    def learn(self, sample_set: SampleSet) -> None:
        self.generator.learn(sample_set)

    def generate(self, state: Optional[GenerationState] = None, rng=None) -> str:
        """Generate one name; a throwaway state and RNG are made if omitted."""
        state = require_state(state)
        if rng is None:
            rng = new_rng()
        return self.generator.generate(state, rng)

    def validate(self) -> None:
        try:
            self.generator.validate()
        except ValidationError as e:
            raise e.with_name(self.name) from e

    def __repr__(self) -> str:
        return f"NamePart({self.name!r}, {type(self.generator).__name__})"


def find_part(parts: Iterable[NamePart], name: str) -> NamePart:
    """Look up a part by name, raising PART_NOT_FOUND if missing."""
    for part in parts:
        if part.name == name:
            return part
    raise LearnError(LearnErrorCode.PART_NOT_FOUND, f"Part not found: {name}")


def learn_parts(parts: Iterable[NamePart], sample_sets: Dict[str, SampleSet]) -> None:
    """Learn each sample set into the part with the matching name."""
    parts = list(parts)
    for name, sample_set in sample_sets.items():
        find_part(parts, name).learn(sample_set)


__all__ = [
    'NamePart',
    'find_part',
    'learn_parts',
]
