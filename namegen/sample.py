#!/usr/bin/env python3
"""
Learning Samples
================
Input protocol for ``learn``. A sample is one of:

- Word: a whole word, learned by the Markov and word-list engines
- WeightedWord: a word with an integer weight (word list only)
- Tokens: an ordered list of column values, learned by the grammar engine

A SampleSet bundles samples with optional column labels.

Sample files
------------
Sets are separated by blank lines and ``#`` starts a comment line.
For word engines every line is one word, optionally suffixed with
``*<weight>``. For the grammar engine the first line of a set holds the
labels and every following line holds one sample's tokens.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Tuple, Union


# =============================================================================
# Sample Types
# =============================================================================

class Sample:
    """Base class for all sample kinds."""
    __slots__ = ()


@dataclass(frozen=True)
class Word(Sample):
    """A whole word."""
    text: str


@dataclass(frozen=True)
class WeightedWord(Sample):
    """A word counted ``weight`` times."""
    text: str
    weight: int


@dataclass(frozen=True)
class Tokens(Sample):
    """Column values of one grammar row."""
    tokens: Tuple[str, ...]

    def __init__(self, tokens: Sequence[str]):
        object.__setattr__(self, 'tokens', tuple(tokens))


@dataclass
class SampleSet:
    """Samples learned together, with optional column labels."""
    labels: List[str] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list)

    def add_sample(self, sample: Sample):
        self.samples.append(sample)

    def add_word(self, text: str, weight: int = 1):
        if weight == 1:
            self.samples.append(Word(text))
        else:
            self.samples.append(WeightedWord(text, weight))

    def add_tokens(self, tokens: Sequence[str]):
        self.samples.append(Tokens(tokens))

    def __len__(self) -> int:
        return len(self.samples)

    @classmethod
    def of_words(cls, words: Sequence[str]) -> 'SampleSet':
        """Build an unlabeled set of Word samples."""
        return cls(samples=[Word(w) for w in words])

    @classmethod
    def of_tokens(cls, labels: Sequence[str], rows: Sequence[Sequence[str]]) -> 'SampleSet':
        """Build a labeled set of Tokens samples."""
        return cls(labels=list(labels), samples=[Tokens(row) for row in rows])


# =============================================================================
# Sample File Loading
# =============================================================================

def _split_blocks(text: str) -> List[List[str]]:
    blocks: List[List[str]] = []
    current: List[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if line.startswith('#'):
            continue
        if not line:
            if current:
                blocks.append(current)
                current = []
            continue
        current.append(line)
    if current:
        blocks.append(current)
    return blocks


def parse_word_line(line: str) -> Union[Word, WeightedWord]:
    """Parse ``word`` or ``word*weight``."""
    if '*' in line:
        text, _, weight = line.rpartition('*')
        try:
            return WeightedWord(text.strip(), int(weight))
        except ValueError:
            raise ValueError(f"Invalid weight in sample line: {line!r}")
    return Word(line)


def parse_sample_sets(text: str, kind: str = 'word') -> List[SampleSet]:
    """
    Parse sample file content.

    Args:
        text: File content
        kind: 'word' for Markov/word-list sets, 'tokens' for grammar sets

    Returns:
        List of SampleSets, one per blank-line separated block
    """
    if kind not in ('word', 'tokens'):
        raise ValueError(f"Unknown sample kind '{kind}'. Use 'word' or 'tokens'")

    sets = []
    for block in _split_blocks(text):
        if kind == 'word':
            sets.append(SampleSet(samples=[parse_word_line(line) for line in block]))
        else:
            labels = block[0].split()
            sets.append(SampleSet.of_tokens(labels, [line.split() for line in block[1:]]))
    return sets


def load_sample_sets(path: Path, kind: str = 'word') -> List[SampleSet]:
    """Load sample sets from a UTF-8 sample file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sample file not found: {path}")
    return parse_sample_sets(path.read_text(encoding='utf-8'), kind=kind)


__all__ = [
    'Sample',
    'Word',
    'WeightedWord',
    'Tokens',
    'SampleSet',
    'parse_word_line',
    'parse_sample_sets',
    'load_sample_sets',
]
