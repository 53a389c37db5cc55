#!/usr/bin/env python3
"""
namegen - Procedural Name Generation
====================================

Learns short strings (names) from samples and generates new ones that
resemble them, with reproducible, independently seeded generators.

Quick Start
-----------
    from namegen import MarkovEngine, GenerationState, SampleSet, new_rng

    engine = MarkovEngine(tokens=['th', 'ae'], lrs=True)
    engine.learn(SampleSet.of_words(['aeyna', 'ilyna', 'renala', 'vynira']))

    state = GenerationState()
    rng = new_rng(42)
    names = [engine.generate(state, rng) for _ in range(10)]

Modules
-------
    namegen.generators - Markov, slot grammar and word-list engines
    namegen.sample     - Learning samples and sample files
    namegen.core       - GenerationState and error types
    namegen.part       - Named engine wrapper

CLI Usage
---------
    python -m namegen markov names.txt -n 20 --seed 7
    python -m namegen grammar rows.txt --rlf --ral
"""

__version__ = "0.1.0"

from .core import (
    GenerationState,
    WorkingSet,
    LearnError,
    LearnErrorCode,
    ValidationError,
)
from .sample import (
    Sample,
    Word,
    WeightedWord,
    Tokens,
    SampleSet,
    load_sample_sets,
)
from .generators import (
    PartGenerator,
    MarkovEngine,
    GrammarEngine,
    WordList,
    Markov,
    CFGrammar,
    new_rng,
)
from .part import NamePart, find_part, learn_parts

__all__ = [
    '__version__',
    # Core
    'GenerationState',
    'WorkingSet',
    'LearnError',
    'LearnErrorCode',
    'ValidationError',
    # Samples
    'Sample',
    'Word',
    'WeightedWord',
    'Tokens',
    'SampleSet',
    'load_sample_sets',
    # Engines
    'PartGenerator',
    'MarkovEngine',
    'GrammarEngine',
    'WordList',
    'Markov',
    'CFGrammar',
    'new_rng',
    # Parts
    'NamePart',
    'find_part',
    'learn_parts',
]
