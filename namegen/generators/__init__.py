#!/usr/bin/env python3
"""
Name Engines
============
Provides the learnable generation strategies:
- Markov: token-level Markov chain with faithfulness constraints
- CFGrammar: slot grammar over labeled columns
- WordList: weighted choice from learned words
"""

from .base_generator import (
    PartGenerator,
    pick_weighted,
)
from .markov import (
    MarkovEngine,
    StartNode,
    Node,
)
from .cfgrammar import (
    GrammarEngine,
    TokenRule,
    ResultRule,
)
from .wordlist import (
    WordList,
    WordEntry,
)
from .entropy import (
    new_rng,
)

# Clean aliases
Markov = MarkovEngine
CFGrammar = GrammarEngine

__all__ = [
    'PartGenerator',
    'pick_weighted',
    # Markov
    'Markov',
    'MarkovEngine',
    'StartNode',
    'Node',
    # Grammar
    'CFGrammar',
    'GrammarEngine',
    'TokenRule',
    'ResultRule',
    # Word list
    'WordList',
    'WordEntry',
    # Randomness
    'new_rng',
]
