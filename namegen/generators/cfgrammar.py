#!/usr/bin/env python3
"""
Slot Grammar Name Engine
========================
Context-free "slot" grammar learned from labeled columns, e.g.

    cons vowel cons
    t    a     l
    k    i     r

Each label becomes a TokenRule (a pool of observed tokens) and each row
shape becomes a ResultRule (an ordered tuple of TokenRules). Generation
picks a ResultRule by weight and fills its slots from the pools, so the
output is any combination of learned column values, not just learned rows.

Tokens are sequences of subtokens. Subtokens are letter clusters found by
greedy longest-known-prefix match, so pre-seeded clusters such as 'th' or
'ae' act like single letters for the constraints:

- rlf: no subtoken appears more often than it did in one learned row
- ral: a slot's first subtoken may not repeat the previous slot's last one

Backtracking is deliberately asymmetric. An exhausted slot backtracks into
the previous slot (deep), while a frequency failure only retries the last
slot (shallow). Both shape which names are reachable.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from ..core import GenerationState, LearnError, LearnErrorCode, ValidationError
from ..sample import SampleSet, Tokens
from .base_generator import PartGenerator, pick_weighted

logger = logging.getLogger(__name__)

ANON_LABEL = '*'
ANON_PREFIX = 'anon_'


@dataclass
class TokenRule:
    """A named slot and the pool of tokens seen in it."""
    name: str
    tokens: List[int] = field(default_factory=list)


@dataclass
class ResultRule:
    """One learned row shape."""
    token_rules: Tuple[int, ...]
    weight: int = 0


class GrammarEngine(PartGenerator):
    """
    Learns labeled token rows and generates names slot by slot.

    Usage:
        engine = GrammarEngine(subtokens=['th', 'ae'], rlf=True, ral=True)
        engine.learn(SampleSet.of_tokens(['cons', 'vowel'], [['t', 'a'], ['k', 'i']]))
        name = engine.generate(GenerationState(), new_rng(7))
    """

    kind = 'generators::CFGrammar'

    def __init__(self,
                 subtokens: Sequence[str] = (),
                 rlf: bool = False,
                 ral: bool = False):
        self.rlf = rlf
        self.ral = ral

        self._subtokens: List[str] = []
        self._subtoken_lookup: Dict[str, int] = {}
        self._max_subtoken_len = 0
        self._subtoken_frequencies: List[int] = []

        self._tokens: List[Tuple[int, ...]] = []
        self._token_lookup: Dict[Tuple[int, ...], int] = {}

        self._token_rules: List[TokenRule] = []
        self._token_rule_lookup: Dict[str, int] = {}

        self._result_rules: List[ResultRule] = []
        self._result_lookup: Dict[Tuple[int, ...], int] = {}
        self.total_weight = 0

        for subtoken in subtokens:
            if subtoken:
                self._add_subtoken(subtoken)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    @property
    def subtokens(self) -> Tuple[str, ...]:
        return tuple(self._subtokens)

    @property
    def token_rules(self) -> Tuple[TokenRule, ...]:
        return tuple(self._token_rules)

    @property
    def result_rules(self) -> Tuple[ResultRule, ...]:
        return tuple(self._result_rules)

    def token_text(self, index: int) -> str:
        return ''.join(self._subtokens[s] for s in self._tokens[index])

    def subtoken_ceiling(self, subtoken: str) -> int:
        index = self._subtoken_lookup.get(subtoken)
        return 0 if index is None else self._subtoken_frequencies[index]

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def _exceeds_frequencies(self, subtokens: List[int]) -> bool:
        freqs = self._subtoken_frequencies
        return any(subtokens.count(s) > freqs[s] for s in subtokens)

    def generate(self, state: GenerationState, rng) -> str:
        result = state.result
        stack = state.stack
        stack_pos = state.stack_pos
        subtokens = state.subtokens

        result.clear()
        stack.clear()
        stack_pos.clear()
        subtokens.clear()
        state.result_str = ''

        if not self._result_rules:
            return state.result_str

        tokens = self._tokens
        slots: Tuple[int, ...] = ()

        while True:
            # Pick a row shape on the first pass or when every slot failed
            if not stack_pos:
                index = pick_weighted((r.weight for r in self._result_rules), self.total_weight, rng)
                slots = self._result_rules[index].token_rules
                result.clear()
                stack.clear()
                stack_pos.append(0)
                stack.extend(self._token_rules[slots[0]].tokens)

            pos = stack_pos[-1]
            if pos == len(stack):
                stack_pos.pop()
                if result:
                    result.pop()
                continue

            i = rng.randrange(pos, len(stack))
            token_index = stack[i]
            stack[i] = stack[-1]
            stack.pop()

            if self.ral and result:
                prev, current = tokens[result[-1]], tokens[token_index]
                if prev and current and current[0] == prev[-1]:
                    continue

            result.append(token_index)
            if len(result) < len(slots):
                stack_pos.append(len(stack))
                stack.extend(self._token_rules[slots[len(result)]].tokens)
                continue

            subtokens.clear()
            for t in result:
                subtokens.extend(tokens[t])

            if self.rlf and self._exceeds_frequencies(subtokens):
                result.pop()
                continue

            state.result_str = ''.join(self._subtokens[s] for s in subtokens)
            return state.result_str

    # -------------------------------------------------------------------------
    # Learning
    # -------------------------------------------------------------------------

    def _check_sample_set(self, sample_set: SampleSet) -> int:
        """Check the whole set before anything is mutated; return the column count."""
        columns = len(sample_set.labels)
        for sample in sample_set.samples:
            if not isinstance(sample, Tokens):
                raise LearnError(
                    LearnErrorCode.WRONG_SAMPLE_KIND,
                    "Word type sample not supported",
                    sample,
                )
            if not sample.tokens or (columns > 0 and columns != len(sample.tokens)):
                raise LearnError(
                    LearnErrorCode.LABEL_LENGTH_MISMATCH,
                    "Token lengths must match",
                    sample,
                )
            if columns == 0:
                columns = len(sample.tokens)

        for label in sample_set.labels:
            if label.startswith(ANON_PREFIX):
                raise LearnError(
                    LearnErrorCode.RESERVED_LABEL_PREFIX,
                    f"Labels cannot use reserved prefix ({ANON_PREFIX}): {label}",
                )
        return columns

    def learn(self, sample_set: SampleSet) -> None:
        columns = self._check_sample_set(sample_set)
        if not sample_set.samples:
            return

        with self.transaction():
            if sample_set.labels:
                rules = [
                    self._new_anon_rule() if label == ANON_LABEL else self._ensure_rule(label)
                    for label in sample_set.labels
                ]
            else:
                rules = [self._new_anon_rule() for _ in range(columns)]

            result_index = self._ensure_result_rule(tuple(rules))
            result_rule = self._result_rules[result_index]

            for sample in sample_set.samples:
                result_rule.weight += 1
                self.total_weight += 1

                composed: List[int] = []
                for rule, text in zip(rules, sample.tokens):
                    token_index = self._ensure_token(text)
                    self._token_rules[rule].tokens.append(token_index)
                    composed.extend(self._tokens[token_index])

                self._learn_frequencies(composed)

        logger.debug(f"CFGrammar: learned {len(sample_set.samples)} rows over {columns} columns, "
                     f"{len(self._result_rules)} result rules")

    def _learn_frequencies(self, composed: List[int]):
        freqs = self._subtoken_frequencies
        for subtoken, seen in Counter(composed).items():
            if freqs[subtoken] < seen:
                freqs[subtoken] = seen

    def _add_subtoken(self, subtoken: str) -> int:
        index = self._subtoken_lookup.get(subtoken)
        if index is not None:
            return index

        index = len(self._subtokens)
        self._subtokens.append(subtoken)
        self._subtoken_lookup[subtoken] = index
        self._subtoken_frequencies.append(1)
        self._max_subtoken_len = max(self._max_subtoken_len, len(subtoken))
        return index

    def _ensure_token(self, text: str) -> int:
        subtokens = []
        pos = 0
        while pos < len(text):
            size = min(self._max_subtoken_len, len(text) - pos)
            while size > 1 and text[pos:pos + size] not in self._subtoken_lookup:
                size -= 1
            size = max(size, 1)
            subtokens.append(self._add_subtoken(text[pos:pos + size]))
            pos += size

        key = tuple(subtokens)
        index = self._token_lookup.get(key)
        if index is None:
            index = len(self._tokens)
            self._tokens.append(key)
            self._token_lookup[key] = index
        return index

    def _new_anon_rule(self) -> int:
        index = len(self._token_rules)
        self._token_rules.append(TokenRule(name=f"{ANON_PREFIX}{index}"))
        return index

    def _ensure_rule(self, name: str) -> int:
        index = self._token_rule_lookup.get(name)
        if index is None:
            index = len(self._token_rules)
            self._token_rules.append(TokenRule(name=name))
            self._token_rule_lookup[name] = index
        return index

    def _ensure_result_rule(self, rules: Tuple[int, ...]) -> int:
        index = self._result_lookup.get(rules)
        if index is None:
            index = len(self._result_rules)
            self._result_rules.append(ResultRule(token_rules=rules))
            self._result_lookup[rules] = index
        return index

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _fail(self, message: str):
        raise ValidationError(self.kind, message)

    def validate(self) -> None:
        subtoken_count = len(self._subtokens)
        token_count = len(self._tokens)
        rule_count = len(self._token_rules)

        if sum(r.weight for r in self._result_rules) != self.total_weight:
            self._fail("total_weight is not accurate.")

        if len(self._subtoken_frequencies) != subtoken_count:
            self._fail("subtoken frequency table does not match the subtoken list.")

        for rule in self._result_rules:
            if rule.weight == 0:
                self._fail("result rule has zero weight.")
            if not rule.token_rules:
                self._fail("result rule has no slots.")
            for index in rule.token_rules:
                if not 0 <= index < rule_count:
                    self._fail("result rule has out of range token rule.")
                if not self._token_rules[index].tokens:
                    self._fail("result rule uses a token rule with no tokens.")

        for rule in self._token_rules:
            if any(not 0 <= t < token_count for t in rule.tokens):
                self._fail("token rule has out of range token.")

        for token in self._tokens:
            if any(not 0 <= s < subtoken_count for s in token):
                self._fail("token has out of range subtoken.")


__all__ = [
    'GrammarEngine',
    'TokenRule',
    'ResultRule',
    'ANON_LABEL',
    'ANON_PREFIX',
]
