#!/usr/bin/env python3
"""
Markov Chain Name Engine
========================
Token-level Markov chain with a two-token context, trained on whole words
and sampled by a weighted backtracking walk.

Key features:
- Multi-character tokens (digraphs, vowel pairs) via pre-seeded tokens
- Length faithfulness for starts, middles and endings
- Token frequency ceilings learned per sample
- Allocation-free generation through a reusable GenerationState

Model
-----
Every learned word contributes a StartNode (its first two tokens) and a
chain of Nodes keyed by (two-token context, token, length, ending). A node
lists as children every node that can follow its trailing two tokens, and
its weight is the number of ways to reach an ending from it. Generation
picks children proportional to weight and backtracks when a constraint
rejects every candidate of a frame.

Constraints trade variety for faithfulness:
- lrs: the output has exactly the length of the word its start came from
- lrm: middle nodes are only shared between words of the same length
- lre: endings are only accepted at the length they were learned at
- rtf: no token appears more often than it did within one learned word
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..core import GenerationState, LearnError, LearnErrorCode, ValidationError
from ..sample import Sample, SampleSet, WeightedWord, Word
from .base_generator import PartGenerator, pick_weighted

logger = logging.getLogger(__name__)

# Shortest learnable word, in tokens
MIN_TOKENS = 3


# =============================================================================
# Graph Entities
# =============================================================================

@dataclass
class StartNode:
    """The first two tokens of a learned word."""
    tokens: Tuple[int, int]
    weight: int = 1
    length: int = 0
    children: List[int] = field(default_factory=list)


@dataclass
class Node:
    """A transition state: ``token`` following the context ``prev``."""
    prev: Tuple[int, int]
    token: int
    weight: int = 1
    length: int = 0
    children: List[int] = field(default_factory=list)
    ending: bool = False


# =============================================================================
# Engine
# =============================================================================

class MarkovEngine(PartGenerator):
    """
    Learns whole words and generates new ones that follow the same
    token transitions.

    Usage:
        engine = MarkovEngine(tokens=['th', 'ae'], lrs=True, rtf=True)
        engine.learn(SampleSet.of_words(['aeyna', 'ilyna', 'renala']))
        name = engine.generate(GenerationState(), new_rng(42))
    """

    kind = 'generators::Markov'

    def __init__(self,
                 tokens: Sequence[str] = (),
                 lrs: bool = False,
                 lrm: bool = False,
                 lre: bool = False,
                 rtf: bool = False):
        """
        Args:
            tokens: Letter clusters treated as one token (e.g. 'th', 'ae')
            lrs: Restrict output length to the chosen start's word length
            lrm: Key middle nodes by word length
            lre: Key ending nodes by word length and enforce it
            rtf: Restrict token frequencies to learned per-word maximums
        """
        self.lrs = lrs
        self.lrm = lrm
        self.lre = lre
        self.rtf = rtf

        self._tokens: List[str] = []
        self._token_lookup: Dict[str, int] = {}
        self._max_token_len = 0
        self._max_tokens: List[int] = []

        self._starts: List[StartNode] = []
        self._start_lookup: Dict[Tuple[int, int, int], int] = {}
        self.total_starts = 0

        self._nodes: List[Node] = []
        self._node_lookup: Dict[Tuple[int, int, int, int, bool], int] = {}
        # (last context token, token, length) -> non-ending nodes with that tail
        self._tails: Dict[Tuple[int, int, int], List[int]] = {}

        self._lengths: List[int] = [0] * 8
        self.total_lengths = 0

        for token in tokens:
            if token:
                self._add_token(token)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    @property
    def tokens(self) -> Tuple[str, ...]:
        return tuple(self._tokens)

    @property
    def starts(self) -> Tuple[StartNode, ...]:
        return tuple(self._starts)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return tuple(self._nodes)

    @property
    def lengths(self) -> Tuple[int, ...]:
        """Length histogram; bucket ``i`` counts words of ``i + 3`` tokens."""
        return tuple(self._lengths)

    def token_ceiling(self, token: str) -> int:
        """Most times ``token`` appeared within one learned word."""
        index = self._token_lookup.get(token)
        return 0 if index is None else self._max_tokens[index]

    def format_tree(self, max_depth: int = 12) -> str:
        """Render the learned graph as an indented tree."""
        lines = []
        for start in self._starts:
            lines.append(
                f"{self._tokens[start.tokens[0]]}{self._tokens[start.tokens[1]]} "
                f"l={start.length} w={start.weight}"
            )
            for child in start.children:
                self._format_node(child, 1, max_depth, lines)
        return '\n'.join(lines)

    def _format_node(self, index: int, depth: int, max_depth: int, lines: List[str]):
        if depth == max_depth:
            lines.append('  ' * depth + '...')
            return

        node = self._nodes[index]
        lines.append(
            f"{'  ' * depth}{self._tokens[node.token]} l={node.length} "
            f"w={node.weight} e={node.ending} i={index}"
        )
        for child in node.children:
            self._format_node(child, depth + 1, max_depth, lines)

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def _pick_length(self, rng) -> int:
        return MIN_TOKENS + pick_weighted(self._lengths, self.total_lengths, rng)

    def _pick_start(self, rng) -> int:
        return pick_weighted((s.weight for s in self._starts), self.total_starts, rng)

    def generate(self, state: GenerationState, rng) -> str:
        """
        Generate a name into ``state`` and return it.

        The search has no iteration cap: with strict constraints and sparse
        samples it can take a long time to find an accepted path.
        """
        result = state.result
        stack = state.stack
        stack_pos = state.stack_pos
        stack_weight = state.stack_weight

        result.clear()
        stack.clear()
        stack_pos.clear()
        stack_weight.clear()
        state.result_str = ''

        if not self._starts:
            return state.result_str

        nodes = self._nodes
        length = 1

        while len(result) < length:
            # (Re)start when every frame has been exhausted
            if not stack_pos:
                start = self._starts[self._pick_start(rng)]

                result.clear()
                stack.clear()
                result.extend(start.tokens)
                stack.extend(start.children)
                stack_pos.append(0)
                stack_weight.append(sum(nodes[c].weight for c in start.children))

                length = start.length if self.lrs else self._pick_length(rng)

            pos = stack_pos[-1]
            if len(stack) == pos:
                stack_pos.pop()
                stack_weight.pop()
                result.pop()
                continue

            # Pick a remaining candidate of the top frame by weight
            roll = rng.randrange(stack_weight[-1])
            i = pos
            while roll >= nodes[stack[i]].weight:
                roll -= nodes[stack[i]].weight
                i += 1

            node = nodes[stack[i]]
            stack[i] = stack[-1]
            stack.pop()
            stack_weight[-1] -= node.weight

            # Endings are only accepted as the last token
            ending = len(result) == length - 1
            if node.ending != ending:
                continue
            if self.lre and ending and node.length != length:
                continue
            if self.rtf and result.count(node.token) + 1 > self._max_tokens[node.token]:
                continue

            result.append(node.token)
            stack_pos.append(len(stack))
            stack_weight.append(sum(nodes[c].weight for c in node.children))
            stack.extend(node.children)

        state.result_str = ''.join(self._tokens[t] for t in result)
        return state.result_str

    # -------------------------------------------------------------------------
    # Learning
    # -------------------------------------------------------------------------

    def learn(self, sample_set: SampleSet) -> None:
        """
        Learn every sample in the set.

        Sets of more than one sample are applied atomically: on the first
        failing sample the engine is restored and the LearnError re-raised.
        """
        samples = sample_set.samples
        if len(samples) == 1:
            self.learn_one(samples[0])
            return

        with self.transaction():
            for sample in samples:
                self._learn_sample(sample)
            self.recalculate_weights()

        logger.debug(f"Markov: learned {len(samples)} samples, "
                     f"{len(self._nodes)} nodes, {len(self._tokens)} tokens")

    def learn_one(self, sample: Sample) -> None:
        """
        Learn a single sample.

        When the sample only added fresh nodes below fresh parents, just
        the touched nodes are recalculated. A new link under a node that
        existed before, or a link pointing back to an older node, can
        change weights further up the graph, so those fall back to a full
        recalculation.
        """
        touched, relinked = self._learn_sample(sample)
        if relinked:
            self.recalculate_weights()
        else:
            self._recalculate_touched(touched)

    def _add_token(self, token: str) -> int:
        index = self._token_lookup.get(token)
        if index is not None:
            return index

        index = len(self._tokens)
        self._tokens.append(token)
        self._token_lookup[token] = index
        self._max_tokens.append(0)
        self._max_token_len = max(self._max_token_len, len(token))
        return index

    def _split(self, word: str) -> List[str]:
        """Split a word into the longest known tokens, single chars otherwise."""
        parts = []
        pos = 0
        while pos < len(word):
            size = min(self._max_token_len, len(word) - pos)
            while size > 1 and word[pos:pos + size] not in self._token_lookup:
                size -= 1
            size = max(size, 1)
            parts.append(word[pos:pos + size])
            pos += size
        return parts

    def _learn_sample(self, sample: Sample) -> Tuple[Set[int], bool]:
        if isinstance(sample, (Word, WeightedWord)):
            word = sample.text
        else:
            raise LearnError(
                LearnErrorCode.WRONG_SAMPLE_KIND,
                "Incorrect sample type. Must be Word",
                sample,
            )

        parts = self._split(word)
        if len(parts) < MIN_TOKENS:
            raise LearnError(
                LearnErrorCode.INSUFFICIENT_TOKENS,
                f"{MIN_TOKENS} or more tokens required ({len(parts)} provided)",
                sample,
            )

        known = len(self._tokens)
        tokens = [self._add_token(p) for p in parts]
        if len(self._tokens) > known:
            logger.debug(f"Markov: new tokens {self._tokens[known:]} from {word!r}")
        count = len(tokens)

        if self.rtf:
            for token, seen in Counter(tokens).items():
                if self._max_tokens[token] < seen:
                    self._max_tokens[token] = seen

        # Start
        start_length = count if self.lrs else 0
        start_key = (tokens[0], tokens[1], start_length)
        start_index = self._start_lookup.get(start_key)
        if start_index is None:
            start_index = len(self._starts)
            self._starts.append(StartNode(tokens=(tokens[0], tokens[1]), length=start_length))
            self._start_lookup[start_key] = start_index
        else:
            self._starts[start_index].weight += 1
        self.total_starts += 1

        # Length histogram
        bucket = count - MIN_TOKENS
        while len(self._lengths) <= bucket:
            self._lengths.append(0)
        self._lengths[bucket] += 1
        self.total_lengths += 1

        # Transitions
        touched: Set[int] = set()
        relinked = False
        first_new = len(self._nodes)
        prev = (tokens[0], tokens[1])
        length_m = count if self.lrm else 0
        length_e = count if self.lre else 0
        for i in range(2, count):
            token = tokens[i]
            ending = i == count - 1
            length = length_e if ending else length_m

            key = (prev[0], prev[1], token, length, ending)
            current = self._node_lookup.get(key)
            if current is None:
                current = len(self._nodes)
                self._nodes.append(Node(prev=prev, token=token, length=length, ending=ending))
                self._node_lookup[key] = current
                if not ending:
                    self._tails.setdefault((prev[1], token, length), []).append(current)
                touched.add(current)

            if i == 2:
                children = self._starts[start_index].children
                if current not in children:
                    children.append(current)
            else:
                for parent in self._tails.get((prev[0], prev[1], length_m), ()):
                    children = self._nodes[parent].children
                    if current not in children:
                        children.append(current)
                        touched.add(parent)
                        if parent < first_new or current <= parent:
                            relinked = True

            prev = (prev[1], token)

        return touched, relinked

    def _recalculate_touched(self, touched: Set[int]):
        nodes = self._nodes
        for index in sorted(touched, reverse=True):
            node = nodes[index]
            if node.ending:
                node.weight = 1
            else:
                node.weight = sum(nodes[c].weight for c in node.children)

    def recalculate_weights(self):
        """
        Recompute every node weight from the endings outward.

        Layer by layer, a node is settled once all of its children are,
        taking the sum of their weights. Nodes on a cycle never settle that
        way; they are settled afterwards in reverse creation order from
        their settled children, with a floor of 1.
        """
        nodes = self._nodes
        parents: List[List[int]] = [[] for _ in nodes]
        pending = [len(node.children) for node in nodes]
        settled = [False] * len(nodes)

        for index, node in enumerate(nodes):
            for child in node.children:
                parents[child].append(index)

        frontier = []
        for index, node in enumerate(nodes):
            if node.ending:
                node.weight = 1
                frontier.append(index)

        while frontier:
            next_frontier = []
            for index in frontier:
                settled[index] = True
                for parent in parents[index]:
                    pending[parent] -= 1
                    if pending[parent] == 0 and not settled[parent]:
                        next_frontier.append(parent)

            for index in next_frontier:
                node = nodes[index]
                node.weight = sum(nodes[c].weight for c in node.children)
            frontier = next_frontier

        cyclic = [i for i in range(len(nodes) - 1, -1, -1) if not settled[i]]
        for index in cyclic:
            node = nodes[index]
            node.weight = max(1, sum(nodes[c].weight for c in node.children if settled[c]))
            settled[index] = True

        if cyclic:
            logger.debug(f"Markov: {len(cyclic)} nodes settled on cycles")

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _fail(self, message: str):
        raise ValidationError(self.kind, message)

    def validate(self) -> None:
        token_count = len(self._tokens)
        node_count = len(self._nodes)

        if sum(self._lengths) != self.total_lengths:
            self._fail("total_lengths is not accurate.")

        if sum(s.weight for s in self._starts) != self.total_starts:
            self._fail("total_starts is not accurate.")

        if len(self._max_tokens) != token_count:
            self._fail("token ceiling table does not match the token list.")

        for start in self._starts:
            if start.length == 0 and self.lrs:
                self._fail("start.length cannot be zero if lrs is true.")
            if start.weight == 0:
                self._fail("start has zero weight.")
            for child in start.children:
                if not 0 <= child < node_count:
                    self._fail("start has out of range child.")
            if any(not 0 <= t < token_count for t in start.tokens):
                self._fail("start has out of range token.")

        for node in self._nodes:
            if node.length == 0 and (self.lre if node.ending else self.lrm):
                self._fail("node.length cannot be zero if lrm/lre is true.")
            for child in node.children:
                if not 0 <= child < node_count:
                    self._fail("node has out of range child.")
            if not 0 <= node.token < token_count:
                self._fail("node has out of range token.")
            if node.weight == 0:
                self._fail("node has zero weight.")
            if node.ending and node.weight != 1:
                self._fail("ending node cannot have weight <> 1.")
            if node.ending and node.children:
                self._fail("ending node cannot have children.")
            if any(not 0 <= t < token_count for t in node.prev):
                self._fail("node has out of range prev.")


__all__ = [
    'MarkovEngine',
    'StartNode',
    'Node',
    'MIN_TOKENS',
]
