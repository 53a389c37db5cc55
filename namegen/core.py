#!/usr/bin/env python3
"""
Core Types
==========
Shared generation state and the error types raised by every engine.

GenerationState is the caller-owned bundle of scratch buffers that makes
repeated generation allocation-free once the buffers have grown. Keep one
state per thread (or per concurrent caller) and generation is thread safe.
"""

from enum import Enum
from typing import List, Optional


# =============================================================================
# Generation State
# =============================================================================

class GenerationState:
    """
    Scratch buffers reused across ``generate`` calls.

    Engines clear the buffers they use at the start of every call instead
    of rebinding them, so the lists keep their grown capacity. The string
    returned by ``generate`` is ``result_str`` and is only valid until the
    next call on the same state.
    """

    __slots__ = (
        'result',
        'result_str',
        'result_chars',
        'result_total',
        'stack',
        'stack_pos',
        'stack_weight',
        'subtokens',
    )

    def __init__(self):
        self.result: List[int] = []
        self.result_str: str = ''
        # Only used by a formatting layer on top of the engines.
        self.result_chars: List[str] = []
        self.result_total: str = ''
        self.stack: List[int] = []
        self.stack_pos: List[int] = []
        self.stack_weight: List[int] = []
        self.subtokens: List[int] = []

    def get_result(self) -> str:
        """Get the result of the last generate call."""
        return self.result_str

    def clear(self):
        """Reset every buffer in place."""
        self.result.clear()
        self.result_chars.clear()
        self.stack.clear()
        self.stack_pos.clear()
        self.stack_weight.clear()
        self.subtokens.clear()
        self.result_str = ''
        self.result_total = ''


# Alias kept for readers coming from the WorkingSet naming
WorkingSet = GenerationState


# =============================================================================
# Errors
# =============================================================================

class LearnErrorCode(Enum):
    """Reasons a sample set can be refused by ``learn``."""
    INSUFFICIENT_TOKENS = 0
    WRONG_SAMPLE_KIND = 1
    LABEL_LENGTH_MISMATCH = 3
    RESERVED_LABEL_PREFIX = 4
    PART_NOT_FOUND = 5
    INVALID_WEIGHT = 6


class LearnError(ValueError):
    """
    Raised when a sample set cannot be learned.

    Attributes:
        code: LearnErrorCode describing the failure
        description: Human readable message
        sample: The offending sample, when one sample is to blame
    """

    def __init__(self, code: LearnErrorCode, description: str, sample=None):
        super().__init__(description)
        self.code = code
        self.description = description
        self.sample = sample

    def __str__(self) -> str:
        if self.sample is not None:
            return f"LearnError {self.sample!r}: {self.description} (code: {self.code.name})"
        return f"LearnError: {self.description} (code: {self.code.name})"


class ValidationError(ValueError):
    """
    Raised by ``validate()`` when an engine's state breaks an invariant.

    ``kind`` names the engine type, ``name`` the part it belongs to (empty
    until a NamePart relabels it) and ``message`` the violated invariant.
    """

    def __init__(self, kind: str, message: str, name: str = ''):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.name = name

    def with_name(self, name: str) -> 'ValidationError':
        """Copy of this error attributed to the named part."""
        return ValidationError(self.kind, self.message, name=name)

    def __str__(self) -> str:
        return f"{self.kind}({self.name}): {self.message}"


def require_state(state: Optional[GenerationState]) -> GenerationState:
    """Return the given state, or a fresh one for one-off calls."""
    if state is None:
        return GenerationState()
    return state


__all__ = [
    'GenerationState',
    'WorkingSet',
    'LearnErrorCode',
    'LearnError',
    'ValidationError',
    'require_state',
]
