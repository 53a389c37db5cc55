#!/usr/bin/env python3
"""
Random Sources
==============
Engines take any ``random.Random``-compatible object and only call
``randrange``. This module hands out seedable generators: the same seed
gives the same sequence of names across runs and processes.

Unseeded generators mix several entropy sources into their seed:
- os.urandom() for the system entropy pool
- High-resolution time (nanoseconds)
- Process ID and a fresh object address
"""

import os
import time
import random
import hashlib
from typing import Optional


def entropy_seed() -> int:
    """Derive a 64-bit seed from several entropy sources."""
    hw_entropy = int.from_bytes(os.urandom(8), 'big')
    time_entropy = time.time_ns()
    pid_entropy = os.getpid() << 48
    mem_entropy = id(object()) & 0xFFFFFFFF

    combined = (hw_entropy ^ time_entropy ^ pid_entropy ^ mem_entropy) & ((1 << 256) - 1)
    digest = hashlib.sha256(combined.to_bytes(32, 'big')).digest()
    return int.from_bytes(digest[:8], 'big')


def new_rng(seed: Optional[int] = None) -> random.Random:
    """
    Create an independent generator.

    Args:
        seed: Fixed seed for reproducible output, or None for fresh entropy

    Returns:
        A random.Random instance owned by the caller
    """
    if seed is None:
        seed = entropy_seed()
    return random.Random(seed)


__all__ = [
    'entropy_seed',
    'new_rng',
]
