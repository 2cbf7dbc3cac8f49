"""Deterministic string → [0, 1] hash used for rollout and variant bucketing.

SHA-256 of the UTF-8 input, first two 32-bit big-endian words XOR-ed together,
divided by 0xFFFFFFFF. The XOR is taken over unsigned words, so the result
is never negative. Other implementations sharing a salt scheme must use
the same construction to bucket subjects identically.
"""

from __future__ import annotations

import hashlib
import struct

_MAX_UINT32 = 0xFFFFFFFF


def deterministic_hash(value: str) -> float:
    digest = hashlib.sha256(value.encode("utf-8")).digest()
    high, low = struct.unpack(">II", digest[:8])
    return (high ^ low) / _MAX_UINT32
