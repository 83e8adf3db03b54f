"""Scaled I/Q sample codec for alvl blocks.

Stored samples are signed 16-bit (I, Q) pairs. The physical value of a stored
integer n is n / full_scale * scale, where full_scale comes from the fbin
selector and scale from the scal block.
"""
from __future__ import annotations

import math
import struct
from warnings import warn

from .protocol import SAMPLE_MAX, SAMPLE_MIN, SAMPLE_PAIR_LEN

PAIR_FMT = "=hh"


def round_half_away(x: float) -> int:
    """Round to nearest, ties away from zero (C `round`)."""
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def to_physical(raw: int, full_scale: float, scale: float) -> float:
    return raw / full_scale * scale


def to_fixed(value: float, full_scale: float, scale: float) -> int:
    """Quantize a physical value, saturating to the int16 range."""
    scaled = value / scale * full_scale
    if math.isnan(scaled):
        raise ValueError(f"sample value {value!r} is not a number")
    n = round_half_away(scaled) if math.isfinite(scaled) else None
    if n is None or n > SAMPLE_MAX or n < SAMPLE_MIN:
        clipped = SAMPLE_MAX if scaled > 0 else SAMPLE_MIN
        warn(f"Sample {value!r} saturates to {clipped}")
        return clipped
    return n


def pair_count(payload: bytes | bytearray) -> int:
    return len(payload) // SAMPLE_PAIR_LEN


def unpack_pairs(payload: bytes | bytearray) -> list[tuple[int, int]]:
    """Host-order (I, Q) pairs; trailing bytes short of a pair are ignored."""
    end = pair_count(payload) * SAMPLE_PAIR_LEN
    return list(struct.iter_unpack(PAIR_FMT, bytes(payload[:end])))


def pack_pairs(pairs: list[tuple[int, int]]) -> bytearray:
    out = bytearray(len(pairs) * SAMPLE_PAIR_LEN)
    for n, (i, q) in enumerate(pairs):
        struct.pack_into(PAIR_FMT, out, n * SAMPLE_PAIR_LEN, i, q)
    return out
