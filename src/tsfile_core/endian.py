"""Byte-order normalization between the big-endian stream and the host."""
from __future__ import annotations

import sys

STREAM_BYTEORDER = "big"
HOST_IS_STREAM_ORDER = sys.byteorder == STREAM_BYTEORDER


def normalize(buffer: bytearray, width: int, offset: int = 0, count: int = 1) -> None:
    """Swap `count` consecutive `width`-byte scalars at `offset` in place.

    The swap is its own inverse, so the same call converts stream order to host
    order after reading and host order to stream order before writing. On a
    big-endian host it does nothing.
    """
    assert width in (2, 4, 8), f"unsupported scalar width {width}"
    end = offset + width * count
    assert 0 <= offset <= end <= len(buffer), "scalar run outside buffer"
    if HOST_IS_STREAM_ORDER or count <= 0:
        return

    run = bytes(buffer[offset:end])
    for k in range(width):
        buffer[offset + k:end:width] = run[width - 1 - k::width]
