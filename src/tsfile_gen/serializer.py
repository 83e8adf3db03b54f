"""Block sequence to big-endian binary."""
from __future__ import annotations

from tsfile_core.blocks import BlockSequence
from tsfile_core.registry import lookup


def serialize(blocks: BlockSequence) -> bytes:
    """Encode every block in order. Raises before returning anything on failure."""
    out = bytearray()
    for block in blocks:
        out += lookup(block.tag).serialize(block)
    return bytes(out)
