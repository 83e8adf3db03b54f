from __future__ import annotations

import struct
from collections import Counter
from warnings import warn

from tsfile_core.blocks import Block, BlockSequence
from tsfile_core.endian import normalize
from tsfile_core.errors import ClampedBlock, UnknownBlockType, tag_name
from tsfile_core.protocol import HEADER_LEN, TAG_ALVL, TAG_AQLV, TAG_LEN, SAMPLE_PAIR_LEN
from tsfile_core.registry import lookup


class StreamDecoder:
    """Binary TS decoder: the buffer is truth.

    - Container blocks are descended into and their children spliced in right
      after them, so the output is one flat sequence in file order.
    - A declared length that overruns its enclosing range is clamped, warned
      about and counted, never read past.
    """

    def __init__(self, buffer: bytes | bytearray | memoryview):
        self.buffer = memoryview(buffer)
        self.blocks: BlockSequence = []
        self.scan_stats = {
            "blocks": 0,
            "clamped": 0,
            "trailing_bytes": 0,
            "samples": 0,
            "tags": Counter(),
        }

        self._decode_range(0, len(self.buffer))

    def _decode_range(self, start: int, end: int) -> None:
        # Stack of (pos, end) ranges. A container pushes the rest of its
        # enclosing range, then its own range, so its children follow it.
        ranges = [(start, end)]
        while ranges:
            pos, end = ranges.pop()
            while pos < end:
                remaining = end - pos

                # Torn header
                if remaining < HEADER_LEN:
                    warn(
                        f"Truncated block header at offset {pos}: {remaining} bytes left",
                        ClampedBlock,
                    )
                    self.scan_stats["trailing_bytes"] += remaining
                    break

                header = bytearray(self.buffer[pos:pos + HEADER_LEN])
                tag = bytes(header[:TAG_LEN])
                normalize(header, 4, offset=TAG_LEN)
                (declared,) = struct.unpack_from("=I", header, TAG_LEN)

                handler = lookup(tag, offset=pos)
                block = Block(tag, declared, offset=pos, declared_length=declared)
                pos += HEADER_LEN

                # 1. Clamp to the enclosing range
                if declared > end - pos:
                    block.length = end - pos
                    self.scan_stats["clamped"] += 1
                    warn(
                        f"Block '{tag_name(tag)}' at offset {block.offset} "
                        f"size truncated from {declared} to {block.length} bytes",
                        ClampedBlock,
                    )

                self.blocks.append(block)
                self.scan_stats["blocks"] += 1
                self.scan_stats["tags"][tag_name(tag)] += 1

                # 2. Nested run or leaf payload
                if handler.container:
                    ranges.append((pos + block.length, end))
                    ranges.append((pos, pos + block.length))
                    break

                block.payload = bytearray(self.buffer[pos:pos + block.length])
                handler.normalize(block)
                if tag == TAG_ALVL:
                    self.scan_stats["samples"] += block.length // SAMPLE_PAIR_LEN
                pos += block.length

    def get_scan_stats(self) -> dict:
        stats = dict(self.scan_stats)
        stats["tags"] = dict(sorted(self.scan_stats["tags"].items()))
        return stats


def decode(buffer: bytes | bytearray | memoryview) -> BlockSequence:
    """Decode a whole binary buffer into a flat block sequence."""
    return StreamDecoder(buffer).blocks


def check_leading_tag(buffer: bytes | bytearray) -> None:
    """A TS file longer than one header must open with the outer container."""
    if len(buffer) > HEADER_LEN and bytes(buffer[:TAG_LEN]) != TAG_AQLV:
        raise UnknownBlockType(
            f"bad header key '{tag_name(bytes(buffer[:TAG_LEN]))}', expected '{tag_name(TAG_AQLV)}'",
            offset=0,
        )
