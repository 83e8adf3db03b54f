"""Block sequence to key:value text."""
from __future__ import annotations

from typing import Iterable, Iterator

from tsfile_core.blocks import Block, DecodeContext
from tsfile_core.protocol import TAG_BODY
from tsfile_core.registry import lookup


def iter_lines(
    blocks: Iterable[Block],
    header_only: bool = False,
    ctx: DecodeContext | None = None,
) -> Iterator[str]:
    """Yield text lines block by block, threading one decode context."""
    if ctx is None:
        ctx = DecodeContext()
    for block in blocks:
        handler = lookup(block.tag, offset=block.offset)
        # Header-only output ends where the (large) body begins.
        if header_only and block.tag == TAG_BODY:
            return
        yield from handler.render(block, ctx)


def render(blocks: Iterable[Block], header_only: bool = False) -> str:
    """Render the whole sequence. Nothing is returned if any block fails."""
    return "".join(line + "\n" for line in iter_lines(blocks, header_only))
