"""Container length reconciliation for sequences built from text."""
from __future__ import annotations

from tsfile_core.blocks import Block, BlockSequence
from tsfile_core.errors import MissingContainer, tag_name
from tsfile_core.protocol import HEADER_LEN, TAG_AQLV, TAG_BODY, TAG_END, TAG_HEAD


def region_sizes(blocks: BlockSequence) -> tuple[int, int]:
    """(header region bytes, body region bytes), headers included."""
    in_head = False
    in_body = False
    head_size = 0
    body_size = 0
    for block in blocks:
        if block.tag == TAG_END:
            in_head = False
            in_body = False
        elif block.tag == TAG_BODY:
            in_head = False

        if in_head:
            head_size += block.length + HEADER_LEN
        if in_body:
            body_size += block.length + HEADER_LEN

        if block.tag == TAG_HEAD:
            in_head = True
        elif block.tag == TAG_BODY:
            in_body = True
    return head_size, body_size


def _first(blocks: BlockSequence, tag: bytes) -> Block:
    for block in blocks:
        if block.tag == tag:
            return block
    raise MissingContainer(f"no '{tag_name(tag)}' block", tag=tag)


def reconcile(blocks: BlockSequence) -> BlockSequence:
    """Patch HEAD, BODY and AQLV lengths in place from the blocks they enclose."""
    aqlv = _first(blocks, TAG_AQLV)
    head = _first(blocks, TAG_HEAD)
    body = _first(blocks, TAG_BODY)

    head_size, body_size = region_sizes(blocks)
    head.length = head_size
    body.length = body_size
    aqlv.length = head_size + HEADER_LEN + body_size + HEADER_LEN
    return blocks
