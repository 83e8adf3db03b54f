"""Key:value text to block sequence."""
from __future__ import annotations

from typing import Iterable

from tsfile_core.blocks import BlockSequence, DecodeContext
from tsfile_core.protocol import TAG_LEN
from tsfile_core.registry import lookup
from tsfile_core.stanza import Stanza


def split_lines(text: str) -> list[str]:
    """Split on newline only; text fields may hold any other latin-1 control byte."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _is_blank(line: str) -> bool:
    return not line.strip()


def stanza_at(lines: list[str], index: int, tag: bytes) -> Stanza:
    """Collect the lines after `lines[index]` up to the next blank line."""
    stanza = Stanza(tag, index + 1)
    for n in range(index + 1, len(lines)):
        if _is_blank(lines[n]):
            break
        stanza.lines.append((n + 1, lines[n]))
    return stanza


class TextBuilder:
    """Builds blocks from text, one stanza at a time.

    A line without ':' opens a block; key:value lines are consumed by that
    block's build operation and otherwise skipped here.
    """

    def __init__(self, lines: Iterable[str]):
        self.lines = [line[:-1] if line.endswith("\n") else line for line in lines]
        self.ctx = DecodeContext()
        self.blocks: BlockSequence = []

    def build(self) -> BlockSequence:
        for index, line in enumerate(self.lines):
            if len(line) <= 1 or _is_blank(line):
                continue
            if ":" in line:
                continue
            # CRLF text: the \r belongs to the line ending, not the tag.
            line = line.rstrip("\r")
            tag = line[:TAG_LEN].ljust(TAG_LEN).encode("latin-1", errors="replace")
            handler = lookup(tag, line=index + 1)
            self.blocks.append(handler.build(stanza_at(self.lines, index, tag), self.ctx))
        return self.blocks

    @property
    def line_count(self) -> int:
        return len(self.lines)


def build(text: str) -> BlockSequence:
    """Parse a whole text document into an (unreconciled) block sequence."""
    return TextBuilder(split_lines(text)).build()
