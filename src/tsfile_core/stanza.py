"""A block stanza from the text form: tag line plus its key:value lines."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, TypeVar

from .errors import MalformedParameter

T = TypeVar("T")


@dataclass
class Stanza:
    tag: bytes
    start: int  # 1-based line number of the tag line
    lines: list[tuple[int, str]] = field(default_factory=list)

    def param(self, key: str, parse: Callable[[str], T], pattern: str) -> T:
        """Value of the first `key:` line that parses, in any order within the stanza."""
        prefix = f"{key}:"
        bad_line = None
        for lineno, text in self.lines:
            if not text.startswith(prefix):
                continue
            try:
                return parse(text[len(prefix):])
            except ValueError:
                if bad_line is None:
                    bad_line = lineno
        raise MalformedParameter(
            f"expected '{pattern}'",
            tag=self.tag,
            line=bad_line if bad_line is not None else self.start,
        )
