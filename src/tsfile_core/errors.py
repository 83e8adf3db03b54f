"""Error kinds raised by the TS block-stream engine."""
from __future__ import annotations

ERRORS = {
    "E_UNKNOWN_BLOCK": "Unknown block type",
    "E_TRUNCATED_BLOCK": "Block payload shorter than its fixed layout",
    "E_MISSING_CONTEXT": "Sample block without format and scale context",
    "E_MALFORMED_PARAMETER": "Parameter line does not match expected pattern",
    "E_ODD_SAMPLES": "Odd number of sample lines",
    "E_MISSING_CONTAINER": "Container block missing",
    "E_IO": "I/O failure",
}


def tag_name(tag: bytes | None) -> str:
    """Printable form of a 4-byte tag, stopping at the first NUL."""
    if tag is None:
        return "?"
    return tag.split(b"\x00", 1)[0].decode("latin-1")


class TSFileError(Exception):
    """Base class for fatal errors. Carries a code and optional locators."""

    code = "E_TSFILE"

    def __init__(
        self,
        detail: str = "",
        *,
        tag: bytes | None = None,
        offset: int | None = None,
        line: int | None = None,
    ):
        self.detail = detail
        self.tag = tag
        self.offset = offset
        self.line = line
        super().__init__(str(self))

    @property
    def message(self) -> str:
        return ERRORS.get(self.code, "Error")

    def __str__(self) -> str:
        parts = [self.message]
        if self.detail:
            parts.append(f"({self.detail})")
        where = []
        if self.tag is not None:
            where.append(f"block '{tag_name(self.tag)}'")
        if self.offset is not None:
            where.append(f"offset {self.offset}")
        if self.line is not None:
            where.append(f"line {self.line}")
        if where:
            parts.append("at " + ", ".join(where))
        return " ".join(parts)

    def as_dict(self) -> dict:
        out = {"code": self.code, "message": self.message}
        if self.detail:
            out["detail"] = self.detail
        if self.tag is not None:
            out["tag"] = tag_name(self.tag)
        if self.offset is not None:
            out["offset"] = self.offset
        if self.line is not None:
            out["line"] = self.line
        return out


class UnknownBlockType(TSFileError):
    code = "E_UNKNOWN_BLOCK"


class TruncatedBlock(TSFileError):
    code = "E_TRUNCATED_BLOCK"


class MissingContext(TSFileError):
    code = "E_MISSING_CONTEXT"


class MalformedParameter(TSFileError):
    code = "E_MALFORMED_PARAMETER"


class OddSampleCount(TSFileError):
    code = "E_ODD_SAMPLES"


class MissingContainer(TSFileError):
    code = "E_MISSING_CONTAINER"


class IOFailure(TSFileError):
    code = "E_IO"


class ClampedBlock(UserWarning):
    """A block's declared length ran past the end of its enclosing range."""
