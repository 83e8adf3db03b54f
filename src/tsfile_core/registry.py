"""Block type registry: per-tag normalize, render, build and serialize.

Every known tag maps to one BlockType. Fixed-layout blocks are described by a
tuple of Fields; the same layout drives byte swapping, text rendering, text
parsing and packing, so the four operations cannot drift apart.
"""
from __future__ import annotations

import re
import struct
import time
from dataclasses import dataclass

from . import protocol as p
from .blocks import Block, DecodeContext
from .endian import normalize as swap
from .errors import (
    MalformedParameter,
    MissingContext,
    OddSampleCount,
    TruncatedBlock,
    UnknownBlockType,
    tag_name,
)
from .samples import pack_pairs, pair_count, to_fixed, to_physical, unpack_pairs
from .stanza import Stanza

_INT_RE = re.compile(r"\s*([-+]?\d+)")
_HEX_RE = re.compile(r"\s*(?:0[xX])?([0-9a-fA-F]+)")
_FLOAT_RE = re.compile(
    r"\s*([-+]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def parse_int(text: str) -> int:
    m = _INT_RE.match(text)
    if m is None:
        raise ValueError(f"not an integer: {text!r}")
    return int(m.group(1))


def parse_hex(text: str) -> int:
    m = _HEX_RE.match(text)
    if m is None:
        raise ValueError(f"not a hex integer: {text!r}")
    return int(m.group(1), 16)


def parse_float(text: str) -> float:
    m = _FLOAT_RE.match(text)
    if m is None:
        raise ValueError(f"not a number: {text!r}")
    return float(m.group(1))


def fourcc_text(value: int) -> str:
    return tag_name(value.to_bytes(4, "big"))


def format_float(value: float) -> str:
    return f"{value:.{p.FLOAT_DIGITS}f}"


def pack_header(block: Block) -> bytes:
    """8-byte header in stream order."""
    if len(block.tag) != p.TAG_LEN:
        raise UnknownBlockType(f"tag must be {p.TAG_LEN} bytes", tag=block.tag)
    header = bytearray(block.tag) + struct.pack("=I", block.length)
    swap(header, 4, offset=p.TAG_LEN)
    return bytes(header)


@dataclass(frozen=True)
class Field:
    name: str
    kind: str  # fourcc | hex | int | uint | double | text | mactime
    code: str  # struct code, native size without padding

    @property
    def size(self) -> int:
        return struct.calcsize("=" + self.code)

    @property
    def swapped(self) -> bool:
        return self.kind != "text"

    @property
    def pattern(self) -> str:
        return f"{self.name}:<{self.kind}>"

    def render(self, value) -> str:
        if self.kind == "fourcc":
            return fourcc_text(value)
        if self.kind == "hex":
            return f"{value:x}"
        if self.kind == "double":
            return format_float(value)
        if self.kind == "text":
            return value.split(b"\x00", 1)[0].decode("latin-1")
        if self.kind == "mactime":
            if value == 0:
                return "0"
            t = value - p.MAC_EPOCH_OFFSET
            return f"{t} (NB: seconds since 1970) ({time.asctime(time.gmtime(t))})"
        return str(value)

    def parse(self, text: str):
        if self.kind == "fourcc":
            raw = text[: p.TAG_LEN].encode("latin-1")
            return int.from_bytes(raw.ljust(p.TAG_LEN, b"\x00"), "big")
        if self.kind == "hex":
            return parse_hex(text)
        if self.kind == "double":
            return parse_float(text)
        if self.kind == "text":
            return text.encode("latin-1")[: self.size].ljust(self.size, b"\x00")
        if self.kind == "mactime":
            t = parse_int(text)
            return t + p.MAC_EPOCH_OFFSET if t != 0 else 0
        return parse_int(text)


class BlockType:
    """Operations for one tag. Subclasses fill in the payload handling."""

    container = False

    def __init__(self, tag: bytes):
        self.tag = tag

    @property
    def name(self) -> str:
        return tag_name(self.tag)

    def normalize(self, block: Block) -> None:
        raise NotImplementedError

    def render(self, block: Block, ctx: DecodeContext) -> list[str]:
        raise NotImplementedError

    def build(self, stanza: Stanza, ctx: DecodeContext) -> Block:
        raise NotImplementedError

    def serialize(self, block: Block) -> bytes:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class ContainerType(BlockType):
    """Bracket marker. Length is filled in by the size reconciler."""

    container = True

    def normalize(self, block: Block) -> None:
        pass

    def render(self, block: Block, ctx: DecodeContext) -> list[str]:
        return [self.name, ""]

    def build(self, stanza: Stanza, ctx: DecodeContext) -> Block:
        return Block(self.tag)

    def serialize(self, block: Block) -> bytes:
        return pack_header(block)


class RecordType(BlockType):
    """Fixed-layout block described by a tuple of Fields."""

    def __init__(self, tag: bytes, fields: tuple[Field, ...]):
        super().__init__(tag)
        self.fields = fields
        self.fmt = "=" + "".join(f.code for f in fields)
        self.size = struct.calcsize(self.fmt)

    def _check(self, block: Block) -> None:
        if len(block.payload) < self.size:
            raise TruncatedBlock(
                f"{len(block.payload)} of {self.size} bytes",
                tag=self.tag,
                offset=block.offset,
            )

    def _swap(self, payload: bytearray) -> None:
        off = 0
        for f in self.fields:
            if f.swapped:
                swap(payload, f.size, offset=off)
            off += f.size

    def normalize(self, block: Block) -> None:
        self._check(block)
        self._swap(block.payload)

    def values(self, block: Block) -> dict:
        self._check(block)
        raw = struct.unpack_from(self.fmt, block.payload, 0)
        return dict(zip((f.name for f in self.fields), raw))

    def remember(self, values: dict, ctx: DecodeContext) -> None:
        """Hook for blocks that feed the decode context."""

    def render(self, block: Block, ctx: DecodeContext) -> list[str]:
        values = self.values(block)
        self.remember(values, ctx)
        lines = [self.name]
        lines.extend(f"{f.name}:{f.render(values[f.name])}" for f in self.fields)
        lines.append("")
        return lines

    def build(self, stanza: Stanza, ctx: DecodeContext) -> Block:
        values = {f.name: stanza.param(f.name, f.parse, f.pattern) for f in self.fields}
        payload = bytearray(self.size)
        try:
            struct.pack_into(self.fmt, payload, 0, *values.values())
        except struct.error as e:
            raise MalformedParameter(str(e), tag=self.tag, line=stanza.start) from None
        self.remember(values, ctx)
        return Block(self.tag, self.size, payload)

    def serialize(self, block: Block) -> bytes:
        self._check(block)
        data = bytearray(block.payload)
        self._swap(data)
        return pack_header(block) + bytes(data)


class FormatType(RecordType):
    def remember(self, values: dict, ctx: DecodeContext) -> None:
        ctx.bin_type = values["type"].to_bytes(4, "big")


class ScaleType(RecordType):
    def remember(self, values: dict, ctx: DecodeContext) -> None:
        ctx.scale_i = values["scalar_one"]
        ctx.scale_q = values["scalar_two"]


class SampleType(BlockType):
    """Variable-length array of scaled (I, Q) int16 pairs."""

    def _check(self, block: Block) -> None:
        if len(block.payload) < p.SAMPLE_PAIR_LEN:
            raise TruncatedBlock(
                f"{len(block.payload)} of {p.SAMPLE_PAIR_LEN} bytes",
                tag=self.tag,
                offset=block.offset,
            )

    def normalize(self, block: Block) -> None:
        self._check(block)
        swap(block.payload, 2, count=pair_count(block.payload) * 2)

    def render(self, block: Block, ctx: DecodeContext) -> list[str]:
        self._check(block)
        try:
            full_scale = ctx.full_scale()
            scale_i, scale_q = ctx.scales()
        except MissingContext as e:
            e.offset = block.offset
            raise
        lines = [self.name]
        for i, q in unpack_pairs(block.payload):
            lines.append(f"i:{format_float(to_physical(i, full_scale, scale_i))}")
            lines.append(f"q:{format_float(to_physical(q, full_scale, scale_q))}")
        lines.append("")
        return lines

    def _sample(self, key: str, lineno: int, text: str, stanza: Stanza) -> float:
        prefix = f"{key}:"
        try:
            if not text.startswith(prefix):
                raise ValueError(text)
            return parse_float(text[len(prefix):])
        except ValueError:
            raise MalformedParameter(
                f"expected '{key}:<double>'", tag=self.tag, line=lineno
            ) from None

    def build(self, stanza: Stanza, ctx: DecodeContext) -> Block:
        count = len(stanza.lines)
        if count == 0:
            raise MalformedParameter(
                "expected 'i:<double>' and 'q:<double>' lines", tag=self.tag, line=stanza.start
            )
        if count % 2:
            raise OddSampleCount(f"{count} sample lines", tag=self.tag, line=stanza.start)
        try:
            full_scale = ctx.full_scale()
            scale_i, scale_q = ctx.scales()
            if scale_i == 0 or scale_q == 0:
                raise MissingContext("zero scale factor", tag=self.tag)
        except MissingContext as e:
            e.line = stanza.start
            raise

        pairs = []
        lines = stanza.lines
        for (li, itext), (lq, qtext) in zip(lines[0::2], lines[1::2]):
            i = self._sample("i", li, itext, stanza)
            q = self._sample("q", lq, qtext, stanza)
            try:
                pairs.append((to_fixed(i, full_scale, scale_i), to_fixed(q, full_scale, scale_q)))
            except ValueError as e:
                raise MalformedParameter(str(e), tag=self.tag, line=li) from None
        payload = pack_pairs(pairs)
        return Block(self.tag, len(payload), payload)

    def serialize(self, block: Block) -> bytes:
        data = bytearray(block.payload)
        swap(data, 2, count=pair_count(data) * 2)
        return pack_header(block) + bytes(data)


def _fields(*specs: tuple[str, str, str]) -> tuple[Field, ...]:
    return tuple(Field(*s) for s in specs)


BLOCK_TYPES: tuple[BlockType, ...] = (
    ContainerType(p.TAG_AQLV),
    ContainerType(p.TAG_HEAD),
    RecordType(
        p.TAG_SIGN,
        _fields(
            ("version", "fourcc", "I"),
            ("filetype", "fourcc", "I"),
            ("sitecode", "fourcc", "I"),
            ("userflags", "hex", "I"),
            ("description", "text", f"{p.SIZE_DESCRIPTION}s"),
            ("ownername", "text", f"{p.SIZE_OWNERNAME}s"),
            ("comment", "text", f"{p.SIZE_COMMENT}s"),
        ),
    ),
    RecordType(p.TAG_MCDA, _fields(("timestamp", "mactime", "I"))),
    RecordType(
        p.TAG_CNST,
        _fields(
            ("nchannels", "int", "i"),
            ("nsweeps", "int", "i"),
            ("nsamples", "int", "i"),
            ("iqindicator", "int", "i"),
        ),
    ),
    RecordType(
        p.TAG_SWEP,
        _fields(
            ("samplespersweep", "int", "i"),
            ("sweepstart", "double", "d"),
            ("sweepbandwidth", "double", "d"),
            ("sweeprate", "double", "d"),
            ("rangeoffset", "int", "i"),
        ),
    ),
    FormatType(p.TAG_FBIN, _fields(("format", "fourcc", "I"), ("type", "fourcc", "I"))),
    ContainerType(p.TAG_BODY),
    RecordType(p.TAG_GTAG, _fields(("gtag", "uint", "I"))),
    RecordType(p.TAG_ATAG, _fields(("atag", "uint", "I"))),
    RecordType(p.TAG_INDX, _fields(("index", "uint", "I"))),
    ScaleType(p.TAG_SCAL, _fields(("scalar_one", "double", "d"), ("scalar_two", "double", "d"))),
    SampleType(p.TAG_ALVL),
    ContainerType(p.TAG_END),
)

REGISTRY: dict[bytes, BlockType] = {t.tag: t for t in BLOCK_TYPES}


def lookup(tag: bytes, *, offset: int | None = None, line: int | None = None) -> BlockType:
    """Block type for `tag`, or UnknownBlockType."""
    if not any(tag):
        raise UnknownBlockType("zero tag", offset=offset, line=line)
    handler = REGISTRY.get(tag)
    if handler is None:
        raise UnknownBlockType(f"'{tag_name(tag)}' ({tag.hex()})", tag=tag, offset=offset, line=line)
    return handler
