"""In-memory block model and the cross-block decode/build context."""
from __future__ import annotations

from dataclasses import dataclass, field

from .errors import MissingContext, tag_name
from .protocol import CONTAINER_TAGS, FULL_SCALE, TAG_ALVL


@dataclass
class Block:
    """One tag+length+payload unit.

    Payload scalars are held in host byte order. Containers have no payload;
    their length spans the blocks that follow them up to the closing marker.
    """

    tag: bytes
    length: int = 0
    payload: bytearray = field(default_factory=bytearray)
    # Provenance from the binary decoder; not part of block identity.
    offset: int | None = field(default=None, compare=False)
    declared_length: int | None = field(default=None, compare=False)

    @property
    def name(self) -> str:
        return tag_name(self.tag)

    @property
    def is_container(self) -> bool:
        return self.tag in CONTAINER_TAGS

    @property
    def clamped(self) -> bool:
        return self.declared_length is not None and self.declared_length != self.length


BlockSequence = list[Block]


@dataclass
class DecodeContext:
    """State carried from the fbin and scal blocks to later alvl blocks."""

    bin_type: bytes | None = None
    scale_i: float | None = None
    scale_q: float | None = None

    def full_scale(self) -> float:
        if self.bin_type is None:
            raise MissingContext("no fbin block before sample data", tag=TAG_ALVL)
        try:
            return FULL_SCALE[self.bin_type]
        except KeyError:
            raise MissingContext(
                f"unknown bin_type '{tag_name(self.bin_type)}' ({self.bin_type.hex()})",
                tag=TAG_ALVL,
            ) from None

    def scales(self) -> tuple[float, float]:
        if self.scale_i is None or self.scale_q is None:
            raise MissingContext("no scal block before sample data", tag=TAG_ALVL)
        return self.scale_i, self.scale_q
