"""TS Core - block model, protocol constants and the block type registry."""
from .blocks import Block, BlockSequence, DecodeContext
from .errors import (
    ClampedBlock,
    IOFailure,
    MalformedParameter,
    MissingContainer,
    MissingContext,
    OddSampleCount,
    TruncatedBlock,
    TSFileError,
    UnknownBlockType,
)
from .registry import REGISTRY, lookup

__all__ = [
    "Block",
    "BlockSequence",
    "DecodeContext",
    "ClampedBlock",
    "IOFailure",
    "MalformedParameter",
    "MissingContainer",
    "MissingContext",
    "OddSampleCount",
    "TruncatedBlock",
    "TSFileError",
    "UnknownBlockType",
    "REGISTRY",
    "lookup",
]
