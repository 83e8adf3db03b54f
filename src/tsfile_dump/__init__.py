"""TS Dump - binary TS to text."""
from .decoder import StreamDecoder, decode
from .render import render

__all__ = ["StreamDecoder", "decode", "render"]
