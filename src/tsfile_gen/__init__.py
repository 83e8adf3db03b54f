"""TS Gen - text back to binary TS."""
from .builder import TextBuilder, build
from .reconcile import reconcile
from .serializer import serialize

__all__ = ["TextBuilder", "build", "reconcile", "serialize"]
