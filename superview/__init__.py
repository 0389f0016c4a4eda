"""Superview -- stretch 4:3 footage to 16:9 with a GoPro-style superview remap."""

from superview.errors import SuperviewError
from superview.pipeline import superview

__all__ = ["superview", "SuperviewError"]
