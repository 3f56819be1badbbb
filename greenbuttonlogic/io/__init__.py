"""Output encoders."""

from . import formats

__all__ = ["formats"]
