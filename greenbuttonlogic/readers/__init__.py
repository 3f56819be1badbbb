"""Feed readers."""

from . import espi

__all__ = ["espi"]
