"""Core data structures: columnar stores and the TimeSeries frame."""

from . import columnar, types

__all__ = ["columnar", "types"]
