import logging
from logging import NullHandler

from . import (
    canon,
    codes,
    config,
    dst,
    exceptions,
    stores,
    utils,
    validate,
    link,
    transform,
    ingest,
)
from .core.types import TimeSeries
from .ingest import parse_xml
from .io import formats
from .readers import espi

__all__ = [
    "canon",
    "codes",
    "config",
    "dst",
    "espi",
    "exceptions",
    "formats",
    "ingest",
    "link",
    "parse_xml",
    "stores",
    "transform",
    "utils",
    "validate",
    "TimeSeries",
]

# Set default logging handler to avoid "No handler found" warnings.
logging.getLogger(__name__).addHandler(NullHandler())
