from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from . import transform
from .codes import CodeLookup
from .config import ParseConfig
from .core.types import TimeSeries
from .exceptions import GreenButtonError
from .link import link_feed
from .readers.espi import parse_feed

log = logging.getLogger(__name__)


def parse_xml(
    xml: Union[str, bytes],
    *,
    code_lookup: Optional[CodeLookup] = None,
    config: Optional[ParseConfig] = None,
) -> TimeSeries:
    """
    Parse one Green Button feed and denormalize it.

    Raises a GreenButtonError subclass for any schema or linkage problem;
    there is no partial result.
    """
    feed = parse_feed(xml, config=config)
    return link_feed(feed, code_lookup=code_lookup, config=config)


@dataclass
class IngestResult:
    timeseries: TimeSeries
    parsed: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


def from_feeds(
    feeds: Iterable[tuple[str, Union[str, bytes]]],
    *,
    code_lookup: Optional[CodeLookup] = None,
    config: Optional[ParseConfig] = None,
) -> IngestResult:
    """
    Parse many (name, xml) feeds and fold them with ``transform.extend``.

    A feed that fails is logged and skipped; the rest are still ingested.
    """
    parts: list[TimeSeries] = []
    result = IngestResult(TimeSeries.empty_frame())
    for name, xml in feeds:
        try:
            parts.append(parse_xml(xml, code_lookup=code_lookup, config=config))
        except GreenButtonError as err:
            log.error("Failed to read file %s: %s", name, err)
            result.failed[name] = str(err)
            continue
        result.parsed.append(name)
    result.timeseries = transform.extend(*parts)
    return result


def _read_paths(paths: Iterable[Union[str, Path]], failed: dict[str, str]):
    for path in paths:
        try:
            data = Path(path).read_bytes()
        except OSError as err:
            log.error("Failed to read file %s: %s", path, err)
            failed[str(path)] = str(err)
            continue
        yield str(path), data


def from_paths(
    paths: Iterable[Union[str, Path]],
    *,
    code_lookup: Optional[CodeLookup] = None,
    config: Optional[ParseConfig] = None,
) -> IngestResult:
    unreadable: dict[str, str] = {}
    result = from_feeds(_read_paths(paths, unreadable), code_lookup=code_lookup, config=config)
    result.failed.update(unreadable)
    return result
