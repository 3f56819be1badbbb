"""
Join the columnar stores of one feed into a flat TimeSeries.

Interval readings find their ReadingType through two hops:

    IntervalBlock entry --related_meter_reading_entry_href--> MeterReading entry
    MeterReading entry  --related_reading_type_entry_href-->  ReadingType entry

and the ReadingType entry's EntryType carries the ReadingTypes row index.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from . import canon, dst, validate
from .codes import DEFAULT_LOOKUP, CodeLookup, enums_to_strings
from .config import ParseConfig, default_config
from .core.types import TimeSeries
from .exceptions import InvalidDstRuleError, LinkageError, MissingReadingTypeError
from .stores import Entries, EntryKind, IntervalReadings, LocalTimeParameters, ParsedFeed, ReadingTypes

log = logging.getLogger(__name__)


def _follow_chain(entries: Entries, index_by_href: Dict[str, int], meter_reading_href: str) -> int:
    meter_reading_index = index_by_href.get(meter_reading_href)
    if meter_reading_index is None:
        raise MissingReadingTypeError(f"No MeterReading entry with href {meter_reading_href!r}")

    reading_type_href = entries.related_reading_type_entry_href[meter_reading_index]
    reading_type_index = index_by_href.get(reading_type_href) if reading_type_href else None
    if reading_type_index is None:
        raise MissingReadingTypeError(
            f"MeterReading {meter_reading_href!r} links to no ReadingType entry ({reading_type_href!r})"
        )

    entry_type = entries.entry_type[reading_type_index]
    if entry_type.kind is not EntryKind.READING_TYPE:
        raise MissingReadingTypeError(f"Mismatched reading type {entry_type}")
    return entry_type.reading_type_index


def reading_type_index_by_entry(
    entries: Entries, owners: Optional[set[int]] = None
) -> List[Optional[int]]:
    """
    ReadingTypes row for every entry, or None.

    Entries listed in ``owners`` (those holding interval readings) must
    resolve; a broken chain anywhere else just yields None.
    """
    owners = owners or set()
    index_by_href: Dict[str, int] = {}
    for i, href in enumerate(entries.href):
        index_by_href[href] = i

    out: List[Optional[int]] = []
    for i, meter_reading_href in enumerate(entries.related_meter_reading_entry_href):
        if not meter_reading_href:
            out.append(None)
            continue
        try:
            out.append(_follow_chain(entries, index_by_href, meter_reading_href))
        except MissingReadingTypeError:
            if i in owners:
                raise
            log.debug("entry %d (%s) has no resolvable reading type", i, entries.href[i])
            out.append(None)
    return out


class DstWindows:
    """DST start/end per calendar year, decoded once per year."""

    def __init__(self, start_rule: int, end_rule: int):
        self.start_rule = start_rule
        self.end_rule = end_rule
        self._cache: Dict[int, Tuple[Optional[datetime], Optional[datetime]]] = {}

    def _resolve(self, rule: int, year: int, which: str) -> Optional[datetime]:
        # Invalid rules are common in the wild; treat them as "no DST".
        try:
            out = dst.date_from_dst_rule(rule, year)
        except InvalidDstRuleError as err:
            log.warning("Ignoring DST %s rule for %d: %s", which, year, err)
            return None
        if out is None and rule != canon.DST_RULE_NOT_APPLICABLE:
            log.warning("DST %s rule %#010x has no date in %d", which, rule, year)
        return out

    def for_year(self, year: int) -> Tuple[Optional[datetime], Optional[datetime]]:
        if year not in self._cache:
            self._cache[year] = (
                self._resolve(self.start_rule, year, "start"),
                self._resolve(self.end_rule, year, "end"),
            )
        return self._cache[year]


def local_start_times(
    start_unix_ms: np.ndarray, windows: DstWindows, dst_offset_s: int, tz_offset_s: int
) -> np.ndarray:
    """
    Shift UTC interval starts into local time.

    The DST offset applies when the UTC instant lies strictly inside that
    year's [start, end] window; the tz offset always applies.
    """
    start_unix_ms = np.asarray(start_unix_ms, dtype="int64")
    instants = pd.to_datetime(start_unix_ms, unit="ms")
    years = np.asarray(instants.year)
    in_dst = np.zeros(len(start_unix_ms), dtype=bool)

    for year in pd.unique(years):
        start, end = windows.for_year(int(year))
        if start is None or end is None:
            continue
        in_dst |= (
            (years == year)
            & np.asarray(instants > pd.Timestamp(start))
            & np.asarray(instants < pd.Timestamp(end))
        )

    return start_unix_ms + np.where(in_dst, dst_offset_s * 1000, 0) + tz_offset_s * 1000


def fix_provider_bugs_if_needed(
    cost: np.ndarray, first_href: str, config: ParseConfig
) -> np.ndarray:
    """Some providers publish cost 100x too small; correct it based on the feed's first href."""
    if any(token in first_href for token in config.cost_fix_provider_tokens):
        log.info("applying cost correction x%s for %s", config.cost_fix_factor, first_href)
        return cost * config.cost_fix_factor
    return cost


def denormalize_and_link(
    entries: Entries,
    interval_readings: IntervalReadings,
    reading_types: ReadingTypes,
    local_time_parameters: LocalTimeParameters,
    *,
    code_lookup: Optional[CodeLookup] = None,
    config: Optional[ParseConfig] = None,
) -> TimeSeries:
    """
    One TimeSeries row per interval reading, in interval reading order.

    - titles come from the reading's owning entry
    - codes are resolved to labels through ``code_lookup``
    - value is scaled by 10 ** power_of_ten_multiplier
    - start times are shifted to local time (see ``local_start_times``)
    """
    config = config or default_config()
    code_lookup = code_lookup or DEFAULT_LOOKUP

    if len(local_time_parameters) > 1:
        raise LinkageError("Input with multiple LocalTimeParameters is currently unsupported.")
    if len(local_time_parameters) == 0:
        raise LinkageError("Missing LocalTimeParameters.")

    validate.assert_back_references(entries, interval_readings, reading_types)

    entry_index = np.asarray(interval_readings.entry_index, dtype="int64")
    rt_by_entry = reading_type_index_by_entry(entries, owners=set(entry_index.tolist()))

    rt_index = np.empty(len(entry_index), dtype="int64")
    for i, e in enumerate(entry_index):
        rt = rt_by_entry[e]
        if rt is None:
            raise MissingReadingTypeError(
                f"Missing reading type for interval reading {i} (entry {entries.href[e]!r})"
            )
        rt_index[i] = rt

    columns: Dict[str, object] = {}
    columns["title"] = np.asarray(entries.title, dtype=object)[entry_index]

    cost = np.asarray(interval_readings.cost, dtype="float64")
    if len(entries):
        cost = fix_provider_bugs_if_needed(cost, entries.href[0], config)
    columns["cost"] = cost

    columns["quality"] = enums_to_strings(
        code_lookup, canon.QUALITY_SCOPE, canon.QUALITY_FIELD, interval_readings.quality
    )

    power = np.asarray(reading_types.power_of_ten_multiplier, dtype="float64")[rt_index]
    columns["value"] = np.asarray(interval_readings.value, dtype="float64") * np.power(10.0, power)
    columns["tou"] = interval_readings.tou

    start_ms = np.asarray(interval_readings.time_period_start_unix_ms, dtype="int64")
    if config.apply_local_time:
        ltp = local_time_parameters.row(0)
        windows = DstWindows(ltp["dst_start_rule"], ltp["dst_end_rule"])
        start_ms = local_start_times(start_ms, windows, ltp["dst_offset"], ltp["tz_offset"])
    columns["time_period_start_unix_ms"] = start_ms
    columns["time_period_duration_seconds"] = interval_readings.time_period_duration_seconds

    for column, field in canon.READING_TYPE_ENUM_FIELDS.items():
        labels = enums_to_strings(
            code_lookup, canon.READING_TYPE_SCOPE, field, reading_types.column(column)
        )
        columns[column] = np.asarray(labels, dtype=object)[rt_index]

    return TimeSeries.from_columns(**columns)


def link_feed(
    feed: ParsedFeed,
    *,
    code_lookup: Optional[CodeLookup] = None,
    config: Optional[ParseConfig] = None,
) -> TimeSeries:
    return denormalize_and_link(
        feed.entries,
        feed.interval_readings,
        feed.reading_types,
        feed.local_time_parameters,
        code_lookup=code_lookup,
        config=config,
    )
