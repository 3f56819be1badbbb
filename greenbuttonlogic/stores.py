from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from . import canon
from .core.columnar import Column, ColumnarTable
from .exceptions import ClassificationError, require


class EntryKind(Enum):
    UNSET = "unset"
    OTHER = "other"
    INTERVAL_BLOCK = "interval block"
    LOCAL_TIME_PARAMETERS = "local time parameters"
    READING_TYPE = "reading type"


@dataclass(frozen=True)
class EntryType:
    """
    What an Atom entry's content turned out to be.

    Only the reading-type case carries data: the row index of its
    ReadingTypes record.
    """

    kind: EntryKind
    reading_type_index: Optional[int] = None

    def __post_init__(self):
        has_index = self.reading_type_index is not None
        require(
            has_index == (self.kind is EntryKind.READING_TYPE),
            f"reading_type_index is only valid for reading type entries, got {self!r}",
            ClassificationError,
        )

    @classmethod
    def reading_type_with_index(cls, index: int) -> "EntryType":
        return cls(EntryKind.READING_TYPE, index)

    def merge(self, new: "EntryType") -> "EntryType":
        """Combine with the type implied by another content child."""
        if self == new:
            return self
        if self.kind is EntryKind.UNSET:
            return new
        raise ClassificationError(
            f"Entry has mixed content types: {self} and {new}."
        )

    def __str__(self) -> str:
        if self.kind is EntryKind.UNSET:
            return "ERROR"
        if self.kind is EntryKind.OTHER:
            return "unparsed"
        return self.kind.value


EntryType.UNSET = EntryType(EntryKind.UNSET)  # type: ignore[attr-defined]
EntryType.OTHER = EntryType(EntryKind.OTHER)  # type: ignore[attr-defined]
EntryType.INTERVAL_BLOCK = EntryType(EntryKind.INTERVAL_BLOCK)  # type: ignore[attr-defined]
EntryType.LOCAL_TIME_PARAMETERS = EntryType(EntryKind.LOCAL_TIME_PARAMETERS)  # type: ignore[attr-defined]


class Entries(ColumnarTable):
    COLUMNS = (
        Column("entry_type"),
        Column("href"),
        Column("title"),
        Column("published_unix_ms"),
        Column("updated_unix_ms"),
        # Set on interval block entries: href of the owning MeterReading entry.
        Column("related_meter_reading_entry_href", default_factory=str),
        # Set on MeterReading entries: href of their ReadingType entry.
        Column("related_reading_type_entry_href", default_factory=str),
    )


class IntervalReadings(ColumnarTable):
    COLUMNS = (
        Column("entry_index"),
        Column("cost", default=math.nan),
        Column("quality", default=canon.QUALITY_OTHER),
        Column("value"),
        Column("tou", default=0),
        Column("time_period_start_unix_ms"),
        Column("time_period_duration_seconds"),
    )


class ReadingTypes(ColumnarTable):
    COLUMNS = (
        Column("entry_index"),
        Column("accumulation_behaviour"),
        Column("commodity"),
        Column("currency"),
        Column("data_qualifier"),
        Column("flow_direction"),
        Column("kind"),
        Column("power_of_ten_multiplier"),
        # "none" when absent
        Column("phase", default=0),
        Column("uom"),
    )


class LocalTimeParameters(ColumnarTable):
    COLUMNS = (
        Column("dst_start_rule"),
        Column("dst_end_rule"),
        Column("dst_offset"),
        Column("tz_offset"),
    )


@dataclass
class ParsedFeed:
    """The four stores filled from one feed."""

    entries: Entries
    interval_readings: IntervalReadings
    reading_types: ReadingTypes
    local_time_parameters: LocalTimeParameters

    @classmethod
    def empty(cls) -> "ParsedFeed":
        return cls(Entries(), IntervalReadings(), ReadingTypes(), LocalTimeParameters())
