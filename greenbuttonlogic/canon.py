from __future__ import annotations
from typing import Final

# TimeSeries column order; shared by CSV, Parquet and the frame itself.
TIMESERIES_COLS: Final[list[str]] = [
    "title",
    "cost",
    "quality",
    "value",
    "tou",
    "time_period_start_unix_ms",
    "time_period_duration_seconds",
    "accumulation_behaviour",
    "commodity",
    "currency",
    "data_qualifier",
    "flow_direction",
    "kind",
    "phase",
    "uom",
]

TIMESERIES_DTYPES: Final[dict[str, str]] = {
    "title": "object",
    "cost": "float64",
    "quality": "object",
    "value": "float64",
    "tou": "int32",
    "time_period_start_unix_ms": "int64",
    "time_period_duration_seconds": "int32",
    "accumulation_behaviour": "object",
    "commodity": "object",
    "currency": "object",
    "data_qualifier": "object",
    "flow_direction": "object",
    "kind": "object",
    "phase": "object",
    "uom": "object",
}

# ReadingTypes column -> ESPI field name used for code lookups.
READING_TYPE_ENUM_FIELDS: Final[dict[str, str]] = {
    "accumulation_behaviour": "accumulationBehaviour",
    "commodity": "commodity",
    "currency": "currency",
    "data_qualifier": "dataQualifier",
    "flow_direction": "flowDirection",
    "kind": "kind",
    "phase": "phase",
    "uom": "uom",
}

READING_TYPE_SCOPE: Final[str] = "ReadingType"
QUALITY_SCOPE: Final[str] = ""
QUALITY_FIELD: Final[str] = "QualityOfReading"

# Line protocol tag order after the database tag.
LINE_PROTOCOL_TAGS: Final[list[tuple[str, str]]] = [
    ("accumulation_behavior", "accumulation_behaviour"),
    ("commodity", "commodity"),
    ("currency", "currency"),
    ("data_qualifier", "data_qualifier"),
    ("flow_direction", "flow_direction"),
    ("kind", "kind"),
    ("phase", "phase"),
    ("uom", "uom"),
]

DST_RULE_NOT_APPLICABLE: Final[int] = 0xFFFFFFFF
QUALITY_OTHER: Final[int] = 16

METER_READING_HREF_PATTERN: Final[str] = r"(.*MeterReading/[^/]*)/"
READING_TYPE_LINK_TYPE: Final[str] = "espi-entry/ReadingType"

INTERVAL_BLOCK_TAG: Final[str] = "IntervalBlock"
READING_TYPE_TAG: Final[str] = "ReadingType"
LOCAL_TIME_PARAMETERS_TAG: Final[str] = "LocalTimeParameters"
# Content tags recorded as entries but not expanded into rows.
OTHER_CONTENT_TAGS: Final[tuple[str, ...]] = (
    "ElectricPowerQualitySummary",
    "ElectricPowerUsageSummary",
    "MeterReading",
    "UsagePoint",
    "UsageSummary",
)

FILETYPES: Final[tuple[str, ...]] = ("csv", "influxdb", "parquet")
SCHEMA_VERSION: Final[str] = "1"
SCHEMA_VERSION_KEY: Final[str] = "greenbuttonlogic.schema_version"
