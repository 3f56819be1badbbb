from __future__ import annotations

import logging
import re
from typing import Optional, Union

from lxml import etree

from .. import canon
from ..config import ParseConfig, default_config
from ..core.columnar import RowBuilder
from ..exceptions import ClassificationError, SchemaError, require
from ..stores import (
    EntryType,
    IntervalReadings,
    LocalTimeParameters,
    ParsedFeed,
    ReadingTypes,
)
from ..utils import element_children, localname, parse_hex, parse_text_of, rfc3339_to_unix_ms

log = logging.getLogger(__name__)

_METER_READING_RE = re.compile(canon.METER_READING_HREF_PATTERN)

# ESPI element name -> ReadingTypes column
_READING_TYPE_FIELDS = {
    **{espi: col for col, espi in canon.READING_TYPE_ENUM_FIELDS.items()},
    "powerOfTenMultiplier": "power_of_ten_multiplier",
}


def meter_reading_href(href: str) -> Optional[str]:
    """'.../MeterReading/01/IntervalBlock/1' -> '.../MeterReading/01'."""
    m = _METER_READING_RE.search(href)
    return m.group(1) if m else None


def _parse_link(row: RowBuilder, node: etree._Element) -> None:
    href = node.get("href")
    if href is None:
        return
    rel = node.get("rel")
    if rel == "related" and node.get("type") == canon.READING_TYPE_LINK_TYPE:
        row.set("related_reading_type_entry_href", href)
    if rel == "self":
        row.set("href", href)
        owner = meter_reading_href(href)
        if owner is not None:
            row.set("related_meter_reading_entry_href", owner)


def _parse_time_period(row: RowBuilder, node: etree._Element) -> None:
    start: Optional[etree._Element] = None
    duration: Optional[etree._Element] = None
    for child in element_children(node):
        name = localname(child)
        if name == "start":
            start = child
        elif name == "duration":
            duration = child
    if start is None:
        raise SchemaError("Missing start time.")
    if duration is None:
        raise SchemaError("Missing duration.")
    row.set("time_period_start_unix_ms", parse_text_of(start, int) * 1000)
    row.set("time_period_duration_seconds", parse_text_of(duration, int))


def parse_interval_reading(
    readings: IntervalReadings,
    node: etree._Element,
    entry_index: int,
    config: ParseConfig,
) -> IntervalReadings:
    row = readings.start_push()
    row.set("entry_index", entry_index)
    for child in element_children(node):
        name = localname(child)
        if name == "cost":
            # See https://utilityapi.com/docs/greenbutton/xml#IntervalBlock
            row.set("cost", parse_text_of(child, float) / config.cost_divisor)
        elif name == "ReadingQuality":
            row.set("quality", parse_text_of(child, int))
        elif name == "value":
            row.set("value", parse_text_of(child, int))
        elif name == "tou":
            row.set("tou", parse_text_of(child, int))
        elif name == "timePeriod":
            _parse_time_period(row, child)
        elif name in config.ignored_reading_tags:
            continue
        else:
            raise SchemaError(f"Unmatched tag name: {name!r}")
    return row.finalize_push()


def parse_interval_block(
    readings: IntervalReadings,
    node: etree._Element,
    entry_index: int,
    config: ParseConfig,
) -> IntervalReadings:
    for child in element_children(node):
        if localname(child) == "IntervalReading":
            readings = parse_interval_reading(readings, child, entry_index, config)
    return readings


def parse_reading_type(
    reading_types: ReadingTypes, node: etree._Element, entry_index: int
) -> ReadingTypes:
    row = reading_types.start_push()
    row.set("entry_index", entry_index)
    for child in element_children(node):
        column = _READING_TYPE_FIELDS.get(localname(child))
        if column is not None:
            row.set(column, parse_text_of(child, int))
    return row.finalize_push()


def parse_local_time_parameters(
    ltp: LocalTimeParameters, node: etree._Element
) -> LocalTimeParameters:
    row = ltp.start_push()
    for child in element_children(node):
        name = localname(child)
        if name == "dstStartRule":
            row.set("dst_start_rule", parse_text_of(child, parse_hex))
        elif name == "dstEndRule":
            row.set("dst_end_rule", parse_text_of(child, parse_hex))
        elif name == "dstOffset":
            row.set("dst_offset", parse_text_of(child, int))
        elif name == "tzOffset":
            row.set("tz_offset", parse_text_of(child, int))
        else:
            raise SchemaError(f"Unmatched tag name: {name!r}")
    return row.finalize_push()


def parse_content(
    feed: ParsedFeed, node: etree._Element, entry_index: int, config: ParseConfig
) -> EntryType:
    """
    Classify one <content> block and expand it into the sibling stores.

    Some providers put several IntervalBlocks in one content block; all of
    them are parsed. Repeated LocalTimeParameters each get a row; a
    repeated ReadingType keeps only the last. Mixing different kinds of
    content is an error.
    """
    entry_type = EntryType.UNSET
    interval_blocks: list[etree._Element] = []
    reading_type: Optional[etree._Element] = None
    local_times: list[etree._Element] = []

    for child in element_children(node):
        name = localname(child)
        if name == canon.INTERVAL_BLOCK_TAG:
            entry_type = entry_type.merge(EntryType.INTERVAL_BLOCK)
            interval_blocks.append(child)
        elif name == canon.READING_TYPE_TAG:
            entry_type = entry_type.merge(
                EntryType.reading_type_with_index(len(feed.reading_types))
            )
            reading_type = child
        elif name == canon.LOCAL_TIME_PARAMETERS_TAG:
            entry_type = entry_type.merge(EntryType.LOCAL_TIME_PARAMETERS)
            local_times.append(child)
        elif name in canon.OTHER_CONTENT_TAGS:
            entry_type = entry_type.merge(EntryType.OTHER)
        else:
            raise ClassificationError(f"Unknown tag name {name!r}")

    for block in interval_blocks:
        feed.interval_readings = parse_interval_block(
            feed.interval_readings, block, entry_index, config
        )
    if reading_type is not None:
        feed.reading_types = parse_reading_type(feed.reading_types, reading_type, entry_index)
    for local_time in local_times:
        feed.local_time_parameters = parse_local_time_parameters(
            feed.local_time_parameters, local_time
        )
    return entry_type


def parse_entry(feed: ParsedFeed, node: etree._Element, config: ParseConfig) -> None:
    entry_index = len(feed.entries)
    row = feed.entries.start_push()
    content: Optional[etree._Element] = None

    for child in element_children(node):
        name = localname(child)
        if name == "title":
            if child.text is None:
                raise SchemaError("Empty title.")
            row.set("title", child.text)
        elif name in ("published", "updated"):
            if child.text is None:
                raise SchemaError(f"Missing {name} text")
            row.set(f"{name}_unix_ms", rfc3339_to_unix_ms(child.text))
        elif name == "content":
            content = child
        elif name == "link":
            _parse_link(row, child)

    require(content is not None, "Missing content node", SchemaError)
    row.set("entry_type", parse_content(feed, content, entry_index, config))
    feed.entries = row.finalize_push()


def parse_feed(xml: Union[str, bytes], config: Optional[ParseConfig] = None) -> ParsedFeed:
    """
    Parse one Green Button Atom feed into its four columnar stores.

    Any schema problem fails the whole feed; nothing partial is returned.
    """
    config = config or default_config()
    data = xml.encode("utf-8") if isinstance(xml, str) else xml
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as err:
        raise SchemaError(f"Invalid XML: {err}") from err

    require(localname(root) == "feed", "Missing feed", SchemaError)

    feed = ParsedFeed.empty()
    for node in element_children(root):
        if localname(node) == "entry":
            parse_entry(feed, node, config)

    log.debug(
        "parsed feed: %d entries, %d interval readings, %d reading types, %d local time parameters",
        len(feed.entries),
        len(feed.interval_readings),
        len(feed.reading_types),
        len(feed.local_time_parameters),
    )
    return feed
