"""Parsing Atom feeds into the columnar stores."""

import math

import pytest

from greenbuttonlogic import validate
from greenbuttonlogic.config import ParseConfig
from greenbuttonlogic.exceptions import ClassificationError, MissingFieldError, SchemaError
from greenbuttonlogic.readers import espi
from greenbuttonlogic.stores import EntryKind, EntryType

from conftest import HOST, JAN_1_2020, JUL_1_2020


def test_parse_feed_fills_every_store(feed_xml):
    feed = espi.parse_feed(feed_xml)
    assert len(feed.entries) == 5
    assert len(feed.interval_readings) == 2
    assert len(feed.reading_types) == 1
    assert len(feed.local_time_parameters) == 1
    for table in (feed.entries, feed.interval_readings, feed.reading_types, feed.local_time_parameters):
        validate.assert_balanced(table)


def test_entries_are_classified(feed_xml):
    feed = espi.parse_feed(feed_xml)
    kinds = [t.kind for t in feed.entries.entry_type]
    assert kinds == [
        EntryKind.OTHER,
        EntryKind.OTHER,
        EntryKind.READING_TYPE,
        EntryKind.LOCAL_TIME_PARAMETERS,
        EntryKind.INTERVAL_BLOCK,
    ]
    assert feed.entries.entry_type[2] == EntryType.reading_type_with_index(0)
    assert feed.reading_types.entry_index == [2]


def test_links_are_recorded(feed_xml):
    feed = espi.parse_feed(feed_xml)
    meter_reading = f"{HOST}/Subscription/1/UsagePoint/1/MeterReading/01"
    assert feed.entries.href[1] == meter_reading
    assert feed.entries.related_reading_type_entry_href[1] == f"{HOST}/ReadingType/07"
    assert feed.entries.related_meter_reading_entry_href[4] == meter_reading
    # entries without such links default to ""
    assert feed.entries.related_meter_reading_entry_href[0] == ""
    assert feed.entries.related_reading_type_entry_href[4] == ""


def test_interval_readings_fields_and_defaults(feed_xml):
    readings = espi.parse_feed(feed_xml).interval_readings
    assert readings.entry_index == [4, 4]
    assert readings.cost[0] == pytest.approx(0.12345)
    assert math.isnan(readings.cost[1])
    assert readings.quality == [19, 16]
    assert readings.value == [5, 7]
    assert readings.tou == [0, 0]
    assert readings.time_period_start_unix_ms == [JAN_1_2020 * 1000, JUL_1_2020 * 1000]
    assert readings.time_period_duration_seconds == [3600, 3600]


def test_reading_type_and_local_time_parameters(feed_xml):
    feed = espi.parse_feed(feed_xml)
    rt = feed.reading_types.row(0)
    assert rt["uom"] == 72
    assert rt["currency"] == 840
    assert rt["power_of_ten_multiplier"] == 0
    assert rt["phase"] == 0
    assert feed.local_time_parameters.row(0) == {
        "dst_start_rule": 0x360E2000,
        "dst_end_rule": 0xB40E2000,
        "dst_offset": 3600,
        "tz_offset": -18000,
    }


def test_published_and_updated_are_unix_ms(feed_xml):
    entries = espi.parse_feed(feed_xml).entries
    assert entries.published_unix_ms[0] == 1596240000000
    assert entries.updated_unix_ms[0] == 1596240000000


def test_empty_numeric_text_is_zero(feed_builder):
    reading = f"""<IntervalReading><cost></cost>
        <timePeriod><duration>900</duration><start>{JAN_1_2020}</start></timePeriod>
        <value/></IntervalReading>"""
    readings = espi.parse_feed(feed_builder(readings=[reading])).interval_readings
    assert readings.cost == [0.0]
    assert readings.value == [0]


def test_ignored_reading_tags(feed_builder):
    reading = f"""<IntervalReading><cpp>1</cpp><consumptionTier>2</consumptionTier>
        <timePeriod><duration>900</duration><start>{JAN_1_2020}</start></timePeriod>
        <value>1</value></IntervalReading>"""
    xml = feed_builder(readings=[reading])
    assert len(espi.parse_feed(xml).interval_readings) == 1
    with pytest.raises(SchemaError, match="Unmatched tag name"):
        espi.parse_feed(xml, config=ParseConfig(ignored_reading_tags=()))


def test_unknown_reading_tag_fails_feed(feed_builder):
    reading = f"""<IntervalReading><bogus>1</bogus>
        <timePeriod><duration>900</duration><start>{JAN_1_2020}</start></timePeriod>
        <value>1</value></IntervalReading>"""
    with pytest.raises(SchemaError):
        espi.parse_feed(feed_builder(readings=[reading]))


def test_missing_required_reading_field(feed_builder):
    reading = f"""<IntervalReading>
        <timePeriod><duration>900</duration><start>{JAN_1_2020}</start></timePeriod>
        </IntervalReading>"""
    with pytest.raises(MissingFieldError, match="Missing 'value' for IntervalReadings"):
        espi.parse_feed(feed_builder(readings=[reading]))


def test_missing_start_time(feed_builder):
    reading = """<IntervalReading><timePeriod><duration>900</duration></timePeriod>
        <value>1</value></IntervalReading>"""
    with pytest.raises(SchemaError, match="Missing start time"):
        espi.parse_feed(feed_builder(readings=[reading]))


def test_malformed_number(feed_builder):
    reading = f"""<IntervalReading>
        <timePeriod><duration>900</duration><start>{JAN_1_2020}</start></timePeriod>
        <value>lots</value></IntervalReading>"""
    with pytest.raises(SchemaError, match="Malformed"):
        espi.parse_feed(feed_builder(readings=[reading]))


def test_empty_title_fails(feed_xml):
    xml = feed_xml.replace("<title>Home</title>", "<title/>")
    with pytest.raises(SchemaError, match="Empty title"):
        espi.parse_feed(xml)


def test_unknown_content_fails(feed_xml):
    xml = feed_xml.replace(
        '<MeterReading xmlns="http://naesb.org/espi"/>',
        '<Mystery xmlns="http://naesb.org/espi"/>',
    )
    with pytest.raises(ClassificationError, match="Unknown tag name"):
        espi.parse_feed(xml)


def test_mixed_content_fails(feed_xml):
    xml = feed_xml.replace(
        '<MeterReading xmlns="http://naesb.org/espi"/>',
        '<MeterReading xmlns="http://naesb.org/espi"/><IntervalBlock xmlns="http://naesb.org/espi"/>',
    )
    with pytest.raises(ClassificationError, match="mixed content types"):
        espi.parse_feed(xml)


def test_several_interval_blocks_in_one_content(feed_builder):
    xml = feed_builder()
    start = xml.index('<IntervalBlock xmlns="http://naesb.org/espi">')
    end = xml.index("</IntervalBlock>") + len("</IntervalBlock>")
    block = xml[start:end]
    xml = xml[:start] + block + block + xml[end:]
    feed = espi.parse_feed(xml)
    assert len(feed.interval_readings) == 4
    assert feed.entries.entry_type[-1] == EntryType.INTERVAL_BLOCK


def test_not_a_feed():
    with pytest.raises(SchemaError, match="Missing feed"):
        espi.parse_feed('<entry xmlns="http://www.w3.org/2005/Atom"/>')


def test_invalid_xml():
    with pytest.raises(SchemaError):
        espi.parse_feed("<feed><entry></feed>")


def test_meter_reading_href():
    assert (
        espi.meter_reading_href("https://x/UsagePoint/1/MeterReading/01/IntervalBlock/1")
        == "https://x/UsagePoint/1/MeterReading/01"
    )
    assert espi.meter_reading_href("https://x/UsagePoint/1/MeterReading/01") is None


def test_repeated_local_time_parameters_each_get_a_row(feed_xml):
    start = feed_xml.index('<LocalTimeParameters xmlns="http://naesb.org/espi">')
    end = feed_xml.index("</LocalTimeParameters>") + len("</LocalTimeParameters>")
    second = feed_xml[start:end].replace("-18000", "3600")
    feed = espi.parse_feed(feed_xml[:end] + second + feed_xml[end:])
    assert feed.local_time_parameters.tz_offset == [-18000, 3600]
    assert feed.entries.entry_type[3] == EntryType.LOCAL_TIME_PARAMETERS


def test_repeated_reading_type_keeps_the_last(feed_xml):
    start = feed_xml.index('<ReadingType xmlns="http://naesb.org/espi">')
    end = feed_xml.index("</ReadingType>") + len("</ReadingType>")
    second = feed_xml[start:end].replace("<uom>72</uom>", "<uom>38</uom>")
    feed = espi.parse_feed(feed_xml[:end] + second + feed_xml[end:])
    assert len(feed.reading_types) == 1
    assert feed.reading_types.uom == [38]
    assert feed.entries.entry_type[2] == EntryType.reading_type_with_index(0)
