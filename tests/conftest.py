import pytest

HOST = "https://example.com/DataCustodian/espi/1_1/resource"

# 2020-01-01T00:00:00Z (standard time) and 2020-07-01T00:00:00Z (inside DST)
JAN_1_2020 = 1577836800
JUL_1_2020 = 1593561600


def _entry(title, self_href, content, extra_links=""):
    return f"""
  <entry>
    <id>{self_href}</id>
    <link rel="self" href="{self_href}"/>
    {extra_links}
    <title>{title}</title>
    <content>{content}</content>
    <published>2020-08-01T00:00:00Z</published>
    <updated>2020-08-01T00:00:00Z</updated>
  </entry>"""


def build_feed(
    host=HOST,
    power_of_ten=0,
    with_local_time=True,
    extra_local_time=False,
    with_reading_type=True,
    readings=None,
    block_title="Electricity consumption",
):
    """A small but complete Green Button feed: one meter reading, one block."""
    if readings is None:
        readings = [
            f"""<IntervalReading>
            <cost>12345</cost>
            <ReadingQuality><quality>19</quality></ReadingQuality>
            <timePeriod><duration>3600</duration><start>{JAN_1_2020}</start></timePeriod>
            <value>5</value>
          </IntervalReading>""",
            f"""<IntervalReading>
            <timePeriod><duration>3600</duration><start>{JUL_1_2020}</start></timePeriod>
            <value>7</value>
          </IntervalReading>""",
        ]

    usage_point = f"{host}/Subscription/1/UsagePoint/1"
    meter_reading = f"{usage_point}/MeterReading/01"
    reading_type = f"{host}/ReadingType/07"

    entries = [
        _entry(
            "Home",
            usage_point,
            "<UsagePoint xmlns=\"http://naesb.org/espi\"><ServiceCategory><kind>0</kind></ServiceCategory></UsagePoint>",
        ),
        _entry(
            "Meter",
            meter_reading,
            "<MeterReading xmlns=\"http://naesb.org/espi\"/>",
            extra_links=(
                f'<link rel="related" href="{meter_reading}/IntervalBlock" type="espi-feed/IntervalBlock"/>'
                f'<link rel="related" href="{reading_type}" type="espi-entry/ReadingType"/>'
            ),
        ),
    ]
    if with_reading_type:
        entries.append(
            _entry(
                "Type of Meter Reading Data",
                reading_type,
                f"""<ReadingType xmlns="http://naesb.org/espi">
          <accumulationBehaviour>4</accumulationBehaviour>
          <commodity>1</commodity>
          <currency>840</currency>
          <dataQualifier>12</dataQualifier>
          <flowDirection>1</flowDirection>
          <intervalLength>3600</intervalLength>
          <kind>12</kind>
          <powerOfTenMultiplier>{power_of_ten}</powerOfTenMultiplier>
          <uom>72</uom>
        </ReadingType>""",
            )
        )
    ltp = """<LocalTimeParameters xmlns="http://naesb.org/espi">
          <dstEndRule>B40E2000</dstEndRule>
          <dstOffset>3600</dstOffset>
          <dstStartRule>360E2000</dstStartRule>
          <tzOffset>-18000</tzOffset>
        </LocalTimeParameters>"""
    if with_local_time:
        entries.append(_entry("DST For North America", f"{host}/LocalTimeParameters/01", ltp))
    if extra_local_time:
        entries.append(_entry("DST again", f"{host}/LocalTimeParameters/02", ltp))

    block = f"""<IntervalBlock xmlns="http://naesb.org/espi">
          <interval><duration>86400</duration><start>{JAN_1_2020}</start></interval>
          {"".join(readings)}
        </IntervalBlock>"""
    entries.append(_entry(block_title, f"{meter_reading}/IntervalBlock/1", block))

    return f"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <id>urn:uuid:feed</id>
  <title>Green Button Usage Feed</title>
  <updated>2020-08-01T00:00:00Z</updated>{"".join(entries)}
</feed>
"""


@pytest.fixture
def feed_xml():
    return build_feed()


@pytest.fixture
def feed_builder():
    return build_feed
