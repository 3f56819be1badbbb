"""DST rule decoding and date resolution."""

from datetime import date, datetime

import pytest

from greenbuttonlogic import dst
from greenbuttonlogic.exceptions import InvalidDstRuleError


def _rule(month, operator, day_of_month, day_of_week, hours, seconds=0):
    return (
        (month << 28)
        | (operator << 25)
        | (day_of_month << 20)
        | (day_of_week << 17)
        | (hours << 12)
        | seconds
    )


def test_not_applicable_sentinel_yields_none():
    assert dst.decode_dst_rule(0xFFFFFFFF) is None
    assert dst.date_from_dst_rule(0xFFFFFFFF, 2020) is None


def test_decode_fields():
    rule = dst.decode_dst_rule(0x360E2000)
    assert rule.month == 3
    assert rule.operator == 3
    assert rule.day_of_month == 0
    assert rule.day_of_week == 7
    assert rule.hours == 2
    assert rule.seconds == 0


def test_start_rule_second_occurrence():
    assert dst.date_from_dst_rule(0x360E2000, 2020) == datetime(2020, 3, 10, 2, 0)
    assert dst.date_from_dst_rule(0x360E2000, 2021) == datetime(2021, 3, 9, 2, 0)


def test_end_rule_first_occurrence():
    assert dst.date_from_dst_rule(0xB40E2000, 2020) == datetime(2020, 11, 3, 2, 0)


def test_seconds_split_into_minutes_and_seconds():
    rule = _rule(month=3, operator=0, day_of_month=15, day_of_week=0, hours=1, seconds=90)
    assert dst.date_from_dst_rule(rule, 2020) == datetime(2020, 3, 15, 1, 1, 30)


def test_last_weekday_of_month():
    # day_of_week 5 is Sunday
    rule = _rule(month=10, operator=7, day_of_month=0, day_of_week=5, hours=3)
    assert dst.date_from_dst_rule(rule, 2020) == datetime(2020, 10, 25, 3, 0)


def test_weekday_on_or_after_day_of_month():
    sunday = 6
    assert dst.resolve_date(2020, sunday, 8, 1, 3) == date(2020, 3, 8)
    assert dst.resolve_date(2020, sunday, 9, 1, 3) == date(2020, 3, 15)


def test_fifth_occurrence_only_when_it_exists():
    saturday, sunday = 5, 6
    assert dst.resolve_date(2020, saturday, 0, 6, 2) == date(2020, 2, 29)
    assert dst.resolve_date(2020, sunday, 0, 6, 2) is None


def test_literal_day_must_exist():
    assert dst.resolve_date(2021, 0, 29, 0, 2) is None
    assert dst.resolve_date(2020, 0, 29, 0, 2) == date(2020, 2, 29)


@pytest.mark.parametrize(
    "rule",
    [
        _rule(month=3, operator=0, day_of_month=1, day_of_week=0, hours=24),
        _rule(month=0, operator=0, day_of_month=1, day_of_week=0, hours=2),
        _rule(month=13, operator=0, day_of_month=1, day_of_week=0, hours=2),
        _rule(month=3, operator=0, day_of_month=1, day_of_week=0, hours=2, seconds=3600),
    ],
)
def test_out_of_range_fields_are_invalid(rule):
    with pytest.raises(InvalidDstRuleError):
        dst.decode_dst_rule(rule)


def test_python_weekday_mapping():
    assert dst.decode_dst_rule(_rule(3, 2, 0, 0, 2)).weekday == 1
    assert dst.decode_dst_rule(_rule(3, 2, 0, 6, 2)).weekday == 0


def test_documented_dates_2025():
    tuesday = 1
    assert dst.resolve_date(2025, tuesday, 18, 0, 6) == date(2025, 6, 18)
    assert dst.resolve_date(2025, tuesday, 0, 7, 2) == date(2025, 2, 25)
    assert dst.resolve_date(2025, tuesday, 0, 7, 12) == date(2025, 12, 30)
