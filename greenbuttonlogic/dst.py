"""
Green Button daylight saving time rules.

A rule packs a recurring transition date into 32 bits
(https://www.greenbuttonalliance.org/daylight-savings-time):

    bits  0-11  seconds        0-3599
    bits 12-16  hours          0-23
    bits 17-19  day of week    0 = not applicable, 1-7
    bits 20-24  day of month   0 = not applicable, 1-31
    bits 25-27  operator       0-7
    bits 28-31  month          1-12

Operators:
    0    the day of month itself
    1    the first day_of_week on or after day_of_month
    2-6  the 1st..5th day_of_week of the month
    7    the last day_of_week of the month

0xFFFFFFFF means the rule does not apply.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from . import canon
from .exceptions import InvalidDstRuleError


class DstRule(BaseModel):
    seconds: int = Field(ge=0, le=3599)
    hours: int = Field(ge=0, le=23)
    day_of_week: int = Field(ge=0, le=7)
    day_of_month: int = Field(ge=0, le=31)
    operator: int = Field(ge=0, le=7)
    month: int = Field(ge=1, le=12)

    @property
    def weekday(self) -> int:
        """The day-of-week field as a Python weekday number (Monday = 0)."""
        return (self.day_of_week + 1) % 7

    def resolve(self, year: int) -> Optional[datetime]:
        """Local naive transition time in ``year``, or None when the rule has no date that year."""
        d = resolve_date(year, self.weekday, self.day_of_month, self.operator, self.month)
        if d is None:
            return None
        minutes, seconds = divmod(self.seconds, 60)
        return datetime.combine(d, time(self.hours, minutes, seconds))


def _ymd(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def resolve_date(
    year: int, weekday: int, day_of_month: int, operator: int, month: int
) -> Optional[date]:
    """Apply a rule operator; ``weekday`` uses Python numbering (Monday = 0)."""
    if not 1 <= month <= 12:
        return None

    if operator == 0:
        return _ymd(year, month, day_of_month)

    if operator == 1:
        start = _ymd(year, month, day_of_month)
        if start is None:
            return None
        return start + timedelta(days=(weekday - start.weekday()) % 7)

    if operator == 7:
        last = date(year, month, calendar.monthrange(year, month)[1])
        return last - timedelta(days=(last.weekday() - weekday) % 7)

    first = _ymd(year, month, 1)
    if first is None:
        return None
    nth = operator - 2
    out = first + timedelta(days=(weekday - first.weekday()) % 7 + 7 * nth)
    # a fifth occurrence may not exist
    if out.month != month:
        return None
    return out


def decode_dst_rule(rule: int) -> Optional[DstRule]:
    """Split a packed rule into its fields; None for the not-applicable sentinel."""
    if rule == canon.DST_RULE_NOT_APPLICABLE:
        return None
    if not 0 <= rule <= 0xFFFFFFFF:
        raise InvalidDstRuleError(f"DST rule {rule:#x} is not a 32-bit value")
    try:
        return DstRule(
            seconds=rule & 0x00000FFF,
            hours=(rule & 0x0001F000) >> 12,
            day_of_week=(rule & 0x000E0000) >> 17,
            day_of_month=(rule & 0x01F00000) >> 20,
            operator=(rule & 0x0E000000) >> 25,
            month=(rule & 0xF0000000) >> 28,
        )
    except ValidationError as err:
        raise InvalidDstRuleError(
            f"Invalid dst rule {rule:#010x} in LocalTimeParameters: {err}"
        ) from err


def date_from_dst_rule(rule: int, year: int) -> Optional[datetime]:
    decoded = decode_dst_rule(rule)
    if decoded is None:
        return None
    return decoded.resolve(year)
