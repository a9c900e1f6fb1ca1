from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from ..common.datetime_utils import end_of_day, iso_date, now_local, start_of_day, weekdays_back
from ..core.constants import PERIOD_WEEKDAYS_BACK
from ..core.enums import Period

DayLike = Union[date, datetime]


@dataclass(frozen=True)
class DateRange:
    """Concrete report interval: ``start`` at 00:00:00.000, ``end`` at 23:59:59.999."""

    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    def as_dict(self) -> dict:
        return {"startDate": iso_date(self.start), "endDate": iso_date(self.end)}


def parse_period(value: Optional[str], default: Period) -> Period:
    """Read a period query value; anything unrecognized falls back to ``default``."""
    if not value:
        return default
    try:
        return Period(str(value).strip().lower())
    except ValueError:
        return default


def resolve_period(
    period: Period,
    explicit_start: Optional[DayLike] = None,
    explicit_end: Optional[DayLike] = None,
    reference_end: Optional[DayLike] = None,
) -> DateRange:
    """Turn a symbolic period into a concrete range.

    The end is always the last instant of ``explicit_end`` (or ``reference_end``,
    default now). Without an explicit start, the start is found by counting
    Monday-Friday days backward from the end, so a weekly range always covers
    six teaching days and spans more calendar days when it crosses a weekend.
    """
    end = end_of_day(explicit_end or reference_end or now_local())

    if explicit_start is not None:
        start = start_of_day(explicit_start)
    else:
        steps = PERIOD_WEEKDAYS_BACK.get(period, PERIOD_WEEKDAYS_BACK[Period.MONTHLY])
        start = start_of_day(weekdays_back(end.date(), steps))

    return DateRange(start=start, end=end)
