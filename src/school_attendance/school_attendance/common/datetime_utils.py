from __future__ import annotations

from datetime import date, datetime, time, timedelta

END_OF_DAY = time(23, 59, 59, 999000)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date.

    Longer ISO timestamps (``2026-03-02T00:00:00Z``) are accepted and truncated to the day.
    """
    return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()


def iso_date(value: date | datetime) -> str:
    """Serialize a day as ``YYYY-MM-DD`` with no time or timezone component."""
    if isinstance(value, datetime):
        value = value.date()
    return value.strftime("%Y-%m-%d")


def start_of_day(value: date | datetime) -> datetime:
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time.min)


def end_of_day(value: date | datetime) -> datetime:
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, END_OF_DAY)


def is_weekday(day: date) -> bool:
    return day.weekday() < 5


def weekdays_back(from_day: date, count: int) -> date:
    """Step back one calendar day at a time until ``count`` Mon-Fri days were passed."""
    day = from_day
    found = 0
    while found < count:
        day -= timedelta(days=1)
        if is_weekday(day):
            found += 1
    return day


def days_between(earlier: date, later: date) -> int:
    """Calendar days from ``earlier`` to ``later`` (negative when ``earlier`` is in the future)."""
    return (later - earlier).days


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
