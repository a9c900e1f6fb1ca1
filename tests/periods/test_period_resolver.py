from datetime import date, datetime, time

import pytest

from src.school_attendance.school_attendance.common.datetime_utils import weekdays_back
from src.school_attendance.school_attendance.core.enums import Period
from src.school_attendance.school_attendance.periods.resolver import parse_period, resolve_period

END_OF_DAY = time(23, 59, 59, 999000)


@pytest.mark.parametrize("period", list(Period))
def test_end_is_last_millisecond_of_reference_day_and_start_not_after_end(period):
    reference = datetime(2024, 3, 13, 10, 30)

    rng = resolve_period(period, reference_end=reference)

    assert rng.end == datetime.combine(date(2024, 3, 13), END_OF_DAY)
    assert rng.start <= rng.end
    assert rng.start.time() == time.min


def test_daily_is_the_reference_day():
    rng = resolve_period(Period.DAILY, reference_end=date(2024, 3, 13))

    assert rng.start == datetime(2024, 3, 13)
    assert rng.as_dict() == {"startDate": "2024-03-13", "endDate": "2024-03-13"}


@pytest.mark.parametrize(
    "reference, expected_start",
    [
        (date(2024, 3, 11), date(2024, 3, 1)),  # Monday
        (date(2024, 3, 13), date(2024, 3, 5)),  # Wednesday
        (date(2024, 3, 16), date(2024, 3, 8)),  # Saturday
    ],
)
def test_weekly_counts_six_weekdays_back(reference, expected_start):
    rng = resolve_period(Period.WEEKLY, reference_end=reference)

    assert rng.start_date == expected_start
    assert rng.end_date == reference

    steps = 0
    day = reference
    while day > rng.start_date:
        day = date.fromordinal(day.toordinal() - 1)
        if day.weekday() < 5:
            steps += 1
    assert steps == 6


def test_monthly_and_yearly_skip_weekends():
    reference = date(2024, 3, 13)

    assert resolve_period(Period.MONTHLY, reference_end=reference).start_date == weekdays_back(reference, 30)
    # 30 weekdays is six full weeks back
    assert weekdays_back(reference, 30) == date(2024, 1, 31)
    assert resolve_period(Period.YEARLY, reference_end=reference).start_date == weekdays_back(reference, 365)


def test_explicit_range_wins_and_is_normalized():
    rng = resolve_period(
        Period.DAILY,
        explicit_start=date(2024, 2, 1),
        explicit_end=datetime(2024, 2, 29, 8, 0),
        reference_end=date(2024, 3, 13),
    )

    assert rng.start == datetime(2024, 2, 1)
    assert rng.end == datetime.combine(date(2024, 2, 29), END_OF_DAY)
    assert rng.end_date == date(2024, 2, 29)


def test_explicit_end_without_start_counts_back_from_that_end():
    rng = resolve_period(Period.WEEKLY, explicit_end=date(2024, 3, 13), reference_end=date(2024, 6, 1))

    assert rng.start_date == date(2024, 3, 5)


def test_unknown_period_falls_back_to_default():
    assert parse_period("fortnightly", Period.DAILY) == Period.DAILY
    assert parse_period(None, Period.WEEKLY) == Period.WEEKLY
    assert parse_period(" Monthly ", Period.DAILY) == Period.MONTHLY
