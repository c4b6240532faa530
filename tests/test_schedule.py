from __future__ import annotations

from datetime import date, datetime, time

import pytest

from finance_analytics.models import RecurringFrequency
from finance_analytics.scheduler import next_daily_fire, next_monthly_fire
from finance_analytics.services.schedule import next_occurrence
from finance_analytics.utils.dates import add_months, format_month, parse_month


@pytest.mark.parametrize(
    "current,frequency,expected",
    [
        (date(2025, 3, 15), RecurringFrequency.WEEKLY, date(2025, 3, 22)),
        (date(2025, 12, 29), RecurringFrequency.WEEKLY, date(2026, 1, 5)),
        (date(2025, 3, 15), RecurringFrequency.MONTHLY, date(2025, 4, 15)),
        (date(2025, 12, 15), RecurringFrequency.MONTHLY, date(2026, 1, 15)),
        (date(2025, 3, 15), RecurringFrequency.YEARLY, date(2026, 3, 15)),
    ],
)
def test_next_occurrence(current, frequency, expected):
    assert next_occurrence(current, frequency) == expected


def test_monthly_clamps_to_month_end():
    assert next_occurrence(date(2025, 1, 31), RecurringFrequency.MONTHLY) == date(2025, 2, 28)
    assert next_occurrence(date(2024, 1, 31), RecurringFrequency.MONTHLY) == date(2024, 2, 29)


def test_yearly_from_leap_day_clamps():
    assert next_occurrence(date(2024, 2, 29), RecurringFrequency.YEARLY) == date(2025, 2, 28)


def test_clamping_is_not_reversed_on_the_following_step():
    # Day-of-month lost to clamping stays lost: Jan 31 -> Feb 28 -> Mar 28
    first = next_occurrence(date(2025, 1, 31), RecurringFrequency.MONTHLY)
    assert next_occurrence(first, RecurringFrequency.MONTHLY) == date(2025, 3, 28)


def test_next_occurrence_is_always_later():
    start = date(2025, 1, 31)
    for frequency in RecurringFrequency:
        assert next_occurrence(start, frequency) > start


def test_unknown_frequency_rejected():
    with pytest.raises(ValueError):
        next_occurrence(date(2025, 1, 1), "DAILY")


def test_add_months_negative_and_across_years():
    assert add_months(date(2025, 3, 31), -1) == date(2025, 2, 28)
    assert add_months(date(2025, 1, 15), -13) == date(2023, 12, 15)
    assert add_months(date(2025, 11, 30), 3) == date(2026, 2, 28)


def test_parse_and_format_month():
    assert parse_month("2025-06") == date(2025, 6, 1)
    assert parse_month(date(2025, 6, 17)) == date(2025, 6, 1)
    assert format_month(date(2025, 6, 17)) == "2025-06"
    with pytest.raises(ValueError):
        parse_month("2025-13")
    with pytest.raises(ValueError):
        parse_month("June 2025")


def test_next_daily_fire():
    at = time(1, 0)
    assert next_daily_fire(datetime(2025, 3, 15, 0, 30), at) == datetime(2025, 3, 15, 1, 0)
    # strictly later: firing instant itself rolls to the following day
    assert next_daily_fire(datetime(2025, 3, 15, 1, 0), at) == datetime(2025, 3, 16, 1, 0)
    assert next_daily_fire(datetime(2025, 12, 31, 23, 0), at) == datetime(2026, 1, 1, 1, 0)


def test_next_monthly_fire():
    at = time(0, 0)
    assert next_monthly_fire(datetime(2025, 3, 15, 12, 0), at) == datetime(2025, 4, 1, 0, 0)
    assert next_monthly_fire(datetime(2025, 4, 1, 0, 0), at) == datetime(2025, 5, 1, 0, 0)
    assert next_monthly_fire(datetime(2025, 12, 2, 0, 0), at) == datetime(2026, 1, 1, 0, 0)
    assert next_monthly_fire(datetime(2025, 4, 1, 0, 0), time(6, 0)) == datetime(2025, 4, 1, 6, 0)
