"""Next-occurrence calculation for recurring obligations."""

from __future__ import annotations

from datetime import date, timedelta

from finance_analytics.models import RecurringFrequency
from finance_analytics.utils.dates import add_months


def next_occurrence(current: date, frequency: RecurringFrequency) -> date:
    """Return the date one period of ``frequency`` after ``current``.

    Month and year steps clamp the day to the length of the target month,
    so 2025-01-31 + MONTHLY is 2025-02-28 and 2024-02-29 + YEARLY is 2025-02-28.
    """
    if frequency == RecurringFrequency.WEEKLY:
        return current + timedelta(days=7)
    if frequency == RecurringFrequency.MONTHLY:
        return add_months(current, 1)
    if frequency == RecurringFrequency.YEARLY:
        return add_months(current, 12)
    raise ValueError(f"Unsupported recurring frequency: {frequency!r}")
