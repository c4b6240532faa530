from __future__ import annotations

import calendar
import re
from datetime import date

_MONTH_RE = re.compile(r"^\s*(\d{4})-(\d{1,2})\s*$")


def month_floor(value: date) -> date:
    return date(value.year, value.month, 1)


def add_months(base: date, delta: int) -> date:
    """Shift ``base`` by ``delta`` calendar months, clamping the day to the target month length."""
    total = base.year * 12 + (base.month - 1) + delta
    year, month = divmod(total, 12)
    month += 1
    day = min(base.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def parse_month(value: str | date) -> date:
    """Parse ``YYYY-MM`` (or a date) into the first day of that month."""
    if isinstance(value, date):
        return month_floor(value)
    match = _MONTH_RE.match(str(value))
    if not match:
        raise ValueError("month must be formatted as YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError("month must be between 01 and 12")
    return date(year, month, 1)


def format_month(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"
