from __future__ import annotations

from datetime import date, datetime
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import settings


class Clock(Protocol):
    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Wall clock normalized to the configured local timezone (naive datetimes)."""

    def __init__(self, timezone: str | None = None) -> None:
        name = timezone or settings.TIMEZONE
        try:
            self.zone = ZoneInfo(name)
        except ZoneInfoNotFoundError:
            self.zone = ZoneInfo("UTC")

    def now(self) -> datetime:
        return datetime.now(self.zone).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to a settable instant; used by tests and manual replays."""

    def __init__(self, current: datetime) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def set(self, current: datetime) -> None:
        self.current = current


system_clock = SystemClock()


def get_clock() -> Clock:
    return system_clock
