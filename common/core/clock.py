"""Injectable time source. Services never read the wall clock directly."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current instant as an aware UTC datetime."""
        pass


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock pinned to a settable instant (tests, replays)."""

    def __init__(self, instant: Optional[datetime] = None):
        self._instant = ensure_utc(instant or datetime.now(timezone.utc))

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = ensure_utc(instant)

    def advance(self, **kwargs) -> datetime:
        """Move forward by a timedelta expressed as keyword args (days=, hours=...)."""
        self._instant = self._instant + timedelta(**kwargs)
        return self._instant


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalise aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def add_days(instant: datetime, days: int) -> datetime:
    """Advance the calendar date, keeping the time of day."""
    return instant + timedelta(days=days)


_default_clock: Clock = SystemClock()


def get_clock() -> Clock:
    return _default_clock
