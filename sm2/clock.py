"""
sm2.clock
---------

This module defines the clocks that supply "now" to the scheduler and the review service.

Classes:
    Clock: Interface of a source of the current time and calendar date.
    SystemClock: Reads the system time.
    FixedClock: A manually controlled clock, mostly useful in tests.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone, tzinfo


class Clock(ABC):
    """
    A source of the current time.

    now() always returns a timezone-aware UTC datetime. today() returns the calendar date in the
    clock's own time zone, which is where study-day boundaries are drawn.
    """

    tz: tzinfo

    @abstractmethod
    def now(self) -> datetime: ...

    def today(self) -> date:
        return self.now().astimezone(self.tz).date()


class SystemClock(Clock):
    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """
    A clock that only moves when told to.

    Attributes:
        current: The datetime returned by now().
        tz: The time zone used to derive today().
    """

    def __init__(self, current: datetime, tz: tzinfo = timezone.utc) -> None:
        if current.tzinfo is None:
            raise ValueError("datetime must be timezone-aware")

        self.current = current.astimezone(timezone.utc)
        self.tz = tz

    def now(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> datetime:
        self.current = self.current + delta
        return self.current


__all__ = ["Clock", "SystemClock", "FixedClock"]
