"""
The three flush triggers.

    SizeTrigger     checked after every append; forces a spill
    IntervalTicker  fixed period; forces a regular upload
    DailyTicker     fixed UTC time-of-day; forces a day-boundary upload

Tickers never sleep. The event loop asks them how long until they are
due and whether they are due now, so tests can drive them with a frozen
SpoolClock.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Optional

from s3spool.clock import SpoolClock, default_clock

logger = logging.getLogger(__name__)

DAY = timedelta(days=1)


@dataclass(frozen=True)
class SizeTrigger:
    """Fires when the buffer grows past threshold bytes."""
    threshold: int

    def should_spill(self, buffered: int) -> bool:
        return buffered > self.threshold


class Ticker(ABC):
    """A timer the event loop polls between events."""

    @abstractmethod
    def seconds_until_due(self) -> Optional[float]:
        """Seconds until the next firing, or None if the ticker never fires."""

    @abstractmethod
    def reset(self) -> None:
        """Schedule the next firing after the current one was handled."""

    def is_due(self) -> bool:
        remaining = self.seconds_until_due()
        return remaining is not None and remaining <= 0


class IntervalTicker(Ticker):
    """
    Fires once every `period` seconds.

    A period of 0 disables the ticker. reset() schedules the next firing
    one full period after the moment it is called, so a slow upload or a
    stalled loop yields a single firing rather than a burst.
    """

    def __init__(self, period: float, clock: Optional[SpoolClock] = None):
        self.period = period
        self.clock = clock or default_clock
        self._next: Optional[float] = None
        if period > 0:
            self._next = self.clock.timestamp() + period

    @property
    def enabled(self) -> bool:
        return self._next is not None

    def seconds_until_due(self) -> Optional[float]:
        if self._next is None:
            return None
        return self._next - self.clock.timestamp()

    def reset(self) -> None:
        if self._next is None:
            return
        self._next = self.clock.timestamp() + self.period


def next_daily_fire(now: datetime, at: time) -> datetime:
    """
    Next occurrence of time-of-day `at` (UTC) strictly after `now`.

    If today's instant has already passed (or is exactly now), the same
    time tomorrow is returned.
    """
    now = now.astimezone(timezone.utc)
    candidate = datetime.combine(now.date(), at, tzinfo=timezone.utc)
    if candidate <= now:
        candidate += DAY
    return candidate


def parse_time_of_day(value: str) -> time:
    """Parse "HH:MM[:SS]" into a time. Raises ValueError on bad input."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"expected HH:MM[:SS], got {value!r}")
    numbers = [int(p) for p in parts]
    return time(*numbers)


class DailyTicker(Ticker):
    """
    Fires once a day at a fixed UTC time-of-day (midnight by default).

    Every reset recomputes the target from the clock's current time
    rather than from the previous target, so it never drifts.
    """

    def __init__(self, at: time = time(0, 0, 0), clock: Optional[SpoolClock] = None):
        self.at = at
        self.clock = clock or default_clock
        self.next_fire = next_daily_fire(self.clock.now(), at)

    def seconds_until_due(self) -> Optional[float]:
        return (self.next_fire - self.clock.now()).total_seconds()

    def reset(self) -> None:
        self.next_fire = next_daily_fire(self.clock.now(), self.at)
        logger.debug(f"Next daily flush at {self.next_fire.isoformat()}")
