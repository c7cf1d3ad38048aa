"""
SpoolClock - wall-clock time source for triggers and key derivation.

The daily trigger and the date partition of every uploaded key depend on
"now". Routing all reads through one clock that can be frozen and
advanced keeps that logic testable without sleeping.
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional


class SpoolClock:
    """
    A UTC clock that can be frozen and stepped forward.

    Usage:
        clock = SpoolClock()
        clock.now()  # real time, tz-aware UTC

        clock.freeze(datetime(2024, 3, 2, 0, 0, 1, tzinfo=timezone.utc))
        clock.advance(60)
        clock.unfreeze()
    """

    def __init__(self, frozen_time: Optional[datetime] = None):
        self._frozen_time: Optional[datetime] = _as_utc(frozen_time) if frozen_time else None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        """Current time as a tz-aware UTC datetime (frozen or real)."""
        with self._lock:
            if self._frozen_time is not None:
                return self._frozen_time
        return datetime.now(timezone.utc)

    def timestamp(self) -> float:
        """Seconds since epoch."""
        return self.now().timestamp()

    def freeze(self, dt: datetime) -> None:
        """
        Freeze the clock at a specific time.

        Naive datetimes are taken to be UTC.
        """
        with self._lock:
            self._frozen_time = _as_utc(dt)

    def advance(self, seconds: float) -> None:
        """Move a frozen clock forward. Freezes at real "now" first if needed."""
        with self._lock:
            base = self._frozen_time or datetime.now(timezone.utc)
            self._frozen_time = base + timedelta(seconds=seconds)

    def unfreeze(self) -> None:
        with self._lock:
            self._frozen_time = None

    @property
    def is_frozen(self) -> bool:
        with self._lock:
            return self._frozen_time is not None

    def __enter__(self) -> "SpoolClock":
        return self

    def __exit__(self, *args) -> None:
        self.unfreeze()


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# Process-wide default, used when no clock is injected
default_clock = SpoolClock()
