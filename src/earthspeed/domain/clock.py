"""Wall-clock abstraction.

Only the quarter-hour burst pattern looks at the wall clock. It reads the
clock fresh on every update, so swapping in a ``ManualClock`` makes boundary
crossings reproducible in tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current local time."""

    def now(self) -> datetime: ...


class SystemClock:
    """The host's local wall clock."""

    def now(self) -> datetime:
        return datetime.now()


class ManualClock:
    """A clock that only moves when told to.

    Example
    -------
    >>> clock = ManualClock(datetime(2024, 8, 28, 21, 14, 50))
    >>> clock.advance(15)
    >>> clock.now().minute
    15
    """

    def __init__(self, start: datetime | None = None):
        self._now = start or datetime(2000, 1, 1)

    def now(self) -> datetime:
        return self._now

    def set(self, moment: datetime) -> None:
        self._now = moment

    def advance(self, seconds: float) -> None:
        self._now = self._now + timedelta(seconds=seconds)


__all__ = ["Clock", "SystemClock", "ManualClock"]
