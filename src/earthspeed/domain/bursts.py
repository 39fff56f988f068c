"""Brightness schedules for the burst patterns.

Both burst patterns run the sequential wave and only change its peak
brightness. A cycle is considered complete when the wrapped cycle time
decreases between two consecutive frames.

``CycleBurstCounter`` alternates 5 dim cycles with 3 bright ones.

``QuarterHourBurst`` is bright during the first 30 wall-clock seconds of
every quarter hour, for at most 3 animation cycles. Its counter resets when
the (date, hour, quarter) key changes, which also covers hour and day
rollover.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


LOW_CYCLES = 5
HIGH_CYCLES = 3

QUARTER_MINUTES = 15
BURST_WINDOW_SECONDS = 30.0
MAX_WINDOW_CYCLES = 3


@dataclass
class CycleBurstCounter:
    """Counts completed cycles and decides whether the current one is bright."""

    completed_cycles: int = 0
    last_cycle_time: float | None = None

    @property
    def period(self) -> int:
        return LOW_CYCLES + HIGH_CYCLES

    @property
    def position(self) -> int:
        """Index of the current cycle within the low/high period."""
        return self.completed_cycles % self.period

    @property
    def is_high(self) -> bool:
        return self.position >= LOW_CYCLES

    def observe(self, cycle_time: float) -> bool:
        """Feed this frame's wrapped cycle time; returns True if a cycle just completed."""
        wrapped = self.last_cycle_time is not None and cycle_time < self.last_cycle_time
        if wrapped:
            self.completed_cycles += 1
        self.last_cycle_time = cycle_time
        return wrapped


QuarterKey = tuple[date, int, int]


def quarter_key(moment: datetime) -> QuarterKey:
    """Identify the quarter hour containing ``moment``."""
    return (moment.date(), moment.hour, moment.minute // QUARTER_MINUTES)


def seconds_into_quarter(moment: datetime) -> float:
    return (
        (moment.minute % QUARTER_MINUTES) * 60
        + moment.second
        + moment.microsecond / 1_000_000
    )


def seconds_until_next_quarter(moment: datetime) -> float:
    return QUARTER_MINUTES * 60 - seconds_into_quarter(moment)


@dataclass
class QuarterHourBurst:
    """Wall-clock driven bright window at each quarter hour."""

    current_quarter: QuarterKey | None = None
    window_cycles: int = 0
    last_cycle_time: float | None = None
    bright: bool = False

    def observe(self, moment: datetime, cycle_time: float) -> bool:
        """Feed the wall clock and cycle time for this frame; returns brightness."""
        key = quarter_key(moment)
        if key != self.current_quarter:
            self.current_quarter = key
            self.window_cycles = 0

        wrapped = self.last_cycle_time is not None and cycle_time < self.last_cycle_time
        self.last_cycle_time = cycle_time
        if wrapped and self.bright:
            self.window_cycles += 1

        in_window = seconds_into_quarter(moment) < BURST_WINDOW_SECONDS
        self.bright = in_window and self.window_cycles < MAX_WINDOW_CYCLES
        return self.bright


__all__ = [
    "LOW_CYCLES",
    "HIGH_CYCLES",
    "QUARTER_MINUTES",
    "BURST_WINDOW_SECONDS",
    "MAX_WINDOW_CYCLES",
    "CycleBurstCounter",
    "QuarterHourBurst",
    "quarter_key",
    "seconds_into_quarter",
    "seconds_until_next_quarter",
]
