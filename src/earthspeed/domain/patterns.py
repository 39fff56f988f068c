"""Wave pattern renderers.

Every pattern is a pure function ``CycleState -> FixtureOutputs``. The
stateful parts of a pattern (the random permutation, the burst counters,
the wall-clock window) live in the wave engine, which resolves them into
the immutable ``CycleState`` before dispatch.

All patterns share one flash primitive: a fixture's intensity depends only
on ``time_diff``, the time since its trigger within the current cycle
(wrapped into ``[0, cycle_length)``). Inside the first ``flash_duration``
seconds the intensity follows ``sin(pi * time_diff / flash_duration)``;
outside it is zero. Patterns differ only in how they assign trigger
offsets to fixtures and in how passes of different speed are chained into
a super-cycle.

Example
-------
>>> from earthspeed.domain.installation import InstallationGeometry
>>> timing = WaveTiming.from_geometry(InstallationGeometry())
>>> state = CycleState(time=0.025, fixture_count=30, timing=timing)
>>> outputs = render_pattern(PatternMode.SEQUENTIAL, state)
>>> float(outputs.intensity[0])
1000.0
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import numpy as np

from earthspeed.domain.installation import (
    FLASH_DURATION,
    PEAK_BULB_OPACITY,
    PEAK_GLOW_OPACITY,
    PEAK_INTENSITY,
    InstallationGeometry,
)
from earthspeed.shared.exceptions import UnknownPatternError


# Super-cycle composition
FAST_FACTOR = 5  # fast passes run this many times quicker
FAST_RUN_REPEATS = 3
BLINK_COUNT = 3
BLINK_PERIOD = 0.3  # seconds per blink (on + off)
BLINK_ON_TIME = 0.15


class PatternMode(str, Enum):
    """Available animation patterns."""

    SEQUENTIAL = "sequential"
    BLINK_ALL = "blink-all"
    FAST_RUNS = "fast-runs"
    PING_PONG = "ping-pong"
    PING_PONG_FAST = "ping-pong-fast"
    RANDOM = "random"
    CONVERGE_CENTER = "converge-center"
    CONVERGE_POINT = "converge-point"
    DIVERGE_CENTER = "diverge-center"
    DIVERGE_POINT = "diverge-point"
    BRIGHTNESS_BURST = "brightness-burst"
    BRIGHTNESS_BURST_REALTIME = "brightness-burst-realtime"

    @classmethod
    def parse(cls, value: PatternMode | str) -> PatternMode:
        """Resolve a mode from its identifier.

        Raises
        ------
        UnknownPatternError
            If ``value`` is not a known identifier
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownPatternError(str(value), [m.value for m in cls]) from None

    @property
    def is_burst(self) -> bool:
        """Burst patterns modulate peak brightness and want a night sky."""
        return self in (PatternMode.BRIGHTNESS_BURST, PatternMode.BRIGHTNESS_BURST_REALTIME)


@dataclass(frozen=True)
class ModeInfo:
    """Display record for one pattern."""

    id: str
    name: str
    description: str


MODE_CATALOGUE: dict[PatternMode, ModeInfo] = {
    PatternMode.SEQUENTIAL: ModeInfo("sequential", "Sequential", "Lights flash in order (default)"),
    PatternMode.BLINK_ALL: ModeInfo("blink-all", "Blink All", "Run once, then blink all 3 times"),
    PatternMode.FAST_RUNS: ModeInfo("fast-runs", "Fast Runs", "Run once, then 3 fast runs"),
    PatternMode.PING_PONG: ModeInfo("ping-pong", "Ping Pong", "Run forward then backward"),
    PatternMode.PING_PONG_FAST: ModeInfo(
        "ping-pong-fast", "Ping Pong Fast", "Run forward then backward (fast)"
    ),
    PatternMode.RANDOM: ModeInfo("random", "Random", "Flash lights in random order"),
    PatternMode.CONVERGE_CENTER: ModeInfo(
        "converge-center", "Converge Center", "Both ends to middle"
    ),
    PatternMode.CONVERGE_POINT: ModeInfo(
        "converge-point", "Converge Point", "Both ends to specific point"
    ),
    PatternMode.DIVERGE_CENTER: ModeInfo("diverge-center", "Diverge Center", "Middle outward"),
    PatternMode.DIVERGE_POINT: ModeInfo("diverge-point", "Diverge Point", "Specific point outward"),
    PatternMode.BRIGHTNESS_BURST: ModeInfo(
        "brightness-burst",
        "Brightness Burst",
        "5 dim runs, then 3 bright runs (night sky)",
    ),
    PatternMode.BRIGHTNESS_BURST_REALTIME: ModeInfo(
        "brightness-burst-realtime",
        "Brightness Burst (Clock)",
        "Bright for 30s at every quarter hour, dim otherwise (night sky)",
    ),
}


@dataclass(frozen=True)
class WaveTiming:
    """The two derived timing constants plus the flash envelope length."""

    time_between_lights: float
    cycle_duration: float
    flash_duration: float = FLASH_DURATION

    @classmethod
    def from_geometry(cls, geometry: InstallationGeometry) -> WaveTiming:
        return cls(
            time_between_lights=geometry.time_between_lights,
            cycle_duration=geometry.cycle_duration,
        )

    def wave_front_index(self, time: float) -> float:
        """Fractional fixture index of the sequential wave front at ``time``."""
        return (time % self.cycle_duration) / self.time_between_lights


@dataclass(frozen=True)
class FlashLevels:
    """Peak output values reached at the middle of a flash."""

    intensity: float = PEAK_INTENSITY
    glow_opacity: float = PEAK_GLOW_OPACITY
    bulb_opacity: float = PEAK_BULB_OPACITY

    @classmethod
    def for_intensity(cls, intensity: float) -> FlashLevels:
        """Levels for a given peak spot intensity; opacities saturate at full peak."""
        factor = min(1.0, max(0.0, intensity) / PEAK_INTENSITY)
        return cls(
            intensity=max(0.0, intensity),
            glow_opacity=PEAK_GLOW_OPACITY * factor,
            bulb_opacity=PEAK_BULB_OPACITY * factor,
        )


FULL_LEVELS = FlashLevels()


@dataclass(frozen=True)
class CycleState:
    """Everything a pattern renderer needs for one frame.

    Attributes
    ----------
    time : float
        Virtual animation clock (seconds since the mode was selected)
    fixture_count : int
        Number of fixtures in the row
    timing : WaveTiming
        Derived timing constants
    levels : FlashLevels
        Peak outputs for this frame (burst modes dim or brighten these)
    convergence_point : int
        Fixture index used by converge-point
    divergence_point : int
        Fixture index used by diverge-point
    sequence : tuple[int, ...] | None
        Firing order for random mode (a permutation of fixture indices)
    """

    time: float
    fixture_count: int
    timing: WaveTiming
    levels: FlashLevels = FULL_LEVELS
    convergence_point: int = 0
    divergence_point: int = 0
    sequence: tuple[int, ...] | None = None


@dataclass
class FixtureOutputs:
    """Per-fixture outputs for one frame, as parallel arrays."""

    intensity: np.ndarray
    glow_opacity: np.ndarray
    bulb_opacity: np.ndarray

    @classmethod
    def zeros(cls, count: int) -> FixtureOutputs:
        return cls(np.zeros(count), np.zeros(count), np.zeros(count))

    @classmethod
    def uniform(cls, count: int, levels: FlashLevels) -> FixtureOutputs:
        return cls(
            np.full(count, levels.intensity),
            np.full(count, levels.glow_opacity),
            np.full(count, levels.bulb_opacity),
        )

    @classmethod
    def from_curve(cls, curve: np.ndarray, levels: FlashLevels) -> FixtureOutputs:
        return cls(
            curve * levels.intensity,
            curve * levels.glow_opacity,
            curve * levels.bulb_opacity,
        )

    def __len__(self) -> int:
        return len(self.intensity)


def flash_curve(time_diff: np.ndarray | float, flash_duration: float = FLASH_DURATION) -> np.ndarray:
    """Normalised flash envelope in [0, 1] for each ``time_diff``."""
    time_diff = np.asarray(time_diff, dtype=np.float64)
    curve = np.sin(np.pi * time_diff / flash_duration)
    inside = (time_diff >= 0.0) & (time_diff <= flash_duration)
    return np.where(inside, np.maximum(curve, 0.0), 0.0)


def _flash(
    cycle_time: float,
    offsets: np.ndarray,
    cycle_length: float,
    state: CycleState,
) -> FixtureOutputs:
    # np.mod keeps the wrapped difference in [0, cycle_length)
    time_diff = np.mod(cycle_time - offsets, cycle_length)
    return FixtureOutputs.from_curve(flash_curve(time_diff, state.timing.flash_duration), state.levels)


# =============================================================================
# Trigger offsets (in units of time_between_lights)
# =============================================================================


def sequential_slots(count: int) -> np.ndarray:
    return np.arange(count, dtype=np.float64)


def converge_point_slots(count: int, point: int) -> np.ndarray:
    """Fixtures up to ``point`` count from the start, the rest from the end."""
    indices = np.arange(count)
    return np.where(indices <= point, indices, count - 1 - indices).astype(np.float64)


def converge_center_slots(count: int) -> np.ndarray:
    return converge_point_slots(count, count // 2)


def diverge_point_slots(count: int, point: int) -> np.ndarray:
    return np.abs(np.arange(count) - point).astype(np.float64)


def diverge_center_slots(count: int) -> np.ndarray:
    return diverge_point_slots(count, count // 2)


def random_slots(sequence: tuple[int, ...] | np.ndarray) -> np.ndarray:
    """Slot of each fixture given the firing order ``sequence``."""
    sequence = np.asarray(sequence, dtype=np.int64)
    slots = np.empty(len(sequence), dtype=np.float64)
    slots[sequence] = np.arange(len(sequence), dtype=np.float64)
    return slots


def trigger_offsets(mode: PatternMode, state: CycleState) -> np.ndarray:
    """Trigger offset in seconds of each fixture within the base pass of ``mode``.

    Super-cycle extras (fast passes, blinks, the reverse half of ping-pong)
    are not included; this is the offset table of the first pass.
    """
    count = state.fixture_count
    if mode is PatternMode.RANDOM:
        slots = random_slots(state.sequence) if state.sequence is not None else sequential_slots(count)
    elif mode is PatternMode.CONVERGE_CENTER:
        slots = converge_center_slots(count)
    elif mode is PatternMode.CONVERGE_POINT:
        slots = converge_point_slots(count, state.convergence_point)
    elif mode is PatternMode.DIVERGE_CENTER:
        slots = diverge_center_slots(count)
    elif mode is PatternMode.DIVERGE_POINT:
        slots = diverge_point_slots(count, state.divergence_point)
    else:
        slots = sequential_slots(count)

    tbl = state.timing.time_between_lights
    if mode is PatternMode.PING_PONG_FAST:
        tbl /= FAST_FACTOR
    return slots * tbl


# =============================================================================
# Renderers
# =============================================================================


def render_sequential(state: CycleState) -> FixtureOutputs:
    """Lights flash in order from the first fixture to the last."""
    cycle = state.timing.cycle_duration
    offsets = sequential_slots(state.fixture_count) * state.timing.time_between_lights
    return _flash(state.time % cycle, offsets, cycle, state)


def render_blink_all(state: CycleState) -> FixtureOutputs:
    """One sequential pass, then three synchronized blinks of the whole row."""
    cycle = state.timing.cycle_duration
    super_cycle = cycle + BLINK_COUNT * BLINK_PERIOD
    cycle_time = state.time % super_cycle

    if cycle_time < cycle:
        offsets = sequential_slots(state.fixture_count) * state.timing.time_between_lights
        return _flash(cycle_time, offsets, cycle, state)

    blink_time = (cycle_time - cycle) % BLINK_PERIOD
    if blink_time < BLINK_ON_TIME:
        return FixtureOutputs.uniform(state.fixture_count, state.levels)
    return FixtureOutputs.zeros(state.fixture_count)


def render_fast_runs(state: CycleState) -> FixtureOutputs:
    """One normal pass, then three passes at five times the speed."""
    cycle = state.timing.cycle_duration
    fast_cycle = cycle / FAST_FACTOR
    super_cycle = cycle + FAST_RUN_REPEATS * fast_cycle
    cycle_time = state.time % super_cycle
    slots = sequential_slots(state.fixture_count)

    if cycle_time < cycle:
        return _flash(cycle_time, slots * state.timing.time_between_lights, cycle, state)

    fast_time = (cycle_time - cycle) % fast_cycle
    fast_offsets = slots * (state.timing.time_between_lights / FAST_FACTOR)
    return _flash(fast_time, fast_offsets, fast_cycle, state)


def _ping_pong(state: CycleState, cycle: float, time_between_lights: float) -> FixtureOutputs:
    super_cycle = cycle * 2.0
    cycle_time = state.time % super_cycle
    # Second half replays the forward pass time-reversed
    effective = super_cycle - cycle_time if cycle_time >= cycle else cycle_time
    offsets = sequential_slots(state.fixture_count) * time_between_lights
    return _flash(effective, offsets, cycle, state)


def render_ping_pong(state: CycleState) -> FixtureOutputs:
    """Forward pass then the same pass backward, at normal speed."""
    return _ping_pong(state, state.timing.cycle_duration, state.timing.time_between_lights)


def render_ping_pong_fast(state: CycleState) -> FixtureOutputs:
    """Ping-pong at five times the speed."""
    return _ping_pong(
        state,
        state.timing.cycle_duration / FAST_FACTOR,
        state.timing.time_between_lights / FAST_FACTOR,
    )


def render_random(state: CycleState) -> FixtureOutputs:
    """Flash lights in the order given by ``state.sequence``."""
    cycle = state.timing.cycle_duration
    offsets = trigger_offsets(PatternMode.RANDOM, state)
    return _flash(state.time % cycle, offsets, cycle, state)


def _half_cycle(state: CycleState, mode: PatternMode) -> FixtureOutputs:
    half = state.timing.cycle_duration / 2.0
    return _flash(state.time % half, trigger_offsets(mode, state), half, state)


def render_converge_center(state: CycleState) -> FixtureOutputs:
    """Two fronts start at both ends and meet in the middle."""
    return _half_cycle(state, PatternMode.CONVERGE_CENTER)


def render_converge_point(state: CycleState) -> FixtureOutputs:
    """Two fronts start at both ends and meet at ``convergence_point``."""
    return _half_cycle(state, PatternMode.CONVERGE_POINT)


def render_diverge_center(state: CycleState) -> FixtureOutputs:
    """Two fronts start in the middle and run outward."""
    return _half_cycle(state, PatternMode.DIVERGE_CENTER)


def render_diverge_point(state: CycleState) -> FixtureOutputs:
    """Two fronts start at ``divergence_point`` and run outward."""
    return _half_cycle(state, PatternMode.DIVERGE_POINT)


PatternRenderer = Callable[[CycleState], FixtureOutputs]

# Burst modes reuse the sequential timing; the engine scales ``levels``.
PATTERN_RENDERERS: dict[PatternMode, PatternRenderer] = {
    PatternMode.SEQUENTIAL: render_sequential,
    PatternMode.BLINK_ALL: render_blink_all,
    PatternMode.FAST_RUNS: render_fast_runs,
    PatternMode.PING_PONG: render_ping_pong,
    PatternMode.PING_PONG_FAST: render_ping_pong_fast,
    PatternMode.RANDOM: render_random,
    PatternMode.CONVERGE_CENTER: render_converge_center,
    PatternMode.CONVERGE_POINT: render_converge_point,
    PatternMode.DIVERGE_CENTER: render_diverge_center,
    PatternMode.DIVERGE_POINT: render_diverge_point,
    PatternMode.BRIGHTNESS_BURST: render_sequential,
    PatternMode.BRIGHTNESS_BURST_REALTIME: render_sequential,
}

_missing = set(PatternMode) - set(PATTERN_RENDERERS)
if _missing:
    raise RuntimeError(f"Pattern renderers missing for: {sorted(m.value for m in _missing)}")


def render_pattern(mode: PatternMode, state: CycleState) -> FixtureOutputs:
    """Dispatch to the renderer registered for ``mode``."""
    return PATTERN_RENDERERS[mode](state)


__all__ = [
    "PatternMode",
    "ModeInfo",
    "MODE_CATALOGUE",
    "WaveTiming",
    "FlashLevels",
    "FULL_LEVELS",
    "CycleState",
    "FixtureOutputs",
    "PatternRenderer",
    "PATTERN_RENDERERS",
    "flash_curve",
    "trigger_offsets",
    "render_pattern",
    "sequential_slots",
    "converge_center_slots",
    "converge_point_slots",
    "diverge_center_slots",
    "diverge_point_slots",
    "random_slots",
]
