"""
Wave pattern engine.

Owns the live animation state (active pattern, virtual clock, speed,
toggles, point indices, burst brightness) and writes every fixture's
outputs once per frame. The per-pattern maths lives in
``earthspeed.domain.patterns``; this module resolves the stateful inputs
(random permutation, burst counters, wall clock) into an immutable
``CycleState`` and dispatches.

Nothing here raises on bad input. Unknown patterns fall back to
sequential, numeric parameters are clamped.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

from earthspeed.config.slider_constants import SliderBounds
from earthspeed.domain.bursts import CycleBurstCounter, QuarterHourBurst
from earthspeed.domain.clock import Clock, SystemClock
from earthspeed.domain.installation import Fixture, InstallationGeometry
from earthspeed.domain.patterns import (
    FULL_LEVELS,
    MODE_CATALOGUE,
    CycleState,
    FixtureOutputs,
    FlashLevels,
    ModeInfo,
    PatternMode,
    WaveTiming,
    render_pattern,
)
from earthspeed.interaction.events import EventType
from earthspeed.shared.exceptions import UnknownPatternError
from earthspeed.shared.math import clamp

if TYPE_CHECKING:
    from earthspeed.config.settings import AnimationSettings
    from earthspeed.engine.lighting import LightingPresetSink
    from earthspeed.interaction.events import EventBus

logger = logging.getLogger(__name__)

NIGHT_PRESET = "night"


def brightness_to_intensity(value: float) -> float:
    """Convert UI brightness units to peak spot intensity."""
    return value * SliderBounds.BRIGHTNESS_TO_INTENSITY


@dataclass
class ModeState:
    """Pattern-local state; replaced wholesale whenever the mode changes."""

    sequence: tuple[int, ...] | None = None
    burst: CycleBurstCounter = field(default_factory=CycleBurstCounter)
    quarter: QuarterHourBurst = field(default_factory=QuarterHourBurst)


@dataclass(frozen=True)
class WaveStatus:
    """Read-only snapshot of the engine for display."""

    enabled: bool
    all_lights_on: bool
    animation_mode: str
    speed_multiplier: float
    current_time: float
    cycle_duration: float
    cycle_progress: float
    earth_rotation_speed: float
    time_between_lights: float
    flash_duration: float
    convergence_point: int
    divergence_point: int
    low_brightness: float
    high_brightness: float
    peak_intensity: float | None = None
    burst_cycle: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class WaveEngine:
    """
    Per-frame scheduler for the fixture row.

    Parameters
    ----------
    fixtures : list[Fixture]
        The row to drive; outputs are written in place
    geometry : InstallationGeometry | None
        Layout and wave speed (default: the 30-fixture installation)
    settings : AnimationSettings | None
        Initial parameters
    lighting : LightingPresetSink | None
        Receives the ``night`` preset when a burst pattern is selected
    clock : Clock | None
        Wall clock for the quarter-hour burst (default: system clock)
    rng : np.random.Generator | None
        Source of random-mode permutations (default: seeded from settings)
    event_bus : EventBus | None
        Notified after every successful parameter change
    """

    def __init__(
        self,
        fixtures: list[Fixture],
        geometry: InstallationGeometry | None = None,
        *,
        settings: AnimationSettings | None = None,
        lighting: LightingPresetSink | None = None,
        clock: Clock | None = None,
        rng: np.random.Generator | None = None,
        event_bus: EventBus | None = None,
    ):
        self.fixtures = fixtures
        self.geometry = geometry or InstallationGeometry(fixture_count=len(fixtures))
        if self.geometry.fixture_count != len(fixtures):
            logger.warning(
                f"Geometry expects {self.geometry.fixture_count} fixtures, got {len(fixtures)}"
            )
        self.timing = WaveTiming.from_geometry(self.geometry)
        self.lighting = lighting
        self.clock = clock or SystemClock()
        self.event_bus = event_bus

        seed = settings.seed if settings is not None else None
        self.rng = rng if rng is not None else np.random.default_rng(seed)

        midpoint = self.geometry.midpoint_index
        self.mode = PatternMode.SEQUENTIAL
        self.current_time = 0.0
        self.speed_multiplier = 1.0
        self.enabled = True
        self.all_lights_on = False
        self.mode_state = ModeState()
        self.convergence_point = midpoint
        self.divergence_point = midpoint
        self.low_brightness = SliderBounds.DEFAULT_LOW_BRIGHTNESS
        self.high_brightness = SliderBounds.DEFAULT_HIGH_BRIGHTNESS
        self._levels = FULL_LEVELS
        self._outputs = FixtureOutputs.zeros(len(fixtures))

        if settings is not None:
            self._apply_settings(settings)

    def _apply_settings(self, settings: AnimationSettings) -> None:
        # Direct assignment: startup values are not user changes, nothing to emit
        try:
            self.mode = PatternMode.parse(settings.mode)
        except UnknownPatternError as e:
            logger.warning(f"{e}; using sequential")
        self.speed_multiplier = clamp(
            settings.speed_multiplier, SliderBounds.SPEED_MIN, SliderBounds.SPEED_MAX
        )
        self.enabled = settings.enabled
        self.all_lights_on = settings.all_lights_on
        if settings.convergence_point is not None:
            self.convergence_point = self.geometry.clamp_index(settings.convergence_point)
        if settings.divergence_point is not None:
            self.divergence_point = self.geometry.clamp_index(settings.divergence_point)
        self.low_brightness = self._clamp_brightness(settings.low_brightness)
        self.high_brightness = self._clamp_brightness(settings.high_brightness)
        self._enter_mode()

    # =========================================================================
    # Per-frame update
    # =========================================================================

    def update(self, delta_time: float) -> None:
        """Advance the virtual clock and recompute every fixture's outputs."""
        if self.all_lights_on:
            self._write(FixtureOutputs.uniform(len(self.fixtures), FULL_LEVELS))
            return
        if not self.enabled:
            return

        self.current_time += delta_time * self.speed_multiplier
        self._levels = self._resolve_levels()

        if self.mode is PatternMode.RANDOM and self.mode_state.sequence is None:
            self.mode_state.sequence = tuple(
                int(i) for i in self.rng.permutation(len(self.fixtures))
            )

        state = CycleState(
            time=self.current_time,
            fixture_count=len(self.fixtures),
            timing=self.timing,
            levels=self._levels,
            convergence_point=self.convergence_point,
            divergence_point=self.divergence_point,
            sequence=self.mode_state.sequence,
        )
        self._write(render_pattern(self.mode, state))

    def _resolve_levels(self) -> FlashLevels:
        if not self.mode.is_burst:
            return FULL_LEVELS

        cycle_time = self.current_time % self.timing.cycle_duration
        if self.mode is PatternMode.BRIGHTNESS_BURST:
            counter = self.mode_state.burst
            if counter.observe(cycle_time):
                logger.debug(
                    f"Burst cycle {counter.completed_cycles} "
                    f"({'high' if counter.is_high else 'low'})"
                )
            bright = counter.is_high
        else:
            bright = self.mode_state.quarter.observe(self.clock.now(), cycle_time)

        value = self.high_brightness if bright else self.low_brightness
        return FlashLevels.for_intensity(brightness_to_intensity(value))

    def _write(self, outputs: FixtureOutputs) -> None:
        self._outputs = outputs
        for i, fixture in enumerate(self.fixtures):
            fixture.set_output(
                outputs.intensity[i], outputs.glow_opacity[i], outputs.bulb_opacity[i]
            )

    def _darken(self) -> None:
        self._write(FixtureOutputs.zeros(len(self.fixtures)))

    @property
    def outputs(self) -> FixtureOutputs:
        """Outputs written by the most recent update."""
        return self._outputs

    # =========================================================================
    # Mutators
    # =========================================================================

    def set_animation_mode(self, mode: PatternMode | str) -> PatternMode:
        """Switch pattern; resets the clock and discards pattern-local state.

        Unknown names fall back to sequential. Returns the mode in effect.
        """
        try:
            resolved = PatternMode.parse(mode)
        except UnknownPatternError as e:
            logger.warning(f"{e}; falling back to sequential")
            resolved = PatternMode.SEQUENTIAL

        self.mode = resolved
        self.current_time = 0.0
        self.mode_state = ModeState()
        self._enter_mode()

        logger.info(f"Animation mode: {resolved.value}")
        self._emit(EventType.PATTERN_CHANGED, mode=resolved.value)
        return resolved

    def _enter_mode(self) -> None:
        """Set opening levels and, for burst modes, request the night sky."""
        if not self.mode.is_burst:
            self._levels = FULL_LEVELS
            return

        # Burst schedules always open on a dim cycle
        self._levels = FlashLevels.for_intensity(brightness_to_intensity(self.low_brightness))
        if self.lighting is None:
            return
        try:
            self.lighting.apply_preset(NIGHT_PRESET)
        except Exception as e:
            logger.error(f"Lighting sink failed on {NIGHT_PRESET!r}: {e}", exc_info=True)

    def set_speed_multiplier(self, multiplier: float) -> None:
        self.speed_multiplier = clamp(multiplier, SliderBounds.SPEED_MIN, SliderBounds.SPEED_MAX)
        self._emit(EventType.SPEED_CHANGED, speed=self.speed_multiplier)

    def set_enabled(self, enabled: bool) -> None:
        """Pause or resume; pausing darkens every fixture immediately."""
        self.enabled = bool(enabled)
        if not self.enabled:
            self._darken()
        logger.info(f"Animation {'enabled' if self.enabled else 'disabled'}")
        self._emit(EventType.ANIMATION_TOGGLED, enabled=self.enabled)

    def reset(self) -> None:
        """Restart the current pattern from time zero.

        Burst schedules keep their progress; only their wrap detection
        restarts, so rewinding the clock is not counted as a finished cycle.
        """
        self.current_time = 0.0
        self.mode_state.burst.last_cycle_time = None
        self.mode_state.quarter.last_cycle_time = None
        self._emit(EventType.ANIMATION_RESET)

    def set_all_lights_on(self, on: bool) -> None:
        """Hold every fixture at full output; turning it off darkens immediately."""
        self.all_lights_on = bool(on)
        if not self.all_lights_on:
            self._darken()
        self._emit(EventType.ALL_LIGHTS_TOGGLED, on=self.all_lights_on)

    def set_convergence_point(self, index: int) -> None:
        self.convergence_point = self.geometry.clamp_index(index)
        self._emit(EventType.POINT_CHANGED, kind="convergence", index=self.convergence_point)

    def set_divergence_point(self, index: int) -> None:
        self.divergence_point = self.geometry.clamp_index(index)
        self._emit(EventType.POINT_CHANGED, kind="divergence", index=self.divergence_point)

    def set_low_brightness(self, value: float) -> None:
        self.low_brightness = self._clamp_brightness(value)
        self._emit(EventType.BRIGHTNESS_CHANGED, kind="low", value=self.low_brightness)

    def set_high_brightness(self, value: float) -> None:
        self.high_brightness = self._clamp_brightness(value)
        self._emit(EventType.BRIGHTNESS_CHANGED, kind="high", value=self.high_brightness)

    @staticmethod
    def _clamp_brightness(value: float) -> float:
        return clamp(float(value), SliderBounds.BRIGHTNESS_MIN, SliderBounds.BRIGHTNESS_MAX)

    def _emit(self, event_type: EventType, **data) -> None:
        if self.event_bus is not None:
            self.event_bus.emit(event_type, source="wave_engine", **data)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_current_wave_position(self) -> float:
        """World Z of the sequential wave front (0.0 while paused)."""
        if not self.enabled:
            return 0.0
        return self.geometry.fixture_z(self.timing.wave_front_index(self.current_time))

    def get_status(self) -> WaveStatus:
        cycle = self.timing.cycle_duration
        peak = None
        burst_cycle = None
        if self.mode.is_burst:
            peak = self._levels.intensity
            if self.mode is PatternMode.BRIGHTNESS_BURST:
                burst_cycle = self.mode_state.burst.completed_cycles
            else:
                burst_cycle = self.mode_state.quarter.window_cycles

        return WaveStatus(
            enabled=self.enabled,
            all_lights_on=self.all_lights_on,
            animation_mode=self.mode.value,
            speed_multiplier=self.speed_multiplier,
            current_time=self.current_time,
            cycle_duration=cycle,
            cycle_progress=(self.current_time % cycle) / cycle,
            earth_rotation_speed=self.geometry.rotation_speed,
            time_between_lights=self.timing.time_between_lights,
            flash_duration=self.timing.flash_duration,
            convergence_point=self.convergence_point,
            divergence_point=self.divergence_point,
            low_brightness=self.low_brightness,
            high_brightness=self.high_brightness,
            peak_intensity=peak,
            burst_cycle=burst_cycle,
        )

    @staticmethod
    def get_available_modes() -> list[ModeInfo]:
        return list(MODE_CATALOGUE.values())


# Keyboard shortcuts for the animation (lower-cased key names)
SPEED_UP_KEYS = ("+", "=", "arrowup")
SLOW_DOWN_KEYS = ("-", "_", "arrowdown")


def apply_animation_key(engine: WaveEngine, key: str) -> bool:
    """
    Apply one animation keyboard shortcut.

    Parameters
    ----------
    engine : WaveEngine
        Engine to mutate
    key : str
        Key name as reported by the input layer (case-insensitive)

    Returns
    -------
    bool
        True if the key was handled
    """
    key = key.lower()
    if key in (" ", "space"):
        engine.set_enabled(not engine.enabled)
    elif key == "r":
        engine.reset()
    elif key in SPEED_UP_KEYS:
        engine.set_speed_multiplier(engine.speed_multiplier + SliderBounds.SPEED_KEY_STEP)
    elif key in SLOW_DOWN_KEYS:
        engine.set_speed_multiplier(engine.speed_multiplier - SliderBounds.SPEED_KEY_STEP)
    elif key == "1":
        engine.set_speed_multiplier(1.0)
    elif key == "0":
        engine.set_speed_multiplier(SliderBounds.SPEED_MIN)
    elif key == "l":
        engine.set_all_lights_on(not engine.all_lights_on)
    else:
        return False
    return True


__all__ = [
    "NIGHT_PRESET",
    "brightness_to_intensity",
    "ModeState",
    "WaveStatus",
    "WaveEngine",
    "apply_animation_key",
]
