"""
Time-of-day lighting controller.

Holds the scene's sky, ambient and sun parameters and switches them between
named presets. The wave engine uses this as a fire-and-forget sink: burst
patterns ask for the ``night`` preset when they are selected and never look
at the result.

Sun placement
-------------
Azimuth 0° is north (-Z), 90° east (+X), 180° south (+Z), 270° west.
Elevation 0° is the horizon, 90° overhead. The sun sits on a sphere of
radius ``SUN_DISTANCE`` around the origin and always points at it.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Protocol

import numpy as np

from earthspeed.config.slider_constants import SliderBounds
from earthspeed.interaction.events import EventType
from earthspeed.shared.exceptions import UnknownPresetError
from earthspeed.shared.math import clamp

if TYPE_CHECKING:
    from earthspeed.interaction.events import EventBus

logger = logging.getLogger(__name__)

SUN_DISTANCE = 1500.0


class LightingPresetSink(Protocol):
    """Anything that can switch to a named lighting preset."""

    def apply_preset(self, key: str) -> bool: ...


@dataclass(frozen=True)
class TimeOfDayPreset:
    """Sky and light parameters for one time of day (colours are 0xRRGGBB)."""

    name: str
    sky_color: int
    horizon_color: int
    ambient_color: int
    ambient_intensity: float
    sun_color: int
    sun_intensity: float
    sun_azimuth: float
    sun_elevation: float


TIME_OF_DAY_PRESETS: dict[str, TimeOfDayPreset] = {
    "night": TimeOfDayPreset(
        name="Night",
        sky_color=0x000814,
        horizon_color=0x1A1A2E,
        ambient_color=0x4A5C7A,
        ambient_intensity=0.15,
        sun_color=0x6688AA,  # moonlight
        sun_intensity=0.4,
        sun_azimuth=180.0,
        sun_elevation=30.0,
    ),
    "dawn": TimeOfDayPreset(
        name="Dawn",
        sky_color=0x4A5C8A,
        horizon_color=0xFF6B35,
        ambient_color=0xFF9966,
        ambient_intensity=0.2,
        sun_color=0xFFAA77,
        sun_intensity=1.5,
        sun_azimuth=90.0,
        sun_elevation=10.0,
    ),
    "day": TimeOfDayPreset(
        name="Day",
        sky_color=0x87CEEB,
        horizon_color=0xB0D4F1,
        ambient_color=0xDDDDDD,
        ambient_intensity=0.3,
        sun_color=0xFFFFFF,
        sun_intensity=2.5,
        sun_azimuth=45.0,
        sun_elevation=60.0,
    ),
    "dusk": TimeOfDayPreset(
        name="Dusk",
        sky_color=0x1E3A5F,
        horizon_color=0xFF6347,
        ambient_color=0xFF8866,
        ambient_intensity=0.25,
        sun_color=0xFF7744,
        sun_intensity=1.8,
        sun_azimuth=270.0,
        sun_elevation=8.0,
    ),
    "golden-hour": TimeOfDayPreset(
        name="Golden Hour",
        sky_color=0xFF9A56,
        horizon_color=0xFFD700,
        ambient_color=0xFFCC88,
        ambient_intensity=0.3,
        sun_color=0xFFAA44,
        sun_intensity=2.0,
        sun_azimuth=280.0,
        sun_elevation=15.0,
    ),
}


def get_time_of_day_preset(key: str) -> TimeOfDayPreset:
    """Look up a preset by key.

    Raises
    ------
    UnknownPresetError
        If ``key`` is not a known preset
    """
    try:
        return TIME_OF_DAY_PRESETS[key]
    except KeyError:
        raise UnknownPresetError(key, "lighting", list(TIME_OF_DAY_PRESETS)) from None


def hex_to_rgb(color: int) -> tuple[int, int, int]:
    """0xRRGGBB -> (r, g, b) in 0..255."""
    return ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)


@dataclass(frozen=True)
class SunPosition:
    """Sun direction in compass degrees plus its intensity."""

    azimuth: float = 45.0
    elevation: float = 45.0
    intensity: float = 2.0
    distance: float = SUN_DISTANCE

    def to_cartesian(self) -> np.ndarray:
        """World position of the sun (y up)."""
        azimuth_rad = math.radians(self.azimuth - 90.0)
        elevation_rad = math.radians(self.elevation)
        horizontal = self.distance * math.cos(elevation_rad)
        return np.array(
            [
                horizontal * math.cos(azimuth_rad),
                self.distance * math.sin(elevation_rad),
                horizontal * math.sin(azimuth_rad),
            ]
        )


@dataclass(frozen=True)
class LightingState:
    """Snapshot of the scene lighting for the renderer."""

    preset_key: str
    sky_color: int
    horizon_color: int
    ambient_color: int
    ambient_intensity: float
    sun_color: int
    sun: SunPosition


class LightingController:
    """Applies time-of-day presets and manual sun adjustments."""

    def __init__(self, initial_preset: str = "day", event_bus: EventBus | None = None):
        self.event_bus = event_bus
        self._listeners: list[Callable[[LightingState], None]] = []

        preset = TIME_OF_DAY_PRESETS["day"]
        self._state = self._state_from_preset("day", preset)
        if initial_preset != "day":
            self.apply_preset(initial_preset)

    @property
    def state(self) -> LightingState:
        return self._state

    @property
    def current_preset(self) -> str:
        return self._state.preset_key

    def add_listener(self, callback: Callable[[LightingState], None]) -> None:
        """Register a callback invoked with the new state after every change."""
        self._listeners.append(callback)

    def apply_preset(self, key: str) -> bool:
        """Switch to a named preset. Unknown keys are logged and ignored."""
        try:
            preset = get_time_of_day_preset(key)
        except UnknownPresetError as e:
            logger.warning(str(e))
            return False

        self._state = self._state_from_preset(key, preset)
        self._notify()
        if self.event_bus is not None:
            self.event_bus.emit(EventType.LIGHTING_PRESET_CHANGED, source="lighting", preset=key)
        logger.info(f"Time of day changed to: {preset.name}")
        return True

    def set_sun_azimuth(self, azimuth: float) -> None:
        azimuth = clamp(azimuth, SliderBounds.SUN_AZIMUTH_MIN, SliderBounds.SUN_AZIMUTH_MAX)
        self._move_sun(replace(self._state.sun, azimuth=azimuth))

    def set_sun_elevation(self, elevation: float) -> None:
        elevation = clamp(elevation, SliderBounds.SUN_ELEVATION_MIN, SliderBounds.SUN_ELEVATION_MAX)
        self._move_sun(replace(self._state.sun, elevation=elevation))

    def set_sun_intensity(self, intensity: float) -> None:
        intensity = clamp(intensity, SliderBounds.SUN_INTENSITY_MIN, SliderBounds.SUN_INTENSITY_MAX)
        self._move_sun(replace(self._state.sun, intensity=intensity))

    def _move_sun(self, sun: SunPosition) -> None:
        self._state = replace(self._state, sun=sun)
        self._notify()
        if self.event_bus is not None:
            self.event_bus.emit(
                EventType.SUN_MOVED,
                source="lighting",
                azimuth=sun.azimuth,
                elevation=sun.elevation,
                intensity=sun.intensity,
            )

    def _notify(self) -> None:
        for callback in tuple(self._listeners):
            try:
                callback(self._state)
            except Exception as e:
                name = getattr(callback, "__qualname__", repr(callback))
                logger.error(f"Lighting listener {name} failed: {e}", exc_info=True)

    @staticmethod
    def _state_from_preset(key: str, preset: TimeOfDayPreset) -> LightingState:
        return LightingState(
            preset_key=key,
            sky_color=preset.sky_color,
            horizon_color=preset.horizon_color,
            ambient_color=preset.ambient_color,
            ambient_intensity=preset.ambient_intensity,
            sun_color=preset.sun_color,
            sun=SunPosition(
                azimuth=preset.sun_azimuth,
                elevation=preset.sun_elevation,
                intensity=preset.sun_intensity,
            ),
        )


__all__ = [
    "SUN_DISTANCE",
    "LightingPresetSink",
    "TimeOfDayPreset",
    "TIME_OF_DAY_PRESETS",
    "get_time_of_day_preset",
    "hex_to_rgb",
    "SunPosition",
    "LightingState",
    "LightingController",
]
