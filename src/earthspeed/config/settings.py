"""
Configuration dataclasses for the Earth-speed simulator.

This module provides type-safe configuration using Python 3.10+ dataclasses.
Every value here is a startup default; at runtime the engines own the live
state and the UI mutates it through the engine APIs.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field

from earthspeed.config.slider_constants import SliderBounds
from earthspeed.domain.installation import (
    EARTH_ROTATION_SPEED,
    LIGHT_HEIGHT,
    LIGHT_SPACING,
    NUM_LIGHTS,
    InstallationGeometry,
)
from earthspeed.shared.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


@dataclass
class InstallationSettings:
    """Physical layout of the row."""

    fixture_count: int = NUM_LIGHTS
    spacing: float = LIGHT_SPACING  # feet
    rotation_speed: float = EARTH_ROTATION_SPEED  # feet per second
    light_height: float = LIGHT_HEIGHT  # feet

    def to_geometry(self) -> InstallationGeometry:
        """Build the immutable geometry (raises ConfigurationError if invalid)."""
        return InstallationGeometry(
            fixture_count=self.fixture_count,
            spacing=self.spacing,
            rotation_speed=self.rotation_speed,
            light_height=self.light_height,
        )

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass
class AnimationSettings:
    """Initial wave pattern parameters."""

    mode: str = "sequential"
    speed_multiplier: float = 1.0
    enabled: bool = True
    all_lights_on: bool = False
    convergence_point: int | None = None  # None = middle fixture
    divergence_point: int | None = None  # None = middle fixture
    low_brightness: float = SliderBounds.DEFAULT_LOW_BRIGHTNESS
    high_brightness: float = SliderBounds.DEFAULT_HIGH_BRIGHTNESS
    seed: int | None = None  # random-mode permutation seed

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass
class LocomotionSettings:
    """First-person walking physics (feet, seconds)."""

    walk_speed: float = 50.0
    run_multiplier: float = 3.0
    jump_speed: float = 30.0
    gravity: float = 60.0
    ground_level: float = 6.0
    look_sensitivity: float = 0.002  # radians per pixel

    def __post_init__(self):
        if self.gravity <= 0:
            raise ConfigurationError("Gravity must be positive", field="gravity", value=self.gravity)
        if self.walk_speed < 0:
            raise ConfigurationError(
                "Walk speed cannot be negative", field="walk_speed", value=self.walk_speed
            )


@dataclass
class FollowSettings:
    """Camera offset while tracking the wave front."""

    height: float = 50.0
    lead: float = 100.0  # distance ahead of the front along +Z
    target_height: float = 4.0


@dataclass
class OrbitSettings:
    """Damped orbit interaction limits."""

    damping_factor: float = 0.05
    min_distance: float = 10.0
    max_distance: float = 8000.0
    min_polar_angle: float = 0.01
    max_polar_angle: float = math.pi / 2

    def __post_init__(self):
        if not 0.0 < self.damping_factor <= 1.0:
            raise ConfigurationError(
                "Damping factor must be in (0, 1]",
                field="damping_factor",
                value=self.damping_factor,
            )


@dataclass
class CameraSettings:
    """Camera state machine defaults."""

    default_preset: str = "WALKING"
    transition_duration: float = 1.5  # seconds
    teleport_duration: float = 1.0  # seconds
    locomotion: LocomotionSettings = field(default_factory=LocomotionSettings)
    follow: FollowSettings = field(default_factory=FollowSettings)
    orbit: OrbitSettings = field(default_factory=OrbitSettings)

    def __post_init__(self):
        if self.transition_duration <= 0:
            raise ConfigurationError(
                "Transition duration must be positive",
                field="transition_duration",
                value=self.transition_duration,
            )

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass
class ViewerConfig:
    """Top-level configuration for the interactive viewer."""

    host: str = "0.0.0.0"
    port: int = 8080
    target_fps: float = 60.0
    max_frame_delta: float = 0.1  # seconds; longer gaps are clamped
    time_of_day: str = "day"
    query: str = ""  # URL-style startup overrides, see config.query

    installation: InstallationSettings = field(default_factory=InstallationSettings)
    animation: AnimationSettings = field(default_factory=AnimationSettings)
    camera: CameraSettings = field(default_factory=CameraSettings)

    def __post_init__(self):
        if self.target_fps <= 0:
            raise ConfigurationError("Target FPS must be positive", field="target_fps", value=self.target_fps)
        if self.max_frame_delta <= 0:
            raise ConfigurationError(
                "Max frame delta must be positive",
                field="max_frame_delta",
                value=self.max_frame_delta,
            )

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for easy serialization."""
        return asdict(self)


__all__ = [
    "InstallationSettings",
    "AnimationSettings",
    "LocomotionSettings",
    "FollowSettings",
    "OrbitSettings",
    "CameraSettings",
    "ViewerConfig",
]
