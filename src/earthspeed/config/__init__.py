"""Configuration module for the Earth-speed viewer."""

from earthspeed.config.settings import (
    AnimationSettings,
    CameraSettings,
    FollowSettings,
    InstallationSettings,
    LocomotionSettings,
    OrbitSettings,
    ViewerConfig,
)
from earthspeed.config.slider_constants import SliderBounds


__all__ = [
    "AnimationSettings",
    "CameraSettings",
    "FollowSettings",
    "InstallationSettings",
    "LocomotionSettings",
    "OrbitSettings",
    "SliderBounds",
    "ViewerConfig",
]
