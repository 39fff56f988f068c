"""
Minimap coordinate conversion and teleport poses.

The minimap is a top-down view of the ground square ``[-GROUND_BOUNDS,
GROUND_BOUNDS]`` in X and Z. Minimap coordinates are normalised: ``u``
runs left to right and ``v`` top to bottom, both in [0, 1]. The top edge
of the map is -Z (the start of the installation).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from earthspeed.config.slider_constants import SliderBounds
from earthspeed.shared.math import clamp

EYE_HEIGHT = 6.0  # feet
TELEPORT_PITCH = -0.1  # radians, slight downward look
TELEPORT_DURATION = 1.0  # seconds


@dataclass(frozen=True)
class TeleportPose:
    """Arguments for ``CameraController.teleport_to_position``."""

    position: np.ndarray
    yaw: float
    pitch: float
    duration: float = TELEPORT_DURATION

    @property
    def orientation(self) -> tuple[float, float]:
        return (self.yaw, self.pitch)


def minimap_to_world(u: float, v: float, bounds: float = SliderBounds.GROUND_BOUNDS) -> tuple[float, float]:
    """
    Convert minimap coordinates to ground X/Z.

    Parameters
    ----------
    u, v : float
        Normalised minimap coordinates (v grows downward)
    bounds : float
        Half extent of the ground square

    Returns
    -------
    tuple[float, float]
        (x, z) clamped to the ground square
    """
    x_ndc = u * 2.0 - 1.0
    y_ndc = -(v * 2.0 - 1.0)
    x = clamp(x_ndc * bounds, -bounds, bounds)
    z = clamp(-y_ndc * bounds, -bounds, bounds)
    return x, z


def world_to_minimap(x: float, z: float, bounds: float = SliderBounds.GROUND_BOUNDS) -> tuple[float, float]:
    """Inverse of ``minimap_to_world`` (for drawing the position marker)."""
    u = (clamp(x, -bounds, bounds) / bounds + 1.0) / 2.0
    v = (clamp(z, -bounds, bounds) / bounds + 1.0) / 2.0
    return u, v


def teleport_pose_facing_center(x: float, z: float) -> TeleportPose:
    """Walking pose at eye height on (x, z), facing the installation centre."""
    position = np.array([x, EYE_HEIGHT, z], dtype=np.float64)
    dx, dz = -x, -z
    if math.hypot(dx, dz) < 1e-9:
        yaw = 0.0
    else:
        yaw = math.atan2(-dx, -dz)
    return TeleportPose(position=position, yaw=yaw, pitch=TELEPORT_PITCH)


def teleport_from_minimap(u: float, v: float) -> TeleportPose:
    """Minimap click -> teleport pose."""
    return teleport_pose_facing_center(*minimap_to_world(u, v))


__all__ = [
    "EYE_HEIGHT",
    "TELEPORT_PITCH",
    "TELEPORT_DURATION",
    "TeleportPose",
    "minimap_to_world",
    "world_to_minimap",
    "teleport_pose_facing_center",
    "teleport_from_minimap",
]
