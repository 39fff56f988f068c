"""Mathematical utilities shared by the wave engine and the camera."""

from __future__ import annotations

import math

import numpy as np


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` into ``[lo, hi]``."""
    return max(lo, min(hi, value))


def ease_in_out_quad(t: float) -> float:
    """
    Ease-in-out curve used for camera transitions.

    ``2t²`` for the first half, ``1 - (-2t + 2)² / 2`` for the second.
    Input is clamped to [0, 1].

    Example:
        >>> ease_in_out_quad(0.5)
        0.5
    """
    t = clamp(t, 0.0, 1.0)
    if t < 0.5:
        return 2.0 * t * t
    return 1.0 - ((-2.0 * t + 2.0) ** 2) / 2.0


def lerp(a: np.ndarray | float, b: np.ndarray | float, t: float) -> np.ndarray | float:
    """Linear interpolation between two scalars or arrays."""
    return a + (b - a) * t


def wrap_angle(angle: float) -> float:
    """Wrap an angle in radians into [-pi, pi)."""
    return (angle + math.pi) % (2.0 * math.pi) - math.pi


def lerp_angle(a: float, b: float, t: float) -> float:
    """Interpolate between two angles along the shorter arc."""
    return a + wrap_angle(b - a) * t
