"""
Quaternion and yaw/pitch utilities for camera orientation.

All quaternions use wxyz format (w, x, y, z) to match viser's convention.

Yaw/pitch convention (Y-up, camera looks down local -Z):
- yaw rotates around world Y; yaw = 0 looks toward -Z, positive yaw turns left
- pitch rotates around the local X axis; positive pitch looks up
- no roll

With that convention the look direction is
``(-sin(yaw) cos(pitch), sin(pitch), -cos(yaw) cos(pitch))`` and the
inverse is ``yaw = atan2(-dx, -dz)``, ``pitch = asin(dy)``.
"""

from __future__ import annotations

import math

import numpy as np

Y_AXIS = np.array([0.0, 1.0, 0.0])
X_AXIS = np.array([1.0, 0.0, 0.0])


def quat_multiply(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    """Hamilton product ``q1 * q2`` (wxyz)."""
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2

    return np.array(
        [
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        ]
    )


def quat_normalize(q: np.ndarray) -> np.ndarray:
    """Normalize to unit length; degenerate input becomes identity."""
    norm = np.linalg.norm(q)
    if norm < 1e-6:
        return np.array([1.0, 0.0, 0.0, 0.0])
    return q / norm


def quat_from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """
    Create quaternion from axis-angle representation.

    Parameters
    ----------
    axis : np.ndarray
        Rotation axis (3,) - will be normalized
    angle : float
        Rotation angle in radians

    Returns
    -------
    np.ndarray
        Rotation quaternion (wxyz format)
    """
    axis = np.asarray(axis, dtype=np.float64)
    axis_norm = np.linalg.norm(axis)
    if axis_norm < 1e-6:
        return np.array([1.0, 0.0, 0.0, 0.0])

    axis = axis / axis_norm
    s = math.sin(angle / 2.0)
    return np.array([math.cos(angle / 2.0), axis[0] * s, axis[1] * s, axis[2] * s])


def quat_rotate(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """Rotate vector ``v`` by unit quaternion ``q``."""
    w, x, y, z = quat_normalize(q)
    u = np.array([x, y, z])
    v = np.asarray(v, dtype=np.float64)
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)


def quat_from_yaw_pitch(yaw: float, pitch: float) -> np.ndarray:
    """Orientation for a yaw/pitch pair (yaw about world Y, then pitch about local X)."""
    q_yaw = quat_from_axis_angle(Y_AXIS, yaw)
    q_pitch = quat_from_axis_angle(X_AXIS, pitch)
    return quat_normalize(quat_multiply(q_yaw, q_pitch))


def forward_from_yaw_pitch(yaw: float, pitch: float) -> np.ndarray:
    """Unit look direction."""
    return quat_rotate(quat_from_yaw_pitch(yaw, pitch), np.array([0.0, 0.0, -1.0]))


def right_from_yaw(yaw: float) -> np.ndarray:
    """Unit horizontal right vector for a heading."""
    return np.array([math.cos(yaw), 0.0, -math.sin(yaw)])


def yaw_pitch_from_direction(direction: np.ndarray) -> tuple[float, float]:
    """
    Inverse of ``forward_from_yaw_pitch``.

    Parameters
    ----------
    direction : np.ndarray
        Look direction (3,), need not be normalized

    Returns
    -------
    tuple[float, float]
        (yaw, pitch) in radians; (0, 0) for a zero vector
    """
    d = np.asarray(direction, dtype=np.float64)
    norm = np.linalg.norm(d)
    if norm < 1e-9:
        return 0.0, 0.0
    d = d / norm
    yaw = math.atan2(-d[0], -d[2])
    pitch = math.asin(float(np.clip(d[1], -1.0, 1.0)))
    return yaw, pitch


__all__ = [
    "quat_multiply",
    "quat_normalize",
    "quat_from_axis_angle",
    "quat_rotate",
    "quat_from_yaw_pitch",
    "forward_from_yaw_pitch",
    "right_from_yaw",
    "yaw_pitch_from_direction",
]
