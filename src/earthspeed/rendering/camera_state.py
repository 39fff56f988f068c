"""
Camera pose: position, look target, yaw/pitch and field of view.

Position and target are the primary representation (they are what orbit
interaction and preset transitions interpolate). Yaw/pitch is kept
alongside because walking mode steers by orientation, and a teleport must
land on an exact orientation rather than one re-derived from a target.

Data flow mirrors the viewer's ownership model:
- orbit/preset: viser owns the camera, ``set_from_viser`` copies it in
- transitions, walking, follow: the controller owns it and
  ``to_viser_params`` is pushed out
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .quaternion_utils import (
    forward_from_yaw_pitch,
    quat_from_yaw_pitch,
    yaw_pitch_from_direction,
)

# Target distance used when orientation drives the pose (walking)
LOOK_DISTANCE = 100.0


def _origin() -> np.ndarray:
    return np.zeros(3, dtype=np.float64)


@dataclass
class CameraPose:
    """
    Full camera pose.

    Attributes
    ----------
    position : np.ndarray
        (3,) eye position in feet
    target : np.ndarray
        (3,) point the camera looks at (orbit centre in orbit mode)
    yaw : float
        Heading in radians
    pitch : float
        Elevation of the look direction in radians
    fov : float
        Vertical field of view in degrees
    """

    position: np.ndarray = field(default_factory=_origin)
    target: np.ndarray = field(default_factory=_origin)
    yaw: float = 0.0
    pitch: float = 0.0
    fov: float = 75.0

    def __post_init__(self):
        self.position = np.asarray(self.position, dtype=np.float64).copy()
        self.target = np.asarray(self.target, dtype=np.float64).copy()
        if self.position.shape != (3,) or self.target.shape != (3,):
            raise ValueError(
                f"position/target must be (3,), got {self.position.shape}/{self.target.shape}"
            )

    @classmethod
    def looking_at(cls, position, target, fov: float) -> CameraPose:
        """Pose at ``position`` facing ``target``, orientation derived from the direction."""
        pose = cls(position=position, target=target, fov=fov)
        pose.orient_toward_target()
        return pose

    @property
    def forward(self) -> np.ndarray:
        """Unit look direction from yaw/pitch."""
        return forward_from_yaw_pitch(self.yaw, self.pitch)

    @property
    def wxyz(self) -> np.ndarray:
        return quat_from_yaw_pitch(self.yaw, self.pitch)

    @property
    def distance(self) -> float:
        return float(np.linalg.norm(self.target - self.position))

    def orient_toward_target(self) -> None:
        """Derive yaw/pitch from the direction to ``target``."""
        self.yaw, self.pitch = yaw_pitch_from_direction(self.target - self.position)

    def set_orientation(self, yaw: float, pitch: float) -> None:
        """Set yaw/pitch exactly and move the target in front of the eye."""
        self.yaw = float(yaw)
        self.pitch = float(pitch)
        self.target = self.position + self.forward * LOOK_DISTANCE

    def set_from_viser(self, position, look_at, fov_radians: float | None = None) -> None:
        """Copy a browser-owned camera into this pose."""
        self.position = np.asarray(position, dtype=np.float64).copy()
        self.target = np.asarray(look_at, dtype=np.float64).copy()
        if fov_radians is not None:
            self.fov = float(np.degrees(fov_radians))
        self.orient_toward_target()

    def to_viser_params(self) -> dict:
        """
        Convert to viser camera parameters.

        Returns
        -------
        dict
            {"position": tuple, "look_at": tuple, "up_direction": tuple, "fov": float}
            with ``fov`` in radians
        """
        return {
            "position": tuple(float(x) for x in self.position),
            "look_at": tuple(float(x) for x in self.target),
            "up_direction": (0.0, 1.0, 0.0),
            "fov": float(np.radians(self.fov)),
        }

    def copy(self) -> CameraPose:
        return CameraPose(
            position=self.position.copy(),
            target=self.target.copy(),
            yaw=self.yaw,
            pitch=self.pitch,
            fov=self.fov,
        )


__all__ = ["LOOK_DISTANCE", "CameraPose"]
