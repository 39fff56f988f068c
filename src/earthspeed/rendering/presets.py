"""Named camera presets (1 unit = 1 foot, installation along Z centred on the origin)."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from earthspeed.shared.exceptions import UnknownPresetError


@dataclass(frozen=True)
class CameraPreset:
    """A fixed pose plus the mode it puts the camera in."""

    key: str
    name: str
    position: tuple[float, float, float]
    target: tuple[float, float, float]
    fov: float
    is_walking: bool = False
    is_following: bool = False

    @property
    def position_array(self) -> np.ndarray:
        return np.array(self.position, dtype=np.float64)

    @property
    def target_array(self) -> np.ndarray:
        return np.array(self.target, dtype=np.float64)


class CameraPresets:
    """Registry of the built-in presets, in display order."""

    WALKING = CameraPreset(
        "WALKING", "Walking Mode", (40.0, 6.0, -2590.0), (0.0, 4.0, -2400.0), 75.0,
        is_walking=True,
    )
    GROUND = CameraPreset(
        "GROUND", "Ground Start", (0.0, 6.0, -2602.0), (0.0, 4.0, 2552.0), 75.0
    )
    GROUND_END = CameraPreset(
        "GROUND_END", "Ground End", (0.0, 8.0, 2600.0), (0.0, 4.0, -2552.0), 75.0
    )
    ELEVATED = CameraPreset(
        "ELEVATED", "Elevated View", (1200.0, 600.0, 1200.0), (0.0, 0.0, -500.0), 60.0
    )
    AERIAL = CameraPreset("AERIAL", "Aerial View", (0.0, 4000.0, 0.0), (0.0, 0.0, 0.0), 90.0)
    SIDE = CameraPreset("SIDE", "Side View", (2000.0, 400.0, 0.0), (0.0, 0.0, 0.0), 70.0)
    FOLLOW = CameraPreset(
        "FOLLOW", "Following Wave", (0.0, 50.0, -2552.0), (0.0, 4.0, -2552.0), 70.0,
        is_following=True,
    )

    ALL: tuple[CameraPreset, ...] = (WALKING, GROUND, GROUND_END, ELEVATED, AERIAL, SIDE, FOLLOW)

    @classmethod
    def keys(cls) -> list[str]:
        return [p.key for p in cls.ALL]

    @classmethod
    def get(cls, key: str) -> CameraPreset:
        """Look up a preset by key (case-insensitive).

        Raises
        ------
        UnknownPresetError
            If ``key`` is not a known preset
        """
        wanted = str(key).strip().upper()
        for preset in cls.ALL:
            if preset.key == wanted:
                return preset
        raise UnknownPresetError(str(key), "camera", cls.keys())


__all__ = ["CameraPreset", "CameraPresets"]
