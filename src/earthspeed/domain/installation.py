"""Installation geometry and fixture records.

The installation is a straight row of light fixtures laid along the world
Z axis and centred on the origin. One world unit is one foot.

Physical basis
--------------
The wave represents the Earth's rotational surface speed at the latitude of
Black Rock City (about 1156 ft/s). With fixtures 176 ft apart, the wave needs
``176 / 1156`` seconds to travel from one fixture to the next; that interval
and the full-row cycle derived from it are the only timing inputs every
pattern uses.

Example
-------
>>> geometry = InstallationGeometry()
>>> round(geometry.time_between_lights, 4)
0.1522
>>> fixtures = build_fixtures(geometry)
>>> fixtures[0].position[2] == -geometry.total_length / 2
True
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from earthspeed.shared.exceptions import ConfigurationError


# Physical constants
EARTH_ROTATION_SPEED = 1156.0  # feet per second at Burning Man latitude
LIGHT_SPACING = 176.0  # feet between fixtures
LIGHT_HEIGHT = 4.0  # feet
NUM_LIGHTS = 30

# Flash envelope
FLASH_DURATION = 0.05  # seconds (50ms strobe)
PEAK_INTENSITY = 1000.0
PEAK_GLOW_OPACITY = 0.8
PEAK_BULB_OPACITY = 1.0

SCALE_CIRCLE_RADIUS = 50.0  # feet


@dataclass(frozen=True)
class InstallationGeometry:
    """Physical layout of the row of fixtures.

    Attributes
    ----------
    fixture_count : int
        Number of fixtures in the row
    spacing : float
        Distance between adjacent fixtures (feet)
    rotation_speed : float
        Speed of the wave along the row (feet per second)
    light_height : float
        Mounting height of each fixture (feet)
    """

    fixture_count: int = NUM_LIGHTS
    spacing: float = LIGHT_SPACING
    rotation_speed: float = EARTH_ROTATION_SPEED
    light_height: float = LIGHT_HEIGHT

    def __post_init__(self):
        if self.fixture_count < 1:
            raise ConfigurationError(
                "Installation needs at least one fixture",
                field="fixture_count",
                value=self.fixture_count,
            )
        if self.spacing <= 0:
            raise ConfigurationError(
                "Fixture spacing must be positive", field="spacing", value=self.spacing
            )
        if self.rotation_speed <= 0:
            raise ConfigurationError(
                "Wave speed must be positive",
                field="rotation_speed",
                value=self.rotation_speed,
            )

    @property
    def total_length(self) -> float:
        """Distance from the first to the last fixture."""
        return (self.fixture_count - 1) * self.spacing

    @property
    def time_between_lights(self) -> float:
        """Seconds for the wave to travel between adjacent fixtures."""
        return self.spacing / self.rotation_speed

    @property
    def cycle_duration(self) -> float:
        """Seconds for one full pass of the wave across the row."""
        return self.time_between_lights * self.fixture_count

    @property
    def midpoint_index(self) -> int:
        """Index of the middle fixture (lower middle for even counts)."""
        return self.fixture_count // 2

    def fixture_z(self, index: float) -> float:
        """World Z of a (possibly fractional) fixture index."""
        return -self.total_length / 2.0 + index * self.spacing

    def fixture_position(self, index: int) -> np.ndarray:
        """World-space position of fixture ``index`` at mounting height."""
        return np.array([0.0, self.light_height, self.fixture_z(index)], dtype=np.float64)

    def clamp_index(self, index: int) -> int:
        """Clamp a fixture index into ``[0, fixture_count - 1]``."""
        return max(0, min(self.fixture_count - 1, int(index)))


@dataclass
class Fixture:
    """One light source in the row.

    ``index`` and ``position`` are fixed at creation. The three output
    fields are written every frame by the wave engine and only read by the
    renderer. ``scale_circle_visible`` is the display-only 50 ft ring.
    """

    index: int
    position: np.ndarray
    intensity: float = 0.0
    glow_opacity: float = 0.0
    bulb_opacity: float = 0.0
    scale_circle_visible: bool = False

    @property
    def is_lit(self) -> bool:
        return self.intensity > 0.0

    def set_output(self, intensity: float, glow_opacity: float, bulb_opacity: float) -> None:
        self.intensity = float(intensity)
        self.glow_opacity = float(glow_opacity)
        self.bulb_opacity = float(bulb_opacity)

    def darken(self) -> None:
        self.set_output(0.0, 0.0, 0.0)


def build_fixtures(geometry: InstallationGeometry | None = None) -> list[Fixture]:
    """Create the fixture row for ``geometry`` (default 30 fixtures)."""
    geometry = geometry or InstallationGeometry()
    return [
        Fixture(index=i, position=geometry.fixture_position(i))
        for i in range(geometry.fixture_count)
    ]


def set_scale_circles_visible(fixtures: list[Fixture], visible: bool) -> None:
    """Show or hide the 50 ft scale ring around every fixture."""
    for fixture in fixtures:
        fixture.scale_circle_visible = visible


__all__ = [
    "EARTH_ROTATION_SPEED",
    "LIGHT_SPACING",
    "LIGHT_HEIGHT",
    "NUM_LIGHTS",
    "FLASH_DURATION",
    "PEAK_INTENSITY",
    "PEAK_GLOW_OPACITY",
    "PEAK_BULB_OPACITY",
    "SCALE_CIRCLE_RADIUS",
    "InstallationGeometry",
    "Fixture",
    "build_fixtures",
    "set_scale_circles_visible",
]
