"""Centralized bound constants for UI controls and parameter clamping.

The GUI sliders and the engine mutators read the same constants, so a value
a slider can produce is always a value the engine accepts unchanged.
"""

from __future__ import annotations


class SliderBounds:
    """Named constants for UI slider min/max values."""

    # === Animation ===
    SPEED_MIN = 0.1
    SPEED_MAX = 10.0
    SPEED_STEP = 0.1
    SPEED_KEY_STEP = 0.5  # keyboard +/- increment

    # Point selectors are fixture indices; the max is fixture_count - 1
    POINT_MIN = 0

    # === Brightness (UI units, peak intensity = value * BRIGHTNESS_TO_INTENSITY) ===
    BRIGHTNESS_MIN = 0.0
    BRIGHTNESS_MAX = 300000.0
    BRIGHTNESS_STEP = 1000.0
    BRIGHTNESS_TO_INTENSITY = 0.005

    DEFAULT_LOW_BRIGHTNESS = 6000.0
    DEFAULT_HIGH_BRIGHTNESS = 200000.0

    # === Sun ===
    SUN_AZIMUTH_MIN = 0.0
    SUN_AZIMUTH_MAX = 360.0
    SUN_ELEVATION_MIN = 0.0
    SUN_ELEVATION_MAX = 90.0
    SUN_INTENSITY_MIN = 0.0
    SUN_INTENSITY_MAX = 5.0

    # === Minimap ===
    GROUND_BOUNDS = 3000.0  # half extent of the walkable ground (feet)

    # === Camera ===
    FOV_MIN = 10.0
    FOV_MAX = 120.0
