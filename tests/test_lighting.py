"""Tests for the time-of-day lighting controller."""

import numpy as np
import pytest

from earthspeed.engine.lighting import (
    SUN_DISTANCE,
    TIME_OF_DAY_PRESETS,
    LightingController,
    SunPosition,
    get_time_of_day_preset,
    hex_to_rgb,
)
from earthspeed.interaction.events import EventType
from earthspeed.shared.exceptions import UnknownPresetError


class TestPresets:
    """Test the preset table."""

    def test_available_presets(self):
        assert set(TIME_OF_DAY_PRESETS) == {"night", "dawn", "day", "dusk", "golden-hour"}

    def test_unknown_preset_raises(self):
        with pytest.raises(UnknownPresetError) as exc_info:
            get_time_of_day_preset("noon")
        assert exc_info.value.kind == "lighting"

    def test_hex_to_rgb(self):
        assert hex_to_rgb(0x87CEEB) == (0x87, 0xCE, 0xEB)


class TestSunPosition:
    """Test compass angles to world coordinates."""

    def test_east_on_horizon(self):
        np.testing.assert_allclose(
            SunPosition(azimuth=90.0, elevation=0.0).to_cartesian(), [SUN_DISTANCE, 0.0, 0.0], atol=1e-9
        )

    def test_north_on_horizon(self):
        np.testing.assert_allclose(
            SunPosition(azimuth=0.0, elevation=0.0).to_cartesian(), [0.0, 0.0, -SUN_DISTANCE], atol=1e-9
        )

    def test_overhead(self):
        np.testing.assert_allclose(
            SunPosition(azimuth=123.0, elevation=90.0).to_cartesian(), [0.0, SUN_DISTANCE, 0.0], atol=1e-9
        )

    def test_distance_preserved(self):
        position = SunPosition(azimuth=45.0, elevation=60.0).to_cartesian()
        assert np.linalg.norm(position) == pytest.approx(SUN_DISTANCE)


class TestLightingController:
    """Test preset switching and manual sun control."""

    def test_starts_on_day(self):
        controller = LightingController()
        assert controller.current_preset == "day"
        assert controller.state.sun.elevation == 60.0

    def test_initial_preset(self):
        assert LightingController("night").current_preset == "night"

    def test_unknown_initial_preset_keeps_day(self):
        assert LightingController("noon").current_preset == "day"

    def test_apply_preset(self, lighting, event_bus):
        seen = []
        lighting.add_listener(seen.append)

        assert lighting.apply_preset("night")

        state = lighting.state
        assert state.sky_color == 0x000814
        assert state.sun.azimuth == 180.0
        assert state.sun.intensity == 0.4
        assert seen == [state]
        event = event_bus.get_history(EventType.LIGHTING_PRESET_CHANGED)[-1]
        assert event.data == {"preset": "night"}

    def test_unknown_preset_is_noop(self, lighting, event_bus):
        before = lighting.state
        assert not lighting.apply_preset("noon")
        assert lighting.state is before
        assert event_bus.get_history(EventType.LIGHTING_PRESET_CHANGED) == []

    def test_manual_sun_is_clamped(self, lighting):
        lighting.set_sun_azimuth(400.0)
        lighting.set_sun_elevation(-5.0)
        lighting.set_sun_intensity(9.0)

        sun = lighting.state.sun
        assert sun.azimuth == 360.0
        assert sun.elevation == 0.0
        assert sun.intensity == 5.0

    def test_manual_sun_keeps_preset_colors(self, lighting, event_bus):
        lighting.apply_preset("dusk")
        lighting.set_sun_elevation(30.0)
        assert lighting.current_preset == "dusk"
        assert lighting.state.sun_color == 0xFF7744
        assert event_bus.get_history(EventType.SUN_MOVED)[-1].data["elevation"] == 30.0

    def test_failing_listener_does_not_stop_others(self, lighting, event_bus):
        seen = []

        def broken(state):
            raise RuntimeError("scene gone")

        lighting.add_listener(broken)
        lighting.add_listener(seen.append)

        assert lighting.apply_preset("dawn")
        assert seen == [lighting.state]
        assert event_bus.get_history(EventType.LIGHTING_PRESET_CHANGED)[-1].data == {"preset": "dawn"}
