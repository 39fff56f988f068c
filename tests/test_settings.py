"""Tests for configuration dataclasses and installation geometry."""

import pytest

from earthspeed.config import (
    AnimationSettings,
    CameraSettings,
    InstallationSettings,
    LocomotionSettings,
    OrbitSettings,
    SliderBounds,
    ViewerConfig,
)
from earthspeed.domain.installation import (
    InstallationGeometry,
    build_fixtures,
    set_scale_circles_visible,
)
from earthspeed.shared.exceptions import ConfigurationError


class TestInstallationGeometry:
    """Test derived timing and fixture layout."""

    def test_derived_timing(self, geometry):
        assert geometry.time_between_lights == pytest.approx(0.1522, abs=1e-4)
        assert geometry.cycle_duration == pytest.approx(4.567, abs=1e-3)

    def test_fixtures_centred_on_origin(self, fixtures):
        assert fixtures[0].position[2] == pytest.approx(-2552.0)
        assert fixtures[-1].position[2] == pytest.approx(2552.0)
        assert fixtures[1].position[2] - fixtures[0].position[2] == pytest.approx(176.0)
        assert all(f.position[1] == 4.0 for f in fixtures)

    def test_fixtures_start_dark(self, fixtures):
        assert not any(f.is_lit for f in fixtures)

    def test_midpoint(self):
        assert InstallationGeometry(fixture_count=30).midpoint_index == 15
        assert InstallationGeometry(fixture_count=7).midpoint_index == 3

    def test_clamp_index(self, geometry):
        assert geometry.clamp_index(-1) == 0
        assert geometry.clamp_index(30) == 29

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"fixture_count": 0}, "fixture_count"),
            ({"spacing": -1.0}, "spacing"),
            ({"rotation_speed": 0.0}, "rotation_speed"),
        ],
    )
    def test_invalid_geometry(self, kwargs, field):
        with pytest.raises(ConfigurationError) as exc_info:
            InstallationGeometry(**kwargs)
        assert exc_info.value.field == field

    def test_scale_circles_toggle(self, fixtures):
        set_scale_circles_visible(fixtures, True)
        assert all(f.scale_circle_visible for f in fixtures)
        set_scale_circles_visible(fixtures, False)
        assert not any(f.scale_circle_visible for f in fixtures)

    def test_custom_row(self):
        geometry = InstallationSettings(fixture_count=5, spacing=100.0).to_geometry()
        fixtures = build_fixtures(geometry)
        assert [f.position[2] for f in fixtures] == [-200.0, -100.0, 0.0, 100.0, 200.0]


class TestSettings:
    """Test settings defaults and validation."""

    def test_defaults(self):
        config = ViewerConfig()
        assert config.port == 8080
        assert config.animation.low_brightness == SliderBounds.DEFAULT_LOW_BRIGHTNESS
        assert config.camera.default_preset == "WALKING"
        assert config.camera.transition_duration == 1.5
        assert config.camera.locomotion.ground_level == 6.0

    def test_to_dict_nests_groups(self):
        data = ViewerConfig().to_dict()
        assert data["installation"]["fixture_count"] == 30
        assert data["camera"]["orbit"]["damping_factor"] == 0.05

    def test_animation_to_dict(self):
        assert AnimationSettings(mode="random").to_dict()["mode"] == "random"

    def test_invalid_values(self):
        with pytest.raises(ConfigurationError):
            ViewerConfig(target_fps=0)
        with pytest.raises(ConfigurationError):
            CameraSettings(transition_duration=0)
        with pytest.raises(ConfigurationError):
            LocomotionSettings(gravity=-1.0)
        with pytest.raises(ConfigurationError):
            OrbitSettings(damping_factor=0.0)

    def test_error_message_carries_field(self):
        with pytest.raises(ConfigurationError, match="target_fps"):
            ViewerConfig(target_fps=-5)
