"""Tests for query-string startup options."""

import logging

import numpy as np
import pytest

from earthspeed.config.query import StartupOptions, apply_startup_options, parse_query
from earthspeed.domain.patterns import PatternMode
from earthspeed.rendering.camera import CameraMode


class TestParseQuery:
    """Test parsing of the recognised keys."""

    def test_empty(self):
        assert parse_query("").is_empty

    def test_full_query(self):
        options = parse_query(
            "?mode=converge-point&speed=2.5&point=7&divergence=3&low=1000&high=150000"
            "&camera=AERIAL&time=dusk&allOn=false&enabled=1"
        )
        assert options == StartupOptions(
            mode="converge-point",
            speed=2.5,
            convergence_point=7,
            divergence_point=3,
            low_brightness=1000.0,
            high_brightness=150000.0,
            camera="AERIAL",
            time_of_day="dusk",
            all_lights_on=False,
            enabled=True,
        )

    def test_convergence_alias(self):
        assert parse_query("convergence=4").convergence_point == 4

    def test_position_and_orientation(self):
        options = parse_query("pos=10,6,-20&yaw=1.5&pitch=-0.1")
        assert options.position == (10.0, 6.0, -20.0)
        assert options.yaw == 1.5
        assert options.pitch == -0.1

    def test_last_value_wins(self):
        assert parse_query("speed=2&speed=3").speed == 3.0

    def test_unparseable_values_skipped(self, caplog):
        with caplog.at_level(logging.WARNING):
            options = parse_query("speed=fast&pos=1,2&allOn=maybe&low=inf")
        assert options.is_empty
        assert "speed" in caplog.text
        assert "x,y,z" in caplog.text

    def test_unknown_keys_ignored(self):
        assert parse_query("volume=11").is_empty

    def test_out_of_range_passes_through(self):
        assert parse_query("speed=50").speed == 50.0


class TestApplyStartupOptions:
    """Test that options go through the regular mutators."""

    def test_wave_options(self, engine, camera, lighting):
        options = parse_query("mode=diverge-point&speed=50&divergence=99&high=999999")
        apply_startup_options(options, engine, camera, lighting)

        assert engine.mode is PatternMode.DIVERGE_POINT
        assert engine.speed_multiplier == 10.0
        assert engine.divergence_point == 29
        assert engine.high_brightness == 300000.0

    def test_burst_mode_overrides_time_of_day(self, engine, camera, lighting):
        apply_startup_options(parse_query("time=dawn&mode=brightness-burst"), engine, camera, lighting)
        assert lighting.current_preset == "night"

    def test_time_of_day(self, engine, camera, lighting):
        apply_startup_options(parse_query("time=golden-hour"), engine, camera, lighting)
        assert lighting.current_preset == "golden-hour"

    def test_camera_preset_snaps(self, engine, camera):
        apply_startup_options(parse_query("camera=side"), engine, camera)
        assert camera.current_preset == "SIDE"
        assert not camera.is_transitioning

    def test_unknown_camera_is_noop(self, engine, camera):
        apply_startup_options(parse_query("camera=drone"), engine, camera)
        assert camera.current_preset == "WALKING"

    def test_explicit_pose(self, engine, make_camera):
        camera = make_camera("AERIAL")
        apply_startup_options(parse_query("pos=100,6,200&yaw=0.5&pitch=-0.2"), engine, camera)
        camera.update(0.0)

        assert camera.mode is CameraMode.WALKING
        np.testing.assert_allclose(camera.pose.position, [100.0, 6.0, 200.0])
        assert camera.pose.yaw == 0.5
        assert camera.pose.pitch == -0.2

    def test_flags(self, engine, camera):
        apply_startup_options(parse_query("enabled=false&allOn=true"), engine, camera)
        assert not engine.enabled
        assert engine.all_lights_on

    def test_unknown_mode_falls_back(self, engine, camera):
        apply_startup_options(parse_query("mode=strobe"), engine, camera)
        assert engine.mode is PatternMode.SEQUENTIAL

    def test_missing_lighting_ignores_time(self, engine, camera):
        apply_startup_options(StartupOptions(time_of_day="night"), engine, camera)

    @pytest.mark.parametrize("query", ["low=-5", "low=5e9"])
    def test_brightness_clamped(self, engine, camera, query):
        apply_startup_options(parse_query(query), engine, camera)
        assert 0.0 <= engine.low_brightness <= 300000.0
