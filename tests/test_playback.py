"""Tests for the frame loop and context wiring."""

import threading
from datetime import datetime

import numpy as np
import pytest

from earthspeed.config.settings import AnimationSettings, CameraSettings, ViewerConfig
from earthspeed.core.container import create_context
from earthspeed.domain.clock import ManualClock
from earthspeed.domain.installation import FLASH_DURATION, PEAK_INTENSITY
from earthspeed.domain.patterns import PatternMode
from earthspeed.interaction.events import EventType
from earthspeed.interaction.playback import FrameLoop


@pytest.fixture
def loop(engine, make_camera):
    return FrameLoop(engine, make_camera("FOLLOW"), max_frame_delta=0.1)


class TestFrameLoop:
    """Test per-frame ordering and clamping."""

    def test_follow_sees_current_frame_wave_position(self, loop):
        snapshot = loop.step(0.05)

        assert snapshot.wave_position == pytest.approx(loop.wave.get_current_wave_position())
        assert snapshot.camera.position[2] == pytest.approx(snapshot.wave_position + 100.0)
        assert snapshot.wave_position == pytest.approx(-2552.0 + 0.05 * 1156.0)

    def test_delta_clamped(self, loop):
        snapshot = loop.step(5.0)
        assert snapshot.delta_time == 0.1
        assert loop.wave.current_time == pytest.approx(0.1)

    def test_negative_delta_clamped(self, loop):
        snapshot = loop.step(-1.0)
        assert snapshot.delta_time == 0.0

    def test_frame_index_increments(self, loop):
        assert [loop.step(0.01).frame_index for _ in range(3)] == [0, 1, 2]

    def test_snapshot_is_a_copy(self, loop):
        snapshot = loop.step(FLASH_DURATION / 2)
        assert snapshot.intensity[0] == pytest.approx(PEAK_INTENSITY)
        loop.step(0.1)
        assert snapshot.intensity[0] == pytest.approx(PEAK_INTENSITY)
        assert snapshot.camera is not loop.camera.pose

    def test_step_under_lock(self, engine, camera):
        lock = threading.RLock()
        loop = FrameLoop(engine, camera, lock=lock)
        with lock:
            loop.step(0.01)
        assert loop.frame_index == 1

    def test_run_loop_stops(self, loop):
        frames = []

        def on_frame(snapshot):
            frames.append(snapshot.frame_index)
            if len(frames) >= 3:
                loop.stop()

        loop.run_loop(target_fps=1000.0, on_frame=on_frame)
        assert frames == [0, 1, 2]


class TestContext:
    """Test the headless application wiring."""

    def test_default_context(self):
        ctx = create_context()
        assert len(ctx.fixtures) == 30
        assert ctx.wave.mode is PatternMode.SEQUENTIAL
        assert ctx.camera.is_walking
        assert ctx.lighting.current_preset == "day"
        assert ctx.frame_loop.wave is ctx.wave
        assert ctx.camera.input is ctx.input_state

    def test_config_groups_applied(self):
        config = ViewerConfig(
            time_of_day="dusk",
            animation=AnimationSettings(mode="fast-runs", speed_multiplier=3.0),
            camera=CameraSettings(default_preset="AERIAL"),
        )
        ctx = create_context(config)
        assert ctx.wave.mode is PatternMode.FAST_RUNS
        assert ctx.wave.speed_multiplier == 3.0
        assert ctx.camera.current_preset == "AERIAL"
        assert ctx.lighting.current_preset == "dusk"

    def test_query_applied_after_config(self):
        config = ViewerConfig(
            animation=AnimationSettings(mode="fast-runs"),
            query="mode=brightness-burst-realtime&camera=FOLLOW",
        )
        ctx = create_context(config, clock=ManualClock(datetime(2024, 1, 1, 12, 0, 5)))
        assert ctx.wave.mode is PatternMode.BRIGHTNESS_BURST_REALTIME
        assert ctx.camera.is_following
        assert ctx.lighting.current_preset == "night"

        ctx.frame_loop.step(0.02)
        assert ctx.wave.get_status().peak_intensity == pytest.approx(PEAK_INTENSITY)

    def test_shared_event_bus(self):
        ctx = create_context()
        received = []
        ctx.event_bus.subscribe(EventType.CAMERA_PRESET_CHANGED, received.append)
        ctx.camera.set_preset("SIDE")
        assert received[0].data["preset"] == "SIDE"

    def test_seeded_random_mode(self):
        config = ViewerConfig(animation=AnimationSettings(mode="random", seed=9))
        a, b = create_context(config), create_context(config)
        a.frame_loop.step(0.01)
        b.frame_loop.step(0.01)
        assert a.wave.mode_state.sequence == b.wave.mode_state.sequence
        np.testing.assert_array_equal(a.wave.outputs.intensity, b.wave.outputs.intensity)
