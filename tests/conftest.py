"""Pytest configuration and shared fixtures."""

from datetime import datetime

import numpy as np
import pytest

from earthspeed.config.settings import CameraSettings
from earthspeed.domain.clock import ManualClock
from earthspeed.domain.installation import InstallationGeometry, build_fixtures
from earthspeed.domain.patterns import CycleState, WaveTiming
from earthspeed.engine.lighting import LightingController
from earthspeed.engine.wave import WaveEngine
from earthspeed.interaction.events import EventBus
from earthspeed.rendering.camera import CameraController


@pytest.fixture
def geometry():
    """The default 30-fixture installation."""
    return InstallationGeometry()


@pytest.fixture
def timing(geometry):
    return WaveTiming.from_geometry(geometry)


@pytest.fixture
def fixtures(geometry):
    return build_fixtures(geometry)


@pytest.fixture
def manual_clock():
    """Wall clock parked at 21:00:00 on a fixed date."""
    return ManualClock(datetime(2024, 8, 28, 21, 0, 0))


@pytest.fixture
def event_bus():
    return EventBus(name="test")


@pytest.fixture
def lighting(event_bus):
    return LightingController(event_bus=event_bus)


@pytest.fixture
def engine(fixtures, geometry, lighting, manual_clock, event_bus):
    """Wave engine with a seeded permutation source and a manual clock."""
    return WaveEngine(
        fixtures,
        geometry,
        lighting=lighting,
        clock=manual_clock,
        rng=np.random.default_rng(1234),
        event_bus=event_bus,
    )


@pytest.fixture
def camera(event_bus):
    """Camera starting on the walking preset."""
    return CameraController(event_bus=event_bus)


@pytest.fixture
def make_camera(event_bus):
    """Factory for a camera starting on a given preset."""

    def _make(preset: str = "WALKING", **settings) -> CameraController:
        return CameraController(
            CameraSettings(default_preset=preset, **settings), event_bus=event_bus
        )

    return _make


@pytest.fixture
def make_state(timing):
    """Factory for a ``CycleState`` at a given time."""

    def _make(time: float, **kwargs) -> CycleState:
        kwargs.setdefault("fixture_count", 30)
        return CycleState(time=time, timing=timing, **kwargs)

    return _make
