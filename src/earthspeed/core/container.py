"""
Application container for wiring the simulation core.

Builds every context object the viewer needs (event bus, fixtures, lighting,
wave engine, camera, frame loop) from a ``ViewerConfig``, with no viser
dependency, so tests and headless runs get the same wiring as the app.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

import numpy as np

from earthspeed.config.query import apply_startup_options, parse_query
from earthspeed.config.settings import ViewerConfig
from earthspeed.domain.clock import Clock
from earthspeed.domain.installation import Fixture, InstallationGeometry, build_fixtures
from earthspeed.engine.lighting import LightingController
from earthspeed.engine.wave import WaveEngine
from earthspeed.interaction.events import EventBus
from earthspeed.interaction.input_state import InputState
from earthspeed.interaction.playback import FrameLoop
from earthspeed.rendering.camera import CameraController

logger = logging.getLogger(__name__)


@dataclass
class SimulationContext:
    """Bundle of the wired core objects; owned by the application."""

    config: ViewerConfig
    event_bus: EventBus
    geometry: InstallationGeometry
    fixtures: list[Fixture]
    lighting: LightingController
    input_state: InputState
    wave: WaveEngine
    camera: CameraController
    frame_loop: FrameLoop
    lock: threading.RLock


def create_context(
    config: ViewerConfig | None = None,
    clock: Clock | None = None,
    rng: np.random.Generator | None = None,
) -> SimulationContext:
    """
    Build and wire the simulation core.

    Parameters
    ----------
    config : ViewerConfig | None
        Viewer configuration (defaults if None)
    clock : Clock | None
        Wall clock for the quarter-hour burst; tests pass a ``ManualClock``
    rng : np.random.Generator | None
        Random-mode permutation source; defaults to one seeded from config

    Returns
    -------
    SimulationContext
        Wired context with startup query options already applied
    """
    config = config or ViewerConfig()
    event_bus = EventBus(name="earthspeed")
    geometry = config.installation.to_geometry()
    fixtures = build_fixtures(geometry)

    lighting = LightingController(config.time_of_day, event_bus=event_bus)
    input_state = InputState()
    wave = WaveEngine(
        fixtures,
        geometry,
        settings=config.animation,
        lighting=lighting,
        clock=clock,
        rng=rng,
        event_bus=event_bus,
    )
    camera = CameraController(config.camera, input_state=input_state, event_bus=event_bus)

    lock = threading.RLock()
    frame_loop = FrameLoop(wave, camera, max_frame_delta=config.max_frame_delta, lock=lock)

    if config.query:
        apply_startup_options(parse_query(config.query), wave, camera, lighting)

    logger.debug(
        f"Context created: {geometry.fixture_count} fixtures, "
        f"cycle {geometry.cycle_duration:.3f}s, mode {wave.mode.value}"
    )
    return SimulationContext(
        config=config,
        event_bus=event_bus,
        geometry=geometry,
        fixtures=fixtures,
        lighting=lighting,
        input_state=input_state,
        wave=wave,
        camera=camera,
        frame_loop=frame_loop,
        lock=lock,
    )


__all__ = ["SimulationContext", "create_context"]
