"""
Command-line entry point for the Earth-speed viewer.

Arguments are parsed by tyro from the signature of ``main``.
"""

from __future__ import annotations

import logging

import tyro

from earthspeed.config.settings import AnimationSettings, CameraSettings, ViewerConfig
from earthspeed.core.app import EarthSpeedApp
from earthspeed.shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for a viewer run."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main(
    port: int = 8080,
    host: str = "0.0.0.0",
    mode: str = "sequential",
    speed: float = 1.0,
    camera: str = "WALKING",
    time_of_day: str = "day",
    query: str = "",
    log_level: str = "INFO",
    fps: float = 60.0,
) -> None:
    """
    Walk along a row of lights flashing at the speed the ground moves.

    Parameters
    ----------
    port : int
        Port for the browser viewer
    host : str
        Interface to bind; 127.0.0.1 keeps the viewer local
    mode : str
        Wave pattern to start with (sequential, ping-pong, ping-pong-fast,
        fast-runs, blink-all, random, converge-center, diverge-center,
        converge-point, diverge-point, brightness-burst,
        brightness-burst-realtime)
    speed : float
        Playback multiplier, clamped to 0.1 .. 10
    camera : str
        Starting viewpoint: WALKING, GROUND, GROUND_END, ELEVATED, AERIAL, SIDE
        or FOLLOW
    time_of_day : str
        Sky preset: night, dawn, day, dusk or golden-hour
    query : str
        URL-style overrides applied last, e.g. "mode=converge-point&point=5"
    log_level : str
        DEBUG, INFO, WARNING or ERROR
    fps : float
        Frame rate the loop aims for

    Examples
    --------
    Bursts at night, seen from above:
        earthspeed --mode brightness-burst --camera AERIAL

    Start standing beside fixture 15, facing west:
        earthspeed --query "pos=50,6,88&yaw=1.57"
    """
    setup_logging(log_level)

    try:
        config = ViewerConfig(
            host=host,
            port=port,
            target_fps=fps,
            time_of_day=time_of_day,
            query=query,
            animation=AnimationSettings(mode=mode, speed_multiplier=speed),
            camera=CameraSettings(default_preset=camera),
        )
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return

    logger.info(f"Earth-speed viewer: {mode} at {speed}x, camera {camera}, {time_of_day}")
    if query:
        logger.info(f"Startup overrides: {query}")

    app = EarthSpeedApp(config)
    app.setup_viewer()
    app.run()


def cli() -> None:
    """Console script entry point."""
    tyro.cli(main)


if __name__ == "__main__":
    cli()
