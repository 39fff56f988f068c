"""
Query-string startup options.

A URL-style query (``mode=ping-pong&speed=2&camera=AERIAL``) sets initial
values once at startup. Values go through the same mutators the GUI uses,
so out-of-range numbers are clamped there rather than rejected here. Only
values that cannot be parsed at all are dropped, with a warning.

Recognised keys
---------------
mode, speed, point (alias convergence), divergence, low, high, camera,
pos=x,y,z, yaw, pitch, time, allOn, enabled
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING
from urllib.parse import parse_qs

import numpy as np

if TYPE_CHECKING:
    from earthspeed.engine.lighting import LightingController
    from earthspeed.engine.wave import WaveEngine
    from earthspeed.rendering.camera import CameraController

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class StartupOptions:
    """Parsed startup overrides; ``None`` means "leave as configured"."""

    mode: str | None = None
    speed: float | None = None
    convergence_point: int | None = None
    divergence_point: int | None = None
    low_brightness: float | None = None
    high_brightness: float | None = None
    camera: str | None = None
    position: tuple[float, float, float] | None = None
    yaw: float | None = None
    pitch: float | None = None
    time_of_day: str | None = None
    all_lights_on: bool | None = None
    enabled: bool | None = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


def _parse_float(key: str, raw: str) -> float | None:
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring query parameter {key}={raw!r}: not a number")
        return None
    if not np.isfinite(value):
        logger.warning(f"Ignoring query parameter {key}={raw!r}: not finite")
        return None
    return value


def _parse_int(key: str, raw: str) -> int | None:
    value = _parse_float(key, raw)
    return None if value is None else int(round(value))


def _parse_bool(key: str, raw: str) -> bool | None:
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    logger.warning(f"Ignoring query parameter {key}={raw!r}: not a boolean")
    return None


def _parse_position(key: str, raw: str) -> tuple[float, float, float] | None:
    parts = raw.split(",")
    if len(parts) != 3:
        logger.warning(f"Ignoring query parameter {key}={raw!r}: expected x,y,z")
        return None
    values = [_parse_float(key, p) for p in parts]
    if any(v is None for v in values):
        return None
    return (values[0], values[1], values[2])


def parse_query(query: str) -> StartupOptions:
    """
    Parse a query string into startup options.

    Parameters
    ----------
    query : str
        Query string, with or without a leading ``?``. When a key repeats,
        the last value wins.

    Returns
    -------
    StartupOptions
        Parsed options; unknown keys are ignored with a debug log
    """
    options = StartupOptions()
    params = parse_qs(query.lstrip("?"), keep_blank_values=False)

    for key, values in params.items():
        raw = values[-1]
        if key == "mode":
            options.mode = raw
        elif key == "speed":
            options.speed = _parse_float(key, raw)
        elif key in ("point", "convergence"):
            options.convergence_point = _parse_int(key, raw)
        elif key == "divergence":
            options.divergence_point = _parse_int(key, raw)
        elif key == "low":
            options.low_brightness = _parse_float(key, raw)
        elif key == "high":
            options.high_brightness = _parse_float(key, raw)
        elif key == "camera":
            options.camera = raw
        elif key == "pos":
            options.position = _parse_position(key, raw)
        elif key == "yaw":
            options.yaw = _parse_float(key, raw)
        elif key == "pitch":
            options.pitch = _parse_float(key, raw)
        elif key == "time":
            options.time_of_day = raw
        elif key == "allOn":
            options.all_lights_on = _parse_bool(key, raw)
        elif key == "enabled":
            options.enabled = _parse_bool(key, raw)
        else:
            logger.debug(f"Unknown query parameter: {key}")

    return options


def apply_startup_options(
    options: StartupOptions,
    wave: WaveEngine,
    camera: CameraController,
    lighting: LightingController | None = None,
) -> None:
    """Apply parsed options through the regular mutator APIs."""
    if options.time_of_day is not None and lighting is not None:
        lighting.apply_preset(options.time_of_day)

    # Mode first: selecting a burst mode switches lighting to night
    if options.mode is not None:
        wave.set_animation_mode(options.mode)
    if options.speed is not None:
        wave.set_speed_multiplier(options.speed)
    if options.convergence_point is not None:
        wave.set_convergence_point(options.convergence_point)
    if options.divergence_point is not None:
        wave.set_divergence_point(options.divergence_point)
    if options.low_brightness is not None:
        wave.set_low_brightness(options.low_brightness)
    if options.high_brightness is not None:
        wave.set_high_brightness(options.high_brightness)
    if options.enabled is not None:
        wave.set_enabled(options.enabled)
    if options.all_lights_on is not None:
        wave.set_all_lights_on(options.all_lights_on)

    if options.camera is not None:
        camera.set_preset(options.camera, animate=False)
    if options.position is not None:
        orientation = (options.yaw or 0.0, options.pitch or 0.0)
        camera.teleport_to_position(np.array(options.position), orientation, duration=0.0)

    if not options.is_empty:
        logger.info(f"Applied startup options: {options}")


__all__ = ["StartupOptions", "parse_query", "apply_startup_options"]
