"""
Input state read synchronously by the camera each frame.

The platform layer (viser GUI callbacks, keyboard handlers, tests) writes
into an ``InputState``; ``CameraController.update`` consumes it. Held keys
are level-triggered flags that persist across frames. Look, orbit and jump
inputs are edge-triggered and cleared when consumed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


@dataclass
class InputState:
    """Accumulated user input between two camera updates."""

    # Held movement keys (walking mode)
    forward: bool = False
    backward: bool = False
    left: bool = False
    right: bool = False
    running: bool = False

    # One-shot requests
    jump_requested: bool = False

    # Pixel deltas for mouse look
    look_dx: float = 0.0
    look_dy: float = 0.0

    # Orbit deltas (radians) and dolly scale (>1 moves away)
    orbit_azimuth: float = 0.0
    orbit_polar: float = 0.0
    zoom_scale: float = 1.0

    def apply_walking_key(self, key: str, pressed: bool) -> bool:
        """Update flags for a key press/release. Returns True if the key is a walking key."""
        key = key.lower()
        if key == "w":
            self.forward = pressed
        elif key == "s":
            self.backward = pressed
        elif key == "a":
            self.left = pressed
        elif key == "d":
            self.right = pressed
        elif key == "shift":
            self.running = pressed
        elif key in (" ", "space"):
            if pressed:
                self.jump_requested = True
        else:
            return False
        return True

    def move_intent(self) -> np.ndarray:
        """Normalized camera-local (x, 0, z) intent; forward is -Z."""
        direction = np.zeros(3)
        if self.forward:
            direction[2] -= 1.0
        if self.backward:
            direction[2] += 1.0
        if self.left:
            direction[0] -= 1.0
        if self.right:
            direction[0] += 1.0
        norm = np.linalg.norm(direction)
        if norm > 0:
            direction /= norm
        return direction

    def add_look_delta(self, dx: float, dy: float) -> None:
        self.look_dx += dx
        self.look_dy += dy

    def add_orbit_delta(self, azimuth: float, polar: float) -> None:
        self.orbit_azimuth += azimuth
        self.orbit_polar += polar

    def add_zoom(self, scale: float) -> None:
        if scale > 0 and math.isfinite(scale):
            self.zoom_scale *= scale

    def consume_look(self) -> tuple[float, float]:
        dx, dy = self.look_dx, self.look_dy
        self.look_dx = self.look_dy = 0.0
        return dx, dy

    def consume_jump(self) -> bool:
        requested = self.jump_requested
        self.jump_requested = False
        return requested

    def consume_orbit(self) -> tuple[float, float, float]:
        deltas = (self.orbit_azimuth, self.orbit_polar, self.zoom_scale)
        self.orbit_azimuth = self.orbit_polar = 0.0
        self.zoom_scale = 1.0
        return deltas

    def discard_one_shots(self) -> None:
        """Drop pending look/orbit/jump input; held keys survive."""
        self.consume_look()
        self.consume_jump()
        self.consume_orbit()

    def release_all(self) -> None:
        self.forward = self.backward = self.left = self.right = self.running = False
        self.discard_one_shots()


__all__ = ["InputState"]
