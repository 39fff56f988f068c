"""
Frame loop driving the wave engine and the camera.

One ``step`` is one rendered frame: the wave engine advances first, then
the camera is updated with the wave front position of *this* frame, so
follow mode never lags a frame behind the lights.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from earthspeed.engine.wave import WaveEngine
from earthspeed.rendering.camera import CameraController
from earthspeed.rendering.camera_state import CameraPose

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameSnapshot:
    """What the renderer needs to draw one frame."""

    frame_index: int
    delta_time: float
    wave_position: float
    camera: CameraPose
    intensity: np.ndarray
    glow_opacity: np.ndarray
    bulb_opacity: np.ndarray


class FrameLoop:
    """
    Controller for the per-frame update order.

    Handles:
    - Clamping long frame gaps (tab switches, debugger pauses)
    - Wave-before-camera ordering
    - The blocking real-time loop used by the viewer
    """

    def __init__(
        self,
        wave: WaveEngine,
        camera: CameraController,
        max_frame_delta: float = 0.1,
        lock: threading.Lock | None = None,
    ):
        """
        Initialize the frame loop.

        Parameters
        ----------
        wave : WaveEngine
            Wave pattern engine (updated first)
        camera : CameraController
            Camera state machine (updated with the fresh wave position)
        max_frame_delta : float
            Upper bound for a single frame's delta in seconds
        lock : threading.Lock | None
            Held for the duration of each step when given
        """
        self.wave = wave
        self.camera = camera
        self.max_frame_delta = max_frame_delta
        self._lock = lock
        self._stop_event = threading.Event()
        self.frame_index = 0

        logger.debug("FrameLoop initialized")

    def step(self, delta_time: float) -> FrameSnapshot:
        """Advance one frame and return its snapshot."""
        delta_time = min(max(float(delta_time), 0.0), self.max_frame_delta)
        if self._lock is None:
            return self._step(delta_time)
        with self._lock:
            return self._step(delta_time)

    def _step(self, delta_time: float) -> FrameSnapshot:
        self.wave.update(delta_time)
        wave_position = self.wave.get_current_wave_position()
        self.camera.update(delta_time, wave_position)

        outputs = self.wave.outputs
        snapshot = FrameSnapshot(
            frame_index=self.frame_index,
            delta_time=delta_time,
            wave_position=wave_position,
            camera=self.camera.pose.copy(),
            intensity=outputs.intensity.copy(),
            glow_opacity=outputs.glow_opacity.copy(),
            bulb_opacity=outputs.bulb_opacity.copy(),
        )
        self.frame_index += 1
        return snapshot

    def run_loop(
        self,
        target_fps: float,
        on_frame: Callable[[FrameSnapshot], None] | None = None,
    ) -> None:
        """
        Run the real-time loop until ``stop`` is called.

        Frame deltas come from ``time.perf_counter``. Errors in a frame are
        logged and the loop keeps going.
        """
        logger.info(f"Starting frame loop at {target_fps:.0f} fps")
        frame_budget = 1.0 / target_fps
        last = time.perf_counter()

        while not self._stop_event.is_set():
            try:
                now = time.perf_counter()
                snapshot = self.step(now - last)
                last = now
                if on_frame is not None:
                    on_frame(snapshot)

                remaining = frame_budget - (time.perf_counter() - now)
                if remaining > 0:
                    time.sleep(remaining)

            except KeyboardInterrupt:
                logger.info("Frame loop interrupted")
                break
            except Exception as e:
                logger.error(f"Error in frame loop: {e}", exc_info=True)
                time.sleep(1.0)  # Prevent tight loop on error
                last = time.perf_counter()

    def stop(self) -> None:
        """Stop the frame loop."""
        self._stop_event.set()
        logger.info("Frame loop stopped")


__all__ = ["FrameSnapshot", "FrameLoop"]
