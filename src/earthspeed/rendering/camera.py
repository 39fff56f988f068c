"""
Camera state machine for the Earth-speed viewer.

DESIGN: Explicit Mode-Based Camera Ownership
============================================

The camera is in exactly one mode:

1. ORBIT / PRESET: the browser owns the camera
   - User can orbit/pan/zoom with the mouse
   - We sync FROM viser (``sync_from_client``)
   - PRESET is a static preset pose that has not been moved yet

2. WALKING: we own the camera
   - WASD/run/jump locomotion with gravity, mouse look
   - Orbit interaction is disabled

3. FOLLOW: we own the camera
   - Pose is recomputed every frame from the wave front position
   - User input is ignored

Orthogonal to the mode, a ``CameraTransition`` may be in flight. While it
is, interpolation owns the pose and mode-specific updates are suspended;
held movement keys keep accumulating but look deltas are dropped.

Mode transitions:
- set_preset(key)            -> mode of the preset, Transitioning or Steady
- teleport_to_position(...)  -> WALKING, Transitioning
- transition reaches t = 1   -> Steady in the same mode

Transition timing uses the controller's own clock (the sum of every
``update`` delta), so playback is deterministic for a given frame sequence.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

import numpy as np

from earthspeed.config.settings import CameraSettings
from earthspeed.interaction.events import EventType
from earthspeed.interaction.input_state import InputState
from earthspeed.shared.exceptions import UnknownPresetError
from earthspeed.shared.math import clamp, ease_in_out_quad, lerp, lerp_angle

from .camera_state import CameraPose
from .presets import CameraPreset, CameraPresets
from .quaternion_utils import Y_AXIS, quat_from_axis_angle, quat_rotate

if TYPE_CHECKING:
    from earthspeed.interaction.events import EventBus

logger = logging.getLogger(__name__)

# Orbit deltas below this are treated as settled
ORBIT_EPSILON = 1e-6


class CameraMode(Enum):
    """Which update logic runs each steady frame."""
    ORBIT = "orbit"
    PRESET = "preset"
    WALKING = "walking"
    FOLLOW = "follow"


@dataclass
class CameraTransition:
    """In-flight interpolation between two poses.

    ``target_orientation`` is set only for teleports; it is applied exactly
    when the transition completes.
    """

    start: CameraPose
    end: CameraPose
    start_time: float
    duration: float
    target_orientation: tuple[float, float] | None = None

    def progress(self, now: float) -> float:
        """Linear progress in [0, 1]."""
        if self.duration <= 0:
            return 1.0
        return min(max((now - self.start_time) / self.duration, 0.0), 1.0)


@dataclass
class LocomotionState:
    """Vertical motion for walking mode."""

    vertical_velocity: float = 0.0
    is_jumping: bool = False

    def reset(self) -> None:
        self.vertical_velocity = 0.0
        self.is_jumping = False


@dataclass
class OrbitState:
    """Pending damped orbit motion (radians)."""

    azimuth_delta: float = 0.0
    polar_delta: float = 0.0

    @property
    def settled(self) -> bool:
        return abs(self.azimuth_delta) < ORBIT_EPSILON and abs(self.polar_delta) < ORBIT_EPSILON

    def reset(self) -> None:
        self.azimuth_delta = 0.0
        self.polar_delta = 0.0


class CameraController:
    """
    Camera state machine: presets, transitions, walking, follow and orbit.

    Parameters
    ----------
    settings : CameraSettings | None
        Durations, locomotion physics, follow offset and orbit limits
    input_state : InputState | None
        Shared input record; a private one is created if omitted
    event_bus : EventBus | None
        Notified on preset changes, teleports and finished transitions
    """

    def __init__(
        self,
        settings: CameraSettings | None = None,
        input_state: InputState | None = None,
        event_bus: EventBus | None = None,
    ):
        self.settings = settings or CameraSettings()
        self.input = input_state if input_state is not None else InputState()
        self.event_bus = event_bus

        self.pose = CameraPose()
        self.mode = CameraMode.PRESET
        self.current_preset: str | None = None
        self.transition: CameraTransition | None = None
        self.locomotion = LocomotionState()
        self.orbit = OrbitState()
        self.wave_position = 0.0
        self.elapsed = 0.0

        if not self.set_preset(self.settings.default_preset, animate=False):
            self.set_preset(CameraPresets.WALKING.key, animate=False)

        logger.info(f"CameraController initialized ({self.current_preset})")

    # =========================================================================
    # Mode queries
    # =========================================================================

    @property
    def is_transitioning(self) -> bool:
        return self.transition is not None

    @property
    def is_walking(self) -> bool:
        return self.mode is CameraMode.WALKING

    @property
    def is_following(self) -> bool:
        return self.mode is CameraMode.FOLLOW

    @property
    def orbit_enabled(self) -> bool:
        """Orbit interaction is only available outside walking and follow."""
        return self.mode in (CameraMode.ORBIT, CameraMode.PRESET)

    def is_app_controlled(self) -> bool:
        """Check if the app currently owns the camera (blocks viser sync)."""
        return self.transition is not None or not self.orbit_enabled

    # =========================================================================
    # Presets and teleport
    # =========================================================================

    def set_preset(self, key: str, animate: bool = True) -> bool:
        """
        Switch to a named preset.

        Parameters
        ----------
        key : str
            Preset key (see ``CameraPresets``)
        animate : bool
            Interpolate over ``transition_duration`` if no transition is in
            flight; otherwise (or when False) snap immediately and discard any
            in-flight transition

        Returns
        -------
        bool
            False if the key is unknown (nothing changes)
        """
        try:
            preset = CameraPresets.get(key)
        except UnknownPresetError as e:
            logger.warning(str(e))
            return False

        was_walking = self.is_walking
        self.current_preset = preset.key
        self.mode = self._mode_for(preset)
        self.orbit.reset()
        if self.is_walking and not was_walking:
            self.locomotion.reset()

        end = CameraPose.looking_at(preset.position_array, preset.target_array, preset.fov)
        if animate and self.transition is None:
            self.transition = CameraTransition(
                start=self.pose.copy(),
                end=end,
                start_time=self.elapsed,
                duration=self.settings.transition_duration,
            )
        else:
            self.transition = None
            self.pose = end

        logger.info(f"Camera preset: {preset.name} ({self.mode.value})")
        self._emit(EventType.CAMERA_PRESET_CHANGED, preset=preset.key, animated=self.is_transitioning)
        return True

    @staticmethod
    def _mode_for(preset: CameraPreset) -> CameraMode:
        if preset.is_walking:
            return CameraMode.WALKING
        if preset.is_following:
            return CameraMode.FOLLOW
        return CameraMode.PRESET

    def teleport_to_position(
        self,
        position,
        orientation: tuple[float, float],
        duration: float | None = None,
    ) -> None:
        """
        Fly to an explicit walking pose.

        Forces walking mode, then interpolates position and yaw/pitch over
        ``duration`` seconds. The supplied orientation is applied exactly when
        the transition completes.

        Parameters
        ----------
        position : array-like
            (3,) destination eye position
        orientation : tuple[float, float]
            Destination (yaw, pitch) in radians
        duration : float | None
            Seconds; defaults to ``teleport_duration``
        """
        if not self.is_walking:
            self.set_preset(CameraPresets.WALKING.key, animate=False)

        yaw, pitch = float(orientation[0]), float(orientation[1])
        end = CameraPose(position=position, fov=CameraPresets.WALKING.fov)
        end.set_orientation(yaw, pitch)

        self.locomotion.reset()
        self.transition = CameraTransition(
            start=self.pose.copy(),
            end=end,
            start_time=self.elapsed,
            duration=self.settings.teleport_duration if duration is None else float(duration),
            target_orientation=(yaw, pitch),
        )

        logger.debug(
            f"Teleport to ({end.position[0]:.1f}, {end.position[1]:.1f}, {end.position[2]:.1f}) "
            f"yaw={yaw:.3f} pitch={pitch:.3f}"
        )
        self._emit(
            EventType.CAMERA_TELEPORTED,
            position=tuple(float(x) for x in end.position),
            yaw=yaw,
            pitch=pitch,
        )

    # =========================================================================
    # Per-frame update
    # =========================================================================

    def update(self, delta_time: float, wave_position: float | None = None) -> None:
        """Advance the transition or run the steady logic of the current mode."""
        self.elapsed += delta_time
        if wave_position is not None:
            self.wave_position = wave_position

        if self.transition is not None:
            # Look/orbit input is dropped while interpolation owns the pose
            self.input.consume_look()
            self.input.consume_orbit()
            self._advance_transition()
            return

        if self.mode is CameraMode.FOLLOW:
            self.input.discard_one_shots()
            self._apply_follow()
        elif self.mode is CameraMode.WALKING:
            self._apply_locomotion(delta_time)
        else:
            self._apply_orbit()

    def _advance_transition(self) -> None:
        transition = self.transition
        raw = transition.progress(self.elapsed)
        t = ease_in_out_quad(raw)
        start, end = transition.start, transition.end

        self.pose.position = lerp(start.position, end.position, t)
        self.pose.fov = lerp(start.fov, end.fov, t)
        if transition.target_orientation is not None:
            self.pose.set_orientation(
                lerp_angle(start.yaw, end.yaw, t),
                lerp(start.pitch, end.pitch, t),
            )
        else:
            self.pose.target = lerp(start.target, end.target, t)
            self.pose.orient_toward_target()

        if raw >= 1.0:
            self.transition = None
            if self.is_walking and transition.target_orientation is not None:
                self.pose.set_orientation(*transition.target_orientation)
            else:
                self.pose.orient_toward_target()
            logger.debug(f"Camera transition finished ({self.mode.value})")
            self._emit(EventType.CAMERA_TRANSITION_FINISHED, mode=self.mode.value)

    def _apply_follow(self) -> None:
        follow = self.settings.follow
        self.pose.position = np.array([0.0, follow.height, self.wave_position + follow.lead])
        self.pose.target = np.array([0.0, follow.target_height, self.wave_position])
        self.pose.orient_toward_target()

    def _apply_locomotion(self, delta_time: float) -> None:
        loco = self.settings.locomotion
        pose = self.pose

        dx, dy = self.input.consume_look()
        yaw = pose.yaw - dx * loco.look_sensitivity
        pitch = clamp(pose.pitch - dy * loco.look_sensitivity, -math.pi / 2, math.pi / 2)

        # Intent is camera-local; rotate by heading only so movement stays horizontal
        intent = self.input.move_intent()
        if np.any(intent):
            direction = quat_rotate(quat_from_axis_angle(Y_AXIS, yaw), intent)
            direction[1] = 0.0
            direction /= np.linalg.norm(direction)
            speed = loco.walk_speed * (loco.run_multiplier if self.input.running else 1.0)
            pose.position = pose.position + direction * speed * delta_time

        state = self.locomotion
        if self.input.consume_jump() and not state.is_jumping:
            state.is_jumping = True
            state.vertical_velocity = loco.jump_speed

        position = pose.position.copy()
        if state.is_jumping or position[1] > loco.ground_level:
            state.vertical_velocity -= loco.gravity * delta_time
            position[1] += state.vertical_velocity * delta_time
            if position[1] <= loco.ground_level:
                position[1] = loco.ground_level
                state.reset()
        else:
            position[1] = loco.ground_level
        pose.position = position

        pose.set_orientation(yaw, pitch)

    def _apply_orbit(self) -> None:
        """
        Damped orbit around ``pose.target``.

        Driven by ``InputState.add_orbit_delta`` and ``add_zoom``. The viser
        viewer never calls these: its browser client orbits on its own and
        the result arrives through ``sync_from_client``. The damped path
        serves headless runs and any non-viser input layer.
        """
        orbit_cfg = self.settings.orbit
        d_azimuth, d_polar, zoom = self.input.consume_orbit()
        self.orbit.azimuth_delta += d_azimuth
        self.orbit.polar_delta += d_polar

        if self.orbit.settled and zoom == 1.0:
            self.orbit.reset()
            return

        offset = self.pose.position - self.pose.target
        radius = float(np.linalg.norm(offset))
        if radius < 1e-9:
            return

        azimuth = math.atan2(offset[0], offset[2])
        polar = math.acos(clamp(offset[1] / radius, -1.0, 1.0))

        damping = orbit_cfg.damping_factor
        azimuth += self.orbit.azimuth_delta * damping
        polar = clamp(
            polar + self.orbit.polar_delta * damping,
            orbit_cfg.min_polar_angle,
            orbit_cfg.max_polar_angle,
        )
        radius = clamp(radius * zoom, orbit_cfg.min_distance, orbit_cfg.max_distance)

        self.orbit.azimuth_delta *= 1.0 - damping
        self.orbit.polar_delta *= 1.0 - damping

        sin_polar = math.sin(polar)
        self.pose.position = self.pose.target + radius * np.array(
            [sin_polar * math.sin(azimuth), math.cos(polar), sin_polar * math.cos(azimuth)]
        )
        self.pose.orient_toward_target()
        self._leave_preset()

    # =========================================================================
    # Viser synchronization
    # =========================================================================

    def sync_from_client(self, position, look_at, fov_radians: float | None = None) -> bool:
        """
        Copy a browser-owned camera into the pose.

        Ignored while the app owns the camera. Returns True if the pose was
        updated.
        """
        if self.is_app_controlled():
            return False

        previous = self.pose.copy()
        self.pose.set_from_viser(position, look_at, fov_radians)
        moved = (
            not np.allclose(previous.position, self.pose.position, atol=1e-3)
            or not np.allclose(previous.target, self.pose.target, atol=1e-3)
        )
        if moved:
            self._leave_preset()
        return True

    def _leave_preset(self) -> None:
        if self.mode is CameraMode.PRESET:
            self.mode = CameraMode.ORBIT
            self.current_preset = None

    # =========================================================================
    # Status
    # =========================================================================

    def get_status(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "preset": self.current_preset,
            "transitioning": self.is_transitioning,
            "position": tuple(float(x) for x in self.pose.position),
            "yaw": self.pose.yaw,
            "pitch": self.pose.pitch,
            "fov": self.pose.fov,
        }

    def _emit(self, event_type: EventType, **data) -> None:
        if self.event_bus is not None:
            self.event_bus.emit(event_type, source="camera", **data)


__all__ = [
    "CameraMode",
    "CameraTransition",
    "LocomotionState",
    "OrbitState",
    "CameraController",
]
