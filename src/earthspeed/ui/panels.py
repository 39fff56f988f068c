"""
GUI panels for the viewer.

Factory functions create one folder each and wire widget callbacks to the
engine mutators. Widgets never hold animation state: when an engine
changes (from any source) it emits an event and the panel copies the new
value back into the widget.

Every callback takes the application lock, so GUI threads and the frame
loop never touch the engines at the same time. Programmatic widget updates
are guarded by ``WidgetSync`` so they do not call back into the engines.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Iterator

import viser

from earthspeed.config.slider_constants import SliderBounds
from earthspeed.domain.installation import Fixture, set_scale_circles_visible
from earthspeed.engine.lighting import TIME_OF_DAY_PRESETS, LightingController
from earthspeed.engine.wave import WaveEngine, apply_animation_key
from earthspeed.interaction.events import Event, EventBus, EventType
from earthspeed.rendering.camera import CameraController
from earthspeed.rendering.minimap import teleport_from_minimap
from earthspeed.rendering.presets import CameraPresets

logger = logging.getLogger(__name__)

WALK_BUTTONS = {"Forward": "w", "Back": "s", "Left": "a", "Right": "d"}
LOOK_STEP_PIXELS = 150.0


class WidgetSync:
    """Suppresses widget callbacks while the app writes widget values."""

    def __init__(self):
        self._depth = 0

    @property
    def active(self) -> bool:
        return self._depth > 0

    @contextlib.contextmanager
    def writing(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    def set(self, handle, value) -> None:
        if handle.value != value:
            with self.writing():
                handle.value = value


def create_animation_controls(
    server: viser.ViserServer,
    wave: WaveEngine,
    lock: threading.RLock,
    event_bus: EventBus,
    sync: WidgetSync,
) -> dict:
    """
    Create the Animation folder (pattern, speed, toggles, points, brightness).

    Returns
    -------
    dict
        Widget handles keyed by name
    """
    controls: dict = {}
    last_index = len(wave.fixtures) - 1

    with server.gui.add_folder("Animation"):
        mode_labels = {info.name: info.id for info in wave.get_available_modes()}
        mode_ids = {v: k for k, v in mode_labels.items()}
        controls["mode"] = server.gui.add_dropdown(
            "Pattern",
            tuple(mode_labels),
            initial_value=mode_ids[wave.mode.value],
            hint="\n".join(f"{info.name}: {info.description}" for info in wave.get_available_modes()),
        )
        controls["speed"] = server.gui.add_slider(
            "Speed",
            min=SliderBounds.SPEED_MIN,
            max=SliderBounds.SPEED_MAX,
            step=SliderBounds.SPEED_STEP,
            initial_value=wave.speed_multiplier,
            hint="1.0 = real Earth rotation speed",
        )
        controls["speed_keys"] = server.gui.add_button_group("Speed", ("0.1x", "1x", "-", "+"))
        controls["enabled"] = server.gui.add_checkbox("Animate", initial_value=wave.enabled)
        controls["all_on"] = server.gui.add_checkbox("All Lights On", initial_value=wave.all_lights_on)
        controls["reset"] = server.gui.add_button("Reset")
        controls["convergence"] = server.gui.add_slider(
            "Converge Point",
            min=SliderBounds.POINT_MIN,
            max=last_index,
            step=1,
            initial_value=wave.convergence_point,
        )
        controls["divergence"] = server.gui.add_slider(
            "Diverge Point",
            min=SliderBounds.POINT_MIN,
            max=last_index,
            step=1,
            initial_value=wave.divergence_point,
        )
        controls["low"] = server.gui.add_slider(
            "Low Brightness",
            min=SliderBounds.BRIGHTNESS_MIN,
            max=SliderBounds.BRIGHTNESS_MAX,
            step=SliderBounds.BRIGHTNESS_STEP,
            initial_value=wave.low_brightness,
            hint="Peak brightness of dim burst cycles",
        )
        controls["high"] = server.gui.add_slider(
            "High Brightness",
            min=SliderBounds.BRIGHTNESS_MIN,
            max=SliderBounds.BRIGHTNESS_MAX,
            step=SliderBounds.BRIGHTNESS_STEP,
            initial_value=wave.high_brightness,
            hint="Peak brightness of bright burst cycles",
        )

    @controls["mode"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            wave.set_animation_mode(mode_labels[controls["mode"].value])

    @controls["speed"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            wave.set_speed_multiplier(controls["speed"].value)

    @controls["speed_keys"].on_click
    def _(_) -> None:
        key = {"0.1x": "0", "1x": "1", "-": "-", "+": "+"}[controls["speed_keys"].value]
        with lock:
            apply_animation_key(wave, key)

    @controls["enabled"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            wave.set_enabled(controls["enabled"].value)

    @controls["all_on"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            wave.set_all_lights_on(controls["all_on"].value)

    @controls["reset"].on_click
    def _(_) -> None:
        with lock:
            wave.reset()

    @controls["convergence"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            wave.set_convergence_point(int(controls["convergence"].value))

    @controls["divergence"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            wave.set_divergence_point(int(controls["divergence"].value))

    @controls["low"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            wave.set_low_brightness(controls["low"].value)

    @controls["high"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            wave.set_high_brightness(controls["high"].value)

    # Engine -> widgets
    def on_pattern(event: Event) -> None:
        sync.set(controls["mode"], mode_ids[event.data["mode"]])

    def on_speed(event: Event) -> None:
        sync.set(controls["speed"], event.data["speed"])

    def on_toggle(event: Event) -> None:
        sync.set(controls["enabled"], event.data["enabled"])

    def on_all_on(event: Event) -> None:
        sync.set(controls["all_on"], event.data["on"])

    def on_point(event: Event) -> None:
        sync.set(controls[event.data["kind"]], event.data["index"])

    def on_brightness(event: Event) -> None:
        sync.set(controls[event.data["kind"]], event.data["value"])

    event_bus.subscribe(EventType.PATTERN_CHANGED, on_pattern)
    event_bus.subscribe(EventType.SPEED_CHANGED, on_speed)
    event_bus.subscribe(EventType.ANIMATION_TOGGLED, on_toggle)
    event_bus.subscribe(EventType.ALL_LIGHTS_TOGGLED, on_all_on)
    event_bus.subscribe(EventType.POINT_CHANGED, on_point)
    event_bus.subscribe(EventType.BRIGHTNESS_CHANGED, on_brightness)

    return controls


def create_camera_controls(
    server: viser.ViserServer,
    camera: CameraController,
    lock: threading.RLock,
) -> dict:
    """Create the Camera folder (presets), Walk folder and Teleport folder."""
    controls: dict = {}

    with server.gui.add_folder("Camera"):
        for preset in CameraPresets.ALL:
            button = server.gui.add_button(preset.name)
            controls[preset.key] = button

            def make_callback(key: str):
                def _(_) -> None:
                    with lock:
                        camera.set_preset(key)
                return _

            button.on_click(make_callback(preset.key))

    with server.gui.add_folder("Walk", expand_by_default=False):
        controls["walk"] = server.gui.add_button_group("Move", (*WALK_BUTTONS, "Stop"))
        controls["look"] = server.gui.add_button_group("Look", ("<", ">", "^", "v"))
        controls["run"] = server.gui.add_checkbox("Run", initial_value=False)
        controls["jump"] = server.gui.add_button("Jump")

    @controls["walk"].on_click
    def _(_) -> None:
        choice = controls["walk"].value
        with lock:
            for label, key in WALK_BUTTONS.items():
                camera.input.apply_walking_key(key, label == choice)

    @controls["look"].on_click
    def _(_) -> None:
        dx, dy = {
            "<": (-LOOK_STEP_PIXELS, 0.0),
            ">": (LOOK_STEP_PIXELS, 0.0),
            "^": (0.0, -LOOK_STEP_PIXELS),
            "v": (0.0, LOOK_STEP_PIXELS),
        }[controls["look"].value]
        with lock:
            camera.input.add_look_delta(dx, dy)

    @controls["run"].on_update
    def _(_) -> None:
        with lock:
            camera.input.apply_walking_key("shift", controls["run"].value)

    @controls["jump"].on_click
    def _(_) -> None:
        with lock:
            camera.input.apply_walking_key("space", True)

    with server.gui.add_folder("Teleport", expand_by_default=False):
        controls["map_u"] = server.gui.add_slider(
            "Map X", min=0.0, max=1.0, step=0.01, initial_value=0.5, hint="0 = west edge, 1 = east edge"
        )
        controls["map_v"] = server.gui.add_slider(
            "Map Y", min=0.0, max=1.0, step=0.01, initial_value=0.05, hint="0 = start of the row, 1 = end"
        )
        controls["teleport"] = server.gui.add_button("Teleport")

    @controls["teleport"].on_click
    def _(_) -> None:
        pose = teleport_from_minimap(controls["map_u"].value, controls["map_v"].value)
        with lock:
            camera.teleport_to_position(pose.position, pose.orientation, pose.duration)

    return controls


def create_lighting_controls(
    server: viser.ViserServer,
    lighting: LightingController,
    lock: threading.RLock,
    event_bus: EventBus,
    sync: WidgetSync,
) -> dict:
    """Create the Lighting folder (time of day and sun)."""
    controls: dict = {}
    sun = lighting.state.sun

    with server.gui.add_folder("Lighting", expand_by_default=False):
        controls["time"] = server.gui.add_dropdown(
            "Time of Day",
            tuple(TIME_OF_DAY_PRESETS),
            initial_value=lighting.current_preset,
        )
        controls["azimuth"] = server.gui.add_slider(
            "Sun Azimuth",
            min=SliderBounds.SUN_AZIMUTH_MIN,
            max=SliderBounds.SUN_AZIMUTH_MAX,
            step=1.0,
            initial_value=sun.azimuth,
            hint="0 = north, 90 = east",
        )
        controls["elevation"] = server.gui.add_slider(
            "Sun Elevation",
            min=SliderBounds.SUN_ELEVATION_MIN,
            max=SliderBounds.SUN_ELEVATION_MAX,
            step=1.0,
            initial_value=sun.elevation,
        )
        controls["intensity"] = server.gui.add_slider(
            "Sun Intensity",
            min=SliderBounds.SUN_INTENSITY_MIN,
            max=SliderBounds.SUN_INTENSITY_MAX,
            step=0.1,
            initial_value=sun.intensity,
        )

    @controls["time"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            lighting.apply_preset(controls["time"].value)

    @controls["azimuth"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            lighting.set_sun_azimuth(controls["azimuth"].value)

    @controls["elevation"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            lighting.set_sun_elevation(controls["elevation"].value)

    @controls["intensity"].on_update
    def _(_) -> None:
        if sync.active:
            return
        with lock:
            lighting.set_sun_intensity(controls["intensity"].value)

    def on_preset(event: Event) -> None:
        state = lighting.state
        sync.set(controls["time"], event.data["preset"])
        sync.set(controls["azimuth"], state.sun.azimuth)
        sync.set(controls["elevation"], state.sun.elevation)
        sync.set(controls["intensity"], state.sun.intensity)

    event_bus.subscribe(EventType.LIGHTING_PRESET_CHANGED, on_preset)
    return controls


def create_display_controls(
    server: viser.ViserServer,
    fixtures: list[Fixture],
    lock: threading.RLock,
    event_bus: EventBus,
) -> dict:
    """Create the Display folder (scale circles)."""
    controls: dict = {}
    with server.gui.add_folder("Display", expand_by_default=False):
        controls["scale_circles"] = server.gui.add_checkbox(
            "Scale Circles",
            initial_value=False,
            hint="50 ft rings around each fixture",
        )

    @controls["scale_circles"].on_update
    def _(_) -> None:
        visible = controls["scale_circles"].value
        with lock:
            set_scale_circles_visible(fixtures, visible)
        event_bus.emit(EventType.SCALE_CIRCLES_TOGGLED, source="display", visible=visible)

    return controls


class StatusPanel:
    """Compact status display using markdown."""

    def __init__(self, server: viser.ViserServer):
        with server.gui.add_folder("Status"):
            self._markdown = server.gui.add_markdown("*Starting...*")
        self._last_content = ""

    def update(self, wave_status: dict, camera_status: dict) -> None:
        """Refresh the display (no message is sent if nothing changed)."""
        state = "On (all)" if wave_status["all_lights_on"] else (
            "Running" if wave_status["enabled"] else "Paused"
        )
        content = (
            f"**Pattern** {wave_status['animation_mode']} | **{state}**  \n"
            f"**Speed** {wave_status['speed_multiplier']:.1f}x | "
            f"**Cycle** {wave_status['cycle_duration']:.3f}s "
            f"({wave_status['cycle_progress'] * 100:.0f}%)  \n"
            f"**Light gap** {wave_status['time_between_lights'] * 1000:.1f} ms @ "
            f"{wave_status['earth_rotation_speed']:.0f} ft/s"
        )
        if wave_status.get("peak_intensity") is not None:
            content += (
                f"  \n**Burst** peak {wave_status['peak_intensity']:.0f} | "
                f"cycle {wave_status['burst_cycle']}"
            )
        preset = camera_status["preset"] or "free"
        content += f"  \n**Camera** {camera_status['mode']} ({preset})"
        if camera_status["transitioning"]:
            content += " moving"

        if content != self._last_content:
            self._markdown.content = content
            self._last_content = content


__all__ = [
    "WidgetSync",
    "create_animation_controls",
    "create_camera_controls",
    "create_lighting_controls",
    "create_display_controls",
    "StatusPanel",
]
