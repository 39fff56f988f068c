"""
Viser scene for the installation.

Builds the static geometry once (ground grid, poles, bulbs, glow spheres,
scale rings, lights) and afterwards only pushes what changes: per-fixture
opacities every frame and lighting when a preset or the sun moves. Updates
below ``OPACITY_EPSILON`` are skipped so an idle row sends no messages.
"""

from __future__ import annotations

import logging

import numpy as np
import viser

from earthspeed.domain.installation import SCALE_CIRCLE_RADIUS, Fixture, InstallationGeometry
from earthspeed.engine.lighting import LightingState, hex_to_rgb
from earthspeed.rendering.quaternion_utils import quat_from_yaw_pitch, yaw_pitch_from_direction

logger = logging.getLogger(__name__)

OPACITY_EPSILON = 0.01
GROUND_SIZE = 6000.0  # feet
POLE_COLOR = (60, 60, 60)
BULB_COLOR = (255, 244, 214)
GLOW_COLOR = (255, 220, 150)
RING_COLOR = (255, 80, 80)
BULB_RADIUS = 1.5
GLOW_RADIUS = 8.0
RING_SEGMENTS = 48
SKY_TEXTURE_HEIGHT = 64


def ring_segments(center: np.ndarray, radius: float, segments: int = RING_SEGMENTS) -> np.ndarray:
    """(segments, 2, 3) line segments of a horizontal circle around ``center``."""
    angles = np.linspace(0.0, 2.0 * np.pi, segments + 1)
    points = np.stack(
        [
            center[0] + radius * np.cos(angles),
            np.full_like(angles, 0.2),
            center[2] + radius * np.sin(angles),
        ],
        axis=1,
    )
    return np.stack([points[:-1], points[1:]], axis=1)


def sky_gradient(sky_color: int, horizon_color: int, height: int = SKY_TEXTURE_HEIGHT) -> np.ndarray:
    """Vertical gradient image (height, 1, 3) from sky at the top to horizon at the bottom."""
    top = np.array(hex_to_rgb(sky_color), dtype=np.float32)
    bottom = np.array(hex_to_rgb(horizon_color), dtype=np.float32)
    t = np.linspace(0.0, 1.0, height, dtype=np.float32)[:, None]
    rows = top * (1.0 - t) + bottom * t
    return rows[:, None, :].astype(np.uint8)


class InstallationScene:
    """Scene-graph handles for the row and the sky."""

    def __init__(
        self,
        server: viser.ViserServer,
        fixtures: list[Fixture],
        geometry: InstallationGeometry,
    ):
        self.server = server
        self.fixtures = fixtures
        self.geometry = geometry

        self._bulbs: list = []
        self._glows: list = []
        self._rings: list = []
        self._last_glow = np.full(len(fixtures), -1.0)
        self._last_bulb = np.full(len(fixtures), -1.0)
        self._ambient = None
        self._sun = None

        self._build()
        logger.info(f"Scene built with {len(fixtures)} fixtures")

    def _build(self) -> None:
        scene = self.server.scene
        scene.set_up_direction("+y")
        scene.enable_default_lights(False)

        scene.add_grid(
            name="/ground",
            width=GROUND_SIZE,
            height=GROUND_SIZE,
            plane="xz",
            cell_size=176.0,
            cell_color=(90, 80, 70),
            section_size=880.0,
            section_color=(130, 115, 95),
        )

        height = self.geometry.light_height
        for fixture in self.fixtures:
            x, _, z = fixture.position
            prefix = f"/fixtures/{fixture.index:02d}"
            scene.add_box(
                name=f"{prefix}/pole",
                color=POLE_COLOR,
                dimensions=(0.5, height, 0.5),
                position=(x, height / 2.0, z),
            )
            self._bulbs.append(
                scene.add_icosphere(
                    name=f"{prefix}/bulb",
                    radius=BULB_RADIUS,
                    color=BULB_COLOR,
                    opacity=0.0,
                    position=tuple(fixture.position),
                )
            )
            self._glows.append(
                scene.add_icosphere(
                    name=f"{prefix}/glow",
                    radius=GLOW_RADIUS,
                    color=GLOW_COLOR,
                    opacity=0.0,
                    position=tuple(fixture.position),
                )
            )
            self._rings.append(
                scene.add_line_segments(
                    name=f"{prefix}/scale_ring",
                    points=ring_segments(fixture.position, SCALE_CIRCLE_RADIUS),
                    colors=RING_COLOR,
                    line_width=2.0,
                    visible=fixture.scale_circle_visible,
                )
            )

        self._ambient = scene.add_light_ambient(name="/lights/ambient", color=(255, 255, 255), intensity=0.3)
        self._sun = scene.add_light_directional(
            name="/lights/sun", color=(255, 255, 255), intensity=2.5, cast_shadow=False
        )

    def update_fixtures(self) -> None:
        """Push changed glow/bulb opacities."""
        glow = np.array([f.glow_opacity for f in self.fixtures])
        bulb = np.array([f.bulb_opacity for f in self.fixtures])

        changed = np.nonzero(
            (np.abs(glow - self._last_glow) > OPACITY_EPSILON)
            | (np.abs(bulb - self._last_bulb) > OPACITY_EPSILON)
        )[0]
        if changed.size == 0:
            return

        with self.server.atomic():
            for i in changed:
                self._glows[i].opacity = float(glow[i])
                self._bulbs[i].opacity = float(bulb[i])
        self._last_glow[changed] = glow[changed]
        self._last_bulb[changed] = bulb[changed]

    def update_scale_circles(self) -> None:
        for fixture, ring in zip(self.fixtures, self._rings):
            ring.visible = fixture.scale_circle_visible

    def apply_lighting(self, state: LightingState) -> None:
        """Sky gradient, ambient light and sun from a lighting snapshot."""
        self.server.scene.set_background_image(sky_gradient(state.sky_color, state.horizon_color))

        self._ambient.color = hex_to_rgb(state.ambient_color)
        self._ambient.intensity = state.ambient_intensity

        position = state.sun.to_cartesian()
        yaw, pitch = yaw_pitch_from_direction(-position)
        self._sun.position = tuple(float(x) for x in position)
        self._sun.wxyz = tuple(float(x) for x in quat_from_yaw_pitch(yaw, pitch))
        self._sun.color = hex_to_rgb(state.sun_color)
        self._sun.intensity = state.sun.intensity

        logger.debug(
            f"Lighting applied: {state.preset_key} "
            f"(sun az={state.sun.azimuth:.0f} el={state.sun.elevation:.0f})"
        )


def push_camera(clients, params: dict) -> None:
    """Push a pose (from ``CameraPose.to_viser_params``) to viser clients."""
    for client in clients:
        try:
            with client.atomic():
                client.camera.fov = params["fov"]
                client.camera.position = params["position"]
                client.camera.look_at = params["look_at"]
                client.camera.up_direction = params["up_direction"]
        except Exception as e:
            logger.debug(f"Error applying to viser client: {e}")


__all__ = [
    "InstallationScene",
    "ring_segments",
    "sky_gradient",
    "push_camera",
]
