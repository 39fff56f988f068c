"""
Main viewer application class.

``EarthSpeedApp`` owns the viser server and the simulation context, builds
the scene and GUI, and runs the frame loop. Camera ownership follows the
controller's mode: while the browser owns the camera its updates are synced
in; while the app owns it (transitions, walking, follow) every frame pushes
the pose out to all clients.
"""

from __future__ import annotations

import logging
import time

import viser

from earthspeed.config.settings import ViewerConfig
from earthspeed.core.container import SimulationContext, create_context
from earthspeed.domain.clock import Clock
from earthspeed.engine.lighting import LightingState
from earthspeed.interaction.events import Event, EventType
from earthspeed.interaction.playback import FrameSnapshot
from earthspeed.ui.panels import (
    StatusPanel,
    WidgetSync,
    create_animation_controls,
    create_camera_controls,
    create_display_controls,
    create_lighting_controls,
)
from earthspeed.ui.scene import InstallationScene, push_camera

logger = logging.getLogger(__name__)

STATUS_INTERVAL = 0.25  # seconds between status panel refreshes


class EarthSpeedApp:
    """
    Main viewer application.

    Orchestrates the viser scene, GUI panels and the frame loop around a
    ``SimulationContext``.
    """

    def __init__(self, config: ViewerConfig, clock: Clock | None = None):
        """
        Initialize the viewer.

        Parameters
        ----------
        config : ViewerConfig
            Viewer configuration
        clock : Clock | None
            Wall clock override (default: system clock)
        """
        self.config = config
        self.context: SimulationContext = create_context(config, clock=clock)

        self.server = viser.ViserServer(host=config.host, port=config.port)
        logger.debug(f"Viser server started on {config.host}:{config.port}")

        self.scene = InstallationScene(self.server, self.context.fixtures, self.context.geometry)
        self.sync = WidgetSync()
        self.status_panel: StatusPanel | None = None
        self.controls: dict[str, dict] = {}
        self._initialized_clients: set[int] = set()
        self._last_status = 0.0

    def setup_viewer(self) -> None:
        """Build GUI panels and hook lighting, display and client events."""
        ctx = self.context

        self.status_panel = StatusPanel(self.server)
        self.controls["animation"] = create_animation_controls(
            self.server, ctx.wave, ctx.lock, ctx.event_bus, self.sync
        )
        self.controls["camera"] = create_camera_controls(self.server, ctx.camera, ctx.lock)
        self.controls["lighting"] = create_lighting_controls(
            self.server, ctx.lighting, ctx.lock, ctx.event_bus, self.sync
        )
        self.controls["display"] = create_display_controls(
            self.server, ctx.fixtures, ctx.lock, ctx.event_bus
        )

        ctx.lighting.add_listener(self._on_lighting_changed)
        self.scene.apply_lighting(ctx.lighting.state)
        ctx.event_bus.subscribe(EventType.SCALE_CIRCLES_TOGGLED, self._on_scale_circles)

        self._setup_client_sync()
        logger.info("Viewer setup complete")

    def _setup_client_sync(self) -> None:
        camera = self.context.camera
        lock = self.context.lock

        @self.server.on_client_connect
        def _(client: viser.ClientHandle) -> None:
            with lock:
                params = camera.pose.to_viser_params()
            push_camera([client], params)
            self._initialized_clients.add(client.client_id)
            logger.debug(f"Client {client.client_id} initialized")

            @client.camera.on_update
            def _(_) -> None:
                # Skip uninitialized clients (prevents viser default from overwriting)
                if client.client_id not in self._initialized_clients:
                    return
                with lock:
                    camera.sync_from_client(
                        client.camera.position, client.camera.look_at, client.camera.fov
                    )

        @self.server.on_client_disconnect
        def _(client: viser.ClientHandle) -> None:
            self._initialized_clients.discard(client.client_id)
            logger.debug(f"Client {client.client_id} removed")

    def _on_lighting_changed(self, state: LightingState) -> None:
        self.scene.apply_lighting(state)

    def _on_scale_circles(self, event: Event) -> None:
        self.scene.update_scale_circles()

    def _on_frame(self, snapshot: FrameSnapshot) -> None:
        """Push one frame to the browser."""
        ctx = self.context
        self.scene.update_fixtures()

        with ctx.lock:
            app_owned = ctx.camera.is_app_controlled()
        if app_owned:
            push_camera(self.server.get_clients().values(), snapshot.camera.to_viser_params())

        now = time.perf_counter()
        if self.status_panel is not None and now - self._last_status >= STATUS_INTERVAL:
            with ctx.lock:
                wave_status = ctx.wave.get_status().to_dict()
                camera_status = ctx.camera.get_status()
            self.status_panel.update(wave_status, camera_status)
            self._last_status = now

    def run(self) -> None:
        """Run the main viewer loop."""
        logger.info(f"Earth-speed viewer running on http://{self.config.host}:{self.config.port}")

        try:
            self.context.frame_loop.run_loop(self.config.target_fps, on_frame=self._on_frame)
        except KeyboardInterrupt:
            logger.info("Viewer stopped by user")
        finally:
            self.context.frame_loop.stop()
            self.server.stop()
            logger.info("Viewer shutdown complete")


__all__ = ["EarthSpeedApp"]
