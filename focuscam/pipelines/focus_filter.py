"""
Focus filter instance: owns the focus camera, the watcher thread and the
channels between them.

The host calls update() when settings change, video_tick() once per frame
with the elapsed time and video_render() to apply the crop. All of these run
on the tick thread; only the watcher runs elsewhere.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from focuscam.camera import CropRenderer, FocusCamera, ScreenRegion
from focuscam.utils.config_loader import FilterSettings
from focuscam.watcher import Snapshot, WindowSource, WindowWatcher, create_channel_pair

logger = logging.getLogger(__name__)


class FocusFilter:
    def __init__(
        self,
        source: WindowSource,
        settings: Optional[FilterSettings] = None,
        renderer: Optional[CropRenderer] = None
    ):
        self.camera = FocusCamera()
        self.renderer = renderer if renderer is not None else CropRenderer()
        self.settings = None
        self.update(settings if settings is not None else FilterSettings())

        self.receive, self.send = create_channel_pair()
        self.watcher = WindowWatcher(source, self.receive, self.send)
        # raises WatcherConnectionError when the focus source is unreachable
        self.watcher.start()
        self._destroyed = False
        logger.info("Focus filter created")

    def update(self, settings: FilterSettings):
        self.settings = settings
        self.camera.set_zoom_setting(settings.zoom)
        self.camera.set_region(ScreenRegion(
            x=settings.screen_x,
            y=settings.screen_y,
            width=settings.screen_width,
            height=settings.screen_height
        ))
        self.camera.set_animation_time(settings.animation_time)
        logger.debug(f"Filter settings updated: {settings}")

    def drain(self) -> int:
        handled = 0
        for message in self.receive.try_iter():
            if isinstance(message, Snapshot):
                self.camera.handle_snapshot(message.snapshot)
                handled += 1
        return handled

    def video_tick(self, seconds: float) -> Tuple[np.ndarray, float]:
        """Drain pending snapshots, then advance the camera by `seconds`."""
        self.drain()
        return self.camera.advance(seconds)

    def video_render(self, frame: np.ndarray) -> np.ndarray:
        pan, zoom = self.camera.get_current()
        return self.renderer.render(frame, pan, zoom, target=self.camera.get_target())

    def wait_for_snapshots(self, count: int, timeout: float = 1.0) -> bool:
        """Wait until the watcher has forwarded `count` snapshots in total."""
        return self.receive.wait_sent(count, timeout)

    def destroy(self, timeout: Optional[float] = 2.0):
        if self._destroyed:
            return
        self._destroyed = True
        self.watcher.request_shutdown()
        if not self.watcher.join(timeout):
            logger.warning("Window watcher did not stop in time")
        self.receive.close()
        logger.info(f"Focus filter destroyed, camera stats: {self.camera.get_stats()}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.destroy()
