"""
Cámara de foco: sigue la ventana con foco de entrada.

Simula un camarógrafo que encuadra la ventana activa:
- Centrado: la ventana queda en el centro del recorte
- Zoom acotado: nunca más cerca que el límite configurado ni más lejos que la pantalla
- Histéresis: ignora variaciones sub-píxel de la geometría reportada
- Reposo: si el foco sale de la región vuelve a la vista completa
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .easing import lerp, smooth_step

logger = logging.getLogger(__name__)

# extra fraction of the screen kept around the focused window
WINDOW_MARGIN = 0.1
RETARGET_THRESHOLD = 0.001


@dataclass(frozen=True)
class WindowSnapshot:
    """Geometry of the focused window, top-left corner in virtual-screen pixels."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class ScreenRegion:
    """Rectangle of the virtual screen the camera is allowed to frame."""

    x: int = 0
    y: int = 0
    width: int = 1920
    height: int = 1080

    def contains_origin(self, snapshot: WindowSnapshot) -> bool:
        # Only the top-left corner is tested. A window whose body overlaps the
        # region while its corner lies outside counts as off-region.
        x = np.float32(snapshot.x)
        y = np.float32(snapshot.y)
        return not (
            x > np.float32(self.width + self.x)
            or x < np.float32(self.x)
            or y < np.float32(self.y)
            or y > np.float32(self.height + self.y)
        )


class FocusCamera:
    """
    Tween (from, target, progress) over a normalized pan and a zoom scalar.

    Pan is the top-left of the visible crop in screen fractions and is kept in
    single precision; zoom is the shown fraction of the screen edge (1.0 is the
    full screen) and is kept in double precision. The instance is owned by the
    render/tick thread and is never shared.
    """

    def __init__(
        self,
        region: ScreenRegion = None,
        zoom_setting: float = 1.0,
        animation_time: float = 0.3
    ):
        self.region = region if region is not None else ScreenRegion()
        self.zoom_setting = float(zoom_setting)
        self.internal_zoom = 1.0 / self.zoom_setting
        self.animation_time = float(animation_time)

        self.current = np.zeros(2, dtype=np.float32)
        self.start = np.zeros(2, dtype=np.float32)
        self.target = np.zeros(2, dtype=np.float32)

        self.current_zoom = 1.0
        self.from_zoom = 1.0
        self.target_zoom = 1.0

        self.progress = 1.0

        self.stats = self._empty_stats()

        logger.info(
            f"FocusCamera initialized: region={self.region}, "
            f"zoom_setting={self.zoom_setting}, animation_time={self.animation_time}s"
        )

    @staticmethod
    def _empty_stats() -> dict:
        return {
            'snapshots': 0,
            'retargets': 0,
            'suppressed': 0,
            'off_region': 0,
            'ticks': 0
        }

    @property
    def is_settled(self) -> bool:
        return self.progress >= 1.0

    @property
    def is_resting(self) -> bool:
        """True when the current target is not a focus move (see handle_snapshot)."""
        return not (
            self.target_zoom != 1.0
            and self.target[0] != 0.0
            and self.target[1] != 0.0
        )

    def window_zoom(self, snapshot: WindowSnapshot) -> float:
        ratio = max(
            np.float32(snapshot.width) / np.float32(self.region.width),
            np.float32(snapshot.height) / np.float32(self.region.height)
        )
        return min(max(float(ratio) + WINDOW_MARGIN, self.internal_zoom), 1.0)

    def handle_snapshot(self, snapshot: WindowSnapshot) -> bool:
        """
        Decide whether a focus snapshot starts a new camera move.

        Returns True when the tween was retargeted.
        """
        self.stats['snapshots'] += 1
        window_zoom = self.window_zoom(snapshot)

        if not self.region.contains_origin(snapshot):
            self.stats['off_region'] += 1
            if self.is_resting:
                return False
            logger.debug(f"Focus left region at ({snapshot.x}, {snapshot.y}), returning to full view")
            self._retarget(np.zeros(2, dtype=np.float32), 1.0)
            return True

        zoom32 = np.float32(window_zoom)
        center_x = (
            np.float32(snapshot.x) + np.float32(snapshot.width) / np.float32(2.0)
            - np.float32(self.region.x)
        ) / np.float32(self.region.width)
        center_y = (
            np.float32(snapshot.y) + np.float32(snapshot.height) / np.float32(2.0)
            - np.float32(self.region.y)
        ) / np.float32(self.region.height)

        limit = np.float32(1.0) - zoom32
        target_x = max(min(center_x - np.float32(0.5) * zoom32, limit), np.float32(0.0))
        target_y = max(min(center_y - np.float32(0.5) * zoom32, limit), np.float32(0.0))

        if (
            abs(target_y - self.target[1]) > RETARGET_THRESHOLD
            or abs(target_x - self.target[0]) > RETARGET_THRESHOLD
            or abs(window_zoom - self.target_zoom) > RETARGET_THRESHOLD
        ):
            logger.debug(
                f"Retarget: pan=({float(target_x):.4f}, {float(target_y):.4f}) zoom={window_zoom:.4f}"
            )
            self._retarget(np.array([target_x, target_y], dtype=np.float32), window_zoom)
            return True

        self.stats['suppressed'] += 1
        return False

    def _retarget(self, pan: np.ndarray, zoom: float):
        self.progress = 0.0
        self.from_zoom = self.current_zoom
        self.target_zoom = zoom
        self.start = self.current.copy()
        self.target = pan
        self.stats['retargets'] += 1

    def advance(self, seconds: float) -> Tuple[np.ndarray, float]:
        """Advance the tween by `seconds` and return (pan, zoom) for this frame."""
        self.stats['ticks'] += 1
        self.progress = min(self.progress + float(seconds) / self.animation_time, 1.0)

        eased = smooth_step(self.progress)

        self.current = lerp(self.start, self.target, eased).astype(np.float32)
        self.current_zoom = lerp(self.from_zoom, self.target_zoom, float(eased))

        if self.stats['ticks'] % 100 == 0:
            logger.debug(f"Camera stats: {self.stats}, progress={self.progress:.3f}")

        return self.current.copy(), self.current_zoom

    def set_zoom_setting(self, zoom_setting: float):
        """
        Change the maximum magnification.

        The zoom target jumps to the new limit while progress is left alone, so
        a settled camera shows the new zoom on the next frame without easing.
        """
        zoom_setting = float(zoom_setting)
        if zoom_setting == self.zoom_setting:
            return
        self.zoom_setting = zoom_setting
        self.internal_zoom = 1.0 / zoom_setting
        self.from_zoom = self.current_zoom
        self.target_zoom = self.internal_zoom
        logger.debug(f"Zoom limit set to {zoom_setting:.3f} (internal {self.internal_zoom:.3f})")

    def set_region(self, region: ScreenRegion):
        self.region = region

    def set_animation_time(self, animation_time: float):
        self.animation_time = float(animation_time)

    def get_current(self) -> Tuple[np.ndarray, float]:
        """Retorna paneo y zoom actuales sin avanzar la animación."""
        return self.current.copy(), self.current_zoom

    def get_target(self) -> Tuple[np.ndarray, float]:
        return self.target.copy(), self.target_zoom

    def get_stats(self) -> dict:
        return self.stats.copy()

    def reset(self):
        logger.info("Resetting Focus Camera")
        self.current = np.zeros(2, dtype=np.float32)
        self.start = np.zeros(2, dtype=np.float32)
        self.target = np.zeros(2, dtype=np.float32)
        self.current_zoom = 1.0
        self.from_zoom = 1.0
        self.target_zoom = 1.0
        self.progress = 1.0
        self.stats = self._empty_stats()
