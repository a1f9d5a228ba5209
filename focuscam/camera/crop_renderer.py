import cv2
import numpy as np
import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


class CropRenderer:
    """
    Applies the crop/zoom transform to a frame on the CPU.

    An output pixel at normalized (u, v) samples the input at
    (u * zoom + pan_x, v * zoom + pan_y); the output keeps the input size.
    """

    def __init__(self, interpolation: int = cv2.INTER_LINEAR, draw_target: bool = False):
        self.interpolation = interpolation
        self.draw_target = draw_target

    @staticmethod
    def crop_rect(
        frame_shape: Tuple[int, ...],
        pan: np.ndarray,
        zoom: float
    ) -> Tuple[int, int, int, int]:
        h, w = frame_shape[:2]
        x1 = int(round(float(pan[0]) * w))
        y1 = int(round(float(pan[1]) * h))
        x2 = int(round((float(pan[0]) + zoom) * w))
        y2 = int(round((float(pan[1]) + zoom) * h))

        x1 = max(0, min(x1, w - 1))
        y1 = max(0, min(y1, h - 1))
        x2 = max(x1 + 1, min(x2, w))
        y2 = max(y1 + 1, min(y2, h))
        return (x1, y1, x2, y2)

    def render(
        self,
        frame: np.ndarray,
        pan: np.ndarray,
        zoom: float,
        target: Optional[Tuple[np.ndarray, float]] = None
    ) -> np.ndarray:
        if frame is None:
            return None

        h, w = frame.shape[:2]
        source = frame
        if self.draw_target and target is not None:
            source = frame.copy()
            x1, y1, x2, y2 = self.crop_rect(frame.shape, target[0], target[1])
            cv2.rectangle(source, (x1, y1), (x2 - 1, y2 - 1), (0, 255, 255), 2)

        if zoom >= 1.0 and not pan.any():
            return source

        # maps destination pixels to source pixels
        matrix = np.array([
            [zoom, 0.0, float(pan[0]) * w],
            [0.0, zoom, float(pan[1]) * h]
        ], dtype=np.float64)

        return cv2.warpAffine(
            source,
            matrix,
            (w, h),
            flags=self.interpolation | cv2.WARP_INVERSE_MAP,
            borderMode=cv2.BORDER_REPLICATE
        )
