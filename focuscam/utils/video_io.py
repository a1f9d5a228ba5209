"""
OpenCV capture and output for screen recordings.

A numeric input such as "0" selects a local capture device, anything else is
handed to OpenCV as a file path or URL.
"""

import cv2
import numpy as np
import logging
from typing import Optional, Tuple, Union
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_FPS = 30.0


class VideoReader:
    def __init__(self, source: Union[str, int]):
        self.source = source
        if isinstance(source, str) and source.isdigit():
            source = int(source)
        self.cap = cv2.VideoCapture(source)

        if not self.cap.isOpened():
            raise ValueError(f"Could not open video source: {self.source}")

        fps = self.cap.get(cv2.CAP_PROP_FPS)
        if not fps or fps <= 0:
            logger.warning(f"{self.source} reports no frame rate, assuming {DEFAULT_FPS}")
            fps = DEFAULT_FPS
        self.fps = fps
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.total_frames = int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT))

    def read(self) -> Tuple[bool, Optional[np.ndarray]]:
        return self.cap.read()

    def release(self):
        self.cap.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()


class VideoWriter:
    """Writes frames at a fixed size, scaling any frame that does not match it."""

    def __init__(self, output_path: str, width: int, height: int, fps: float = DEFAULT_FPS, codec: str = 'mp4v'):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.size = (width, height)

        self.writer = cv2.VideoWriter(str(self.output_path), cv2.VideoWriter_fourcc(*codec), fps, self.size)
        if not self.writer.isOpened():
            raise ValueError(f"Could not create video output: {output_path}")

    def write(self, frame: np.ndarray):
        if (frame.shape[1], frame.shape[0]) != self.size:
            frame = cv2.resize(frame, self.size)
        self.writer.write(frame)

    def release(self):
        self.writer.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
