import cv2
import numpy as np
import time
import logging
import os
from typing import Optional, Dict, Any, Callable
from collections import deque

from focuscam.camera import CropRenderer
from focuscam.pipelines.focus_filter import FocusFilter
from focuscam.utils import VideoReader, VideoWriter, FilterSettings
from focuscam.watcher import ScriptedWindowSource, TraceFeeder, WindowSource, load_trace

logger = logging.getLogger(__name__)


def has_display() -> bool:
    """Check if display is available for cv2.imshow"""
    if os.environ.get('DISPLAY') is None and os.name != 'nt':
        return False
    try:
        cv2.namedWindow('test', cv2.WINDOW_NORMAL)
        cv2.destroyWindow('test')
        return True
    except cv2.error:
        return False


class StreamPipeline:
    """
    Live focus camera over a capture source (device index, file or URL).

    Ticks use a monotonic clock. Focus events come from `source` when given,
    otherwise from a trace replayed in wall-clock time.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self._setup_logging()
        self.display_available = has_display()

        logger.info("Initializing StreamPipeline")

        if not self.display_available:
            logger.info("No display detected - running in headless mode (cv2.imshow disabled)")

        self.settings = FilterSettings.from_config(config)
        stream_config = config.get('stream', {})
        self.show_stats = stream_config.get('show_stats', True)
        self.preview = stream_config.get('preview', True)
        self.draw_target = config.get('draw_target', False)

        self.fps_history = deque(maxlen=30)
        self._last_frame_time = None
        self.focus_filter = None

    def _setup_logging(self):
        log_level = logging.DEBUG if self.config.get('stream', {}).get('debug_mode', False) else logging.INFO
        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

    def run(
        self,
        input_source: str,
        output_destination: Optional[str] = None,
        trace_path: Optional[str] = None,
        source: Optional[WindowSource] = None,
        should_stop: Optional[Callable[[], bool]] = None
    ):
        feeder = None
        if source is None:
            source = ScriptedWindowSource()
            if trace_path:
                feeder = TraceFeeder(load_trace(trace_path), source)
            else:
                logger.warning("No focus source or trace given, camera will stay at full view")

        logger.info(f"Connecting to input: {input_source}")
        reader = VideoReader(input_source)
        logger.info(f"Connected! Resolution: {reader.width}x{reader.height} @ {reader.fps}fps")

        try:
            self.focus_filter = FocusFilter(
                source,
                settings=self.settings,
                renderer=CropRenderer(draw_target=self.draw_target)
            )
        except Exception:
            reader.release()
            raise

        show_preview = self.preview and self.display_available
        frame_count = 0
        start_time = time.monotonic()
        last_tick = start_time
        last_report = start_time

        logger.info("Starting main loop... (Press 'q' to quit)")

        writer = None
        try:
            if output_destination:
                logger.info(f"Writing output to: {output_destination}")
                writer = VideoWriter(output_destination, reader.width, reader.height, fps=reader.fps)

            while True:
                if should_stop is not None and should_stop():
                    logger.info("Stop requested")
                    break

                ret, frame = reader.read()
                if not ret:
                    logger.info("End of stream")
                    break

                now = time.monotonic()
                if feeder is not None:
                    feeder.advance(now - start_time)

                pan, zoom = self.focus_filter.video_tick(now - last_tick)
                last_tick = now

                output = self.focus_filter.video_render(frame)

                if self.show_stats:
                    output = self._draw_stats(output, zoom)

                if writer:
                    writer.write(output)

                if show_preview:
                    cv2.imshow('Focus Camera', output)
                    if cv2.waitKey(1) & 0xFF == ord('q'):
                        logger.info("Stopped by user")
                        break

                frame_count += 1
                if frame_count % 100 == 0:
                    elapsed = time.monotonic() - last_report
                    logger.info(f"Frames: {frame_count} | FPS: {100 / elapsed:.2f} | "
                                f"pan=({pan[0]:.3f}, {pan[1]:.3f}) zoom={zoom:.3f}")
                    last_report = time.monotonic()

        except KeyboardInterrupt:
            logger.info("Interrupted by user")

        finally:
            reader.release()
            if writer:
                writer.release()
            if show_preview:
                cv2.destroyAllWindows()
            self.focus_filter.destroy()
            self._log_final_stats(frame_count)

    def _draw_stats(self, frame: np.ndarray, zoom: float) -> np.ndarray:
        now = time.monotonic()
        if self._last_frame_time is not None:
            elapsed = now - self._last_frame_time
            if elapsed > 0:
                self.fps_history.append(1.0 / elapsed)
        self._last_frame_time = now

        avg_fps = sum(self.fps_history) / len(self.fps_history) if self.fps_history else 0.0
        status = "SETTLED" if self.focus_filter.camera.is_settled else "MOVING"

        frame = frame.copy()
        cv2.putText(frame, f"FPS: {avg_fps:.1f}", (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
        cv2.putText(frame, f"Camera: {status}", (10, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 255, 0), 2)
        cv2.putText(frame, f"Zoom: {1.0 / zoom:.2f}x", (10, 90), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (200, 200, 200), 1)
        return frame

    def _log_final_stats(self, total_frames: int):
        logger.info("=" * 50)
        logger.info("FINAL STATISTICS")
        logger.info("=" * 50)
        logger.info(f"Total frames processed: {total_frames}")
        logger.info(f"Camera stats: {self.focus_filter.camera.get_stats()}")
        logger.info("=" * 50)
