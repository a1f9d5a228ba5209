import numpy as np
import json
import logging
import time
from pathlib import Path
from typing import Optional, Dict, Any, List
from tqdm import tqdm
from collections import deque

from focuscam.camera import CropRenderer
from focuscam.pipelines.focus_filter import FocusFilter
from focuscam.utils import VideoReader, VideoWriter, FilterSettings
from focuscam.watcher import ScriptedWindowSource, TraceFeeder, load_trace

logger = logging.getLogger(__name__)


class BatchPipeline:
    """Applies the focus camera to a recorded screen video driven by a focus trace."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self._setup_logging()

        logger.info("Initializing BatchPipeline")

        self.settings = FilterSettings.from_config(config)
        logger.info(f"Filter settings: {self.settings.to_dict()}")

        output_config = config.get('output', {})
        self.codec = output_config.get('codec', 'mp4v')
        self.save_camera_data = config.get('save_camera_data', True)
        self.draw_target = config.get('draw_target', False)
        self.snapshot_wait = float(config.get('snapshot_wait', 1.0))

        self.stats = {
            'total_frames': 0,
            'moving_frames': 0,
            'processing_times': deque(maxlen=1000),
            'start_time': None,
            'end_time': None
        }

    def _setup_logging(self):
        log_level = logging.DEBUG if self.config.get('debug', False) else logging.INFO
        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

    def process_video(
        self,
        input_path: str,
        trace_path: str,
        output_path: str,
        camera_output_path: Optional[str] = None
    ) -> Dict[str, Any]:
        self._validate_input(input_path)
        trace = load_trace(trace_path)

        logger.info(f"Processing video: {input_path}")
        logger.info(f"Output will be saved to: {output_path}")

        reader = VideoReader(input_path)
        logger.info(f"Video loaded: {reader.width}x{reader.height} @ {reader.fps}fps, {reader.total_frames} frames")

        source = ScriptedWindowSource()
        feeder = TraceFeeder(trace, source)
        try:
            focus_filter = FocusFilter(
                source,
                settings=self.settings,
                renderer=CropRenderer(draw_target=self.draw_target)
            )
        except Exception:
            reader.release()
            raise

        writer = None
        camera_data = []
        frame_idx = 0
        dt = 1.0 / reader.fps
        self.stats['start_time'] = time.time()

        pbar = tqdm(
            total=reader.total_frames if reader.total_frames > 0 else None,
            desc="Focusing",
            unit="frame",
            ncols=100
        )

        try:
            writer = VideoWriter(
                output_path,
                width=reader.width,
                height=reader.height,
                fps=reader.fps,
                codec=self.codec
            )

            while True:
                frame_start = time.time()

                ret, frame = reader.read()
                if not ret:
                    break

                # let the watcher forward this frame's snapshots before ticking
                if feeder.advance(frame_idx * dt):
                    if not focus_filter.wait_for_snapshots(feeder.position, self.snapshot_wait):
                        logger.warning(f"Frame {frame_idx}: watcher did not forward all snapshots in time")

                pan, zoom = focus_filter.video_tick(dt)
                writer.write(focus_filter.video_render(frame))

                self.stats['total_frames'] += 1
                if not focus_filter.camera.is_settled:
                    self.stats['moving_frames'] += 1

                if self.save_camera_data:
                    camera_data.append({
                        'frame': frame_idx,
                        'pan': [float(pan[0]), float(pan[1])],
                        'zoom': float(zoom),
                        'progress': float(focus_filter.camera.progress)
                    })

                self.stats['processing_times'].append((time.time() - frame_start) * 1000)
                frame_idx += 1

                if frame_idx % 100 == 0:
                    pbar.set_postfix({
                        'ms/frame': f"{np.mean(self.stats['processing_times']):.1f}",
                        'zoom': f'{zoom:.2f}'
                    })

                pbar.update(1)

        finally:
            pbar.close()
            reader.release()
            if writer is not None:
                writer.release()
            focus_filter.destroy()
            self.stats['end_time'] = time.time()

        camera_stats = focus_filter.camera.get_stats()
        self._save_outputs(camera_data, camera_stats, output_path, camera_output_path)
        self._log_final_statistics(camera_stats)
        return camera_stats

    def _validate_input(self, input_path: str):
        path = Path(input_path)
        if not path.exists():
            raise FileNotFoundError(f"Input video not found: {input_path}")
        if not path.is_file():
            raise ValueError(f"Input path is not a file: {input_path}")
        logger.info(f"Input validation passed: {input_path}")

    def _save_outputs(
        self,
        camera_data: List[Dict],
        camera_stats: Dict[str, int],
        output_path: str,
        camera_output_path: Optional[str]
    ):
        if self.save_camera_data and camera_output_path:
            Path(camera_output_path).parent.mkdir(parents=True, exist_ok=True)

            output_data = {
                'metadata': {
                    'video_output': str(output_path),
                    'total_frames': self.stats['total_frames'],
                    'moving_frames': self.stats['moving_frames'],
                    'settings': self.settings.to_dict(),
                    'camera_stats': camera_stats
                },
                'camera_data': camera_data
            }

            with open(camera_output_path, 'w') as f:
                json.dump(output_data, f, indent=2)
            logger.info(f"Camera data saved to: {camera_output_path}")

        logger.info(f"Video saved to: {output_path}")

    def _log_final_statistics(self, camera_stats: Dict[str, int]):
        logger.info("=" * 60)
        logger.info("BATCH PROCESSING COMPLETE")
        logger.info("=" * 60)

        total_time = self.stats['end_time'] - self.stats['start_time']
        fps = self.stats['total_frames'] / total_time if total_time > 0 else 0

        logger.info(f"Total frames: {self.stats['total_frames']}")
        logger.info(f"Frames with camera in motion: {self.stats['moving_frames']}")
        logger.info(f"Total time: {total_time:.2f}s")
        logger.info(f"Average FPS: {fps:.2f}")

        if self.stats['processing_times']:
            logger.info(f"Avg processing time: {np.mean(self.stats['processing_times']):.2f}ms/frame")

        logger.info(f"Camera stats: {camera_stats}")
        logger.info("=" * 60)
