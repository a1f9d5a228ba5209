import argparse
import sys
import logging
import signal
from pathlib import Path
from typing import List, Optional

from focuscam import __version__
from focuscam.utils import load_config, merge_configs
from focuscam.pipelines import BatchPipeline, StreamPipeline

logger = logging.getLogger(__name__)


class GracefulKiller:
    kill_now = False

    def __init__(self):
        signal.signal(signal.SIGINT, self.exit_gracefully)
        signal.signal(signal.SIGTERM, self.exit_gracefully)

    def exit_gracefully(self, signum, frame):
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.kill_now = True


def setup_logging(debug: bool = False, log_file: Optional[str] = 'focus_camera.log'):
    log_level = logging.DEBUG if debug else logging.INFO
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='a'))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=handlers
    )
    logger.info("Logging initialized")


def print_system_info():
    import cv2
    import numpy as np

    logger.info("=" * 60)
    logger.info(f"FOCUS CAMERA v{__version__}")
    logger.info("=" * 60)
    logger.info(f"Python version: {sys.version.split()[0]}")
    logger.info(f"OpenCV version: {cv2.__version__}")
    logger.info(f"NumPy version: {np.__version__}")
    logger.info("=" * 60)


def validate_config_files(*config_paths: str) -> bool:
    for config_path in config_paths:
        if not Path(config_path).exists():
            logger.error(f"Config not found: {config_path}")
            return False
    return True


def apply_overrides(config: dict, args: argparse.Namespace) -> dict:
    filter_config = dict(config.get('filter', {}))

    if args.zoom is not None:
        filter_config['zoom'] = args.zoom
        logger.info(f"Zoom override: {args.zoom}")

    if args.animation_time is not None:
        filter_config['animation_time'] = args.animation_time
        logger.info(f"Animation time override: {args.animation_time}s")

    if args.region is not None:
        x, y, w, h = args.region
        filter_config.update({'screen_x': x, 'screen_y': y, 'screen_width': w, 'screen_height': h})
        logger.info(f"Screen region override: {w}x{h}+{x}+{y}")

    config['filter'] = filter_config

    if args.draw_target:
        config['draw_target'] = True

    if args.debug:
        config['debug'] = True
        config.setdefault('stream', {})
        config['stream']['debug_mode'] = True

    return config


def run_batch_mode(config: dict, input_path: str, trace_path: str, output_path: str):
    camera_path = config.get('output', {}).get('camera_path')

    if not Path(input_path).exists():
        logger.error(f"Input file not found: {input_path}")
        sys.exit(1)

    logger.info("Starting BATCH mode")
    logger.info(f"Input: {input_path}")
    logger.info(f"Trace: {trace_path}")
    logger.info(f"Output: {output_path}")

    if camera_path:
        logger.info(f"Camera data: {camera_path}")

    try:
        pipeline = BatchPipeline(config)
        pipeline.process_video(input_path, trace_path, output_path, camera_path)
        logger.info("Batch processing completed successfully")
    except Exception as e:
        logger.exception(f"Batch processing failed: {e}")
        sys.exit(1)


def run_stream_mode(config: dict, input_source: str, output_path: Optional[str], trace_path: Optional[str]):
    logger.info("Starting STREAM mode")
    logger.info(f"Input: {input_source}")
    logger.info(f"Output: {output_path if output_path else 'PREVIEW ONLY'}")
    logger.info(f"Trace: {trace_path if trace_path else 'none'}")

    killer = GracefulKiller()

    try:
        pipeline = StreamPipeline(config)
        pipeline.run(input_source, output_path, trace_path=trace_path, should_stop=lambda: killer.kill_now)

        if killer.kill_now:
            logger.info("Stream stopped by user")
        else:
            logger.info("Stream completed")
    except KeyboardInterrupt:
        logger.info("Stream interrupted by user")
    except Exception as e:
        logger.exception(f"Stream processing failed: {e}")
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Focus Camera - pans and zooms onto the focused window',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Batch mode:
    python main.py batch --input screen.mp4 --trace focus_trace.yml --output focused.mp4

  Stream mode:
    python main.py stream --input 0 --trace configs/example_trace.yml
    python main.py stream --input screen.mp4 --zoom 2.5 --region 0 0 2560 1440 --debug
        """
    )

    parser.add_argument(
        'mode',
        choices=['batch', 'stream'],
        help='Operation mode: batch (file processing) or stream (real-time)'
    )

    parser.add_argument(
        '--filter-config',
        default='configs/filter_config.yml',
        help='Path to filter config file (default: configs/filter_config.yml)'
    )

    parser.add_argument('--input', help='Input path/URL/device (overrides config file)')
    parser.add_argument('--output', help='Output path (overrides config file)')
    parser.add_argument('--trace', help='Focus trace YAML (overrides config file)')

    parser.add_argument('--zoom', type=float, help='Maximum magnification (1.0-5.0)')
    parser.add_argument('--animation-time', type=float, help='Camera move duration in seconds (0.3-10.0)')
    parser.add_argument(
        '--region',
        type=int,
        nargs=4,
        metavar=('X', 'Y', 'W', 'H'),
        help='Screen region the camera may frame'
    )

    parser.add_argument(
        '--draw-target',
        action='store_true',
        help='Draw the camera target rectangle on the output'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--no-logging-file',
        action='store_true',
        help='Disable logging to file'
    )

    return parser


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    setup_logging(args.debug, None if args.no_logging_file else 'focus_camera.log')
    print_system_info()

    try:
        mode_config_path = 'configs/batch_config.yml' if args.mode == 'batch' else 'configs/stream_config.yml'

        if not validate_config_files(args.filter_config, mode_config_path):
            sys.exit(1)

        logger.info("Loading configuration files...")
        filter_config = load_config(args.filter_config)
        mode_config = load_config(mode_config_path)
        config = apply_overrides(merge_configs(filter_config, mode_config), args)

        if args.mode == 'batch':
            input_path = args.input or config['input']['video_path']
            trace_path = args.trace or config['input']['trace_path']
            output_path = args.output or config['output']['video_path']
            run_batch_mode(config, input_path, trace_path, output_path)

        elif args.mode == 'stream':
            input_source = args.input or config['stream']['input_url']
            output_path = args.output or config['stream'].get('output_path')
            trace_path = args.trace or config['stream'].get('trace_path')
            run_stream_mode(config, input_source, output_path, trace_path)

        logger.info("Application finished successfully")

    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    try:
        main()
    except KeyboardInterrupt:
        print("\nShutdown requested... exiting")
        sys.exit(0)
