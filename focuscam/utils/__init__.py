from .video_io import VideoReader, VideoWriter
from .config_loader import load_config, merge_configs, FilterSettings, FILTER_PROPERTIES

__all__ = ['VideoReader', 'VideoWriter', 'load_config', 'merge_configs', 'FilterSettings', 'FILTER_PROPERTIES']
