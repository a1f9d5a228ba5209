from .focus_filter import FocusFilter
from .batch_pipeline import BatchPipeline
from .stream_pipeline import StreamPipeline

__all__ = ['FocusFilter', 'BatchPipeline', 'StreamPipeline']
