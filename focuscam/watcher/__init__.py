"""
Observación del foco de ventanas.
El hilo del observador envía instantáneas de geometría al filtro por un canal.
"""

from .channel import EventChannel, Shutdown, Snapshot, create_channel_pair
from .window_watcher import (
    ScriptedWindowSource,
    WatcherConnectionError,
    WindowSource,
    WindowWatcher,
)
from .trace import TraceFeeder, load_trace, parse_trace

__all__ = [
    'EventChannel', 'Shutdown', 'Snapshot', 'create_channel_pair',
    'ScriptedWindowSource', 'WatcherConnectionError', 'WindowSource', 'WindowWatcher',
    'TraceFeeder', 'load_trace', 'parse_trace'
]
