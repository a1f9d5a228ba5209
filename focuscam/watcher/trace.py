import yaml
import logging
from pathlib import Path
from typing import List, Tuple, Union, Dict, Any

from focuscam.camera.focus_camera import WindowSnapshot
from .window_watcher import ScriptedWindowSource

logger = logging.getLogger(__name__)

TimedSnapshot = Tuple[float, WindowSnapshot]


def parse_trace(entries: List[Dict[str, Any]]) -> List[TimedSnapshot]:
    """
    Convert a list of {at, x, y, width, height} mappings into timed snapshots,
    sorted by time.
    """
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise ValueError(f"Focus trace must be a list, got {type(entries).__name__}")

    trace = []
    for i, entry in enumerate(entries):
        try:
            at = float(entry['at'])
            snapshot = WindowSnapshot(
                x=float(entry['x']),
                y=float(entry['y']),
                width=float(entry['width']),
                height=float(entry['height'])
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid trace entry #{i}: {entry!r} ({e})") from e
        if at < 0:
            raise ValueError(f"Invalid trace entry #{i}: negative time {at}")
        trace.append((at, snapshot))

    trace.sort(key=lambda item: item[0])
    return trace


def load_trace(trace_path: Union[str, Path]) -> List[TimedSnapshot]:
    trace_file = Path(trace_path)

    if not trace_file.exists():
        raise FileNotFoundError(f"Focus trace not found: {trace_path}")

    with open(trace_file, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if isinstance(data, dict):
        data = data.get('events', [])

    trace = parse_trace(data)
    logger.info(f"Loaded focus trace with {len(trace)} events from {trace_path}")
    return trace


class TraceFeeder:
    """Pushes trace snapshots into a scripted source as their time comes due."""

    def __init__(self, trace: List[TimedSnapshot], source: ScriptedWindowSource):
        self.trace = trace
        self.source = source
        self.position = 0

    @property
    def finished(self) -> bool:
        return self.position >= len(self.trace)

    def advance(self, t: float) -> int:
        pushed = 0
        while self.position < len(self.trace) and self.trace[self.position][0] <= t:
            self.source.push(self.trace[self.position][1])
            self.position += 1
            pushed += 1
        return pushed
