"""
Message channels between the window watcher thread and the focus filter.

Snapshots flow watcher -> filter, the shutdown request flows filter -> watcher.
Both directions are unbounded FIFOs: senders never block and receivers poll.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, Union

from focuscam.camera.focus_camera import WindowSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    snapshot: WindowSnapshot


@dataclass(frozen=True)
class Shutdown:
    pass


Message = Union[Snapshot, Shutdown]


class EventChannel:
    """
    Single-producer / single-consumer queue.

    Once the receiving side is closed, send() drops messages silently; that is
    the normal shutdown race, not an error.
    """

    def __init__(self, name: str = 'channel'):
        self.name = name
        self._queue = queue.Queue()
        self._closed = False
        self._sent = 0
        self._sent_cond = threading.Condition()

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, message: Message) -> bool:
        if self._closed:
            logger.debug(f"[{self.name}] receiver gone, dropping {type(message).__name__}")
            return False
        self._queue.put_nowait(message)
        with self._sent_cond:
            self._sent += 1
            self._sent_cond.notify_all()
        return True

    def try_recv(self) -> Optional[Message]:
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def try_iter(self) -> Iterator[Message]:
        """Yield every message available right now, never blocking."""
        while True:
            message = self.try_recv()
            if message is None:
                return
            yield message

    def pending(self) -> int:
        return self._queue.qsize()

    def sent_count(self) -> int:
        with self._sent_cond:
            return self._sent

    def wait_sent(self, count: int, timeout: float) -> bool:
        """Block until `count` messages have been sent in total. Not for the tick path."""
        with self._sent_cond:
            return self._sent_cond.wait_for(lambda: self._sent >= count, timeout=timeout)

    def close(self):
        self._closed = True
        while self.try_recv() is not None:
            pass


def create_channel_pair() -> Tuple[EventChannel, EventChannel]:
    """Return (snapshots, control): watcher->filter and filter->watcher channels."""
    return EventChannel('snapshots'), EventChannel('control')
