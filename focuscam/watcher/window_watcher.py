"""
Window watcher: forwards focused-window geometry from a blocking source to
the focus filter on a dedicated thread.
"""

import logging
from abc import ABC, abstractmethod
import queue
import threading
from typing import Optional

from focuscam.camera.focus_camera import WindowSnapshot
from .channel import EventChannel, Shutdown, Snapshot

logger = logging.getLogger(__name__)


class WatcherConnectionError(RuntimeError):
    """The focus source could not be reached when the watcher was created."""


class WindowSource(ABC):
    """
    Blocking source of focus/geometry events.

    next_event() may return None for a wake-up that carries no snapshot
    (interrupt, or an event that is not relevant to the focused window).
    """

    def connect(self):
        pass

    @abstractmethod
    def next_event(self) -> Optional[WindowSnapshot]:
        ...

    @abstractmethod
    def interrupt(self):
        """Wake a blocked next_event(). Must be safe to call from any thread."""
        ...

    def close(self):
        pass


class ScriptedWindowSource(WindowSource):
    """Source fed programmatically with push(); used for traces and tests."""

    def __init__(self):
        self._events = queue.Queue()
        self.connected = False
        self.closed = False

    def connect(self):
        self.connected = True

    def push(self, snapshot: WindowSnapshot):
        self._events.put(snapshot)

    def next_event(self) -> Optional[WindowSnapshot]:
        return self._events.get()

    def interrupt(self):
        self._events.put(None)

    def close(self):
        self.closed = True


class WindowWatcher:
    def __init__(self, source: WindowSource, snapshots: EventChannel, control: EventChannel):
        self.source = source
        self.snapshots = snapshots
        self.control = control
        self.thread = None
        self._shutdown_requested = False

    def start(self):
        try:
            self.source.connect()
        except WatcherConnectionError:
            raise
        except Exception as e:
            raise WatcherConnectionError(f"Could not connect to focus source: {e}") from e

        self.thread = threading.Thread(target=self._run, name='window-watcher', daemon=True)
        self.thread.start()
        logger.info(f"Window watcher started ({type(self.source).__name__})")

    def _run(self):
        try:
            while True:
                snapshot = self.source.next_event()
                if snapshot is not None:
                    self.snapshots.send(Snapshot(snapshot))

                message = self.control.try_recv()
                if isinstance(message, Shutdown):
                    logger.info("Window watcher received shutdown")
                    return
        except Exception as e:
            logger.exception(f"Window watcher stopped on error: {e}")
        finally:
            self.control.close()
            self.source.close()

    def request_shutdown(self):
        if self._shutdown_requested:
            return
        self._shutdown_requested = True
        self.control.send(Shutdown())
        self.source.interrupt()

    def join(self, timeout: Optional[float] = None) -> bool:
        if self.thread is None:
            return True
        self.thread.join(timeout)
        return not self.thread.is_alive()

    def is_alive(self) -> bool:
        return self.thread is not None and self.thread.is_alive()
