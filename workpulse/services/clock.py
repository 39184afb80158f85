import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

from workpulse.config import TICK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class Clock(ABC):
    """Periodic tick source the timer subscribes to while a session is active"""

    @abstractmethod
    def start(self, callback: TickCallback) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...

    @property
    @abstractmethod
    def is_running(self) -> bool: ...


class IntervalClock(Clock):
    """Fires the callback every `interval` seconds on a daemon thread.

    Each start() gets its own stop event, so a tick that is already in flight when
    stop() is called cannot leak into the next run.
    """

    def __init__(self, interval: float = TICK_INTERVAL_SECONDS):
        self.interval = interval
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None

    @property
    def is_running(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    def start(self, callback: TickCallback) -> None:
        if self.is_running:
            logger.warning("Clock already running, ignoring start")
            return

        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run, args=(callback, stop_event), name="workpulse-clock", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        self._stop_event = None
        self._thread = None

    def _run(self, callback: TickCallback, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                callback()
            except Exception:
                logger.exception("Clock tick failed")
