import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

ResetCallback = Callable[[], None]


class DataResetNotifier:
    """In-process "data was reset" broadcast.

    Every component that caches records (the timer, the history list) registers a
    callback here and refreshes its own state when the record store has been wiped.
    """

    def __init__(self):
        self._subscribers: list[ResetCallback] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: ResetCallback) -> None:
        with self._lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def unsubscribe(self, callback: ResetCallback) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def notify(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback()
            except Exception:
                logger.exception("Data reset subscriber %r failed", callback)
