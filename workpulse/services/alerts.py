import logging
import sys
import threading
from abc import ABC, abstractmethod

import pyttsx3

logger = logging.getLogger(__name__)


class AlertingPort(ABC):
    """Timed alerts plus audible/spoken feedback.

    Scheduling is fire-and-forget: callers get no delivery confirmation. There is no
    per-alert cancellation, only cancel_all_pending().
    """

    @abstractmethod
    def schedule_alert(self, after_seconds: float, title: str, body: str) -> None: ...

    @abstractmethod
    def cancel_all_pending(self) -> None: ...

    @abstractmethod
    def speak(self, text: str) -> None: ...

    @abstractmethod
    def play_tone(self) -> None: ...


class DesktopAlerter(AlertingPort):
    """Local alerts: one threading.Timer per scheduled alert, pyttsx3 for speech"""

    def __init__(self):
        self._pending: list[threading.Timer] = []
        self._lock = threading.Lock()
        self._speech_lock = threading.Lock()
        self._engine = None
        self._speech_available = True

    @property
    def pending_count(self) -> int:
        with self._lock:
            return sum(1 for t in self._pending if t.is_alive())

    def schedule_alert(self, after_seconds: float, title: str, body: str) -> None:
        if after_seconds <= 0:
            return

        try:
            alert = threading.Timer(after_seconds, self._deliver, args=(title, body))
            alert.daemon = True
            with self._lock:
                self._pending.append(alert)
            alert.start()
            logger.info("Alert scheduled in %.0fs: %s", after_seconds, title)
        except RuntimeError:
            logger.exception("Could not schedule alert %r", title)

    def cancel_all_pending(self) -> None:
        with self._lock:
            pending, self._pending = self._pending, []
        for alert in pending:
            alert.cancel()
        if pending:
            logger.debug("Cancelled %d pending alert(s)", len(pending))
        self._stop_speaking()

    def speak(self, text: str) -> None:
        # runAndWait() blocks until the utterance ends, keep it off the caller's thread
        threading.Thread(target=self._say, args=(text,), name="workpulse-speech", daemon=True).start()

    def play_tone(self) -> None:
        # Terminal bell, the closest thing to a system beep without a GUI toolkit
        sys.stdout.write("\a")
        sys.stdout.flush()

    def _deliver(self, title: str, body: str) -> None:
        with self._lock:
            self._pending = [t for t in self._pending if t is not threading.current_thread()]
        logger.warning("🔔 %s: %s", title, body)
        self.play_tone()
        self.speak(body)

    def _say(self, text: str) -> None:
        with self._speech_lock:
            engine = self._get_engine()
            if engine is None:
                return
            try:
                engine.say(text)
                engine.runAndWait()
            except RuntimeError:
                logger.warning("Speech engine busy, dropped announcement: %s", text)

    def _get_engine(self):
        if self._engine is None and self._speech_available:
            try:
                self._engine = pyttsx3.init()
            except Exception as e:
                # No TTS driver on this machine, keep working silently
                self._speech_available = False
                logger.warning("Speech engine unavailable, announcements disabled: %s", e)
        return self._engine

    def _stop_speaking(self) -> None:
        if self._engine is None:
            return
        try:
            self._engine.stop()
        except RuntimeError:
            logger.debug("Speech engine could not be stopped")
