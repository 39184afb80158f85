"""Fake ports and a throwaway SQLite store shared by the test modules."""
import tempfile
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from workpulse.database import Base
from workpulse.events import DataResetNotifier
from workpulse.services.clock import Clock
from workpulse.services.alerts import AlertingPort
from workpulse.services.records import RecordStore


class FakeClock(Clock):
    """Clock driven by hand: fire() delivers one tick to the current subscriber."""

    def __init__(self):
        self.callback = None
        self.start_count = 0
        self.stop_count = 0

    @property
    def is_running(self) -> bool:
        return self.callback is not None

    def start(self, callback) -> None:
        assert self.callback is None, "clock started twice"
        self.callback = callback
        self.start_count += 1

    def stop(self) -> None:
        self.callback = None
        self.stop_count += 1

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if self.callback is None:
                return
            self.callback()


class FakeAlerter(AlertingPort):
    def __init__(self):
        self.scheduled: list[tuple[float, str, str]] = []
        self.pending: list[tuple[float, str, str]] = []
        self.cancel_count = 0
        self.spoken: list[str] = []
        self.tones = 0

    def schedule_alert(self, after_seconds, title, body) -> None:
        if after_seconds <= 0:
            return
        self.scheduled.append((after_seconds, title, body))
        self.pending.append((after_seconds, title, body))

    def cancel_all_pending(self) -> None:
        self.pending.clear()
        self.cancel_count += 1

    def speak(self, text) -> None:
        self.spoken.append(text)

    def play_tone(self) -> None:
        self.tones += 1


class FakeAudio:
    def __init__(self):
        self.is_playing = False
        self.volume = 0.5

    def play(self) -> None:
        self.is_playing = True

    def pause(self) -> None:
        self.is_playing = False

    def toggle(self) -> None:
        self.is_playing = not self.is_playing


class TempDatabase:
    """File-backed SQLite database living in a temporary directory"""

    def __init__(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.db_path = Path(self.tmp_dir.name) / "test.db"
        self.engine = create_engine(
            f"sqlite:///{self.db_path}",
            connect_args={"check_same_thread": False},
        )
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )
        Base.metadata.create_all(bind=self.engine)

    def make_store(self) -> RecordStore:
        return RecordStore(self.SessionLocal, DataResetNotifier())

    def close(self) -> None:
        self.engine.dispose()
        self.tmp_dir.cleanup()
