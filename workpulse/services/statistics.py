import logging
import threading
import uuid
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError

from workpulse.models import WorkSession
from workpulse.schemas import (
    BreakEventInfo,
    HistoryDay,
    HistoryResponse,
    SessionDetailResponse,
    SessionSummary,
    TodayResponse,
)
from workpulse.services.calculations import (
    day_bounds,
    format_date_key,
    format_duration,
    format_minutes,
    format_time,
)
from workpulse.services.records import RecordStore

logger = logging.getLogger(__name__)


class TodayAggregator:
    """Sum of focus time for sessions started today.

    Always recomputed from the store rather than accumulated, so edits and
    deletions made elsewhere are reflected on the next call.
    """

    def __init__(self, store: RecordStore):
        self.store = store
        self.total = 0

    def recompute(self, now: datetime | None = None) -> int:
        if now is None:
            now = datetime.now()

        start, end = day_bounds(now)
        try:
            sessions = self.store.sessions_between(start, end)
        except SQLAlchemyError:
            # Keep showing the last known total
            logger.exception("Could not compute today's focus total")
            return self.total
        self.total = sum(s.focus_duration or 0 for s in sessions)
        return self.total

    def summary(self, now: datetime | None = None) -> TodayResponse:
        if now is None:
            now = datetime.now()
        total = self.recompute(now)
        return TodayResponse(
            date=format_date_key(now),
            total_seconds=total,
            total_formatted=format_duration(total),
        )


def summarize_session(session: WorkSession) -> SessionSummary:
    return SessionSummary(
        id=session.id,
        task_name=session.task_name,
        start_time=format_time(session.start_time),
        end_time=format_time(session.end_time) if session.end_time else None,
        focus_seconds=session.focus_duration,
        focus_formatted=format_duration(session.focus_duration),
        focus_minutes=format_minutes(session.focus_duration),
        break_seconds=session.break_duration,
        break_formatted=format_duration(session.break_duration),
    )


class SessionHistory:
    """Stored sessions grouped by the local day they started, newest day first"""

    def __init__(self, store: RecordStore):
        self.store = store
        self.sessions: list[WorkSession] = []
        self.grouped: dict[str, list[WorkSession]] = {}
        self.sorted_keys: list[str] = []
        self._lock = threading.Lock()
        store.reset_notifier.subscribe(self.refresh)

    def refresh(self) -> None:
        try:
            sessions = self.store.fetch_sessions()
        except SQLAlchemyError:
            logger.exception("Could not load session history")
            return

        grouped: dict[str, list[WorkSession]] = {}
        for session in sessions:
            grouped.setdefault(format_date_key(session.start_time), []).append(session)

        with self._lock:
            self.sessions = sessions
            self.grouped = grouped
            self.sorted_keys = sorted(grouped, reverse=True)

    def delete_session(self, session_id: uuid.UUID) -> bool:
        deleted = self.store.delete_session(session_id)
        if deleted:
            self.refresh()
        return deleted

    def as_response(self) -> HistoryResponse:
        with self._lock:
            days = [
                HistoryDay(date=key, sessions=[summarize_session(s) for s in self.grouped[key]])
                for key in self.sorted_keys
            ]
        return HistoryResponse(days=days)


def get_session_details(store: RecordStore, session_id: uuid.UUID) -> SessionDetailResponse | None:
    """Get detailed information about a stored session including its breaks"""
    session = store.get_session(session_id)

    if not session:
        return None

    breaks = [
        BreakEventInfo(
            id=event.id,
            type=event.break_type,
            display_name=event.type_display_name,
            start_time=format_time(event.start_time),
            end_time=format_time(event.end_time) if event.end_time else None,
            duration_seconds=event.duration,
            duration_formatted=format_duration(event.duration),
        )
        for event in session.break_events
    ]

    return SessionDetailResponse(
        id=session.id,
        task_name=session.task_name,
        date=format_date_key(session.start_time),
        start_time=format_time(session.start_time),
        end_time=format_time(session.end_time) if session.end_time else None,
        started_at=session.start_time,
        focus_seconds=session.focus_duration,
        focus_formatted=format_duration(session.focus_duration),
        break_seconds=session.break_duration,
        break_formatted=format_duration(session.break_duration),
        break_count=len(breaks),
        breaks=breaks,
    )
