import logging
import uuid
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, selectinload

from workpulse.config import DEFAULT_TASK_NAME
from workpulse.events import DataResetNotifier
from workpulse.models import BreakEvent, BreakType, WorkSession

logger = logging.getLogger(__name__)


class RecordStore:
    """Durable storage for work sessions and their break events"""

    def __init__(self, session_factory: sessionmaker, reset_notifier: DataResetNotifier | None = None):
        self.session_factory = session_factory
        self.reset_notifier = reset_notifier or DataResetNotifier()

    def new_session(self, task_name: str | None, now: datetime) -> WorkSession:
        """Create an in-memory session draft; nothing is written until save()"""
        name = (task_name or "").strip() or DEFAULT_TASK_NAME
        return WorkSession(
            id=uuid.uuid4(),
            task_name=name,
            start_time=now,
            created_at=now,
            focus_duration=0,
            break_duration=0,
        )

    def new_break_event(self, session: WorkSession, break_type: BreakType, now: datetime) -> BreakEvent:
        """Create an in-memory break draft owned by the given session"""
        event = BreakEvent(
            id=uuid.uuid4(),
            type=break_type.value,
            start_time=now,
            duration=0,
        )
        session.break_events.append(event)
        return event

    def save(self, session: WorkSession) -> bool:
        """Persist a session and its break events. Failures are logged, never retried."""
        db = self.session_factory()
        try:
            db.add(session)
            db.commit()
            return True
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to save work session %s", session.id)
            return False
        finally:
            db.close()

    def fetch_sessions(self) -> list[WorkSession]:
        """All sessions, newest start first"""
        with self.session_factory() as db:
            return (
                db.query(WorkSession)
                .options(selectinload(WorkSession.break_events))
                .order_by(WorkSession.start_time.desc())
                .all()
            )

    def sessions_between(self, start: datetime, end: datetime) -> list[WorkSession]:
        """Sessions whose start_time falls in [start, end)"""
        with self.session_factory() as db:
            return (
                db.query(WorkSession)
                .filter(WorkSession.start_time >= start, WorkSession.start_time < end)
                .all()
            )

    def get_session(self, session_id: uuid.UUID) -> WorkSession | None:
        with self.session_factory() as db:
            return (
                db.query(WorkSession)
                .options(selectinload(WorkSession.break_events))
                .filter(WorkSession.id == session_id)
                .first()
            )

    def delete_session(self, session_id: uuid.UUID) -> bool:
        """Delete a session (cascade removes its break events)"""
        return self._delete(WorkSession, session_id)

    def delete_break_event(self, event_id: uuid.UUID) -> bool:
        """Delete a single break event, the owning session stays"""
        return self._delete(BreakEvent, event_id)

    def delete_all(self) -> None:
        """Wipe every record of every kind, then broadcast the data reset"""
        # Children first so the delete never depends on FK enforcement
        for model in (BreakEvent, WorkSession):
            db = self.session_factory()
            try:
                deleted = db.query(model).delete(synchronize_session=False)
                db.commit()
                logger.info("Deleted %d %s records", deleted, model.__name__)
            except SQLAlchemyError:
                db.rollback()
                logger.exception("Failed to delete %s records", model.__name__)
            finally:
                db.close()

        self.reset_notifier.notify()

    def _delete(self, model: type, record_id: uuid.UUID) -> bool:
        db: Session = self.session_factory()
        try:
            record = db.query(model).filter(model.id == record_id).first()
            if not record:
                return False
            db.delete(record)
            db.commit()
            return True
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to delete %s %s", model.__name__, record_id)
            return False
        finally:
            db.close()
