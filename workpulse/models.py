import enum
import uuid
from datetime import datetime
from sqlalchemy import ForeignKey, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workpulse.database import Base


class TimerState(str, enum.Enum):
    IDLE = "idle"
    WORKING = "working"
    PAUSED = "paused"
    ON_BREAK = "onBreak"


class BreakType(str, enum.Enum):
    TOILET = "toilet"
    MEAL = "meal"
    REST = "rest"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> "BreakType":
        """Map a stored or requested type string onto the closed set, unknown values become OTHER"""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER

    @property
    def display_name(self) -> str:
        return BREAK_DISPLAY_NAMES[self]


BREAK_DISPLAY_NAMES = {
    BreakType.TOILET: "🚽 Toilet",
    BreakType.MEAL: "🍚 Meal",
    BreakType.REST: "☕ Rest",
    BreakType.OTHER: "☕ Break",
}


class WorkSession(Base):
    __tablename__ = "work_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    task_name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    focus_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    break_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)

    break_events: Mapped[list["BreakEvent"]] = relationship(
        "BreakEvent",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="BreakEvent.start_time",
    )


class BreakEvent(Base):
    __tablename__ = "break_events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=BreakType.REST.value)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    session_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("work_sessions.id", ondelete="CASCADE"), nullable=True
    )

    session: Mapped["WorkSession | None"] = relationship("WorkSession", back_populates="break_events")

    @property
    def break_type(self) -> BreakType:
        return BreakType.parse(self.type)

    @property
    def type_display_name(self) -> str:
        return self.break_type.display_name
