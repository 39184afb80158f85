import uuid
from datetime import datetime
from pydantic import BaseModel, Field

from workpulse.models import BreakType


class AudioInfo(BaseModel):
    is_playing: bool
    volume: float


class StatusResponse(BaseModel):
    status: str  # "idle", "working", "paused", "onBreak"
    status_text: str
    task_name: str
    focus_seconds: int
    focus_formatted: str
    break_seconds: int  # current break only
    break_formatted: str
    total_break_seconds: int  # all finished breaks of this session
    total_break_formatted: str
    target_focus_minutes: int
    is_target_mode_enabled: bool
    remaining_target_seconds: int
    remaining_target_formatted: str
    target_progress: float  # 0.0 - 1.0
    selected_break_type: BreakType
    today_total_seconds: int
    today_total_formatted: str
    audio: AudioInfo


class ActionResponse(BaseModel):
    success: bool
    message: str
    status: str


class StartRequest(BaseModel):
    task_name: str | None = None


class BreakRequest(BaseModel):
    type: str | None = None  # toilet | meal | rest, anything else is a generic break


class SettingsRequest(BaseModel):
    target_focus_minutes: int | None = Field(default=None, gt=0)
    is_target_mode_enabled: bool | None = None
    selected_break_type: str | None = None
    task_name: str | None = None


class VolumeRequest(BaseModel):
    volume: float = Field(ge=0.0, le=1.0)


class TodayResponse(BaseModel):
    date: str  # YYYY/MM/DD
    total_seconds: int
    total_formatted: str


class SessionSummary(BaseModel):
    id: uuid.UUID
    task_name: str
    start_time: str  # HH:MM:SS
    end_time: str | None
    focus_seconds: int
    focus_formatted: str
    focus_minutes: str  # e.g. "25 min"
    break_seconds: int
    break_formatted: str


class HistoryDay(BaseModel):
    date: str  # YYYY/MM/DD
    sessions: list[SessionSummary]


class HistoryResponse(BaseModel):
    days: list[HistoryDay]


class BreakEventInfo(BaseModel):
    id: uuid.UUID
    type: BreakType
    display_name: str
    start_time: str  # HH:MM:SS
    end_time: str | None
    duration_seconds: int
    duration_formatted: str


class SessionDetailResponse(BaseModel):
    id: uuid.UUID
    task_name: str
    date: str
    start_time: str
    end_time: str | None
    started_at: datetime
    focus_seconds: int
    focus_formatted: str
    break_seconds: int
    break_formatted: str
    break_count: int
    breaks: list[BreakEventInfo]


class VersionResponse(BaseModel):
    version: str
