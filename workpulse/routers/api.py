import uuid
from fastapi import APIRouter, Depends, HTTPException, Request

from workpulse.schemas import (
    ActionResponse,
    AudioInfo,
    BreakRequest,
    HistoryResponse,
    SessionDetailResponse,
    SettingsRequest,
    StartRequest,
    StatusResponse,
    TodayResponse,
    VersionResponse,
    VolumeRequest,
)
from workpulse.services import statistics
from workpulse.services.records import RecordStore
from workpulse.services.statistics import SessionHistory
from workpulse.services.timer import FocusTimer
from workpulse.version import get_version

router = APIRouter(prefix="/api", tags=["api"])


def get_timer(request: Request) -> FocusTimer:
    return request.app.state.timer


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_history(request: Request) -> SessionHistory:
    return request.app.state.history


@router.get("/status", response_model=StatusResponse)
def get_status(timer: FocusTimer = Depends(get_timer)):
    """Get current timer status"""
    return timer.snapshot()


@router.post("/start", response_model=ActionResponse)
def start_session(body: StartRequest | None = None, timer: FocusTimer = Depends(get_timer)):
    """Start a new work session"""
    return timer.start_session(body.task_name if body else None)


@router.post("/pause", response_model=ActionResponse)
def pause_session(timer: FocusTimer = Depends(get_timer)):
    """Pause the current session"""
    return timer.pause_session()


@router.post("/resume", response_model=ActionResponse)
def resume_session(timer: FocusTimer = Depends(get_timer)):
    """Resume from pause"""
    return timer.resume_session()


@router.post("/stop", response_model=ActionResponse)
def stop_session(timer: FocusTimer = Depends(get_timer)):
    """Stop and save the session"""
    return timer.stop_session()


@router.post("/breaks/start", response_model=ActionResponse)
def start_break(body: BreakRequest | None = None, timer: FocusTimer = Depends(get_timer)):
    """Start a break, defaulting to the selected break type"""
    return timer.start_break(body.type if body else None)


@router.post("/breaks/end", response_model=ActionResponse)
def end_break(timer: FocusTimer = Depends(get_timer)):
    """End the running break"""
    return timer.end_break()


@router.put("/settings", response_model=ActionResponse)
def update_settings(body: SettingsRequest, timer: FocusTimer = Depends(get_timer)):
    """Change target duration, target mode, break type or task name"""
    return timer.configure(
        target_focus_minutes=body.target_focus_minutes,
        is_target_mode_enabled=body.is_target_mode_enabled,
        selected_break_type=body.selected_break_type,
        task_name=body.task_name,
    )


@router.get("/today", response_model=TodayResponse)
def get_today(timer: FocusTimer = Depends(get_timer)):
    """Get today's accumulated focus time"""
    return timer.aggregator.summary()


@router.get("/history", response_model=HistoryResponse)
def get_history_days(history: SessionHistory = Depends(get_history)):
    """Get stored sessions grouped by day"""
    history.refresh()
    return history.as_response()


@router.get("/sessions/{session_id}", response_model=SessionDetailResponse)
def get_session_details(session_id: uuid.UUID, store: RecordStore = Depends(get_store)):
    """Get detailed information about a session including its breaks"""
    result = statistics.get_session_details(store, session_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return result


@router.delete("/sessions/{session_id}", response_model=ActionResponse)
def delete_session(
    session_id: uuid.UUID,
    history: SessionHistory = Depends(get_history),
    timer: FocusTimer = Depends(get_timer),
):
    """Delete a stored session and its breaks"""
    if not history.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    timer.aggregator.recompute()
    return ActionResponse(success=True, message="Session deleted", status=timer.state.value)


@router.delete("/breaks/{break_id}", response_model=ActionResponse)
def delete_break(
    break_id: uuid.UUID,
    store: RecordStore = Depends(get_store),
    timer: FocusTimer = Depends(get_timer),
):
    """Delete a single stored break event"""
    if not store.delete_break_event(break_id):
        raise HTTPException(status_code=404, detail="Break not found")
    return ActionResponse(success=True, message="Break deleted", status=timer.state.value)


@router.post("/reset", response_model=ActionResponse)
def reset_data(store: RecordStore = Depends(get_store), timer: FocusTimer = Depends(get_timer)):
    """Delete all stored data; the timer drops any session in progress"""
    store.delete_all()
    return ActionResponse(success=True, message="All data deleted", status=timer.state.value)


@router.post("/audio/toggle", response_model=AudioInfo)
def toggle_audio(timer: FocusTimer = Depends(get_timer)):
    """Toggle ambient noise playback"""
    timer.audio.toggle()
    return AudioInfo(is_playing=timer.audio.is_playing, volume=timer.audio.volume)


@router.put("/audio/volume", response_model=AudioInfo)
def set_volume(body: VolumeRequest, timer: FocusTimer = Depends(get_timer)):
    """Set ambient noise volume (0.0 - 1.0)"""
    timer.audio.volume = body.volume
    return AudioInfo(is_playing=timer.audio.is_playing, volume=timer.audio.volume)


@router.get("/version", response_model=VersionResponse)
def version():
    return VersionResponse(version=get_version())
