import logging
import threading
from datetime import datetime
from functools import partial

from workpulse.config import (
    ALERT_BODY,
    ALERT_RESUME_BODY,
    ALERT_TITLE,
    AUTOPLAY_AMBIENT,
    DEFAULT_BREAK_TYPE,
    SPOKEN_ANNOUNCEMENT,
    TARGET_FOCUS_MINUTES,
    TARGET_MODE_ENABLED,
)
from workpulse.models import BreakEvent, BreakType, TimerState, WorkSession
from workpulse.schemas import ActionResponse, AudioInfo, StatusResponse
from workpulse.services.alerts import AlertingPort
from workpulse.services.audio import AmbientAudio
from workpulse.services.calculations import (
    calculate_target_progress,
    format_duration,
    target_seconds,
)
from workpulse.services.clock import Clock
from workpulse.services.records import RecordStore
from workpulse.services.statistics import TodayAggregator

logger = logging.getLogger(__name__)

STATUS_TEXTS = {
    TimerState.IDLE: "Ready",
    TimerState.WORKING: "Deep focus",
    TimerState.PAUSED: "Paused",
}

BREAK_STATUS_TEXTS = {
    BreakType.TOILET: "Toilet break",
    BreakType.MEAL: "Meal time",
}


class FocusTimer:
    """Session state machine: idle -> working <-> paused / onBreak -> idle.

    User intents and clock ticks are serialized through one re-entrant lock. Every
    transition that stops active timing also cancels pending alerts, so the scheduled
    target alert can never fire after the tick-driven pause already happened.
    Intents that are not valid in the current state are ignored.
    """

    def __init__(
        self,
        store: RecordStore,
        aggregator: TodayAggregator,
        alerter: AlertingPort,
        clock: Clock,
        audio: AmbientAudio,
        target_focus_minutes: int = TARGET_FOCUS_MINUTES,
        is_target_mode_enabled: bool = TARGET_MODE_ENABLED,
        selected_break_type: str = DEFAULT_BREAK_TYPE,
        autoplay_audio: bool = AUTOPLAY_AMBIENT,
    ):
        self.store = store
        self.aggregator = aggregator
        self.alerter = alerter
        self.clock = clock
        self.audio = audio
        self.autoplay_audio = autoplay_audio

        self.state = TimerState.IDLE
        self.task_name = ""
        self.focus_seconds = 0
        self.break_seconds = 0
        self.total_break_seconds = 0

        self.target_focus_minutes = target_focus_minutes if target_focus_minutes > 0 else TARGET_FOCUS_MINUTES
        self.is_target_mode_enabled = is_target_mode_enabled
        self.remaining_target_seconds = 0
        self.selected_break_type = BreakType.parse(selected_break_type)

        self._current_session: WorkSession | None = None
        self._current_break: BreakEvent | None = None
        self._lock = threading.RLock()
        self._clock_generation = 0

        store.reset_notifier.subscribe(self.handle_data_reset)
        self.aggregator.recompute()

    @property
    def current_session(self) -> WorkSession | None:
        return self._current_session

    @property
    def current_break(self) -> BreakEvent | None:
        return self._current_break

    # User intents

    def start_session(self, task_name: str | None = None) -> ActionResponse:
        """Start a new work session"""
        with self._lock:
            if self.state is not TimerState.IDLE:
                return self._rejected("Session already active")

            now = datetime.now()
            if task_name is not None:
                self.task_name = task_name
            self._current_session = self.store.new_session(self.task_name, now)
            self.focus_seconds = 0
            self.break_seconds = 0
            self.total_break_seconds = 0

            if self.is_target_mode_enabled:
                self.remaining_target_seconds = target_seconds(self.target_focus_minutes)
                self._schedule_target_alert(ALERT_BODY.format(minutes=self.target_focus_minutes))
            else:
                self.remaining_target_seconds = 0

            if self.autoplay_audio:
                self.audio.play()

            self.state = TimerState.WORKING
            self._start_clock()
            logger.info("Session started: %s", self._current_session.task_name)
            return self._accepted("Session started")

    def pause_session(self) -> ActionResponse:
        """Pause the working timer"""
        with self._lock:
            if self.state is not TimerState.WORKING:
                return self._rejected("Timer is not running")

            self._pause()
            logger.info("Session paused at %ss", self.focus_seconds)
            return self._accepted("Session paused")

    def resume_session(self) -> ActionResponse:
        """Resume from pause"""
        with self._lock:
            if self.state is not TimerState.PAUSED:
                return self._rejected("Timer is not paused")

            self.state = TimerState.WORKING
            self._start_clock()
            if self.autoplay_audio:
                self.audio.play()
            self._reschedule_remaining_target()
            logger.info("Session resumed")
            return self._accepted("Session resumed")

    def start_break(self, break_type: str | None = None) -> ActionResponse:
        """Leave the working state for a categorized break"""
        with self._lock:
            if self.state is not TimerState.WORKING:
                return self._rejected("Breaks can only start while working")

            self._stop_clock()
            self.audio.pause()
            self.alerter.cancel_all_pending()

            kind = BreakType.parse(break_type) if break_type is not None else self.selected_break_type
            self.state = TimerState.ON_BREAK
            self.selected_break_type = kind
            self.break_seconds = 0
            self._current_break = self.store.new_break_event(self._current_session, kind, datetime.now())

            self._start_clock()
            logger.info("Break started: %s", kind.value)
            return self._accepted("Break started")

    def end_break(self) -> ActionResponse:
        """Finish the running break and go back to work"""
        with self._lock:
            if self.state is not TimerState.ON_BREAK:
                return self._rejected("No break in progress")

            self._finish_break(datetime.now())

            self.state = TimerState.WORKING
            if self.autoplay_audio:
                self.audio.play()
            self._start_clock()
            self._reschedule_remaining_target()
            return self._accepted("Break ended")

    def stop_session(self) -> ActionResponse:
        """Stop the session and save it"""
        with self._lock:
            session = self._current_session
            if self.state is TimerState.IDLE or session is None:
                return self._rejected("No active session")

            now = datetime.now()
            if self.state is TimerState.ON_BREAK:
                self._finish_break(now)

            self._stop_clock()
            self.audio.pause()
            self.alerter.cancel_all_pending()

            session.end_time = now
            session.focus_duration = self.focus_seconds
            session.break_duration = self.total_break_seconds
            saved = self.store.save(session)
            if not saved:
                # The session still ends for the user, only the record is lost
                logger.error("Session %s ended but could not be stored", session.id)

            self.state = TimerState.IDLE
            self.focus_seconds = 0
            self.break_seconds = 0
            self.total_break_seconds = 0
            self.remaining_target_seconds = 0
            self._current_session = None
            self._current_break = None

            self.aggregator.recompute(now)
            logger.info(
                "Session stopped: focus=%ss break=%ss",
                session.focus_duration,
                session.break_duration,
            )
            return self._accepted("Session stopped and saved" if saved else "Session stopped, saving failed")

    def handle_data_reset(self) -> None:
        """Drop all in-memory state after the record store was wiped. Nothing is saved."""
        with self._lock:
            self._stop_clock()
            self.alerter.cancel_all_pending()
            self.audio.pause()

            self.state = TimerState.IDLE
            self.task_name = ""
            self.focus_seconds = 0
            self.break_seconds = 0
            self.total_break_seconds = 0
            self.remaining_target_seconds = 0
            self._current_session = None
            self._current_break = None

            self.aggregator.recompute()
            logger.info("Timer reset after data wipe")

    def configure(
        self,
        target_focus_minutes: int | None = None,
        is_target_mode_enabled: bool | None = None,
        selected_break_type: str | None = None,
        task_name: str | None = None,
    ) -> ActionResponse:
        """Update the user-facing settings.

        Target and task name belong to the next session and can only change while
        idle; the break type may change at any time.
        """
        with self._lock:
            session_settings = (target_focus_minutes, is_target_mode_enabled, task_name)
            if self.state is not TimerState.IDLE and any(v is not None for v in session_settings):
                return self._rejected("Target and task name can only be changed while idle")

            if target_focus_minutes is not None:
                if target_focus_minutes > 0:
                    self.target_focus_minutes = target_focus_minutes
                else:
                    logger.warning("Ignoring non-positive target of %s minutes", target_focus_minutes)
            if is_target_mode_enabled is not None:
                self.is_target_mode_enabled = is_target_mode_enabled
            if selected_break_type is not None:
                self.selected_break_type = BreakType.parse(selected_break_type)
            if task_name is not None:
                self.task_name = task_name

            return self._accepted("Settings updated")

    # Clock

    def tick(self) -> None:
        """One second of elapsed time"""
        with self._lock:
            if self.state is TimerState.WORKING:
                self.focus_seconds += 1
                if self.is_target_mode_enabled:
                    self._enforce_target()
                if self._current_session is not None:
                    self._current_session.focus_duration = self.focus_seconds
            elif self.state is TimerState.ON_BREAK:
                self.break_seconds += 1
                if self._current_break is not None:
                    self._current_break.duration = self.break_seconds

    def _on_tick(self, generation: int) -> None:
        with self._lock:
            # A tick from a clock run that has since been stopped
            if generation != self._clock_generation:
                return
            self.tick()

    def _start_clock(self) -> None:
        if self.clock.is_running:
            return
        self.clock.start(partial(self._on_tick, self._clock_generation))

    def _stop_clock(self) -> None:
        self._clock_generation += 1
        self.clock.stop()

    # Helpers

    def _enforce_target(self) -> None:
        limit = target_seconds(self.target_focus_minutes)
        self.remaining_target_seconds = max(0, limit - self.focus_seconds)
        if self.focus_seconds < limit:
            return

        self.focus_seconds = limit
        self.remaining_target_seconds = 0
        # Pause first: cancel_all_pending() also silences speech in progress
        self._pause()
        self.is_target_mode_enabled = False
        self.alerter.play_tone()
        self.alerter.speak(SPOKEN_ANNOUNCEMENT)
        logger.info("Target of %s minutes reached, session paused", self.target_focus_minutes)

    def _pause(self) -> None:
        self.state = TimerState.PAUSED
        self._stop_clock()
        self.audio.pause()
        self.alerter.cancel_all_pending()

    def _finish_break(self, now: datetime) -> None:
        self._stop_clock()
        if self._current_break is not None:
            self._current_break.end_time = now
            self._current_break.duration = self.break_seconds
            self.total_break_seconds += self.break_seconds
            logger.info("Break ended: %s after %ss", self._current_break.type, self.break_seconds)
        self._current_break = None
        self.break_seconds = 0

    def _reschedule_remaining_target(self) -> None:
        if self.is_target_mode_enabled and self.remaining_target_seconds > 0:
            self._schedule_target_alert(ALERT_RESUME_BODY)

    def _schedule_target_alert(self, body: str) -> None:
        try:
            self.alerter.schedule_alert(self.remaining_target_seconds, ALERT_TITLE, body)
        except Exception:
            # The tick counter still enforces the target
            logger.exception("Failed to schedule target alert")

    def _accepted(self, message: str) -> ActionResponse:
        return ActionResponse(success=True, message=message, status=self.state.value)

    def _rejected(self, message: str) -> ActionResponse:
        return ActionResponse(success=False, message=message, status=self.state.value)

    # Read model

    def status_text(self) -> str:
        if self.state is TimerState.ON_BREAK:
            return BREAK_STATUS_TEXTS.get(self.selected_break_type, "Taking a break")
        return STATUS_TEXTS[self.state]

    def snapshot(self) -> StatusResponse:
        """Current timer status for display"""
        with self._lock:
            today_total = self.aggregator.total
            return StatusResponse(
                status=self.state.value,
                status_text=self.status_text(),
                task_name=self.task_name,
                focus_seconds=self.focus_seconds,
                focus_formatted=format_duration(self.focus_seconds),
                break_seconds=self.break_seconds,
                break_formatted=format_duration(self.break_seconds),
                total_break_seconds=self.total_break_seconds,
                total_break_formatted=format_duration(self.total_break_seconds),
                target_focus_minutes=self.target_focus_minutes,
                is_target_mode_enabled=self.is_target_mode_enabled,
                remaining_target_seconds=self.remaining_target_seconds,
                remaining_target_formatted=format_duration(self.remaining_target_seconds),
                target_progress=(
                    calculate_target_progress(self.target_focus_minutes, self.remaining_target_seconds)
                    if self.is_target_mode_enabled and self.state is not TimerState.IDLE
                    else 0.0
                ),
                selected_break_type=self.selected_break_type,
                today_total_seconds=today_total,
                today_total_formatted=format_duration(today_total),
                audio=AudioInfo(is_playing=self.audio.is_playing, volume=self.audio.volume),
            )

    def shutdown(self) -> None:
        """Stop background activity when the application exits"""
        with self._lock:
            self._stop_clock()
            self.alerter.cancel_all_pending()
            self.audio.pause()
