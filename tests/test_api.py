import unittest
import uuid

from fastapi import HTTPException

from workpulse.routers import api
from workpulse.schemas import BreakRequest, SettingsRequest, StartRequest, VolumeRequest
from workpulse.services.statistics import SessionHistory, TodayAggregator
from workpulse.services.timer import FocusTimer

from helpers import FakeAlerter, FakeAudio, FakeClock, TempDatabase


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.database = TempDatabase()
        self.store = self.database.make_store()
        self.history = SessionHistory(self.store)
        self.clock = FakeClock()
        self.audio = FakeAudio()
        self.timer = FocusTimer(
            store=self.store,
            aggregator=TodayAggregator(self.store),
            alerter=FakeAlerter(),
            clock=self.clock,
            audio=self.audio,
            is_target_mode_enabled=False,
        )

    def tearDown(self) -> None:
        self.database.close()

    def run_session(self, task_name: str, focus: int, break_seconds: int = 0) -> uuid.UUID:
        api.start_session(body=StartRequest(task_name=task_name), timer=self.timer)
        self.clock.fire(focus)
        if break_seconds:
            api.start_break(body=BreakRequest(type="meal"), timer=self.timer)
            self.clock.fire(break_seconds)
            api.end_break(timer=self.timer)
        session_id = self.timer.current_session.id
        api.stop_session(timer=self.timer)
        return session_id

    def test_full_session_flow(self) -> None:
        result = api.start_session(body=StartRequest(task_name="Write docs"), timer=self.timer)
        self.assertTrue(result.success)
        self.assertEqual(result.status, "working")

        self.clock.fire(10)
        self.assertEqual(api.pause_session(timer=self.timer).status, "paused")
        self.assertEqual(api.resume_session(timer=self.timer).status, "working")
        self.assertEqual(api.start_break(body=None, timer=self.timer).status, "onBreak")
        self.clock.fire(4)
        self.assertEqual(api.end_break(timer=self.timer).status, "working")

        result = api.stop_session(timer=self.timer)

        self.assertTrue(result.success)
        self.assertEqual(result.status, "idle")
        today = api.get_today(timer=self.timer)
        self.assertEqual(today.total_seconds, 10)

    def test_invalid_intent_reports_unchanged_status(self) -> None:
        result = api.end_break(timer=self.timer)

        self.assertFalse(result.success)
        self.assertEqual(result.status, "idle")

    def test_status_snapshot(self) -> None:
        api.start_session(body=None, timer=self.timer)
        self.clock.fire(65)

        status = api.get_status(timer=self.timer)

        self.assertEqual(status.status, "working")
        self.assertEqual(status.status_text, "Deep focus")
        self.assertEqual(status.focus_formatted, "01:05")
        self.assertTrue(status.audio.is_playing)

    def test_update_settings(self) -> None:
        result = api.update_settings(
            body=SettingsRequest(target_focus_minutes=50, is_target_mode_enabled=True, selected_break_type="meal"),
            timer=self.timer,
        )

        self.assertTrue(result.success)
        status = api.get_status(timer=self.timer)
        self.assertEqual(status.target_focus_minutes, 50)
        self.assertTrue(status.is_target_mode_enabled)
        self.assertEqual(status.selected_break_type.value, "meal")

    def test_update_settings_rejected_during_session(self) -> None:
        api.start_session(body=StartRequest(task_name="Write docs"), timer=self.timer)
        self.clock.fire(600)

        result = api.update_settings(
            body=SettingsRequest(target_focus_minutes=1, is_target_mode_enabled=True),
            timer=self.timer,
        )
        self.clock.fire()

        self.assertFalse(result.success)
        status = api.get_status(timer=self.timer)
        self.assertEqual(status.status, "working")
        self.assertEqual(status.focus_seconds, 601)
        self.assertFalse(status.is_target_mode_enabled)

    def test_history_and_details(self) -> None:
        session_id = self.run_session("Write docs", 30, break_seconds=12)

        history = api.get_history_days(history=self.history)
        details = api.get_session_details(session_id=session_id, store=self.store)

        self.assertEqual(len(history.days), 1)
        self.assertEqual(history.days[0].sessions[0].id, session_id)
        self.assertEqual(details.focus_seconds, 30)
        self.assertEqual(details.break_seconds, 12)
        self.assertEqual(details.breaks[0].display_name, "🍚 Meal")

    def test_session_details_raises_http_404_when_not_found(self) -> None:
        with self.assertRaises(HTTPException) as context:
            api.get_session_details(session_id=uuid.uuid4(), store=self.store)

        self.assertEqual(context.exception.status_code, 404)
        self.assertEqual(context.exception.detail, "Session not found")

    def test_delete_session_updates_today_total(self) -> None:
        session_id = self.run_session("Write docs", 30)
        self.assertEqual(self.timer.aggregator.total, 30)

        result = api.delete_session(session_id=session_id, history=self.history, timer=self.timer)

        self.assertTrue(result.success)
        self.assertEqual(self.timer.aggregator.total, 0)
        with self.assertRaises(HTTPException):
            api.delete_session(session_id=session_id, history=self.history, timer=self.timer)

    def test_delete_break(self) -> None:
        session_id = self.run_session("Write docs", 30, break_seconds=12)
        break_id = api.get_session_details(session_id=session_id, store=self.store).breaks[0].id

        result = api.delete_break(break_id=break_id, store=self.store, timer=self.timer)

        self.assertTrue(result.success)
        self.assertEqual(api.get_session_details(session_id=session_id, store=self.store).breaks, [])
        with self.assertRaises(HTTPException):
            api.delete_break(break_id=break_id, store=self.store, timer=self.timer)

    def test_reset_discards_running_session(self) -> None:
        self.run_session("Earlier", 20)
        api.start_session(body=StartRequest(task_name="Current"), timer=self.timer)
        self.clock.fire(5)

        result = api.reset_data(store=self.store, timer=self.timer)

        self.assertTrue(result.success)
        self.assertEqual(result.status, "idle")
        self.assertEqual(api.get_history_days(history=self.history).days, [])
        status = api.get_status(timer=self.timer)
        self.assertEqual(status.focus_seconds, 0)
        self.assertEqual(status.today_total_seconds, 0)

    def test_audio_controls(self) -> None:
        info = api.toggle_audio(timer=self.timer)
        self.assertTrue(info.is_playing)

        info = api.set_volume(body=VolumeRequest(volume=0.8), timer=self.timer)
        self.assertEqual(info.volume, 0.8)


if __name__ == "__main__":
    unittest.main()
