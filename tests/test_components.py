"""Tests for the engine's building blocks in isolation.

Covers: st.core.accumulator, st.core.tracker, st.core.rotation, st.core.events, st.core.scheduler
"""

import os
import tempfile
import unittest

os.environ.setdefault("STANDUP_TIMER_HOME", tempfile.mkdtemp(prefix="standup-timer-tests-"))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


# ──────────────────────────────────────────────────────────────────────────
# accumulator.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestTimeAccumulator(unittest.TestCase):

    def setUp(self):
        from st.core.accumulator import TimeAccumulator
        from st.core.clock import ManualClock
        self.clock = ManualClock(50_000)
        self.acc = TimeAccumulator(self.clock)

    def test_reads_zero_before_start(self):
        self.clock.advance(10)
        self.assertEqual(self.acc.elapsed(), 0)
        self.assertFalse(self.acc.started)

    def test_floors_partial_seconds(self):
        self.acc.start()
        self.clock.advance(2.999)
        self.assertEqual(self.acc.elapsed(), 2)

    def test_pause_freezes_and_resume_continues(self):
        self.acc.start()
        self.clock.advance(7)
        self.assertEqual(self.acc.pause(), 7)
        self.assertEqual(self.acc.paused_since, self.clock.now())
        self.clock.advance(60)
        self.assertEqual(self.acc.elapsed(), 7)
        self.acc.resume()
        self.assertIsNone(self.acc.paused_since)
        self.clock.advance(3)
        self.assertEqual(self.acc.elapsed(), 10)

    def test_repeated_pause_cycles_do_not_drift(self):
        self.acc.start()
        for _ in range(20):
            self.clock.advance(1)
            self.acc.pause()
            self.clock.advance(13)
            self.acc.resume()
        self.assertEqual(self.acc.elapsed(), 20)

    def test_restart_keeps_paused_flag(self):
        self.acc.start()
        self.clock.advance(5)
        self.acc.pause()
        self.acc.restart()
        self.assertTrue(self.acc.paused)
        self.assertEqual(self.acc.elapsed(), 0)
        self.clock.advance(9)
        self.acc.resume()
        self.clock.advance(1)
        self.assertEqual(self.acc.elapsed(), 1)

    def test_start_clears_pause(self):
        self.acc.start()
        self.acc.pause()
        self.acc.start()
        self.assertFalse(self.acc.paused)


# ──────────────────────────────────────────────────────────────────────────
# tracker.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestParticipantTracker(unittest.TestCase):

    def setUp(self):
        from st.core.clock import ManualClock
        from st.core.state import TimerState
        from st.core.tracker import ParticipantTracker
        self.clock = ManualClock(0)
        self.state = TimerState()
        self.tracker = ParticipantTracker(self.clock, self.state)
        self.tracker.seed(["Ann", "Bo"])

    def test_seed(self):
        self.assertEqual(self.state.participant_time_tracker, {"Ann": 0, "Bo": 0})
        self.assertEqual(self.state.participant_current_start_time, {"Ann": None, "Bo": None})

    def test_commit_adds_whole_seconds_and_clears_marker(self):
        self.tracker.start_turn("Ann")
        self.clock.advance(4.7)
        self.assertEqual(self.tracker.commit_turn("Ann"), 4)
        self.assertEqual(self.state.participant_time_tracker["Ann"], 4)
        self.assertIsNone(self.state.participant_current_start_time["Ann"])

    def test_commit_is_idempotent(self):
        self.tracker.start_turn("Ann")
        self.clock.advance(3)
        self.tracker.commit_turn("Ann")
        self.clock.advance(3)
        self.assertEqual(self.tracker.commit_turn("Ann"), 0)
        self.assertEqual(self.state.participant_time_tracker["Ann"], 3)

    def test_blank_names_are_ignored(self):
        self.tracker.start_turn("")
        self.tracker.start_turn(None)
        self.assertEqual(self.tracker.commit_turn(None), 0)
        self.assertNotIn("", self.state.participant_current_start_time)

    def test_live_time_only_counts_current_unpaused(self):
        self.state.participant_time_tracker["Ann"] = 10
        self.tracker.start_turn("Ann")
        self.clock.advance(5)
        self.assertEqual(self.tracker.live_time("Ann", "Ann", False), 15)
        self.assertEqual(self.tracker.live_time("Ann", "Ann", True), 10)
        self.assertEqual(self.tracker.live_time("Ann", "Bo", False), 10)
        self.assertEqual(self.tracker.live_time("Bo", "Ann", False), 0)

    def test_reset(self):
        self.state.participant_time_tracker["Bo"] = 30
        self.tracker.reset("Bo")
        self.assertEqual(self.state.participant_time_tracker["Bo"], 0)

    def test_sync_keeps_existing_totals(self):
        self.state.participant_time_tracker["Ann"] = 12
        self.state.participant_time_tracker["Bo"] = 8
        self.tracker.sync(["Cy", "Ann"])
        self.assertEqual(self.state.participant_time_tracker, {"Cy": 0, "Ann": 12})
        self.assertEqual(self.state.participant_current_start_time, {"Cy": None, "Ann": None})

    def test_total_time_counts_duplicates_once(self):
        self.state.participant_time_tracker["Ann"] = 5
        self.state.participant_time_tracker["Bo"] = 2
        self.assertEqual(self.tracker.total_time(["Ann", "Bo", "Ann"], "Bo", False), 7)


# ──────────────────────────────────────────────────────────────────────────
# rotation.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestRotationController(unittest.TestCase):

    def setUp(self):
        from st.core.accumulator import TimeAccumulator
        from st.core.clock import ManualClock
        from st.core.rotation import RotationController
        from st.core.state import TimerState
        from st.core.tracker import ParticipantTracker
        self.clock = ManualClock(0)
        self.state = TimerState()
        self.roster = ("Ann", "Bo", "Cy")
        self.emitted = []
        self.tracker = ParticipantTracker(self.clock, self.state)
        self.tracker.seed(self.roster)
        self.acc = TimeAccumulator(self.clock)
        self.rotation = RotationController(
            self.tracker, self.acc, roster=lambda: self.roster, emit=self.emitted.append, state=self.state)
        self.acc.start()
        self.tracker.start_turn("Ann")

    def test_advance_commits_and_starts_next(self):
        self.clock.advance(6)
        self.state.elapsed_time = 6
        self.assertTrue(self.rotation.next())
        self.assertEqual(self.state.participant_time_tracker["Ann"], 6)
        self.assertEqual(self.state.current_participant_index, 1)
        self.assertEqual(self.state.elapsed_time, 0)
        self.assertEqual(self.state.participant_current_start_time["Bo"], self.clock.now())
        self.assertEqual(self.emitted, ["participantChanged"])

    def test_previous_wraps(self):
        self.rotation.previous()
        self.assertEqual(self.rotation.current_name(), "Cy")

    def test_advance_restarts_turn_clock(self):
        self.clock.advance(12)
        self.rotation.next()
        self.clock.advance(2)
        self.assertEqual(self.acc.elapsed(), 2)

    def test_empty_roster_is_noop(self):
        self.roster = ()
        self.assertFalse(self.rotation.next())
        self.assertEqual(self.emitted, [])
        self.assertIsNone(self.rotation.current_name())

    def test_bad_direction(self):
        with self.assertRaises(ValueError):
            self.rotation.advance(2)


# ──────────────────────────────────────────────────────────────────────────
# events.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestEventBus(unittest.TestCase):

    def setUp(self):
        from st.core.events import EventBus
        from st.core.settings import create_settings
        from st.core.state import TimerState
        self.bus = EventBus()
        self.state = TimerState(participant_time_tracker={"Ann": 1})
        self.settings = create_settings(participants=["Ann"])

    def test_emit_delivers_snapshot_in_order(self):
        from st.core.events import TimerEventType
        calls = []
        self.bus.on("tick", lambda e: calls.append(("first", e)))
        self.bus.on(TimerEventType.TICK, lambda e: calls.append(("second", e)))
        event = self.bus.emit("tick", self.state, self.settings)

        self.assertEqual([name for name, _ in calls], ["first", "second"])
        self.assertEqual(event.type, TimerEventType.TICK)
        self.assertIsNot(event.state, self.state)
        self.assertEqual(event.state, self.state)
        self.assertIs(event.settings, self.settings)

    def test_same_listener_registered_once(self):
        calls = []
        self.bus.on("reset", calls.append)
        self.bus.on("reset", calls.append)
        self.bus.emit("reset", self.state, self.settings)
        self.assertEqual(len(calls), 1)

    def test_listener_can_unsubscribe_itself(self):
        calls = []

        def once(event):
            calls.append(event)
            self.bus.off("paused", once)

        self.bus.on("paused", once)
        self.bus.emit("paused", self.state, self.settings)
        self.bus.emit("paused", self.state, self.settings)
        self.assertEqual(len(calls), 1)

    def test_emit_without_listeners(self):
        self.assertIsNone(self.bus.emit("timeUp", self.state, self.settings))

    def test_off_unknown_listener_is_harmless(self):
        self.bus.off("tick", print)

    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            self.bus.emit("boom", self.state, self.settings)


# ──────────────────────────────────────────────────────────────────────────
# scheduler.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestScheduler(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        from PySide6.QtWidgets import QApplication
        cls._app = QApplication.instance() or QApplication([])

    def test_start_stop(self):
        from st.core.scheduler import Scheduler, TICK_INTERVAL_MS
        calls = []
        scheduler = Scheduler(lambda: calls.append(1))
        self.assertEqual(scheduler.interval_ms, TICK_INTERVAL_MS)
        self.assertFalse(scheduler.is_active)
        scheduler.start()
        self.assertTrue(scheduler.is_active)
        scheduler.start()
        self.assertTrue(scheduler.is_active)
        scheduler.stop()
        self.assertFalse(scheduler.is_active)
        scheduler.stop()

    def test_tick_invokes_callback(self):
        from st.core.scheduler import Scheduler
        calls = []
        scheduler = Scheduler(lambda: calls.append(1), interval_ms=50)
        scheduler.tick()
        scheduler.tick()
        self.assertEqual(len(calls), 2)

    def test_timer_fires_through_event_loop(self):
        from PySide6.QtCore import QEventLoop, QTimer
        from st.core.scheduler import Scheduler
        loop = QEventLoop()
        calls = []

        def on_tick():
            calls.append(1)
            if len(calls) == 3:
                loop.quit()

        scheduler = Scheduler(on_tick, interval_ms=10)
        scheduler.start()
        QTimer.singleShot(2000, loop.quit)
        loop.exec()
        scheduler.stop()
        self.assertGreaterEqual(len(calls), 3)


if __name__ == "__main__":
    unittest.main()
