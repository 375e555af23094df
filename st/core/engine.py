"""Timer engine: the composition root that owns the runtime state and exposes the public timer API.

One ``TimerEngine`` per running timer.  It wires the clock, time accumulator, participant tracker,
rotation controller, scheduler and event bus together around a single ``TimerState`` it never hands
out.  Callers and listeners only ever see copies.
"""

from dataclasses import dataclass

from st.common.logger import log
from st.core.accumulator import TimeAccumulator
from st.core.clock import SystemClock
from st.core.events import EventBus, TimerEventType
from st.core.rotation import RotationController
from st.core.scheduler import TICK_INTERVAL_MS, Scheduler
from st.core.settings import SETTINGS_KEYS, TimerMode, create_settings
from st.core.state import TimerState
from st.core.storage import MemoryStorage, StorageError
from st.core.tracker import ParticipantTracker
from st.util import calculate_time_per_participant, format_time

# Remaining seconds at or below which a countdown display is flagged as a warning.
WARNING_THRESHOLD = 30


@dataclass(frozen=True)
class DisplayTime:
    time: str               # MM:SS, remaining in countdown mode, elapsed in countup
    progress: float         # 0-100 share of the allocation used this turn
    is_warning: bool
    elapsed_time: int
    remaining_time: int


@dataclass(frozen=True)
class ParticipantSummary:
    name: str
    time_taken: int
    time_taken_display: str
    total_allocation: int
    total_allocation_display: str
    percentage: int
    is_over: bool
    is_current: bool


class TimerEngine:

    def __init__(self, storage=None, settings=None, clock=None, tick_interval_ms=TICK_INTERVAL_MS):
        self._storage = storage or MemoryStorage()
        self._clock = clock or SystemClock()
        self._settings = create_settings(**(settings or {}))
        self._events = EventBus()
        self._accumulator = TimeAccumulator(self._clock)
        self._tracker = ParticipantTracker(self._clock)
        self._rotation = RotationController(
            self._tracker, self._accumulator,
            roster=lambda: self._settings.participants,
            emit=self._emit,
        )
        self._scheduler = Scheduler(self._on_tick, tick_interval_ms)
        self._watching_storage = False
        self._persisting = False

        self._install_state(TimerState())
        self._tracker.seed(self._settings.participants)

    # ------------------------------------------------------------------ #
    #  Settings                                                            #
    # ------------------------------------------------------------------ #

    def initialize(self):
        """Load settings from storage and start following changes other writers make to it."""
        try:
            stored = self._storage.get(list(SETTINGS_KEYS))
        except StorageError:
            log.error("Couldn't load settings from storage, keeping in-memory settings.", exc_info=True)
            raise
        self._apply_settings(create_settings(self._settings, **stored))
        log.info(f"Initialized timer engine with {len(self._settings.participants)} participants, "
                 f"{self._settings.total_time} minutes, {self._settings.timer_mode} mode")

        on_changed = getattr(self._storage, "on_changed", None)
        if on_changed is not None and not self._watching_storage:
            on_changed(self._on_storage_changed)
            self._watching_storage = True

    def update_settings(self, **changes):
        """Persist the given settings, then apply them. A failed write leaves the current settings in place."""
        updates = {key: value for key, value in changes.items() if key in SETTINGS_KEYS}
        if "participants" in updates:
            updates["participants"] = list(updates["participants"])
        new_settings = create_settings(self._settings, **updates)

        self._persisting = True
        try:
            self._storage.set(updates)
        except StorageError:
            log.warning("Couldn't persist settings update, keeping previous settings.", exc_info=True)
            raise
        finally:
            self._persisting = False

        self._apply_settings(new_settings)
        log.info(f"Updated settings: {', '.join(sorted(updates)) or 'nothing'}")
        self._emit(TimerEventType.SETTINGS_CHANGED)

    # Picks up writes made by someone else sharing the same store. Our own writes are skipped.
    def _on_storage_changed(self, changes):
        if self._persisting:
            return
        updates = {key: change.get("new_value") for key, change in changes.items() if key in SETTINGS_KEYS}
        if not updates:
            return
        self._apply_settings(create_settings(self._settings, **updates))
        log.info(f"Applied external settings change: {', '.join(sorted(updates))}")
        self._emit(TimerEventType.SETTINGS_CHANGED)

    def _apply_settings(self, new_settings):
        if new_settings.participants == self._settings.participants:
            self._settings = new_settings
            return

        # Roster changed. Bank the running turn against the old roster before anything moves.
        outgoing = self.get_current_participant()
        self._tracker.commit_turn(outgoing)
        self._settings = new_settings
        self._tracker.sync(new_settings.participants)

        count = len(new_settings.participants)
        if self._state.current_participant_index >= count:
            self._state.current_participant_index = 0
        incoming = self.get_current_participant()
        if incoming != outgoing:
            self._state.elapsed_time = 0
            if self._accumulator.started:
                self._accumulator.restart()
        if incoming and self._accumulator.started and not self._state.is_paused:
            self._tracker.start_turn(incoming)
        log.debug(f"Roster changed to {count} participants, current is now '{incoming}'")

    # ------------------------------------------------------------------ #
    #  Lifecycle                                                           #
    # ------------------------------------------------------------------ #

    def start(self):
        if not self._settings.participants:
            log.debug("Ignoring start with an empty roster")
            return
        self._install_state(TimerState())
        self._tracker.seed(self._settings.participants)
        self._accumulator.start()
        self._tracker.start_turn(self.get_current_participant())
        self._scheduler.start()
        log.info(f"Started timer for {len(self._settings.participants)} participants")
        self._emit(TimerEventType.STATE_CHANGED)

    def stop(self):
        self._scheduler.stop()
        log.info("Stopped timer")

    @property
    def is_running(self):
        return self._scheduler.is_active

    def tick(self):
        """Run one scheduler tick right now, outside the Qt timer."""
        self._scheduler.tick()

    def toggle_pause(self):
        if self._state.is_paused:
            self.resume()
        else:
            self.pause()

    def pause(self):
        if not self._settings.participants or self._state.is_paused:
            return
        self._tracker.commit_turn(self.get_current_participant())
        self._state.elapsed_time = self._accumulator.pause()
        self._state.is_paused = True
        log.debug(f"Paused at {self._state.elapsed_time}s into the turn")
        self._emit(TimerEventType.PAUSED)

    def resume(self):
        if not self._settings.participants or not self._state.is_paused:
            return
        self._state.is_paused = False
        self._accumulator.resume()
        self._tracker.start_turn(self.get_current_participant())
        log.debug(f"Resumed at {self._state.elapsed_time}s into the turn")
        self._emit(TimerEventType.RESUMED)

    def next_participant(self):
        self._rotation.next()

    def previous_participant(self):
        self._rotation.previous()

    def reset_current_participant(self):
        current = self.get_current_participant()
        if not current:
            return
        self._state.elapsed_time = 0
        self._state.is_paused = False
        self._accumulator.start()
        self._tracker.reset(current)
        self._tracker.start_turn(current)
        log.info(f"Reset time for '{current}'")
        self._emit(TimerEventType.RESET)

    def reset_all(self):
        if not self._settings.participants:
            return
        self._install_state(TimerState())
        self._tracker.seed(self._settings.participants)
        self._accumulator.start()
        self._tracker.start_turn(self.get_current_participant())
        log.info("Reset all participants")
        self._emit(TimerEventType.RESET)

    def toggle_minimized(self):
        self._state.is_minimized = not self._state.is_minimized
        self._emit(TimerEventType.STATE_CHANGED)

    # ------------------------------------------------------------------ #
    #  Read accessors                                                      #
    # ------------------------------------------------------------------ #

    def get_state(self):
        return self._state.snapshot()

    def get_settings(self):
        return self._settings

    def get_current_participant(self):
        return self._rotation.current_name()

    def get_time_per_participant(self):
        return calculate_time_per_participant(self._settings.total_time, len(self._settings.participants))

    def get_display_time(self):
        allocation = self.get_time_per_participant()
        elapsed = self._state.elapsed_time
        remaining = max(0, allocation - elapsed)
        progress = min(100, elapsed / allocation * 100) if allocation > 0 else 0
        countdown = self._settings.timer_mode == TimerMode.COUNTDOWN
        return DisplayTime(
            time=format_time(remaining if countdown else elapsed),
            progress=progress,
            is_warning=countdown and remaining <= WARNING_THRESHOLD,
            elapsed_time=elapsed,
            remaining_time=remaining,
        )

    def get_participant_time(self, name):
        return self._tracker.live_time(name, self.get_current_participant(), self._state.is_paused)

    def get_total_time(self):
        return self._tracker.total_time(
            self._settings.participants, self.get_current_participant(), self._state.is_paused)

    def get_total_time_display(self):
        return format_time(self.get_total_time())

    def get_current_participant_total_time(self):
        current = self.get_current_participant()
        if not current:
            return 0
        return self.get_participant_time(current)

    def get_current_participant_time_display(self):
        return (f"{format_time(self.get_current_participant_total_time())} / "
                f"{format_time(self.get_time_per_participant())}")

    def get_summary(self):
        allocation = self.get_time_per_participant()
        summary = []
        for index, name in enumerate(self._settings.participants):
            taken = self.get_participant_time(name)
            summary.append(ParticipantSummary(
                name=name,
                time_taken=taken,
                time_taken_display=format_time(taken),
                total_allocation=allocation,
                total_allocation_display=format_time(allocation),
                percentage=_round_half_up(taken / allocation * 100) if allocation > 0 else 0,
                is_over=taken > allocation,
                is_current=index == self._state.current_participant_index,
            ))
        return summary

    # ------------------------------------------------------------------ #
    #  Events                                                              #
    # ------------------------------------------------------------------ #

    def on(self, event_type, listener):
        self._events.on(event_type, listener)

    def off(self, event_type, listener):
        self._events.off(event_type, listener)

    def remove_all_listeners(self):
        self._events.clear()

    def _emit(self, event_type):
        self._events.emit(event_type, self._state, self._settings)

    # ------------------------------------------------------------------ #
    #  Internals                                                           #
    # ------------------------------------------------------------------ #

    def _install_state(self, state):
        self._state = state
        self._tracker.state = state
        self._rotation.state = state

    # One scheduler tick. Elapsed is always recomputed from timestamps, never incremented.
    def _on_tick(self):
        if self._state.is_paused or not self._accumulator.started:
            return
        participant_count = len(self._settings.participants)
        if participant_count == 0:
            return

        self._state.elapsed_time = self._accumulator.elapsed()
        self._emit(TimerEventType.TICK)

        if self._settings.timer_mode == TimerMode.COUNTDOWN:
            remaining = self.get_time_per_participant() - self._state.elapsed_time
            if remaining <= 0:
                log.info(f"Time is up for '{self.get_current_participant()}', rotating")
                self._emit(TimerEventType.TIME_UP)
                self._rotation.next()


# Rounds .5 away from zero like a display would, rather than Python's banker's rounding.
def _round_half_up(value):
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)
