"""Synchronous publish/subscribe for timer state changes."""

from dataclasses import dataclass
from enum import Enum

from st.core.settings import Settings
from st.core.state import TimerState


class TimerEventType(str, Enum):
    TICK = "tick"
    PARTICIPANT_CHANGED = "participantChanged"
    PAUSED = "paused"
    RESUMED = "resumed"
    RESET = "reset"
    TIME_UP = "timeUp"
    SETTINGS_CHANGED = "settingsChanged"
    STATE_CHANGED = "stateChanged"


@dataclass(frozen=True)
class TimerEvent:
    """What a listener receives: the event kind plus copies of state and settings at emit time."""
    type: TimerEventType
    state: TimerState
    settings: Settings


class EventBus:
    """Observer lists keyed by event type. Listeners run in subscription order on the caller's thread."""

    def __init__(self):
        self._listeners = {}

    @staticmethod
    def _coerce(event_type):
        try:
            return TimerEventType(event_type)
        except ValueError:
            raise ValueError(f"Unknown timer event type: {event_type!r}") from None

    def on(self, event_type, listener):
        listeners = self._listeners.setdefault(self._coerce(event_type), [])
        if listener not in listeners:
            listeners.append(listener)

    def off(self, event_type, listener):
        listeners = self._listeners.get(self._coerce(event_type), [])
        if listener in listeners:
            listeners.remove(listener)

    def clear(self):
        self._listeners.clear()

    def emit(self, event_type, state, settings):
        event_type = self._coerce(event_type)
        listeners = self._listeners.get(event_type)
        if not listeners:
            return None
        event = TimerEvent(type=event_type, state=state.snapshot(), settings=settings)
        # Iterate a copy so listeners may unsubscribe themselves
        for listener in list(listeners):
            listener(event)
        return event
