import math
from st.common.logger import log


# Keeps each participant's committed speaking seconds, plus the start marker of the one turn in flight.
# Works directly on the engine's TimerState dicts; the engine swaps `state` when it rebuilds it.
class ParticipantTracker:

    def __init__(self, clock, state=None):
        self._clock = clock
        self.state = state

    @property
    def committed(self):
        return self.state.participant_time_tracker

    @property
    def markers(self):
        return self.state.participant_current_start_time

    # Every participant at zero, nobody mid-turn.
    def seed(self, participants):
        self.state.participant_time_tracker = {name: 0 for name in participants}
        self.state.participant_current_start_time = {name: None for name in participants}

    # Adopts a new roster. Names that stay keep their totals, new names start at zero, removed names go.
    # Any in-flight turn must already be committed.
    def sync(self, participants):
        committed = {name: self.committed.get(name, 0) for name in participants}
        dropped = [name for name in self.committed if name not in committed]
        self.state.participant_time_tracker = committed
        self.state.participant_current_start_time = {name: None for name in participants}
        if dropped:
            log.debug(f"Dropped tracked time for removed participants: {', '.join(dropped)}")

    def start_turn(self, name):
        if not name:
            return
        self.markers[name] = self._clock.now()

    # Folds an in-flight turn into the committed total. Returns the whole seconds added.
    def commit_turn(self, name):
        if not name:
            return 0
        started = self.markers.get(name)
        if started is None:
            return 0
        spent = math.floor((self._clock.now() - started) / 1000)
        self.committed[name] = self.committed.get(name, 0) + spent
        self.markers[name] = None
        return spent

    def reset(self, name):
        if not name:
            return
        self.committed[name] = 0

    # Committed time, plus the running turn only for the current, unpaused participant. Display, totals and
    # the summary all go through here.
    def live_time(self, name, current_name, is_paused):
        total = self.committed.get(name, 0)
        started = self.markers.get(name)
        if name == current_name and started is not None and not is_paused:
            total += math.floor((self._clock.now() - started) / 1000)
        return total

    # Sum of live time across the roster. Duplicate names share one tracker entry so they count once.
    def total_time(self, participants, current_name, is_paused):
        return sum(self.live_time(name, current_name, is_paused) for name in dict.fromkeys(participants))
