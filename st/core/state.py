"""Runtime timer state. Owned by one engine; observers only ever see copies."""

import copy
from dataclasses import dataclass, field


@dataclass
class TimerState:
    current_participant_index: int = 0
    elapsed_time: int = 0                     # seconds in the current turn
    is_paused: bool = False
    is_minimized: bool = False
    participant_time_tracker: dict = field(default_factory=dict)
    participant_current_start_time: dict = field(default_factory=dict)

    # Independent deep copy, safe to hand to listeners and callers.
    def snapshot(self):
        return copy.deepcopy(self)

