"""Wall-clock sources for the timer engine. Times are epoch milliseconds."""

import time


class SystemClock:
    """Reads the real wall clock."""

    def now(self):
        return time.time() * 1000


class ManualClock:
    """A clock that only moves when told to. Used for simulation and tests."""

    def __init__(self, start_ms=0.0):
        self._now = float(start_ms)

    def now(self):
        return self._now

    def advance(self, seconds):
        self._now += seconds * 1000

    def set(self, ms):
        self._now = float(ms)
