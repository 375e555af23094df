import math


# Turns a turn-start timestamp plus seconds banked before the last pause into the current turn's elapsed
# seconds. Every resume re-anchors the origin instead of stacking offsets, so pause/resume cycles don't drift.
class TimeAccumulator:

    def __init__(self, clock):
        self._clock = clock
        self._origin = None         # ms timestamp the current turn counts from
        self._banked = 0            # whole seconds banked by the last pause
        self._pause_started = None
        self.paused = False

    # Seconds elapsed in the current turn. Frozen at the banked value while paused.
    def elapsed(self):
        if self.paused or self._origin is None:
            return self._banked
        return math.floor((self._clock.now() - self._origin) / 1000) + self._banked

    @property
    def started(self):
        return self._origin is not None

    @property
    def paused_since(self):
        return self._pause_started

    # Fresh running turn from now.
    def start(self):
        self._origin = self._clock.now()
        self._banked = 0
        self._pause_started = None
        self.paused = False

    # Fresh turn from now, keeping whatever paused flag is set.
    def restart(self):
        self._origin = self._clock.now()
        self._banked = 0

    def pause(self):
        if self.paused:
            return self._banked
        self._banked = self.elapsed()
        self._pause_started = self._clock.now()
        self.paused = True
        return self._banked

    def resume(self):
        if not self.paused:
            return
        self._origin = self._clock.now() - self._banked * 1000
        self._banked = 0
        self._pause_started = None
        self.paused = False
