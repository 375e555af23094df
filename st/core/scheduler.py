from PySide6.QtCore import QTimer
from st.common.logger import log

TICK_INTERVAL_MS = 100


# Repeating tick driven by a Qt timer. Only samples; the callback recomputes everything from timestamps, so a
# late or skipped tick loses nothing.
class Scheduler:

    def __init__(self, callback, interval_ms=TICK_INTERVAL_MS):
        self._callback = callback
        self.interval_ms = interval_ms
        self._timer = None

    @property
    def is_active(self):
        return self._timer is not None and self._timer.isActive()

    # Arms the tick, replacing any previously armed one.
    def start(self):
        self.stop()
        self._timer = QTimer()
        self._timer.setInterval(self.interval_ms)
        self._timer.timeout.connect(self.tick)
        self._timer.start()
        log.debug(f"Scheduler armed at {self.interval_ms}ms")

    def stop(self):
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
            log.debug("Scheduler stopped")

    def tick(self):
        self._callback()
