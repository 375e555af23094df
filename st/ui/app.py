import sys
from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QApplication,
    QDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QSystemTrayIcon,
    QVBoxLayout,
    QWidget,
)
from st.common.logger import log
from st.core.engine import TimerEngine
from st.core.events import TimerEventType
from st.core.report import save_report
from st.core.storage import JsonFileStorage, StorageError
from st.ui.dialogs import SettingsDialog, SummaryDialog
from st.ui.theme import THEME, build_stylesheet
from st.ui.tray import TimerTray


# ---------------------------------------------------------------------------
# Overlay window
# ---------------------------------------------------------------------------

# Small always-on-top window showing whose turn it is and how their time is going. Renders purely from
# engine reads, refreshed on every engine event.
class OverlayWindow(QMainWindow):

    def __init__(self, engine):
        super().__init__()
        self.engine = engine
        self.setWindowTitle("Standup Timer")
        self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)
        self.setStyleSheet(build_stylesheet())

        central = QWidget()
        self.setCentralWidget(central)
        lay = QVBoxLayout(central)
        lay.setContentsMargins(12, 10, 12, 10)
        lay.setSpacing(6)

        # -- Header: name + minimize --
        header = QHBoxLayout()
        self._name_lbl = QLabel("-")
        name_font = self._name_lbl.font()
        name_font.setPointSize(14)
        name_font.setBold(True)
        self._name_lbl.setFont(name_font)
        header.addWidget(self._name_lbl, 1)
        self._minimize_btn = QPushButton("−")
        self._minimize_btn.setToolTip("Minimize")
        self._minimize_btn.clicked.connect(self.engine.toggle_minimized)
        header.addWidget(self._minimize_btn)
        lay.addLayout(header)

        # -- Body, hidden while minimized --
        self._body = QWidget()
        body = QVBoxLayout(self._body)
        body.setContentsMargins(0, 0, 0, 0)

        self._info_lbl = QLabel("")
        self._info_lbl.setObjectName("muted")
        body.addWidget(self._info_lbl)

        self._time_lbl = QLabel("00:00")
        time_font = self._time_lbl.font()
        time_font.setPointSize(28)
        self._time_lbl.setFont(time_font)
        self._time_lbl.setAlignment(Qt.AlignCenter)
        body.addWidget(self._time_lbl)

        self._progress = QProgressBar()
        self._progress.setRange(0, 100)
        self._progress.setTextVisible(False)
        body.addWidget(self._progress)

        self._time_info_lbl = QLabel("")
        self._time_info_lbl.setObjectName("muted")
        body.addWidget(self._time_info_lbl)

        self._total_lbl = QLabel("")
        self._total_lbl.setObjectName("muted")
        body.addWidget(self._total_lbl)

        controls = QHBoxLayout()
        for text, tip, slot in (
                ("⏮", "Previous", self.engine.previous_participant),
                ("⏸", "Pause", self.engine.toggle_pause),
                ("⏭", "Next", self.engine.next_participant),
                ("↺", "Reset current", self.engine.reset_current_participant),
                ("☰", "Summary", self._on_summary),
                ("⚙", "Settings", self._on_settings),
        ):
            btn = QPushButton(text)
            btn.setToolTip(tip)
            btn.clicked.connect(lambda _=False, s=slot: s())
            controls.addWidget(btn)
            if tip == "Pause":
                self._pause_btn = btn
        body.addLayout(controls)
        lay.addWidget(self._body)

        # -- Minimized strip --
        self._min_lbl = QLabel("")
        self._min_lbl.setVisible(False)
        lay.addWidget(self._min_lbl)

        for event_type in TimerEventType:
            self.engine.on(event_type, self._on_engine_event)
        self._refresh()

    # ------------------------------------------------------------------ #
    #  Rendering                                                           #
    # ------------------------------------------------------------------ #

    def _on_engine_event(self, event):
        if event.type == TimerEventType.TIME_UP:
            log.debug(f"Time up shown for participant index {event.state.current_participant_index}")
        elif event.type == TimerEventType.SETTINGS_CHANGED and self.isVisible() != event.settings.show_timer:
            self.setVisible(event.settings.show_timer)
        self._refresh()
        if event.type != TimerEventType.TICK:
            self.adjustSize()

    def _refresh(self):
        settings = self.engine.get_settings()
        state = self.engine.get_state()
        if not settings.participants:
            self._name_lbl.setText("No participants")
            self._info_lbl.setText("Open settings to add some.")
            return

        name = self.engine.get_current_participant() or "-"
        display = self.engine.get_display_time()
        total = self.engine.get_total_time_display()

        self._name_lbl.setText(name)
        self._info_lbl.setText(
            f"Participant {state.current_participant_index + 1} of {len(settings.participants)}")
        self._time_lbl.setText(display.time)
        self._time_lbl.setStyleSheet(f"color: {THEME['warning']};" if display.is_warning else "")
        self._progress.setValue(int(display.progress))
        self._time_info_lbl.setText(self.engine.get_current_participant_time_display())
        self._total_lbl.setText(f"Total: {total}")
        self._min_lbl.setText(f"{display.time}  ·  Total: {total}")

        self._pause_btn.setText("▶" if state.is_paused else "⏸")
        self._pause_btn.setToolTip("Start" if state.is_paused else "Pause")

        self._body.setVisible(not state.is_minimized)
        self._min_lbl.setVisible(state.is_minimized)
        self._minimize_btn.setText("+" if state.is_minimized else "−")
        self._minimize_btn.setToolTip("Maximize" if state.is_minimized else "Minimize")

    # ------------------------------------------------------------------ #
    #  Dialogs                                                             #
    # ------------------------------------------------------------------ #

    def _on_settings(self):
        previous = self.engine.get_settings()
        dialog = SettingsDialog(self, previous)
        if dialog.exec() != QDialog.Accepted or dialog.chosen is None:
            return
        try:
            self.engine.update_settings(**dialog.chosen)
        except StorageError as e:
            QMessageBox.warning(self, "Save Error", f"Failed to save settings:\n{e}")
            return
        # New roster means a new meeting
        if self.engine.get_settings().participants != previous.participants or not self.engine.is_running:
            self.engine.start()

    def _on_summary(self):
        dialog = SummaryDialog(
            self, self.engine.get_summary(), self.engine.get_total_time_display(),
            on_save=self._on_save_report)
        dialog.exec()

    def _on_save_report(self):
        try:
            path = save_report(self.engine)
        except OSError as e:
            log.error("Failed to save session report", exc_info=True)
            QMessageBox.warning(self, "Save Error", f"Failed to save report:\n{e}")
            return
        QMessageBox.information(self, "Report saved", f"Saved to:\n{path}")

    # ------------------------------------------------------------------ #
    #  Window close                                                        #
    # ------------------------------------------------------------------ #

    def closeEvent(self, event):
        self.engine.stop()
        self.engine.remove_all_listeners()
        event.accept()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    app = QApplication(sys.argv)
    engine = TimerEngine(storage=JsonFileStorage())
    engine.initialize()
    window = OverlayWindow(engine)
    app.aboutToQuit.connect(engine.stop)

    tray = TimerTray(window, app)
    if QSystemTrayIcon.isSystemTrayAvailable():
        tray.show()
        window.setVisible(engine.get_settings().show_timer)
    elif engine.get_settings().show_timer:
        window.show()
    else:
        # Nothing to bring a hidden window back without a tray
        log.warning("No system tray available, starting the overlay minimized instead of hidden")
        window.showMinimized()
    if engine.get_settings().participants:
        engine.start()
    sys.exit(app.exec())
