"""Settings and summary dialogs for the overlay."""

from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
)
from st.core.settings import TimerMode, parse_participants, validate_settings
from st.ui.theme import THEME

_MODE_LABELS = {TimerMode.COUNTDOWN: "Countdown", TimerMode.COUNTUP: "Count up"}


# Edits the persisted settings. Validation happens here, before anything reaches the engine, and the dialog
# stays open until the input is usable.
class SettingsDialog(QDialog):

    def __init__(self, parent, settings):
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)
        self.setModal(True)

        # Output attribute, read by the overlay after the dialog is accepted
        self.chosen = None

        lay = QVBoxLayout(self)

        lay.addWidget(QLabel("Participants (one per line):"))
        self._participants = QPlainTextEdit("\n".join(settings.participants))
        self._participants.setMinimumHeight(140)
        lay.addWidget(self._participants)

        grid = QGridLayout()
        grid.addWidget(QLabel("Total time (minutes):"), 0, 0)
        self._total_time = QSpinBox()
        self._total_time.setRange(1, 24 * 60)
        self._total_time.setValue(max(1, int(settings.total_time)))
        grid.addWidget(self._total_time, 0, 1)

        grid.addWidget(QLabel("Timer mode:"), 1, 0)
        self._mode = QComboBox()
        for mode in TimerMode.ALL:
            self._mode.addItem(_MODE_LABELS[mode], mode)
        self._mode.setCurrentIndex(max(0, self._mode.findData(settings.timer_mode)))
        grid.addWidget(self._mode, 1, 1)

        grid.addWidget(QLabel("Host URL:"), 2, 0)
        self._host_url = QLineEdit(settings.host_url)
        grid.addWidget(self._host_url, 2, 1)

        self._show_timer = QCheckBox("Show timer")
        self._show_timer.setChecked(settings.show_timer)
        grid.addWidget(self._show_timer, 3, 0, 1, 2)
        lay.addLayout(grid)

        btn_row = QHBoxLayout()
        btn_row.addStretch()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        btn_row.addWidget(cancel_btn)
        save_btn = QPushButton("Save")
        save_btn.setDefault(True)
        save_btn.clicked.connect(self._apply)
        btn_row.addWidget(save_btn)
        lay.addLayout(btn_row)

    def _apply(self):
        participants = parse_participants(self._participants.toPlainText())
        total_time = self._total_time.value()
        timer_mode = self._mode.currentData()
        problems = validate_settings(participants, total_time, timer_mode)
        if problems:
            QMessageBox.warning(self, "Invalid settings", "\n".join(problems))
            return
        self.chosen = {
            "participants": participants,
            "total_time": total_time,
            "timer_mode": timer_mode,
            "host_url": self._host_url.text().strip(),
            "show_timer": self._show_timer.isChecked(),
        }
        self.accept()


# Read-only end-of-meeting report: one row per participant with time taken against their allocation.
class SummaryDialog(QDialog):

    def __init__(self, parent, summary, total_display, on_save=None):
        super().__init__(parent)
        self.setWindowTitle("Summary")
        self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)

        lay = QVBoxLayout(self)
        grid = QGridLayout()
        grid.setHorizontalSpacing(16)
        for row, item in enumerate(summary):
            name = QLabel(item.name + ("  (current)" if item.is_current else ""))
            if item.is_current:
                bold = QFont(name.font())
                bold.setBold(True)
                name.setFont(bold)
            taken = QLabel(f"{item.time_taken_display} / {item.total_allocation_display}")
            pct = QLabel(f"{item.percentage}%")
            if item.is_over:
                for lbl in (taken, pct):
                    lbl.setStyleSheet(f"color: {THEME['over']};")
            grid.addWidget(name, row, 0)
            grid.addWidget(taken, row, 1, Qt.AlignRight)
            grid.addWidget(pct, row, 2, Qt.AlignRight)
        lay.addLayout(grid)

        total = QLabel(f"Total: {total_display}")
        total.setObjectName("muted")
        lay.addWidget(total)

        btn_row = QHBoxLayout()
        btn_row.addStretch()
        if on_save is not None:
            save_btn = QPushButton("Save report")
            save_btn.clicked.connect(on_save)
            btn_row.addWidget(save_btn)
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        btn_row.addWidget(close_btn)
        lay.addLayout(btn_row)
