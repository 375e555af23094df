from PySide6.QtGui import QColor, QIcon, QPixmap
from PySide6.QtWidgets import QApplication, QMenu, QSystemTrayIcon
from st.common.logger import log
from st.ui.theme import THEME


# Plain accent-colored square, used until the app ships a real icon file.
def _tray_icon():
    pixmap = QPixmap(16, 16)
    pixmap.fill(QColor(THEME["accent"]))
    return QIcon(pixmap)


# Tray entry that stays available while the overlay is hidden: Show Timer, Hide Timer and Quit.
# Clicking the icon itself toggles the overlay.
class TimerTray(QSystemTrayIcon):

    def __init__(self, window, parent=None):
        super().__init__(_tray_icon(), parent)
        self.window = window
        self.setToolTip("Standup Timer")

        # setContextMenu doesn't take ownership, so keep a reference
        self._menu = QMenu()
        self.show_action = self._menu.addAction("Show Timer")
        self.show_action.triggered.connect(lambda _=False: self.show_timer())
        self.hide_action = self._menu.addAction("Hide Timer")
        self.hide_action.triggered.connect(lambda _=False: self.hide_timer())
        self._menu.addSeparator()
        self.quit_action = self._menu.addAction("Quit")
        self.quit_action.triggered.connect(lambda _=False: QApplication.quit())
        self.setContextMenu(self._menu)

        self.activated.connect(self._on_activated)

    def show_timer(self):
        self.window.showNormal()
        self.window.raise_()
        self.window.activateWindow()
        log.debug("Overlay shown from tray")

    def hide_timer(self):
        self.window.hide()
        log.debug("Overlay hidden from tray")

    def _on_activated(self, reason):
        if reason != QSystemTrayIcon.Trigger:
            return
        if self.window.isVisible():
            self.hide_timer()
        else:
            self.show_timer()
