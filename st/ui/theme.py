"""Overlay colors and stylesheet."""

THEME = {
    "bg": "#1f2233",
    "text": "#f2f3f8",
    "muted": "#a3a8c3",
    "accent": "#5e6ad2",
    "warning": "#f2994a",
    "over": "#eb5757",
    "button_bg": "#2c3048",
    "button_hover": "#3a3f5c",
    "progress_bg": "#2c3048",
}


def build_stylesheet(t=THEME):
    return f"""
        QWidget {{ background-color: {t['bg']}; color: {t['text']}; }}
        QLabel#muted {{ color: {t['muted']}; }}
        QLabel#warning {{ color: {t['warning']}; }}
        QPushButton {{
            background-color: {t['button_bg']};
            border: none;
            border-radius: 4px;
            padding: 4px 8px;
        }}
        QPushButton:hover {{ background-color: {t['button_hover']}; }}
        QProgressBar {{
            background-color: {t['progress_bg']};
            border: none;
            border-radius: 2px;
            max-height: 4px;
        }}
        QProgressBar::chunk {{ background-color: {t['accent']}; border-radius: 2px; }}
    """
