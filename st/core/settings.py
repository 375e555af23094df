"""Timer settings: an immutable snapshot replaced wholesale on every update."""

from dataclasses import dataclass, fields, replace


class TimerMode:
    COUNTDOWN = "countdown"
    COUNTUP = "countup"

    ALL = (COUNTDOWN, COUNTUP)


@dataclass(frozen=True)
class Settings:
    participants: tuple = ()
    total_time: float = 15          # minutes, for the whole roster
    timer_mode: str = TimerMode.COUNTDOWN
    host_url: str = "linear.app"
    show_timer: bool = True

    def to_dict(self):
        return {
            "participants": list(self.participants),
            "total_time": self.total_time,
            "timer_mode": self.timer_mode,
            "host_url": self.host_url,
            "show_timer": self.show_timer,
        }


DEFAULT_SETTINGS = Settings()
SETTINGS_KEYS = tuple(f.name for f in fields(Settings))


# Overlays the known keys of `changes` onto `base` (defaults if not given). Unknown keys are dropped.
def create_settings(base=None, **changes):
    base = base or DEFAULT_SETTINGS
    known = {k: v for k, v in changes.items() if k in SETTINGS_KEYS}
    if "participants" in known:
        known["participants"] = tuple(known["participants"] or ())
    return replace(base, **known)


def parse_participants(text):
    """Split newline-separated names, trimming whitespace and dropping blanks."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def validate_settings(participants, total_time, timer_mode=TimerMode.COUNTDOWN):
    """Return a list of problems with user-entered settings; empty when they are usable.

    The engine trusts whatever it is given, so anything collecting settings from
    a person runs them through here first.
    """
    problems = []
    if not [p for p in participants if p and p.strip()]:
        problems.append("Please add at least one participant")
    if isinstance(total_time, bool) or not isinstance(total_time, (int, float)) or total_time < 1:
        problems.append("Total time must be at least 1 minute")
    if timer_mode not in TimerMode.ALL:
        problems.append(f"Timer mode must be one of: {', '.join(TimerMode.ALL)}")
    return problems
