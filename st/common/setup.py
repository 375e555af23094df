import os
import sys
from pathlib import Path
from dataclasses import dataclass

# Lil helper function to create missing directories if missing, and optionally error out when a path
# doesn't exist.
def ensure_directory(path: Path,must_exist=False):
    if must_exist:
        if not path.exists():
            raise FileNotFoundError(f"Required directory is missing: {path}")
        if not path.is_dir():
            raise NotADirectoryError(f"Expected a directory, got a file: {path}")
    else:
        path.mkdir(parents=True,exist_ok=True)
    return path

# Picks the per-user data folder. STANDUP_TIMER_HOME wins, then APPDATA on Windows, then a dotfolder in home.
def _resolve_data_root():
    override = os.getenv("STANDUP_TIMER_HOME")
    if override:
        return Path(override)
    appdata = os.getenv("APPDATA")
    if appdata:
        return Path(appdata) / "StandupTimer"
    return Path.home() / ".standup-timer"

# Dataclass for accessing paths across program.
@dataclass(frozen=False)
class ProjectPaths:

    root: Path
    data: Path

    logs: Path
    current: Path
    sessions: Path

    @staticmethod
    def build():
        # Folder for the install itself. Frozen builds live next to the exe, source runs use the repo root.
        if getattr(sys, "frozen", False):
            root = Path(sys.executable).resolve().parent
        else:
            root = Path(__file__).resolve().parents[2]

        # Folder for all user-specific settings, logs and reports
        data = ensure_directory(_resolve_data_root())

        # Folders within the data folder
        logs = ensure_directory(data / "logs")
        current = ensure_directory(data / "current")
        sessions = ensure_directory(data / "completed_sessions")

        return ProjectPaths(
            root = root,
            data = data,
            logs = logs,
            current = current,
            sessions = sessions
        )
PATHS = ProjectPaths.build()
