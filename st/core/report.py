import json
from dataclasses import asdict
from datetime import datetime
from st.common.logger import log
from st.common.setup import PATHS
from st.util import format_time, now_iso

COMPLETED_DIR = PATHS.sessions


# Builds a self-contained report of the meeting so far: settings, per-participant summary and totals.
def build_report(engine):
    settings = engine.get_settings()
    return {
        "meta": {
            "saved_at": now_iso(),
            "is_completed_session": True,
        },
        "settings": settings.to_dict(),
        "time_per_participant": engine.get_time_per_participant(),
        "total_time": engine.get_total_time(),
        "total_time_display": format_time(engine.get_total_time()),
        "participants": [asdict(item) for item in engine.get_summary()],
    }


# Saves the report as a timestamped file in the completed sessions folder and returns its path.
def save_report(engine, directory=None):
    report = build_report(engine)
    directory = directory or COMPLETED_DIR
    directory.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    final_path = directory / f"session_{ts}.json"
    with open(final_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)
    log.info(f"Saved completed session report to '{final_path}'")
    return final_path
