import logging
import os
from pathlib import Path
from logging.handlers import RotatingFileHandler
from st.common.setup import PATHS
from datetime import datetime

LOG_NAME = "standuptimer"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(filename)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Set to 1/true/yes/on to mirror the log to stderr, e.g. when running from a terminal
CONSOLE_ENV = "STANDUP_TIMER_LOG_CONSOLE"


def _has_handler(logger, handler_name):
    return any(h.get_name() == handler_name for h in logger.handlers)


def _attach(logger, handler, handler_name, level, fmt):
    handler.setLevel(level)
    handler.setFormatter(fmt)
    handler.set_name(handler_name)
    logger.addHandler(handler)


# Keeps the newest `keep` per-run logs and deletes the rest.
def _prune_runs(run_dir: Path, name, keep):
    runs = sorted(run_dir.glob(f"{name}_*.log"), key=lambda p: p.stat().st_mtime, reverse=True)
    for run in runs[keep:]:
        try: run.unlink()
        except OSError: pass


def console_enabled(environ=None):
    value = (environ if environ is not None else os.environ).get(CONSOLE_ENV, "")
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_logger(
        name = LOG_NAME,
        level = logging.INFO,
        log_dir: Path | None = None,
        max_bytes = 2 * 1024 * 1024,
        backup_count = 3,
        console = False,
        run_logs: int = 10
) -> logging.Logger:
    """Named logger writing to a rotating log, a latest.log that only holds the current run, and one DEBUG
    file per run under runs/. Calling it again for the same name never stacks duplicate handlers."""
    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(level)

    log_dir = log_dir or PATHS.logs
    log_dir.mkdir(parents=True, exist_ok=True)
    fmt = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    if not _has_handler(logger, f"{name}:persistent"):
        handler = RotatingFileHandler(
            filename=log_dir / f"{name}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        _attach(logger, handler, f"{name}:persistent", level, fmt)

    if not _has_handler(logger, f"{name}:latest"):
        handler = logging.FileHandler(log_dir / "latest.log", mode="w", encoding="utf-8")
        _attach(logger, handler, f"{name}:latest", level, fmt)

    if run_logs > 0 and not _has_handler(logger, f"{name}:run"):
        run_dir = log_dir / "runs"
        run_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(run_dir / f"{name}_{datetime.now():%Y-%m-%d_%H-%M-%S}.log", encoding="utf-8")
        _attach(logger, handler, f"{name}:run", logging.DEBUG, fmt)
        _prune_runs(run_dir, name, run_logs)

    if console and not _has_handler(logger, f"{name}:console"):
        _attach(logger, logging.StreamHandler(), f"{name}:console", level, fmt)

    return logger


log = get_logger(level=logging.DEBUG, console=console_enabled(), run_logs=10)
