"""Leveled file logging for lazybeads.

The terminal belongs to the TUI, so log lines only ever go to a file. With no
file configured, messages are dropped after level filtering.

Format: ``[YYYY-mm-dd HH:MM:SS] LEVEL: message``
"""

from __future__ import annotations

import os
import threading
from datetime import datetime

LEVELS = {
    "DEBUG": 1,
    "INFO": 2,
    "WARN": 3,
    "ERROR": 4,
}

_min_level = LEVELS["INFO"]
_log_file: str | None = None
_lock = threading.Lock()


def init(log_level: str = "INFO", log_file: str | None = None) -> None:
    """Configure level filtering and the output file.

    Args:
        log_level: One of DEBUG, INFO, WARN, ERROR (case-insensitive).
            Unknown names fall back to INFO. A non-empty DEBUG environment
            variable forces DEBUG.
        log_file: Path to append log lines to. Defaults to $LAZYBEADS_LOG.
    """
    global _min_level, _log_file
    level = log_level.upper()
    if level == "WARNING":
        level = "WARN"
    _min_level = LEVELS.get(level, LEVELS["INFO"])
    if os.environ.get("DEBUG"):
        _min_level = LEVELS["DEBUG"]
    _log_file = log_file or os.environ.get("LAZYBEADS_LOG") or None


def _format(level: str, message: str) -> str:
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return f"[{timestamp}] {level}: {message}"


def _emit(level: str, message: str) -> None:
    if LEVELS[level] < _min_level or not _log_file:
        return
    line = _format(level, message)
    with _lock:
        try:
            with open(_log_file, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError:
            pass  # Unwritable log file


def log(message: str) -> None:
    """Log at INFO level."""
    _emit("INFO", message)


def log_debug(message: str) -> None:
    _emit("DEBUG", message)


def log_warn(message: str) -> None:
    _emit("WARN", message)


def log_error(message: str) -> None:
    _emit("ERROR", message)
