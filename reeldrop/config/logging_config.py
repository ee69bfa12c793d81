"""
Logging Configuration

Console plus daily file logging for the whole process:
logs/<YYYY-MM-DD>/logfile-<YYYY-MM-DD>.log
"""

import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_MARKER = "_reeldrop_handler"


def daily_log_path(log_dir: str, today: Optional[date] = None) -> Path:
    stamp = (today or date.today()).strftime("%Y-%m-%d")
    return Path(log_dir) / stamp / f"logfile-{stamp}.log"


def setup_logging(
    log_level: Optional[str] = None,
    log_dir: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger once.

    Args:
        log_level: Level name; defaults to LOG_LEVEL or INFO
        log_dir: Root of the dated log folders; defaults to LOG_DIR or "logs".
            An empty string disables file logging.

    Returns:
        The root logger
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    if log_dir is None:
        log_dir = os.getenv("LOG_DIR", "logs")

    level = getattr(logging, log_level, logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    if any(getattr(h, _HANDLER_MARKER, False) for h in root.handlers):
        return root

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    setattr(console, _HANDLER_MARKER, True)
    root.addHandler(console)

    if log_dir:
        path = daily_log_path(log_dir)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            setattr(file_handler, _HANDLER_MARKER, True)
            root.addHandler(file_handler)
        except OSError as e:
            root.warning(f"File logging disabled, cannot open {path}: {e}")

    return root
