"""Logging setup for recalculation runs and the CLI.

Everything goes to stdout and to a log file. The level comes from the
LOG_LEVEL env var (DEBUG shows per-scope "already up to date" lines,
WARNING keeps only failures). Unknown values fall back to INFO.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_log_level() -> int:
    """Resolve LOG_LEVEL to a logging constant (default: INFO)."""
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_file: str = "logs/settleup.log", level: Optional[int] = None) -> logging.Logger:
    """Route the root logger to stdout and ``log_file``.

    Calling it again replaces the handlers of the previous call, so the CLI
    and tests can reconfigure freely.

    Args:
        log_file: Log file path; parent directories are created
        level: Explicit level, overrides LOG_LEVEL

    Returns:
        The "settleup" logger
    """
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    if level is None:
        level = get_log_level()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()

    for handler in (logging.StreamHandler(sys.stdout), logging.FileHandler(path)):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)

    return logging.getLogger("settleup")
