# src/config/logging_config.py

"""Logging for tracker runs.

Every run writes its own file, ``logs/run_<YYYYMMDD_HHMMSS>.log``, holding
DEBUG output from all ``price_tracker.*`` loggers.  A second handler sends
per-item progress, failures and the run summary to stderr at
``CONSOLE_LOG_LEVEL`` so that cron mail and CI logs show them.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_ROOT_LOGGER = "price_tracker"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _console_level() -> int:
    """Resolve the configured console level name, defaulting to INFO."""
    level = logging.getLevelName(Settings.CONSOLE_LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.INFO


def _run_log_path() -> Path:
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return logs_dir / f"run_{stamp}.log"


def _file_handler(log_file: Path) -> logging.Handler:
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, _DATE_FORMAT))
    return handler


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_console_level())
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT, _DATE_FORMAT))
    return handler


def setup_logging() -> Path:
    """Attach the run-file and console handlers to ``price_tracker``.

    Calling it again (tests, re-entry from ``main``) leaves the existing
    handlers in place.

    Returns:
        Path of this run's log file.
    """
    log_file = _run_log_path()
    tracker_logger = logging.getLogger(_ROOT_LOGGER)
    tracker_logger.setLevel(logging.DEBUG)
    if tracker_logger.handlers:
        return log_file

    tracker_logger.addHandler(_file_handler(log_file))
    tracker_logger.addHandler(_console_handler())
    tracker_logger.debug("Run log: %s", log_file)
    return log_file
