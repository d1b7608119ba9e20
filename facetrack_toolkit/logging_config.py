from __future__ import annotations

"""Logging set-up for FaceTrack Toolkit.

Call :func:`setup_logging` once, before the repository is built. The
``logging`` section of the YAML config is a :func:`logging.config.dictConfig`
mapping; every file handler in it is pointed at ``<log dir>/app.log``.

Environment:
    FACETRACK_LOG_DIR        folder for ``app.log`` (default ``logs``)
    FACETRACK_DEBUG_MODULES  comma separated logger names forced to DEBUG
"""

import copy
import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from facetrack_toolkit.config import ConfigManager

__all__ = ["setup_logging"]

LOG_DIR_ENV = "FACETRACK_LOG_DIR"
DEBUG_MODULES_ENV = "FACETRACK_DEBUG_MODULES"
LOG_FILE_NAME = "app.log"

_LINE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_CONSOLE_ONLY: Dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {"plain": {"format": _LINE_FORMAT}},
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain", "level": "INFO"},
    },
    "root": {"level": "INFO", "handlers": ["console"]},
}


def setup_logging(log_dir: Optional[Path] = None) -> Optional[Path]:
    """Configure logging from the YAML ``logging`` section.

    Returns the log file in use, or None when the console-only fallback
    was applied.
    """
    log_dir = Path(log_dir or os.environ.get(LOG_DIR_ENV, "logs"))
    log_file = log_dir / LOG_FILE_NAME

    try:
        config = ConfigManager().get_logging_config()
        if not isinstance(config, dict) or not config.get("version"):
            raise ValueError("logging section is not a dictConfig mapping")
        log_dir.mkdir(parents=True, exist_ok=True)
        logging.config.dictConfig(_with_log_file(config, log_file))
    except (ValueError, TypeError, AttributeError, ImportError, OSError) as exc:
        logging.config.dictConfig(_CONSOLE_ONLY)
        logging.getLogger(__name__).warning("Console-only logging, config rejected: %s", exc)
        log_file = None
    else:
        logging.getLogger(__name__).info("Logging to %s", log_file)

    _enable_debug_loggers(_debug_logger_names())
    return log_file


def _with_log_file(config: Dict[str, Any], log_file: Path) -> Dict[str, Any]:
    """Copy of *config* whose file handlers all write to *log_file*."""
    config = copy.deepcopy(config)
    for handler in (config.get("handlers") or {}).values():
        if "FileHandler" in str(handler.get("class", "")):
            handler["filename"] = str(log_file)
    return config


def _debug_logger_names() -> List[str]:
    raw = os.environ.get(DEBUG_MODULES_ENV, "")
    return [name.strip() for name in raw.split(",") if name.strip()]


def _enable_debug_loggers(names: List[str]) -> None:
    for name in names:
        target = logging.getLogger(name)
        target.setLevel(logging.DEBUG)
        if not any(h.level <= logging.DEBUG for h in target.handlers):
            handler = logging.StreamHandler()
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter(_LINE_FORMAT))
            target.addHandler(handler)
        target.debug("DEBUG forced by %s", DEBUG_MODULES_ENV)
