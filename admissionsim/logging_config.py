"""Logging configuration helpers for admissionsim.

The library is silent by default (a NullHandler is attached to the
``admissionsim`` logger on import). Call one of these helpers to see output.

What gets logged:
    INFO   dispatcher  derived concurrency limit, once per run
    INFO   simulation  run start and finish with the pipeline counters
    DEBUG  simulation  one progress line per sample interval
    DEBUG  consumer    several completions caught up in one tick
    ERROR  any         rejected configuration, just before ConfigurationError

Example usage:
    import admissionsim

    admissionsim.enable_console_logging(level="INFO")
    admissionsim.set_module_level("simulation", "DEBUG")

    # One JSON object per line; progress lines carry sim_time_s and backlog
    admissionsim.enable_json_logging(level="DEBUG")

Environment variables (read by configure_from_env):
    ADMISSIONSIM_LOGGING: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    ADMISSIONSIM_LOG_FILE: Path to log file (enables rotating file logging)
    ADMISSIONSIM_LOG_JSON: Set to "1" for JSON output
"""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Literal

__all__ = [
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

LOGGER_NAME = "admissionsim"

ENV_LEVEL = "ADMISSIONSIM_LOGGING"
ENV_FILE = "ADMISSIONSIM_LOG_FILE"
ENV_JSON = "ADMISSIONSIM_LOG_JSON"

# Simulation state attached to records through ``extra=``
CONTEXT_FIELDS = ("sim_time_s", "backlog", "in_service", "concurrency_limit")

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with any simulation context fields.

    Example output:
        {"timestamp": "2026-01-15T10:30:00.123456+00:00", "level": "DEBUG",
         "logger": "admissionsim.simulation", "message": "   2.000s  queued 998/998 ...",
         "sim_time_s": 2.0, "backlog": 998, "in_service": 3}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def _level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def _attach(handler: logging.Handler, level: LogLevel | int, formatter: logging.Formatter) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level(level))
    handler.setLevel(_level(level))
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def enable_console_logging(level: LogLevel | int = "INFO", format: str = DEFAULT_FORMAT) -> logging.StreamHandler:
    """Log admissionsim output to stderr."""
    handler = logging.StreamHandler()
    _attach(handler, level, logging.Formatter(format))
    return handler


def enable_file_logging(
    path: str | Path,
    level: LogLevel | int = "INFO",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    json_lines: bool = False,
) -> RotatingFileHandler:
    """Log to a size-rotated file, creating parent directories.

    Args:
        path: Log file path.
        level: Log level name or number.
        max_bytes: Size at which the file rolls over.
        backup_count: Rolled-over files to keep.
        json_lines: Write JsonFormatter records instead of plain text.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    _attach(handler, level, JsonFormatter() if json_lines else logging.Formatter(DEFAULT_FORMAT))
    return handler


def enable_json_logging(level: LogLevel | int = "INFO") -> logging.StreamHandler:
    """Log JSON lines to stderr."""
    handler = logging.StreamHandler()
    _attach(handler, level, JsonFormatter())
    return handler


def configure_from_env() -> None:
    """Configure logging from the ADMISSIONSIM_* environment variables.

    Does nothing when neither a level nor a log file is set.
    """
    level = os.environ.get(ENV_LEVEL, "").upper()
    log_file = os.environ.get(ENV_FILE, "")
    use_json = os.environ.get(ENV_JSON, "") == "1"

    if not level and not log_file:
        return

    level = level or "INFO"
    if log_file:
        enable_file_logging(log_file, level=level, json_lines=use_json)
    elif use_json:
        enable_json_logging(level=level)
    else:
        enable_console_logging(level=level)


def set_level(level: LogLevel | int) -> None:
    """Set the level of the admissionsim root logger."""
    logging.getLogger(LOGGER_NAME).setLevel(_level(level))


def set_module_level(module: str, level: LogLevel | int) -> None:
    """Set the level for one submodule, e.g. ``"simulation"`` or ``"components.dispatcher"``."""
    logging.getLogger(f"{LOGGER_NAME}.{module}").setLevel(_level(level))


def disable_logging() -> None:
    """Close every attached handler and silence the library."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.CRITICAL + 1)
