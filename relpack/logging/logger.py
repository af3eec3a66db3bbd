# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for relpack.

Every line the tool emits is a single JSON object: timestamped, leveled, and
tagged with the logger name. A release run is usually executed by CI, so the
output has to be machine-readable first and human-readable second.

How this works:
  - Python's standard `logging` module does the routing, but the default
    formatter is replaced with JsonFormatter, which serializes every record
    into one JSON line.
  - A stdout handler is always attached; a file handler is added on request.
  - The CLI calls `configure_logging` once, which attaches the handlers to the
    top-level `relpack` logger. Library modules take plain child loggers with
    `logging.getLogger(__name__)` so they inherit the configured level and
    handlers.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "relpack.release.pipeline", "msg": "Archive created", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Attributes every LogRecord carries. Anything else on the record came in
# through `extra=` and belongs in the JSON output.
_STANDARD_RECORD_ATTRS: frozenset[str] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "relativeCreated",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "pathname",
        "filename",
        "module",
        "levelno",
        "levelname",
        "processName",
        "process",
        "threadName",
        "thread",
        "message",
        "msecs",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each entry contains four mandatory fields:
      ts     : ISO 8601 UTC timestamp
      level  : log level name
      module : the logger name (usually the Python module path)
      msg    : the formatted message string

    Fields passed through `extra=` are merged in as additional context, which
    is how the pipeline attaches artifact names, sizes and hashes. When an
    exception is attached, its formatted traceback goes under "exc".
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    Calling this again for the same name updates the level but does not stack
    another set of handlers on top of the existing ones.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  stdout and the file.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = JsonFormatter()

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def configure_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure the root `relpack` logger once per process.

    Module-level loggers are children of it, so their records inherit this
    level and these handlers.
    """
    return get_logger("relpack", log_level=log_level, log_file=log_file)
