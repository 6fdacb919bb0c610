# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for relpack.

Every log entry is a single JSON line on stdout, timestamped and leveled,
carrying the source module. Context goes in the `extra` kwarg rather than
being formatted into the message, so a CI job can grep for the archive
path or the compiler exit code without parsing prose.

How this works:
  - Python's standard `logging` module does the work. A JsonFormatter
    replaces the default formatter.
  - Handlers live on the single package logger named "relpack". Module
    loggers ("relpack.release.compiler", ...) have no handlers of their own
    and propagate up to it, so one call to get_logger with a level adjusts
    every module at once.
  - get_logger is the only way to create loggers in relpack.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "relpack.release.packaging.packager",
   "msg": "Release archive ready", "archive": "/abs/path.tar.xz"}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "relpack"

# Attributes every LogRecord carries. Anything else came in through `extra`.
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

    Mandatory fields:
      ts    : ISO 8601 UTC timestamp
      level : log level name
      module: the logger name (usually the Python module path)
      msg   : the formatted message string

    Fields passed through `extra` are merged in. A traceback, when present,
    lands in an "exc" field.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
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


class _StdoutHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """StreamHandler that looks up sys.stdout on every write instead of caching it."""

    def __init__(self) -> None:
        super().__init__(stream=sys.stdout)

    @property  # type: ignore[override]
    def stream(self):  # type: ignore[no-untyped-def]
        return sys.stdout

    @stream.setter
    def stream(self, value) -> None:  # type: ignore[no-untyped-def]
        pass


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def _configure_root(log_file: Optional[Path]) -> logging.Logger:
    """Attach the JSON handlers to the package logger exactly once per destination."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    formatter = JsonFormatter()

    if not any(isinstance(h, _StdoutHandler) for h in root.handlers):
        stdout_handler = _StdoutHandler()
        stdout_handler.setFormatter(formatter)
        root.addHandler(stdout_handler)
        if root.level == logging.NOTSET:
            root.setLevel(logging.INFO)

    if log_file is not None:
        target = str(log_file.resolve())
        already_attached = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in root.handlers
        )
        if not already_attached:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(target, encoding="utf-8")
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

    # Output is handled here; the Python root logger stays out of it.
    root.propagate = False
    return root


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Return a structured JSON logger.

    Every module calls this once at import time with just its __name__.
    The CLI calls it again with a level (and optionally a file) once the
    command line and config are known; that adjusts the whole package.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL. None keeps
                   the current level.
        log_file: Optional path to a log file. If provided, logs go to both
                  stdout and the file.

    Returns:
        A logging.Logger that outputs structured JSON.

    Raises:
        ValueError: If log_level isn't a recognised level name.
    """
    root = _configure_root(log_file)
    if log_level is not None:
        root.setLevel(_resolve_log_level(log_level))

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)
