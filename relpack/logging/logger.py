# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for relpack.

Every log entry is a single JSON line with a timestamp, level, source module
and message. The release pipeline runs in CI as often as on a laptop, and the
JSON lines are what lets a failed run be grepped for the stage that broke.

How this works:
  - Python's standard `logging` module does the routing; JsonFormatter turns
    each record into one JSON object.
  - A stdout handler is always attached, a file handler only when asked for.
  - `get_logger` is the only way modules obtain a logger.
  - `set_log_level` and `set_log_file` apply the CLI settings to every
    relpack logger, including ones created by modules imported later.

External tools (npm, node, parcel) write straight to the inherited stdout, so
their output interleaves with these lines. That is expected.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "relpack.release.packaging.packer", "msg": "Archive packed", ...}
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TypeVar

T = TypeVar("T")

# LogRecord attributes that are plumbing, not caller context.
_STANDARD_ATTRS: frozenset[str] = frozenset(
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
      ts     : ISO 8601 UTC timestamp
      level  : log level name
      module : the logger name
      msg    : the formatted message

    Anything passed through `extra=` is merged in as additional fields, which
    is how the pipeline attaches stage names, paths and versions. Exception
    info, when present, lands under "exc".
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# Levels and log files set by the CLI, keyed by logger-name prefix. Loggers
# created later (modules imported lazily by a subcommand) pick these up.
_level_defaults: dict[str, str] = {}
_file_defaults: dict[str, Path] = {}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def _under(name: str, prefix: str) -> bool:
    return name == prefix or name.startswith(prefix + ".")


def _default_for(defaults: dict[str, T], name: str) -> Optional[T]:
    """The entry of the most specific prefix covering `name`, if any."""
    matches = [prefix for prefix in defaults if _under(name, prefix)]
    if not matches:
        return None
    return defaults[max(matches, key=len)]


def _attach_file_handler(logger: logging.Logger, log_file: Path) -> None:
    """Add a JSON file handler unless one for the same file is already attached."""
    target = os.path.abspath(str(log_file))
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(logger.level)
    file_handler.setFormatter(JsonFormatter())
    logger.addHandler(file_handler)


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    Every module calls this once at import time and keeps the returned
    logger. Calling it again for the same name updates the level but never
    stacks a second set of handlers.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL. None takes
                   the level set through set_log_level, else INFO.
        log_file: Optional path to a log file. If provided, logs go to both
                  stdout and the file. None takes the file set through
                  set_log_file, if any.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)
    level_name = log_level or _default_for(_level_defaults, name) or "INFO"
    level = _resolve_log_level(level_name)
    logger.setLevel(level)

    if not logger.handlers:
        stdout_handler = logging.StreamHandler(stream=sys.stdout)
        stdout_handler.setFormatter(JsonFormatter())
        logger.addHandler(stdout_handler)
        logger.propagate = False

    target_file = log_file if log_file is not None else _default_for(_file_defaults, name)
    if target_file is not None:
        _attach_file_handler(logger, target_file)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger


def _relpack_loggers(prefix: str) -> list[logging.Logger]:
    return [
        logging.getLogger(name)
        for name in list(logging.Logger.manager.loggerDict)
        if _under(name, prefix)
    ]


def set_log_level(log_level: str, prefix: str = "relpack") -> None:
    """
    Apply a level to every logger under `prefix`, existing or created later.

    Module loggers are created at import time with the default level; the CLI
    calls this once the configured level is known.
    """
    level = _resolve_log_level(log_level)
    _level_defaults[prefix] = log_level.upper()
    for logger in _relpack_loggers(prefix):
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


def set_log_file(log_file: Path, prefix: str = "relpack") -> None:
    """Send every logger under `prefix`, existing or created later, to `log_file` as well."""
    _file_defaults[prefix] = log_file
    for logger in _relpack_loggers(prefix):
        if logger.handlers:
            _attach_file_handler(logger, log_file)
