"""Structured logging for the engine with structlog.

Environment variables:
- LOG_FORMAT: "json" for one JSON object per line, "console" or unset for
  human-readable output.
- LOG_LEVEL: a standard level name; INFO when unset.

Event values are reduced to plain data before rendering: enums become their
value, ready-seat sets become sorted lists, and pydantic models such as
settlement rows are dumped to dicts.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from enum import Enum, StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from typing import Any

LOG_FILE_PREFIX = "tenbou"
LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# keys structlog's own processors read later in the pipeline
_RESERVED_KEYS = frozenset({"exc_info", "stack_info"})


class LogFormat(StrEnum):
    CONSOLE = "console"
    JSON = "json"


def _plain(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset)):
        return sorted(_plain(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


def _serialize_values(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    for key, value in event_dict.items():
        if key not in _RESERVED_KEYS:
            event_dict[key] = _plain(value)
    return event_dict


def _is_test() -> bool:
    return "pytest" in sys.modules


def _resolve_log_format() -> LogFormat:
    value = os.environ.get("LOG_FORMAT", "").lower()
    try:
        return LogFormat(value or LogFormat.CONSOLE)
    except ValueError:
        msg = f"Invalid LOG_FORMAT={value!r}. Must be 'json', 'console', or unset."
        raise ValueError(msg) from None


def _resolve_log_level() -> int:
    value = os.environ.get("LOG_LEVEL", "INFO").upper()
    if value not in _LOG_LEVELS:
        msg = f"Invalid LOG_LEVEL={value!r}. Must be one of {', '.join(_LOG_LEVELS)}."
        raise ValueError(msg)
    return logging.getLevelNamesMapping()[value]


def _formatter(log_format: LogFormat, *, colors: bool = False) -> logging.Formatter:
    if log_format == LogFormat.JSON:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors)
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def _log_file_path(log_dir: Path | str, prefix: str) -> Path:
    dir_path = Path(log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path / f"{prefix}_{datetime.now(tz=UTC).strftime(LOG_FILE_TIMESTAMP_FORMAT)}.log"


def _reset_root_handlers(root: logging.Logger) -> None:
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()


def setup_logging(
    log_dir: Path | str | None = None,
    level: int | None = None,
    *,
    prefix: str = LOG_FILE_PREFIX,
) -> Path | None:
    """
    Route structlog through the stdlib root logger.

    Always logs to stdout. With a log_dir, also writes to a timestamped
    ``<prefix>_<time>.log`` file there, except under pytest. Calling it again
    replaces the previous handlers. Returns the log file path, or None when no
    file was opened.
    """
    log_format = _resolve_log_format()
    if level is None:
        level = _resolve_log_level()

    # format_exc_info runs in the handler formatters
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _serialize_values,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.setLevel(level)
    _reset_root_handlers(root)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(_formatter(log_format, colors=sys.stdout.isatty()))
    root.addHandler(stdout_handler)

    if log_dir is None or _is_test():
        return None

    file_path = _log_file_path(log_dir, prefix)
    file_handler = logging.FileHandler(file_path)
    file_handler.setFormatter(_formatter(log_format))
    root.addHandler(file_handler)
    return file_path
