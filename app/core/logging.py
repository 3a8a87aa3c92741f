"""Process-wide logging configuration and logger accessors."""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import UTC, datetime
from typing import Any

from app.core.config import settings

# Attributes present on every LogRecord; anything else arrived via `extra=`.
_RESERVED_RECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    },
)
_configured = False


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_")
    }


class TextFormatter(logging.Formatter):
    """Human-readable formatter that appends `extra=` fields as key=value pairs."""

    def __init__(self, *, use_utc: bool = False) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
        if use_utc:
            self.converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extras = _extra_fields(record)
        if not extras:
            return message
        suffix = " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        return f"{message} {suffix}"


class JsonFormatter(logging.Formatter):
    """Emit newline-delimited JSON log lines."""

    def __init__(self, *, use_utc: bool = False) -> None:
        super().__init__()
        self._use_utc = use_utc

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        if not self._use_utc:
            created = created.astimezone()
        payload: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extra_fields(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


def configure_logging(*, force: bool = False) -> None:
    """Install a single stdout handler on the root logger.

    Safe to call repeatedly; the handler is only replaced when `force` is set
    or logging has not been configured yet.
    """
    global _configured
    if _configured and not force:
        return

    level = settings.log_level.upper()
    formatter: logging.Formatter
    if settings.log_format.lower() == "json":
        formatter = JsonFormatter(use_utc=settings.log_use_utc)
    else:
        formatter = TextFormatter(use_utc=settings.log_use_utc)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Keep uvicorn access logs from duplicating our request log lines.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    _configured = True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a stdlib logger in the application hierarchy."""
    return logging.getLogger(name)
