"""JSON logging for BlogForge services.

Records are written one JSON object per line. Fields bound with
:func:`log_context` (``job_id``, ``user_id``, ``step`` ...) are attached
to every record emitted inside the ``with`` block, including records
from library code running in the same task.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator

_LOG_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("blogforge_log_context", default={})

# Attributes every LogRecord carries; anything else on a record is an ``extra``.
_RECORD_ATTRIBUTES = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
    "taskName",
}

# Emitted first, in this order, so log lines line up when read by eye.
_LEADING_FIELDS = (
    "service",
    "job_id",
    "user_id",
    "step",
    "section_index",
    "stage",
    "provider",
    "model",
    "attempt",
    "credits",
    "transaction_status",
)

_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "google_genai")


class ContextFilter(logging.Filter):
    """Copy the bound :func:`log_context` fields onto each record."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _LOG_CONTEXT.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        if getattr(record, "service", None) is None:
            record.service = self.service_name
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_") and value is not None
        }
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _LEADING_FIELDS:
            if key in extras:
                payload[key] = extras.pop(key)
        payload.update(sorted(extras.items()))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def setup_logging(service_name: str, level: str | int | None = None) -> None:
    """Route every logger through one JSON handler on stdout.

    ``level`` defaults to ``BLOGFORGE_LOG_LEVEL`` (or INFO). HTTP client
    and SDK loggers are held at WARNING. Safe to call more than once.
    """

    if level is None:
        level = os.getenv("BLOGFORGE_LOG_LEVEL", "INFO").upper()

    loggers: dict[str, dict[str, Any]] = {
        name: {"handlers": ["stdout"], "level": level, "propagate": False}
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
    }
    loggers.update({name: {"level": "WARNING"} for name in _QUIET_LOGGERS})

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"json": {"()": JsonFormatter}},
            "filters": {"context": {"()": ContextFilter, "service_name": service_name}},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "json",
                    "filters": ["context"],
                }
            },
            "root": {"level": level, "handlers": ["stdout"]},
            "loggers": loggers,
        }
    )


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind ``fields`` to log records for the duration of the block.

    Passing ``None`` for a field unbinds it.
    """

    bound = dict(_LOG_CONTEXT.get())
    for key, value in fields.items():
        if value is None:
            bound.pop(key, None)
        else:
            bound[key] = value
    token = _LOG_CONTEXT.set(bound)
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)
