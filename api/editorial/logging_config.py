"""Structured JSON logging for the API and the workers.

Every line carries the service and environment, plus whatever is bound
with ``bind_log_context`` (the request id for HTTP requests, the job id
and sport for task runs). ``extra={}`` fields are merged on top.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

from .utils.datetime_utils import now_utc

_RESERVED_LOG_RECORD_KEYS = {
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
    "module",
    "msecs",
    "message",
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
}

# Prompts and model output can be long; log lines stay bounded.
MAX_LOG_VALUE_CHARS = 2000

# Client libraries that log every request at INFO.
_QUIET_LOGGERS = ("httpx", "openai", "sqlalchemy.engine")

_log_context: ContextVar[dict[str, Any]] = ContextVar("editorial_log_context", default={})


@contextmanager
def bind_log_context(**fields: Any) -> Iterator[None]:
    """Attach fields to every log line emitted in this context."""
    token = _log_context.set({**_log_context.get(), **fields})
    try:
        yield
    finally:
        _log_context.reset(token)


def current_log_context() -> dict[str, Any]:
    return dict(_log_context.get())


def _clip(value: Any) -> Any:
    if isinstance(value, str) and len(value) > MAX_LOG_VALUE_CHARS:
        return value[:MAX_LOG_VALUE_CHARS] + "...[truncated]"
    return value


class JSONFormatter(logging.Formatter):
    def __init__(self, service: str, environment: str) -> None:
        super().__init__()
        self._service = service
        self._environment = environment

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": now_utc().isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "service": self._service,
            "environment": self._environment,
            "message": record.getMessage(),
        }
        payload.update(_log_context.get())
        payload.update(
            (key, _clip(value))
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOG_RECORD_KEYS
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _normalize_log_level(level: str | None, environment: str) -> int:
    env = environment.lower()
    if level:
        normalized = level.strip().upper()
    else:
        normalized = "INFO" if env == "production" else "DEBUG"
    return logging._nameToLevel.get(normalized, logging.INFO)


def configure_logging(service: str, environment: str, log_level: str | None = None) -> None:
    resolved_level = _normalize_log_level(log_level or os.getenv("LOG_LEVEL"), environment)
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JSONFormatter(service=service, environment=environment))
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(resolved_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved_level, logging.WARNING))
