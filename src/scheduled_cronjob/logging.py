from __future__ import annotations

import json
import logging
import sys
from typing import Any

# Attributes every LogRecord carries; they are never copied into the JSON payload.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
        "getMessage",
    }
)

STRUCTURED_FIELDS = ("controller", "resource", "uid", "phase", "event", "reason")


class StructuredJSONFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.default_time_format),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in STRUCTURED_FIELDS:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_structured_logging(level: int = logging.INFO) -> None:
    """Route the root logger (and kopf's) through the JSON formatter on stdout."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJSONFormatter())
    root_logger.addHandler(handler)

    # kopf's own loggers propagate to the root handler
    logging.getLogger("kopf").setLevel(level)


class StructuredLogger:
    """Logger that attaches controller/resource fields to every record."""

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log_with_fields(
        self,
        level: int,
        message: str,
        controller: str | None = None,
        resource: str | None = None,
        uid: str | None = None,
        phase: str | None = None,
        event: str | None = None,
        reason: str | None = None,
        **kwargs: Any,
    ) -> None:
        extra: dict[str, Any] = {}
        for key, value in (
            ("controller", controller),
            ("resource", resource),
            ("uid", uid),
            ("phase", phase),
            ("event", event),
            ("reason", reason),
        ):
            if value is not None:
                extra[key] = value
        extra.update(kwargs)

        self._logger.log(level, message, extra=extra)

    def info(self, message: str, **fields: Any) -> None:
        self._log_with_fields(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log_with_fields(logging.WARNING, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log_with_fields(logging.ERROR, message, **fields)

    def debug(self, message: str, **fields: Any) -> None:
        self._log_with_fields(logging.DEBUG, message, **fields)


logger = StructuredLogger("scheduled-cronjob")
