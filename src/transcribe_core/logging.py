from __future__ import annotations

import logging
import os
import socket
import sys
import time

from transcribe_core.config import LogFormat, LogLevel
from transcribe_core.json_utils import JSONValue, dump_json_str
from transcribe_core.request_context import request_id_var

# Structured fields copied from LogRecord extras into JSON output when present.
_STRUCTURED_FIELDS: tuple[str, ...] = (
    "latency_ms",
    "url",
    "cached",
    "client_id",
    "job_id",
    "attempt",
    "max_attempts",
    "status",
    "wait_ms",
    "removed",
    "error_code",
    "error_message",
    "error_type",
    "path",
    "method",
)


class _MissingValue:
    """Sentinel for absent or non-JSON LogRecord attributes."""

    __slots__ = ()


_MISSING = _MissingValue()


def _get_json_record_value(record: logging.LogRecord, field_name: str) -> JSONValue | _MissingValue:
    """Fetch a record attribute and validate it is JSON-compatible."""
    if field_name not in record.__dict__:
        return _MISSING
    raw_value: object = record.__dict__[field_name]
    if isinstance(raw_value, (str, int, float, bool)) or raw_value is None:
        return raw_value
    return _MISSING


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter.

    Every record carries an ISO8601 UTC timestamp, level, logger and message,
    the static fields (service, instance_id), the current request_id when one
    is bound, any configured extra fields and the known structured fields.
    """

    def __init__(
        self,
        *,
        static_fields: dict[str, str],
        extra_field_names: list[str],
    ) -> None:
        super().__init__()
        self._static = static_fields
        self._extra_fields = extra_field_names

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, JSONValue] = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in self._static:
            payload[key] = self._static[key]

        rid = request_id_var.get()
        if rid != "":
            payload["request_id"] = rid

        for field_name in (*self._extra_fields, *_STRUCTURED_FIELDS):
            if field_name in payload:
                continue
            field_value = _get_json_record_value(record, field_name)
            if isinstance(field_value, _MissingValue):
                continue
            payload[field_name] = field_value

        if record.exc_info is not None:
            payload["exc_info"] = self.formatException(record.exc_info)

        return dump_json_str(payload, compact=False)


class TextFormatter(logging.Formatter):
    """Human-readable formatter for local development.

    Format: [timestamp] [LEVEL] [logger] key=value ... message
    """

    def __init__(self, *, extra_fields: list[str]) -> None:
        super().__init__()
        self._extra_fields = extra_fields

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        parts: list[str] = [
            f"[{timestamp}]",
            f"[{record.levelname}]",
            f"[{record.name}]",
        ]

        for field_name in (*self._extra_fields, *_STRUCTURED_FIELDS):
            field_value = _get_json_record_value(record, field_name)
            if isinstance(field_value, _MissingValue):
                continue
            parts.append(f"{field_name}={field_value}")

        parts.append(record.getMessage())
        line = " ".join(parts)

        if record.exc_info is not None:
            line = line + "\n" + self.formatException(record.exc_info)
        return line


def _compute_instance_id() -> str:
    """Stable instance ID from hostname and PID."""
    host = socket.gethostname().split(".")[0]
    return f"{host}-{os.getpid()}"


_LEVELS: dict[LogLevel, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(
    *,
    level: LogLevel,
    format_mode: LogFormat,
    service_name: str,
    instance_id: str | None,
    extra_fields: list[str] | None,
) -> logging.Logger:
    """Configure the root logger for a service.

    Clears existing handlers, installs a stdout handler with the JSON or text
    formatter and quiets chatty HTTP client loggers.

    Example:
        >>> logger = setup_logging(
        ...     level="INFO",
        ...     format_mode="json",
        ...     service_name="tiktok-transcribe-api",
        ...     instance_id=None,
        ...     extra_fields=None,
        ... )
        >>> logger.info("Server started")
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(_LEVELS[level])

    static_fields: dict[str, str] = {
        "service": service_name,
        "instance_id": instance_id if instance_id is not None else _compute_instance_id(),
    }
    extra_field_names = extra_fields if extra_fields is not None else []

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    if format_mode == "json":
        handler.setFormatter(
            JsonFormatter(static_fields=static_fields, extra_field_names=extra_field_names)
        )
    else:
        handler.setFormatter(TextFormatter(extra_fields=extra_field_names))
    root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance by name (typically __name__)."""
    return logging.getLogger(name)


__all__ = [
    "JsonFormatter",
    "LogFormat",
    "LogLevel",
    "TextFormatter",
    "get_logger",
    "setup_logging",
]
