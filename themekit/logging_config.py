from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import sys
from typing import Any

from themekit.logging_context import get_request_id

REDACTED = "[REDACTED]"
DEFAULT_REDACT_FIELDS = frozenset(
    {
        "password",
        "password_hash",
        "secret",
        "session",
        "session_secret_key",
        "token",
        "csrf_token",
        "authorization",
        "cookie",
    }
)

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED_RECORD_ATTRS = frozenset(
    logging.makeLogRecord({}).__dict__.keys()
) | {"message", "asctime", "color_message"}


def parse_redact_fields(raw_value: str) -> frozenset[str]:
    parts = (part.strip().lower() for part in raw_value.split(","))
    return DEFAULT_REDACT_FIELDS | frozenset(part for part in parts if part)


def _redact(value: Any, redact_fields: frozenset[str]) -> Any:
    if isinstance(value, dict):
        return {
            key: REDACTED if str(key).lower() in redact_fields else _redact(item, redact_fields)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact(item, redact_fields) for item in value]
    return value


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_")
    }


def _timestamp(record: logging.LogRecord) -> str:
    moment = datetime.fromtimestamp(record.created, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%SZ")


class JsonLogFormatter(logging.Formatter):
    def __init__(self, *, redact_fields: frozenset[str] = DEFAULT_REDACT_FIELDS) -> None:
        super().__init__()
        self._redact_fields = redact_fields

    def format(self, record: logging.LogRecord) -> str:
        extras = _record_extras(record)
        payload: dict[str, Any] = {
            "timestamp": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "event": extras.pop("event", None) or record.getMessage(),
        }
        request_id = extras.pop("request_id", None) or get_request_id()
        if request_id:
            payload["request_id"] = request_id
        payload.update(_redact(extras, self._redact_fields))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ConsoleLogFormatter(logging.Formatter):
    def __init__(self, *, redact_fields: frozenset[str] = DEFAULT_REDACT_FIELDS) -> None:
        super().__init__()
        self._redact_fields = redact_fields

    def format(self, record: logging.LogRecord) -> str:
        extras = _redact(_record_extras(record), self._redact_fields)
        extras.pop("event", None)
        request_id = get_request_id()
        fields = " ".join(f"{key}={value}" for key, value in sorted(extras.items()))
        line = f"{_timestamp(record)} {record.levelname:<7} {record.name} {record.getMessage()}"
        if request_id:
            line = f"{line} request_id={request_id}"
        if fields:
            line = f"{line} {fields}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(
    *,
    level: str,
    log_format: str,
    redact_fields: frozenset[str] = DEFAULT_REDACT_FIELDS,
    include_uvicorn_access: bool = False,
) -> None:
    if log_format.strip().lower() == "json":
        formatter: logging.Formatter = JsonLogFormatter(redact_fields=redact_fields)
    else:
        formatter = ConsoleLogFormatter(redact_fields=redact_fields)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    for name in ("uvicorn", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    access_logger = logging.getLogger("uvicorn.access")
    access_logger.handlers.clear()
    access_logger.propagate = include_uvicorn_access
    access_logger.disabled = not include_uvicorn_access
