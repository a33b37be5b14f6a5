"""
Logging setup for the user service.

Call sites log snake_case event names and put context in ``extra=``.
The formatters below render those extras either as JSON (one object per
line) or appended as key=value pairs for local development.
"""

import json
import logging
import sys
from datetime import datetime, timezone

ROOT_LOGGER = "backend.user_service"

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _format_timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z")


def _extras(record: logging.LogRecord) -> dict:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": _format_timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extras(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class PrettyFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = _format_timestamp(record)
        context = " ".join(f"{k}={v}" for k, v in _extras(record).items())
        line = f"{ts} {record.levelname} [{record.name}] {record.getMessage()}"
        if context:
            line = f"{line} {context}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(level: str = "INFO", fmt: str = "pretty") -> None:
    """Attach a stdout handler to the service logger."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())

    formatter: logging.Formatter
    if fmt == "json":
        formatter = JsonFormatter()
    else:
        formatter = PrettyFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logger.handlers = [handler]
    logger.propagate = False
