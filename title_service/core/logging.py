"""
Purpose:
- One JSON object per log line on stdout, so the hosting platform can index fields.
- log_event() is the single way request/server events are emitted.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

# LogRecord attributes that are not structured payload
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def utc_iso(ts: Optional[float] = None) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    when = datetime.fromtimestamp(ts, timezone.utc) if ts is not None else datetime.now(timezone.utc)
    return when.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": utc_iso(record.created),
            "level": record.levelname,
            "logger": record.name,
        }
        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED}
        if "event" not in extra:
            payload["message"] = record.getMessage()
        payload.update(extra)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _normalise_level(level: Optional[str | int]) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        value = level.strip().upper()
        if value.isdigit():
            return int(value)
        mapped = logging.getLevelName(value)
        if isinstance(mapped, int):
            return mapped
    return logging.INFO


def configure_logging(level: Optional[str | int] = None) -> None:
    """Configure root logging to stream JSON lines to stdout.

    Existing root handlers are replaced so repeated calls (tests, reloads)
    never duplicate output.
    """

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=_normalise_level(level), handlers=[handler])


def log_event(logger: logging.Logger, event: str, level: int = logging.INFO, **fields: Any) -> None:
    logger.log(level, event, extra={"event": event, **fields})
