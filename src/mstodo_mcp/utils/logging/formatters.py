"""Log formatters for console and JSONL output.

Records are logged as dicts with at least "event" and "message" keys:

    _logger.info({"event": "token_refreshed", "message": "...", "expires_at": ...})

ConsoleFormatter renders the message for humans on stderr;
ISO8601Formatter writes the whole dict as one JSON line.
"""

from __future__ import annotations

__all__ = [
    "ConsoleFormatter",
    "ISO8601Formatter",
]

import json
import logging
from datetime import datetime, timezone
from typing import Any


def _record_payload(record: logging.LogRecord) -> dict[str, Any]:
    """Normalize a record's msg into a dict."""
    if isinstance(record.msg, dict):
        return dict(record.msg)
    return {"message": record.getMessage()}


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for stderr.

    Extracts the 'message' (or 'event') field from dict messages.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as "LEVEL: message".

        Args:
            record: The log record to format.

        Returns:
            str: Formatted log line, followed by the traceback if any.
        """
        payload = _record_payload(record)
        msg = payload.get("message") or payload.get("event", "")
        line = f"{record.levelname}: {msg}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class ISO8601Formatter(logging.Formatter):
    """JSONL formatter with ISO 8601 timestamps (UTC).

    Format: YYYY-MM-DDTHH:MM:SS.sssZ
    Example: {"time": "2025-12-04T10:48:37.123Z", "level": "INFO", "logger": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON line.

        Args:
            record: The log record to format.

        Returns:
            str: JSON-encoded log entry.
        """
        timestamp = (
            datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )
        entry: dict[str, Any] = {
            "time": timestamp,
            "level": record.levelname,
            "logger": record.name,
            **_record_payload(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)
