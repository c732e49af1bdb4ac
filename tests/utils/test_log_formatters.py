"""Tests for log formatters and logger setup."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from mstodo_mcp.utils.logging.formatters import ConsoleFormatter, ISO8601Formatter
from mstodo_mcp.utils.logging.logger_setup import configure_logging, get_logger


def _record(msg: object, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("microsoft-todo-mcp.test", level, __file__, 1, msg, None, None)


class TestConsoleFormatter:
    def test_uses_message_field(self) -> None:
        line = ConsoleFormatter().format(_record({"event": "token_refreshed", "message": "Access token refreshed"}))

        assert line == "INFO: Access token refreshed"

    def test_falls_back_to_event(self) -> None:
        assert ConsoleFormatter().format(_record({"event": "server_started"})) == "INFO: server_started"

    def test_plain_string_message(self) -> None:
        assert ConsoleFormatter().format(_record("hello", logging.WARNING)) == "WARNING: hello"


class TestISO8601Formatter:
    def test_emits_one_json_object_with_utc_time(self) -> None:
        """Given a dict message, all its keys appear alongside time, level and logger."""
        line = ISO8601Formatter().format(_record({"event": "e", "message": "m", "path": Path("/x")}))

        entry = json.loads(line)
        assert entry["time"].endswith("Z")
        assert entry["level"] == "INFO"
        assert entry["logger"] == "microsoft-todo-mcp.test"
        assert (entry["event"], entry["message"], entry["path"]) == ("e", "m", "/x")


def test_configure_logging_writes_jsonl_file(tmp_path: Path) -> None:
    """Given a log file, package loggers write JSON lines to it."""
    # Arrange
    log_file = tmp_path / "logs" / "server.jsonl"
    root = configure_logging("DEBUG", log_file)

    # Act
    get_logger("tests").info({"event": "heartbeat", "message": "hello"})
    for handler in root.handlers:
        handler.flush()

    # Assert
    entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert entry["event"] == "heartbeat"
    assert entry["logger"] == "microsoft-todo-mcp.tests"
