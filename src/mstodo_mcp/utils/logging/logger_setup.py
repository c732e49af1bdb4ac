"""Logger setup for mstodo-mcp.

All package loggers live under the APP_NAME hierarchy
(e.g. "microsoft-todo-mcp.auth.token_manager") and are configured once
through configure_logging().

Logging destinations:
- stderr: always. stdout is reserved for the MCP stdio transport.
- File (JSONL): optional, when a log file is configured.
"""

from __future__ import annotations

__all__ = [
    "configure_logging",
    "get_logger",
]

import logging
import sys
from pathlib import Path

from mstodo_mcp.constants import APP_NAME
from mstodo_mcp.utils.file_helpers import ensure_private_dir
from mstodo_mcp.utils.logging.formatters import ConsoleFormatter, ISO8601Formatter


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the application hierarchy.

    Args:
        name: Dotted suffix, e.g. "auth.token_manager".

    Returns:
        logging.Logger named "<APP_NAME>.<name>".
    """
    return logging.getLogger(f"{APP_NAME}.{name}")


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> logging.Logger:
    """Configure the application root logger.

    Safe to call more than once: existing handlers are closed and replaced.

    Args:
        level: Log level name for both handlers.
        log_file: Optional JSONL file; its directory is created if missing.

    Returns:
        The configured application root logger.

    Raises:
        OSError: If the log file cannot be opened.
    """
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(level.upper())
    logger.propagate = False

    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(ConsoleFormatter())
    logger.addHandler(stderr_handler)

    if log_file is not None:
        ensure_private_dir(log_file.parent)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(ISO8601Formatter())
        logger.addHandler(file_handler)

    return logger
