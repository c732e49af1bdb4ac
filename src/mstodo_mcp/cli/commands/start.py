"""Start command for mstodo-mcp CLI.

Runs the MCP server over stdio. This is what desktop hosts launch.
"""

from __future__ import annotations

__all__ = [
    "start",
]

import asyncio
import sys
from typing import NoReturn

import click
from pydantic import ValidationError

from mstodo_mcp.config import Settings
from mstodo_mcp.exceptions import StartupError
from mstodo_mcp.server import serve
from mstodo_mcp.utils.logging.logger_setup import configure_logging, get_logger

from ..styling import style_error

_logger = get_logger("cli.start")


def _exit_startup_error(error: Exception, exit_code: int = StartupError.exit_code) -> NoReturn:
    _logger.critical(
        {
            "event": "startup_failed",
            "message": f"Server failed: {error}",
            "error_type": type(error).__name__,
        },
        exc_info=error,
    )
    sys.exit(exit_code)


@click.command()
def start() -> None:
    """Start the MCP server on stdio.

    Configuration comes from environment variables (and ./.env):
    MS_TODO_ACCESS_TOKEN, MS_TODO_REFRESH_TOKEN, CLIENT_ID, CLIENT_SECRET,
    TENANT_ID, MSTODO_MCP_LOG_LEVEL, MSTODO_MCP_LOG_FILE, MSTODO_MCP_HTTP_TIMEOUT.
    """
    try:
        settings = Settings.from_env()
    except ValidationError as e:
        click.echo(style_error(f"Invalid configuration: {e}"), err=True)
        sys.exit(StartupError.exit_code)

    try:
        configure_logging(settings.log_level, settings.log_file)
    except OSError as e:
        click.echo(style_error(f"Could not open log file {settings.log_file}: {e}"), err=True)
        sys.exit(StartupError.exit_code)

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        _logger.info({"event": "server_stopped", "message": "Server stopped"})
    except StartupError as e:
        _exit_startup_error(e, e.exit_code)
    except Exception as e:
        _exit_startup_error(e)
