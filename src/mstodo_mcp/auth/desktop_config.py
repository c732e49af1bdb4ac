"""Desktop host configuration update after a token refresh.

Desktop MCP hosts start this server with the token pair in the server's
env block:

    {
      "mcpServers": {
        "microsoft-todo": {
          "command": "...",
          "env": {"MS_TODO_ACCESS_TOKEN": "...", "MS_TODO_REFRESH_TOKEN": "..."}
        }
      }
    }

After every refresh those two variables are rewritten so the next host
start picks up the new pair. The update is best-effort: a missing file
or missing server entry is a no-op, and write failures surface as
ConfigWriteError for the caller to log.
"""

from __future__ import annotations

__all__ = [
    "get_desktop_config_path",
    "update_desktop_config",
]

import json
from pathlib import Path
from typing import Any

from mstodo_mcp.auth.token_storage import CredentialRecord
from mstodo_mcp.constants import (
    DESKTOP_CONFIG_FILE_NAME,
    DESKTOP_CONFIG_SERVER_KEY,
    get_desktop_config_dir,
)
from mstodo_mcp.exceptions import ConfigWriteError
from mstodo_mcp.utils.file_helpers import atomic_write_json
from mstodo_mcp.utils.logging.logger_setup import get_logger

_logger = get_logger("auth.desktop_config")


def get_desktop_config_path() -> Path:
    """Default location of the desktop host config file."""
    return get_desktop_config_dir() / DESKTOP_CONFIG_FILE_NAME


def update_desktop_config(
    record: CredentialRecord,
    config_path: Path,
    server_key: str = DESKTOP_CONFIG_SERVER_KEY,
) -> bool:
    """Write the record's token pair into the host config's server env block.

    Other keys in the env block and the rest of the file are preserved.

    Args:
        record: Freshly refreshed credential record.
        config_path: Desktop host config file.
        server_key: Entry under mcpServers to update.

    Returns:
        True if the file was rewritten, False if the file or the server
        entry does not exist.

    Raises:
        ConfigWriteError: If the file cannot be read, parsed or written.
    """
    if not config_path.is_file():
        return False

    try:
        config: Any = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigWriteError(f"Could not read desktop config {config_path}: {e}") from e

    servers = config.get("mcpServers") if isinstance(config, dict) else None
    entry = servers.get(server_key) if isinstance(servers, dict) else None
    if not isinstance(entry, dict):
        return False

    env = entry.get("env")
    entry["env"] = {
        **(env if isinstance(env, dict) else {}),
        "MS_TODO_ACCESS_TOKEN": record.access_token,
        "MS_TODO_REFRESH_TOKEN": record.refresh_token,
    }

    try:
        atomic_write_json(config_path, config, private=False)
    except OSError as e:
        raise ConfigWriteError(f"Could not write desktop config {config_path}: {e}") from e

    _logger.info(
        {
            "event": "desktop_config_updated",
            "message": f"Updated desktop config with new tokens: {config_path}",
            "path": str(config_path),
        }
    )
    return True
