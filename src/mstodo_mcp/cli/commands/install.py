"""Install command group for mstodo-mcp CLI.

Provides installation helpers for integrating mstodo-mcp with MCP
clients like Claude Desktop, Cursor, and VS Code.
"""

from __future__ import annotations

__all__ = ["install"]

import json
import shutil
from pathlib import Path

import click

from mstodo_mcp.constants import CLI_NAME, DESKTOP_CONFIG_SERVER_KEY

from ..styling import style_dim


def _get_executable_path() -> str:
    """Find absolute path to the mstodo-mcp executable.

    Raises:
        click.ClickException: If executable cannot be found in PATH.
    """
    path = shutil.which(CLI_NAME)
    if path:
        return str(Path(path).resolve())

    raise click.ClickException(
        f"Could not find {CLI_NAME} executable in PATH.\nEnsure {CLI_NAME} is installed and accessible."
    )


@click.group()
def install() -> None:
    """Installation helper commands."""
    pass


@install.command("mcp-json")
@click.option(
    "--with-env",
    is_flag=True,
    help="Include placeholder CLIENT_ID/CLIENT_SECRET/TENANT_ID entries",
)
def install_mcp_json(with_env: bool) -> None:
    """Generate MCP client configuration JSON.

    \b
    Example output:
        {
          "mcpServers": {
            "microsoft-todo": {
              "command": "/path/to/mstodo-mcp",
              "args": ["start"]
            }
          }
        }

    \b
    Usage with MCP clients:
        Claude Desktop: ~/Library/Application Support/Claude/claude_desktop_config.json
        Cursor:         ~/.cursor/mcp.json
        VS Code:        .vscode/mcp.json
    """
    entry: dict[str, object] = {
        "command": _get_executable_path(),
        "args": ["start"],
    }
    if with_env:
        entry["env"] = {
            "CLIENT_ID": "<application id>",
            "CLIENT_SECRET": "<application secret>",
            "TENANT_ID": "organizations",
        }

    click.echo(json.dumps({"mcpServers": {DESKTOP_CONFIG_SERVER_KEY: entry}}, indent=2))
    click.echo()
    click.echo(style_dim("Add the mcpServers entry to your MCP client config file."))
