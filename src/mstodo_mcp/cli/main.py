"""Main CLI entry point for mstodo-mcp.

Defines the CLI group and registers all subcommands.

Commands:
    auth     - Authentication commands (status, path)
    install  - Installation helpers (mcp-json)
    start    - Run the MCP server on stdio (default)

Subcommand help:
    mstodo-mcp COMMAND -h      Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli", "main"]

import sys

import click

from mstodo_mcp import __version__
from mstodo_mcp.constants import CLI_NAME

from .commands.auth import auth
from .commands.install import install
from .commands.start import start


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """mstodo-mcp: Microsoft To Do tools for MCP hosts.

    Without a command, starts the server on stdio.
    """
    if version:
        click.echo(f"{CLI_NAME} {__version__}")
        sys.exit(0)
    if ctx.invoked_subcommand is None:
        ctx.invoke(start)


# Register commands
cli.add_command(auth)
cli.add_command(install)
cli.add_command(start)


def main() -> None:
    """CLI entry point."""
    cli()
