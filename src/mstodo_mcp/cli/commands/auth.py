"""Authentication commands for mstodo-mcp CLI.

Commands:
    auth status - Resolve tokens and show source, expiry and validity
    auth path   - Show token file locations

Signing in happens in the external interactive setup flow; these
commands only inspect (and, when expired, refresh) what it produced.
"""

from __future__ import annotations

__all__ = ["auth"]

import asyncio
import json as json_module
from datetime import datetime, timezone
from typing import Any

import click
import httpx
from pydantic import ValidationError

from mstodo_mcp.auth.token_manager import TokenManager, TokenResolution
from mstodo_mcp.auth.token_storage import TokenStore
from mstodo_mcp.config import Settings
from mstodo_mcp.constants import REAUTH_COMMAND
from mstodo_mcp.utils.logging.logger_setup import configure_logging

from ..styling import style_dim, style_error, style_label, style_success, style_warning


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e


async def _resolve(settings: Settings, store: TokenStore) -> TokenResolution:
    async with httpx.AsyncClient(timeout=settings.http_timeout) as http_client:
        return await TokenManager(settings, store, http_client).resolve()


@click.group()
def auth() -> None:
    """Authentication commands."""
    pass


@auth.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def status(as_json: bool) -> None:
    """Show authentication status.

    Resolves tokens exactly as the server does (environment, token file,
    legacy file), refreshing them if they are expired.
    """
    settings = _load_settings()
    configure_logging("WARNING")
    store = TokenStore(settings.token_dir, settings.legacy_token_path)
    resolution = asyncio.run(_resolve(settings, store))
    record = resolution.record

    result: dict[str, Any] = {
        "authenticated": record is not None,
        "state": resolution.state.value,
        "source": resolution.source.value if resolution.source else None,
        "refreshed": resolution.refreshed,
        "token_path": str(store.path),
    }
    if record is not None:
        result["expires_at"] = datetime.fromtimestamp(record.expires_at / 1000, tz=timezone.utc).isoformat()
        result["expired"] = record.is_expired()
        result["can_refresh"] = record.can_refresh or bool(settings.client_id and settings.client_secret)
    if resolution.error is not None:
        result["error"] = str(resolution.error)

    if as_json:
        click.echo(json_module.dumps(result, indent=2))
        return

    if record is None:
        click.echo(style_error("Not authenticated"))
        if resolution.error is not None:
            click.echo(f"{style_label('Error')} {resolution.error}")
        click.echo(f"{style_label('Token file')} {store.path}")
        click.echo()
        click.echo(style_dim(f"Run '{REAUTH_COMMAND}' to sign in."))
        return

    if record.is_expired():
        click.echo(style_warning("Token expired"))
    else:
        click.echo(style_success("Authenticated"))
    click.echo(f"{style_label('Source')} {result['source']}")
    click.echo(f"{style_label('Expires')} {result['expires_at']}")
    click.echo(f"{style_label('Token file')} {store.path}")
    if resolution.refreshed:
        click.echo(style_dim("Tokens were refreshed and saved."))
    if not result["can_refresh"]:
        click.echo(style_dim("No client credentials available: tokens cannot be refreshed automatically."))


@auth.command()
def path() -> None:
    """Show token file locations."""
    settings = _load_settings()
    store = TokenStore(settings.token_dir, settings.legacy_token_path)
    click.echo(f"{style_label('Token file')} {store.path}")
    click.echo(f"{style_label('Legacy token file')} {store.legacy_path}")
    if settings.desktop_config_path is not None:
        click.echo(f"{style_label('Desktop config')} {settings.desktop_config_path}")
