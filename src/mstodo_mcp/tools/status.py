"""auth-status tool."""

from __future__ import annotations

__all__ = [
    "PERSONAL_ACCOUNT_NOTE",
    "register_status_tools",
]

from datetime import datetime, timezone

from fastmcp import FastMCP

from mstodo_mcp.auth.token_manager import TokenManager
from mstodo_mcp.constants import REAUTH_COMMAND
from mstodo_mcp.graph.account import is_personal_account
from mstodo_mcp.graph.client import GraphClient
from mstodo_mcp.tools.formatting import format_date

PERSONAL_ACCOUNT_NOTE = (
    "\n\nWARNING: You are using a personal Microsoft account. "
    "Microsoft To Do API access is typically not available for personal accounts "
    "through the Microsoft Graph API. You may encounter 'MailboxNotEnabledForRESTAPI' errors. "
    "This is a Microsoft limitation, not an authentication issue."
)


def register_status_tools(server: FastMCP, token_manager: TokenManager, graph: GraphClient) -> None:
    """Register auth-status on server."""

    @server.tool(
        name="auth-status",
        description=(
            "Check if you're authenticated with Microsoft Graph API. Shows current token status "
            "and expiration time, and indicates if the token needs to be refreshed."
        ),
    )
    async def auth_status() -> str:
        resolution = await token_manager.resolve()
        record = resolution.record
        if record is None:
            return (
                f"Not authenticated. Please run '{REAUTH_COMMAND}' to authenticate with Microsoft."
            )

        expiry = format_date(
            datetime.fromtimestamp(record.expires_at / 1000, tz=timezone.utc), with_time=True
        )
        source = resolution.source.value if resolution.source else "unknown"
        account_note = PERSONAL_ACCOUNT_NOTE if await is_personal_account(graph) else ""

        if record.is_expired():
            return (
                f"Authentication expired at {expiry}. Will attempt to refresh when you call any API. "
                f"(token source: {source}){account_note}"
            )
        return f"Authenticated. Token expires at {expiry}. (token source: {source}){account_note}"
