"""Application-wide constants for mstodo-mcp.

Constants that define application behavior.
For values read from the environment, see config.py.
"""

from __future__ import annotations

__all__ = [
    # Application identity
    "APP_NAME",
    "SERVER_NAME",
    "USER_AGENT",
    "CLI_NAME",
    # Token storage
    "TOKEN_FILE_NAME",
    "get_token_dir",
    # OAuth
    "DEFAULT_TENANT_ID",
    "TOKEN_ENDPOINT_TEMPLATE",
    "REFRESH_SCOPES",
    "TOKEN_EXPIRY_MARGIN_MS",
    "AMBIENT_TOKEN_LIFETIME_MS",
    "DEFAULT_EXPIRES_IN_SECONDS",
    "REAUTH_COMMAND",
    # Microsoft Graph
    "GRAPH_BASE_URL",
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
    "MAILBOX_NOT_ENABLED_MARKER",
    "PERSONAL_ACCOUNT_DOMAINS",
    # Desktop host configuration
    "DESKTOP_HOST_APP_NAME",
    "DESKTOP_CONFIG_FILE_NAME",
    "DESKTOP_CONFIG_SERVER_KEY",
    "get_desktop_config_dir",
]

import os
import sys
from pathlib import Path

from platformdirs import user_config_dir

# ============================================================================
# Application Identity
# ============================================================================

# Used for the token directory name and as the root logger name.
APP_NAME: str = "microsoft-todo-mcp"

# Name the FastMCP server announces to hosts.
SERVER_NAME: str = "mstodo"

USER_AGENT: str = "microsoft-todo-mcp-server/1.0"

# Console script installed by this package.
CLI_NAME: str = "mstodo-mcp"

# ============================================================================
# Token Storage
# ============================================================================

TOKEN_FILE_NAME: str = "tokens.json"


def get_token_dir() -> Path:
    """Get the per-user directory holding the canonical token file.

    Platform-specific paths:
        - Windows: %APPDATA%\\microsoft-todo-mcp (or ~/AppData/Roaming/...)
        - Everything else, macOS included: ~/.config/microsoft-todo-mcp

    macOS deliberately uses ~/.config rather than Application Support so
    installs keep finding tokens written by earlier releases.

    Returns:
        Path to the token directory (not created here).
    """
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(appdata) / APP_NAME
    return Path.home() / ".config" / APP_NAME


# ============================================================================
# OAuth (Microsoft identity platform)
# ============================================================================

# Multi-tenant endpoint accepting work and school accounts.
DEFAULT_TENANT_ID: str = "organizations"

TOKEN_ENDPOINT_TEMPLATE: str = "https://login.microsoftonline.com/{tenant_id}/oauth2/v2.0/token"

# Delegated scopes requested on every refresh.
REFRESH_SCOPES: str = (
    "offline_access Tasks.Read Tasks.ReadWrite Tasks.Read.Shared Tasks.ReadWrite.Shared User.Read"
)

# Tokens are treated as expired 5 minutes before the provider says so.
TOKEN_EXPIRY_MARGIN_MS: int = 5 * 60 * 1000

# Environment-supplied tokens carry no expiry; assume one hour from load.
AMBIENT_TOKEN_LIFETIME_MS: int = 3600 * 1000

# Used when a token response omits expires_in.
DEFAULT_EXPIRES_IN_SECONDS: int = 3600

# Command users run to re-create tokens through the interactive login flow.
REAUTH_COMMAND: str = "npx microsoft-todo-mcp-server setup"

# ============================================================================
# Microsoft Graph
# ============================================================================

GRAPH_BASE_URL: str = "https://graph.microsoft.com/v1.0"

# Applied to every outbound request (token endpoint and Graph).
DEFAULT_HTTP_TIMEOUT_SECONDS: float = 30.0

# Graph error code returned when the To Do API is unavailable for the account.
MAILBOX_NOT_ENABLED_MARKER: str = "MailboxNotEnabledForRESTAPI"

PERSONAL_ACCOUNT_DOMAINS: tuple[str, ...] = (
    "outlook.com",
    "hotmail.com",
    "live.com",
    "msn.com",
    "passport.com",
)

# ============================================================================
# Desktop Host Configuration
# ============================================================================

DESKTOP_HOST_APP_NAME: str = "Claude"
DESKTOP_CONFIG_FILE_NAME: str = "claude_desktop_config.json"

# Key of this server under mcpServers in the desktop host config.
DESKTOP_CONFIG_SERVER_KEY: str = "microsoft-todo"


def get_desktop_config_dir() -> Path:
    """Get the desktop host's per-user configuration directory.

    Platform-specific paths:
        - macOS: ~/Library/Application Support/Claude
        - Linux: ~/.config/Claude
        - Windows: %APPDATA%\\Claude

    Returns:
        Path to the desktop host configuration directory.
    """
    return Path(user_config_dir(DESKTOP_HOST_APP_NAME, appauthor=False, roaming=True))
