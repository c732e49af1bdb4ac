"""OAuth token lifecycle for Microsoft Graph.

This module provides:
- Token storage (canonical per-user file, legacy working-directory file)
- Token refresh via the refresh_token grant
- Desktop host config update after refreshes
- TokenManager, the single entry point for a usable access token

Note: Token exceptions are defined in mstodo_mcp.exceptions
"""

from mstodo_mcp.auth.desktop_config import (
    get_desktop_config_path,
    update_desktop_config,
)
from mstodo_mcp.auth.token_manager import (
    TokenManager,
    TokenResolution,
    TokenSource,
    TokenState,
)
from mstodo_mcp.auth.token_parser import (
    parse_token_response,
)
from mstodo_mcp.auth.token_refresh import (
    build_token_endpoint,
    refresh_tokens,
)
from mstodo_mcp.auth.token_storage import (
    CredentialRecord,
    TokenStore,
    now_ms,
)

__all__ = [
    # Token storage
    "CredentialRecord",
    "TokenStore",
    "now_ms",
    # Token refresh
    "build_token_endpoint",
    "parse_token_response",
    "refresh_tokens",
    # Desktop config
    "get_desktop_config_path",
    "update_desktop_config",
    # Token manager
    "TokenManager",
    "TokenResolution",
    "TokenSource",
    "TokenState",
]
