"""OAuth token response parsing.

Converts a token endpoint response into a CredentialRecord, applying the
expiry safety margin and carrying the client identity forward.
"""

from __future__ import annotations

__all__ = ["parse_token_response"]

from typing import Any

from mstodo_mcp.auth.token_storage import CredentialRecord, now_ms
from mstodo_mcp.constants import DEFAULT_EXPIRES_IN_SECONDS, TOKEN_EXPIRY_MARGIN_MS


def parse_token_response(
    data: dict[str, Any],
    *,
    previous_refresh_token: str,
    client_id: str | None,
    client_secret: str | None,
    tenant_id: str | None,
    issued_at_ms: int | None = None,
) -> CredentialRecord:
    """Parse a token endpoint response into a CredentialRecord.

    Handles the standard OAuth 2.0 fields:
    - access_token (required)
    - refresh_token (optional; the previous one is kept when omitted,
      since Microsoft does not rotate it on every refresh)
    - expires_in (optional, seconds; defaults to one hour)

    Args:
        data: Token response JSON.
        previous_refresh_token: Refresh token that was just redeemed.
        client_id: Application ID to store alongside the tokens.
        client_secret: Application secret to store alongside the tokens.
        tenant_id: Tenant to store alongside the tokens.
        issued_at_ms: Issuance instant (defaults to now).

    Returns:
        CredentialRecord whose expires_at is issuance + lifetime - 5 minutes.

    Raises:
        KeyError: If access_token is missing.
        ValueError: If expires_in is not numeric.
    """
    issued = now_ms() if issued_at_ms is None else issued_at_ms
    expires_in = int(data.get("expires_in") or DEFAULT_EXPIRES_IN_SECONDS)

    return CredentialRecord(
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token") or previous_refresh_token,
        expires_at=issued + expires_in * 1000 - TOKEN_EXPIRY_MARGIN_MS,
        client_id=client_id,
        client_secret=client_secret,
        tenant_id=tenant_id,
    )
