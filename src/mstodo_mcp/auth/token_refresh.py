"""Token refresh for the OAuth refresh_token grant.

When the access token expires, redeem the refresh token at the Microsoft
identity platform for a new access token (and possibly a rotated refresh
token) without user interaction.

Flow:
1. Access token expires (or Graph answers 401)
2. TokenManager calls refresh_tokens() with the refresh token
3. New access_token (and maybe refresh_token) come back
4. TokenManager persists the record and updates the desktop host config
"""

from __future__ import annotations

__all__ = [
    "TokenRefreshError",
    "build_token_endpoint",
    "refresh_tokens",
]

import httpx

from mstodo_mcp.auth.token_parser import parse_token_response
from mstodo_mcp.auth.token_storage import CredentialRecord, now_ms
from mstodo_mcp.constants import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_TENANT_ID,
    REFRESH_SCOPES,
    TOKEN_ENDPOINT_TEMPLATE,
)
from mstodo_mcp.exceptions import TokenRefreshError


def build_token_endpoint(tenant_id: str | None) -> str:
    """Token endpoint URL for a tenant (defaults to "organizations")."""
    return TOKEN_ENDPOINT_TEMPLATE.format(tenant_id=tenant_id or DEFAULT_TENANT_ID)


async def refresh_tokens(
    refresh_token: str,
    *,
    client_id: str,
    client_secret: str,
    tenant_id: str | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> CredentialRecord:
    """Refresh the access token using the refresh_token grant.

    Args:
        refresh_token: Refresh token to redeem.
        client_id: Application (client) ID.
        client_secret: Application secret.
        tenant_id: Tenant for the token endpoint.
        http_client: Optional shared client (for connection reuse and testing).

    Returns:
        New CredentialRecord carrying the client identity used here.

    Raises:
        TokenRefreshError: If the provider rejects the grant, the response is
            malformed, or the endpoint cannot be reached.
    """
    client = http_client or httpx.AsyncClient(timeout=DEFAULT_HTTP_TIMEOUT_SECONDS)
    owns_client = http_client is None
    tenant = tenant_id or DEFAULT_TENANT_ID

    try:
        issued_at = now_ms()
        response = await client.post(
            build_token_endpoint(tenant),
            data={
                "client_id": client_id,
                "client_secret": client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
                "scope": REFRESH_SCOPES,
            },
            headers={"Accept": "application/json"},
        )

        if not response.is_success:
            raise TokenRefreshError(
                f"Token refresh failed: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
            if not isinstance(payload, dict):
                raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
            return parse_token_response(
                payload,
                previous_refresh_token=refresh_token,
                client_id=client_id,
                client_secret=client_secret,
                tenant_id=tenant,
                issued_at_ms=issued_at,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TokenRefreshError(
                f"Malformed token response: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

    except httpx.HTTPError as e:
        raise TokenRefreshError(f"HTTP error during token refresh: {e}") from e

    finally:
        if owns_client:
            await client.aclose()
