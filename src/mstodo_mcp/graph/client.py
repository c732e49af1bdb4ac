"""Authenticated Microsoft Graph request client.

GraphClient sends one request with a bearer token from the TokenManager
and heals one authorization failure:

    1. token = manager.get_access_token()       (UnauthenticatedError if None)
    2. send request
    3. on 401: manager.force_refresh(token); if a different token comes
       back, resend once with it; otherwise surface the 401
    4. non-2xx -> GraphHttpError (AccountCapabilityError for
       MailboxNotEnabledForRESTAPI)

There is no other retry. Network faults (httpx.HTTPError) propagate to
the caller unchanged.
"""

from __future__ import annotations

__all__ = [
    "GraphClient",
]

from typing import Any

import httpx

from mstodo_mcp.auth.token_manager import TokenManager
from mstodo_mcp.constants import GRAPH_BASE_URL, MAILBOX_NOT_ENABLED_MARKER, USER_AGENT
from mstodo_mcp.exceptions import AccountCapabilityError, GraphHttpError, UnauthenticatedError
from mstodo_mcp.utils.logging.logger_setup import get_logger

_logger = get_logger("graph.client")

_BODY_METHODS = frozenset({"POST", "PATCH"})


class GraphClient:
    """Bearer-authenticated JSON client for Microsoft Graph.

    Usage:
        graph = GraphClient(token_manager, http_client)
        lists = await graph.request("/me/todo/lists")
        await graph.request(f"/me/todo/lists/{list_id}", "DELETE")
    """

    def __init__(
        self,
        token_manager: TokenManager,
        http_client: httpx.AsyncClient,
        base_url: str = GRAPH_BASE_URL,
    ) -> None:
        """Initialize the client.

        Args:
            token_manager: Source of access tokens.
            http_client: Shared HTTP client (owned by the caller).
            base_url: Prefix for relative paths.
        """
        self._token_manager = token_manager
        self._http_client = http_client
        self._base_url = base_url.rstrip("/")

    @property
    def token_manager(self) -> TokenManager:
        """The token manager this client draws tokens from."""
        return self._token_manager

    def url_for(self, path_or_url: str) -> str:
        """Absolute URL for a Graph path (absolute URLs pass through)."""
        if path_or_url.startswith(("https://", "http://")):
            return path_or_url
        return f"{self._base_url}/{path_or_url.lstrip('/')}"

    async def request(
        self,
        path_or_url: str,
        method: str = "GET",
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send an authenticated request and return the parsed JSON body.

        Args:
            path_or_url: Graph path ("/me/todo/lists") or absolute URL
                (e.g. an @odata.nextLink).
            method: HTTP method.
            body: JSON body, sent only for POST and PATCH.

        Returns:
            Parsed JSON object; {} for DELETE and empty responses.

        Raises:
            UnauthenticatedError: If no access token is obtainable.
            AccountCapabilityError: If the account cannot use the To Do API.
            GraphHttpError: For any other non-2xx response, or a 2xx body
                that is not a JSON object.
            httpx.HTTPError: On network failures.
        """
        method = method.upper()
        url = self.url_for(path_or_url)

        token = await self._token_manager.get_access_token()
        if token is None:
            raise UnauthenticatedError()

        _logger.debug({"event": "graph_request", "message": f"{method} {url}", "method": method, "url": url})
        response = await self._send(method, url, token, body)

        if response.status_code == 401:
            _logger.info(
                {
                    "event": "graph_unauthorized",
                    "message": "Got 401, attempting token refresh",
                    "url": url,
                }
            )
            record = await self._token_manager.force_refresh(token)
            if record is not None and record.access_token != token:
                response = await self._send(method, url, record.access_token, body)

        if not response.is_success:
            raise self._error_for(response)

        if method == "DELETE" or not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            raise GraphHttpError(response.status_code, f"invalid JSON response: {e}") from e
        if not isinstance(data, dict):
            raise GraphHttpError(response.status_code, f"expected a JSON object, got {type(data).__name__}")
        return data

    async def _send(
        self,
        method: str,
        url: str,
        token: str,
        body: dict[str, Any] | None,
    ) -> httpx.Response:
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        json_body = body if body is not None and method in _BODY_METHODS else None
        return await self._http_client.request(method, url, headers=headers, json=json_body)

    def _error_for(self, response: httpx.Response) -> GraphHttpError:
        text = response.text
        _logger.warning(
            {
                "event": "graph_http_error",
                "message": f"HTTP error! status: {response.status_code}",
                "status_code": response.status_code,
                "url": str(response.request.url),
            }
        )
        if MAILBOX_NOT_ENABLED_MARKER in text:
            _logger.error(
                {
                    "event": "mailbox_not_enabled",
                    "message": AccountCapabilityError.explanation,
                }
            )
            return AccountCapabilityError(response.status_code, text)
        return GraphHttpError(response.status_code, text)
