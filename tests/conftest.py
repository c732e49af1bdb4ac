"""Shared fixtures: isolated settings, token store, scripted HTTP.

HTTP is faked with httpx.MockTransport. FakeHttp answers token endpoint
requests and Graph requests from separate scripts and records every
request it sees.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncIterator, Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest

from mstodo_mcp.auth.token_manager import TokenManager
from mstodo_mcp.auth.token_storage import CredentialRecord, TokenStore, now_ms
from mstodo_mcp.config import Settings
from mstodo_mcp.constants import APP_NAME
from mstodo_mcp.graph.client import GraphClient

TOKEN_HOST = "login.microsoftonline.com"
GRAPH_PREFIX = "/v1.0"

HOUR_MS = 3600 * 1000


class FakeHttp:
    """Scripted transport for token endpoint and Graph calls.

    Token endpoint responses are served in order from token_responses.
    Graph responses are served per (method, path) from routes, falling
    back to graph_responses in order. Unscripted requests get a 599.
    """

    def __init__(self) -> None:
        self.token_responses: list[httpx.Response] = []
        self.graph_responses: list[httpx.Response] = []
        self.routes: dict[tuple[str, str], list[httpx.Response]] = defaultdict(list)
        self.requests: list[httpx.Request] = []
        self.delay = 0.0
        self.error: Exception | None = None

    def route(self, method: str, path: str, response: httpx.Response) -> None:
        """Queue a Graph response for METHOD path (path without /v1.0)."""
        self.routes[(method.upper(), GRAPH_PREFIX + path)].append(response)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

        if request.url.host == TOKEN_HOST:
            queue = self.token_responses
        else:
            queue = self.routes.get((request.method, request.url.path)) or self.graph_responses
        if not queue:
            return httpx.Response(599, text=f"unscripted request: {request.method} {request.url}")
        return queue.pop(0)

    @property
    def token_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == TOKEN_HOST]

    @property
    def graph_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host != TOKEN_HOST]


def token_response(
    access_token: str = "new-access-token",
    refresh_token: str | None = None,
    expires_in: int | None = 3600,
) -> httpx.Response:
    """Successful token endpoint response."""
    data: dict[str, Any] = {"access_token": access_token, "token_type": "Bearer"}
    if refresh_token is not None:
        data["refresh_token"] = refresh_token
    if expires_in is not None:
        data["expires_in"] = expires_in
    return httpx.Response(200, json=data)


def make_record(
    access_token: str = "access-1",
    refresh_token: str = "refresh-1",
    *,
    expires_in_ms: int = HOUR_MS,
    **extra: Any,
) -> CredentialRecord:
    """Record expiring expires_in_ms from now (negative for expired)."""
    return CredentialRecord(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=now_ms() + expires_in_ms,
        **extra,
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_app_logger() -> Iterator[None]:
    """Undo configure_logging() so caplog sees records in every test."""
    yield
    logger = logging.getLogger(APP_NAME)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated to tmp_path, with client credentials, no env tokens."""
    return Settings(
        client_id="settings-client-id",
        client_secret="settings-client-secret",
        token_dir=tmp_path / "config",
        legacy_token_path=tmp_path / "cwd" / "tokens.json",
        desktop_config_path=None,
    )


@pytest.fixture
def store(settings: Settings) -> TokenStore:
    return TokenStore(settings.token_dir, settings.legacy_token_path)


@pytest.fixture
def fake_http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
async def http_client(fake_http: FakeHttp) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_http.handler)) as client:
        yield client


@pytest.fixture
def token_manager(settings: Settings, store: TokenStore, http_client: httpx.AsyncClient) -> TokenManager:
    return TokenManager(settings, store, http_client)


@pytest.fixture
def graph(token_manager: TokenManager, http_client: httpx.AsyncClient) -> GraphClient:
    return GraphClient(token_manager, http_client)
