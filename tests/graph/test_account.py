"""Tests for the personal-account check."""

from __future__ import annotations

import logging

import httpx
import pytest

from conftest import FakeHttp, make_record
from mstodo_mcp.auth.token_storage import TokenStore
from mstodo_mcp.graph.account import account_email, is_personal_account, is_personal_email
from mstodo_mcp.graph.client import GraphClient


@pytest.mark.parametrize(
    ("email", "expected"),
    [
        ("someone@outlook.com", True),
        ("someone@Hotmail.com", True),
        ("someone@live.co.uk", False),
        ("someone@contoso.onmicrosoft.com", False),
        ("", False),
    ],
)
def test_is_personal_email(email: str, expected: bool) -> None:
    assert is_personal_email(email) is expected


def test_account_email_falls_back_to_upn() -> None:
    """Given no mail, userPrincipalName is used."""
    assert account_email({"mail": None, "userPrincipalName": "a@contoso.com"}) == "a@contoso.com"


class TestIsPersonalAccount:
    """Tests for is_personal_account."""

    async def test_personal_profile_warns(
        self, graph: GraphClient, store: TokenStore, fake_http: FakeHttp, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Given an outlook.com profile, returns True and logs a warning."""
        # Arrange
        caplog.set_level(logging.WARNING)
        store.save(make_record())
        fake_http.route("GET", "/me", httpx.Response(200, json={"mail": "me@outlook.com"}))

        # Act / Assert
        assert await is_personal_account(graph) is True
        assert any(
            isinstance(r.msg, dict) and r.msg["event"] == "personal_account_detected" for r in caplog.records
        )

    async def test_work_profile_is_not_personal(
        self, graph: GraphClient, store: TokenStore, fake_http: FakeHttp
    ) -> None:
        """Given a work profile, returns False."""
        store.save(make_record())
        fake_http.route("GET", "/me", httpx.Response(200, json={"mail": "me@contoso.com"}))

        assert await is_personal_account(graph) is False

    async def test_failure_counts_as_not_personal(self, graph: GraphClient) -> None:
        """Given no token, returns False instead of raising."""
        assert await is_personal_account(graph) is False
