"""Tests for GraphClient request handling and the 401 recovery path."""

from __future__ import annotations

import json

import httpx
import pytest

from conftest import FakeHttp, make_record, token_response
from mstodo_mcp.auth.token_storage import TokenStore
from mstodo_mcp.constants import USER_AGENT
from mstodo_mcp.exceptions import AccountCapabilityError, GraphHttpError, UnauthenticatedError
from mstodo_mcp.graph.client import GraphClient

LISTS = "/me/todo/lists"


@pytest.fixture
def signed_in(store: TokenStore) -> None:
    """A valid record with access token A1 on disk."""
    store.save(make_record("A1", "R1"))


class TestRequest:
    """Tests for GraphClient.request."""

    @pytest.mark.usefixtures("signed_in")
    async def test_sends_bearer_and_returns_json(self, graph: GraphClient, fake_http: FakeHttp) -> None:
        """Given a valid token, the request is authorized and the JSON body returned."""
        # Arrange
        fake_http.route("GET", LISTS, httpx.Response(200, json={"value": [{"id": "L1"}]}))

        # Act
        data = await graph.request(LISTS)

        # Assert
        assert data == {"value": [{"id": "L1"}]}
        (request,) = fake_http.graph_requests
        assert str(request.url) == "https://graph.microsoft.com/v1.0/me/todo/lists"
        assert request.headers["Authorization"] == "Bearer A1"
        assert request.headers["User-Agent"] == USER_AGENT
        assert request.headers["Accept"] == "application/json"

    async def test_no_token_raises_without_http(self, graph: GraphClient, fake_http: FakeHttp) -> None:
        """Given no credentials anywhere, UnauthenticatedError is raised before any request."""
        with pytest.raises(UnauthenticatedError):
            await graph.request(LISTS)
        assert fake_http.requests == []

    @pytest.mark.usefixtures("signed_in")
    async def test_post_sends_json_body(self, graph: GraphClient, fake_http: FakeHttp) -> None:
        """Given a POST body, it is sent as JSON."""
        # Arrange
        fake_http.route("POST", LISTS, httpx.Response(201, json={"id": "L2", "displayName": "New"}))

        # Act
        await graph.request(LISTS, "POST", {"displayName": "New"})

        # Assert
        (request,) = fake_http.graph_requests
        assert json.loads(request.read()) == {"displayName": "New"}
        assert request.headers["Content-Type"] == "application/json"

    @pytest.mark.usefixtures("signed_in")
    async def test_get_never_sends_body(self, graph: GraphClient, fake_http: FakeHttp) -> None:
        """Given a body with GET, no body is sent."""
        fake_http.route("GET", LISTS, httpx.Response(200, json={}))

        await graph.request(LISTS, "GET", {"ignored": True})

        assert fake_http.graph_requests[0].read() == b""

    @pytest.mark.usefixtures("signed_in")
    async def test_delete_returns_empty_dict(self, graph: GraphClient, fake_http: FakeHttp) -> None:
        """Given a successful DELETE, an empty dict is returned."""
        fake_http.route("DELETE", f"{LISTS}/L1", httpx.Response(204))

        assert await graph.request(f"{LISTS}/L1", "DELETE") == {}

    @pytest.mark.usefixtures("signed_in")
    async def test_absolute_url_passes_through(self, graph: GraphClient, fake_http: FakeHttp) -> None:
        """Given an @odata.nextLink style URL, it is requested unchanged."""
        fake_http.route("GET", LISTS, httpx.Response(200, json={"value": []}))

        await graph.request("https://graph.microsoft.com/v1.0/me/todo/lists?$skip=10")

        assert fake_http.graph_requests[0].url.params["$skip"] == "10"

    @pytest.mark.usefixtures("signed_in")
    async def test_non_success_raises_graph_http_error(self, graph: GraphClient, fake_http: FakeHttp) -> None:
        """Given a 404, GraphHttpError carries status and body."""
        fake_http.route("GET", LISTS, httpx.Response(404, text="itemNotFound"))

        with pytest.raises(GraphHttpError) as exc_info:
            await graph.request(LISTS)

        assert exc_info.value.status_code == 404
        assert "itemNotFound" in exc_info.value.body
        assert not isinstance(exc_info.value, AccountCapabilityError)

    @pytest.mark.usefixtures("signed_in")
    @pytest.mark.parametrize(
        "response",
        [httpx.Response(200, text="<html>"), httpx.Response(200, json=["L1", "L2"])],
    )
    async def test_success_without_json_object_raises(
        self, graph: GraphClient, fake_http: FakeHttp, response: httpx.Response
    ) -> None:
        """Given a 2xx body that is not a JSON object, GraphHttpError is raised."""
        fake_http.route("GET", LISTS, response)

        with pytest.raises(GraphHttpError) as exc_info:
            await graph.request(LISTS)

        assert exc_info.value.status_code == 200

    @pytest.mark.usefixtures("signed_in")
    async def test_mailbox_not_enabled_raises_capability_error(
        self, graph: GraphClient, fake_http: FakeHttp
    ) -> None:
        """Given MailboxNotEnabledForRESTAPI, AccountCapabilityError is raised."""
        fake_http.route(
            "GET",
            LISTS,
            httpx.Response(401, json={"error": {"code": "MailboxNotEnabledForRESTAPI"}}),
        )
        fake_http.token_responses.append(token_response("A2"))
        fake_http.route(
            "GET",
            LISTS,
            httpx.Response(401, json={"error": {"code": "MailboxNotEnabledForRESTAPI"}}),
        )

        with pytest.raises(AccountCapabilityError) as exc_info:
            await graph.request(LISTS)

        assert "personal Microsoft accounts" in str(exc_info.value)

    @pytest.mark.usefixtures("signed_in")
    async def test_network_error_propagates(self, graph: GraphClient, fake_http: FakeHttp) -> None:
        """Given a transport failure, the httpx error reaches the caller."""
        fake_http.error = httpx.ConnectError("unreachable")

        with pytest.raises(httpx.ConnectError):
            await graph.request(LISTS)


class TestUnauthorizedRecovery:
    """Tests for the single retry after a 401."""

    @pytest.mark.usefixtures("signed_in")
    async def test_retries_once_with_refreshed_token(self, graph: GraphClient, fake_http: FakeHttp) -> None:
        """Given 401 then 200, exactly two Graph calls are made, the second with the new token."""
        # Arrange
        fake_http.route("GET", LISTS, httpx.Response(401, text="InvalidAuthenticationToken"))
        fake_http.route("GET", LISTS, httpx.Response(200, json={"value": []}))
        fake_http.token_responses.append(token_response("A2"))

        # Act
        data = await graph.request(LISTS)

        # Assert
        assert data == {"value": []}
        first, second = fake_http.graph_requests
        assert first.headers["Authorization"] == "Bearer A1"
        assert second.headers["Authorization"] == "Bearer A2"
        assert len(fake_http.token_requests) == 1

    @pytest.mark.usefixtures("signed_in")
    async def test_second_401_surfaces(self, graph: GraphClient, fake_http: FakeHttp) -> None:
        """Given 401 twice, GraphHttpError(401) is raised with no third attempt."""
        # Arrange
        fake_http.route("GET", LISTS, httpx.Response(401, text="InvalidAuthenticationToken"))
        fake_http.route("GET", LISTS, httpx.Response(401, text="InvalidAuthenticationToken"))
        fake_http.token_responses.append(token_response("A2"))

        # Act
        with pytest.raises(GraphHttpError) as exc_info:
            await graph.request(LISTS)

        # Assert
        assert exc_info.value.status_code == 401
        assert len(fake_http.graph_requests) == 2

    @pytest.mark.usefixtures("signed_in")
    async def test_failed_refresh_surfaces_original_401(self, graph: GraphClient, fake_http: FakeHttp) -> None:
        """Given the refresh after a 401 fails, the 401 is raised without a retry."""
        # Arrange
        fake_http.route("GET", LISTS, httpx.Response(401, text="InvalidAuthenticationToken"))
        fake_http.token_responses.append(httpx.Response(400, json={"error": "invalid_grant"}))

        # Act
        with pytest.raises(GraphHttpError) as exc_info:
            await graph.request(LISTS)

        # Assert
        assert exc_info.value.status_code == 401
        assert len(fake_http.graph_requests) == 1
