"""Tests for the Beds24 API client and write token manager."""

import asyncio
import time
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.clients.beds24_client import (
    Beds24Client,
    PageInfo,
    UpstreamRequestFailed,
    UpstreamUnreachable,
    normalize_records,
)
from src.clients.context import CachedToken, ClientContext
from src.clients.token_manager import TokenManagerError, WriteTokenManager

BOOKINGS_URL = "https://api.beds24.com/v2/bookings"


def _http_response(status_code=200, json_body=None, content=None, headers=None):
    kwargs = {"headers": headers or {}, "request": httpx.Request("GET", BOOKINGS_URL)}
    if content is not None:
        kwargs["content"] = content
    else:
        kwargs["json"] = json_body
    return httpx.Response(status_code, **kwargs)


@pytest.fixture
def mock_http():
    """Patch httpx.AsyncClient and yield the client used inside the context manager."""
    with patch("src.clients.beds24_client.httpx.AsyncClient") as mock_cls:
        http = MagicMock()
        http.request = AsyncMock()
        mock_cls.return_value.__aenter__.return_value = http
        yield http


class TestNormalizeRecords:
    """Tests for record extraction across payload shapes."""

    def test_data_list(self):
        assert normalize_records({"data": [{"id": 1}, {"id": 2}]}) == [{"id": 1}, {"id": 2}]

    def test_data_object(self):
        assert normalize_records({"data": {"id": 1}}) == [{"id": 1}]

    def test_bare_list(self):
        assert normalize_records([{"id": 1}]) == [{"id": 1}]

    def test_bare_object(self):
        assert normalize_records({"id": 1}) == [{"id": 1}]

    def test_empty(self):
        assert normalize_records(None) == []
        assert normalize_records({"data": None}) == []

    def test_page_info(self):
        assert PageInfo.from_payload({"pages": {"nextPageExists": True}}).next_page_exists
        assert not PageInfo.from_payload({"pages": {"nextPageExists": "true"}}).next_page_exists
        assert not PageInfo.from_payload({}).next_page_exists


class TestBeds24Client:
    """Tests for Beds24Client.query."""

    @pytest.mark.asyncio
    async def test_get_uses_read_token_and_serializes_params(self, mock_http, bookings_page):
        mock_http.request.return_value = _http_response(json_body=bookings_page)
        client = Beds24Client(read_token="read-token")

        response = await client.query(
            "bookings",
            {"propertyId": 279646, "includeInvoiceItems": True, "arrival": None, "status": ""},
        )

        kwargs = mock_http.request.await_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == BOOKINGS_URL
        assert kwargs["headers"]["token"] == "read-token"
        assert kwargs["params"] == {"propertyId": "279646", "includeInvoiceItems": "true"}
        assert kwargs["json"] is None
        assert len(response.records) == 3
        assert response.pages.next_page_exists is False

    @pytest.mark.asyncio
    async def test_records_rate_limit_headers(self, mock_http, bookings_page):
        mock_http.request.return_value = _http_response(
            json_body=bookings_page,
            headers={
                "X-FiveMinCreditLimit-Remaining": "850",
                "X-FiveMinCreditLimit-ResetsIn": "120",
                "X-RequestCost": "3",
            },
        )
        client = Beds24Client(read_token="read-token")

        await client.query("bookings")

        assert client.rate_limit.remaining == 850
        assert client.rate_limit.resets_in == 120
        assert client.rate_limit.request_cost == 3
        assert client.rate_limit.last_updated > 0

    @pytest.mark.asyncio
    async def test_rate_limit_untouched_without_headers(self, mock_http, bookings_page):
        mock_http.request.return_value = _http_response(json_body=bookings_page)
        client = Beds24Client(read_token="read-token")

        await client.query("bookings")

        assert client.rate_limit.remaining == 1000
        assert client.rate_limit.last_updated == 0.0

    @pytest.mark.asyncio
    async def test_contexts_are_not_shared(self, mock_http, bookings_page):
        mock_http.request.return_value = _http_response(
            json_body=bookings_page,
            headers={"X-FiveMinCreditLimit-Remaining": "10"},
        )
        first = Beds24Client(read_token="read-token")
        second = Beds24Client(read_token="read-token")

        await first.query("bookings")

        assert first.rate_limit.remaining == 10
        assert second.rate_limit.remaining == 1000

    @pytest.mark.asyncio
    async def test_explicit_failure(self, mock_http, error_response):
        mock_http.request.return_value = _http_response(401, json_body=error_response)
        client = Beds24Client(read_token="bad-token")

        with pytest.raises(UpstreamRequestFailed) as exc_info:
            await client.query("bookings")

        assert exc_info.value.status_code == 401
        assert "Token is not valid" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_error(self, mock_http):
        mock_http.request.side_effect = httpx.ConnectError("connection refused")
        client = Beds24Client(read_token="read-token")

        with pytest.raises(UpstreamUnreachable):
            await client.query("bookings")

    @pytest.mark.asyncio
    async def test_transport_timeout(self, mock_http):
        mock_http.request.side_effect = httpx.ReadTimeout("read timed out")
        client = Beds24Client(read_token="read-token")

        with pytest.raises(UpstreamUnreachable, match="timeout"):
            await client.query("bookings")

    @pytest.mark.asyncio
    async def test_undecodable_body(self, mock_http):
        mock_http.request.return_value = _http_response(502, content=b"<html>Bad gateway</html>")
        client = Beds24Client(read_token="read-token")

        with pytest.raises(UpstreamUnreachable, match="502"):
            await client.query("bookings")

    @pytest.mark.asyncio
    async def test_deadline_breach(self):
        client = Beds24Client(read_token="read-token")
        client.deadline = 0.01

        async def slow_request(*args, **kwargs):
            await asyncio.sleep(1)

        with patch.object(client, "_request", side_effect=slow_request):
            with pytest.raises(UpstreamUnreachable, match="did not answer"):
                await client.query("bookings")

    @pytest.mark.asyncio
    async def test_post_uses_write_token(self, mock_http):
        mock_http.request.return_value = _http_response(json_body=[{"success": True}])
        token_manager = AsyncMock()
        token_manager.get_write_token.return_value = "write-token"
        client = Beds24Client(read_token="read-token", token_manager=token_manager)

        await client.write_bookings([{"roomId": 583001, "arrival": "2024-02-01"}])

        kwargs = mock_http.request.await_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["headers"]["token"] == "write-token"
        assert kwargs["params"] is None
        assert kwargs["json"] == [{"roomId": 583001, "arrival": "2024-02-01"}]

    @pytest.mark.asyncio
    async def test_failed_token_refresh_fails_write(self, mock_http):
        token_manager = AsyncMock()
        token_manager.get_write_token.side_effect = TokenManagerError("refresh rejected")
        client = Beds24Client(read_token="read-token", token_manager=token_manager)

        with pytest.raises(UpstreamRequestFailed, match="refresh rejected"):
            await client.write_bookings([{"roomId": 583001}])

        mock_http.request.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_property(self, mock_http, property_response):
        mock_http.request.return_value = _http_response(json_body=property_response)
        client = Beds24Client(read_token="read-token")

        prop = await client.get_property(279646)

        assert prop["id"] == 279646
        params = mock_http.request.await_args.kwargs["params"]
        assert params == {"id": "279646", "includeAllRooms": "true", "includeUnitDetails": "true"}


class TestWriteTokenManager:
    """Tests for the write token cache."""

    @pytest.mark.asyncio
    async def test_reuses_cached_token(self):
        manager = WriteTokenManager(ClientContext(), refresh_token="refresh")

        with patch.object(
            manager,
            "_fetch_new_token",
            AsyncMock(return_value={"token": "write-1", "expiresIn": 86400}),
        ) as fetch:
            assert await manager.get_write_token() == "write-1"
            assert await manager.get_write_token() == "write-1"

        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_refreshes_token_close_to_expiry(self):
        context = ClientContext(write_token=CachedToken("old", expires_at=time.time() + 10))
        manager = WriteTokenManager(context, refresh_token="refresh")

        with patch.object(
            manager,
            "_fetch_new_token",
            AsyncMock(return_value={"token": "write-2", "expiresIn": 86400}),
        ):
            token = await manager.get_write_token()

        assert token == "write-2"
        # Expiry is stored early by the refresh margin
        assert context.write_token.expires_at <= time.time() + 86400 - 60

    @pytest.mark.asyncio
    async def test_missing_refresh_token(self):
        manager = WriteTokenManager(ClientContext(), refresh_token="")

        with pytest.raises(TokenManagerError):
            await manager.get_write_token()

    @pytest.mark.asyncio
    async def test_refresh_without_token(self):
        manager = WriteTokenManager(ClientContext(), refresh_token="refresh")

        with patch.object(
            manager,
            "_fetch_new_token",
            AsyncMock(return_value={"error": "Invalid refresh token"}),
        ):
            with pytest.raises(TokenManagerError, match="Invalid refresh token"):
                await manager.get_write_token()

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        manager = WriteTokenManager(ClientContext(), refresh_token="refresh")

        with patch.object(
            manager,
            "_fetch_new_token",
            AsyncMock(side_effect=httpx.ConnectError("down")),
        ):
            with pytest.raises(TokenManagerError):
                await manager.get_write_token()

    def test_invalidate(self):
        context = ClientContext(write_token=CachedToken("token", expires_at=time.time() + 3600))
        manager = WriteTokenManager(context, refresh_token="refresh")

        manager.invalidate()

        assert context.write_token.token is None
