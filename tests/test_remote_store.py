"""Tests for the remote document store client using mocked HTTP."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from docverify.verification.api_models import ErrorCode
from docverify.verification.models import Expired, Found, NotFound, StoreError
from docverify.verification.store.remote import RemoteStore


BASE_URL = "https://docs.example.com/api"
CLIENT_PATH = "docverify.verification.store.remote.httpx.AsyncClient"


def remote_body(doc_hash="abc123", expires_at="2026-11-01T00:00:00Z", **overrides):
    body = {
        "documentHash": doc_hash,
        "transactionId": "5Tx9remote",
        "timestamp": "2026-10-01T09:30:00Z",
        "walletAddress": "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU",
        "pdfDataUrl": "https://cdn.example.com/reports/abc123.pdf",
        "metadata": {"reportType": "income_statement"},
        "isVerified": True,
        "expiresAt": expires_at,
    }
    body.update(overrides)
    return body


def make_response(status_code, json_body=None, content=None):
    request = httpx.Request("GET", f"{BASE_URL}/verification_documents/abc123")
    if json_body is not None:
        return httpx.Response(status_code, json=json_body, request=request)
    return httpx.Response(status_code, content=content or b"", request=request)


def make_client(response=None, side_effect=None):
    mock_client = AsyncMock()
    mock_client.get = AsyncMock(return_value=response, side_effect=side_effect)
    mock_client.aclose = AsyncMock(return_value=None)
    return mock_client


async def fetch(mock_client, clock, doc_hash="abc123"):
    with patch(CLIENT_PATH, return_value=mock_client) as client_cls:
        store = RemoteStore(base_url=BASE_URL, clock=clock)
        assert await store.connect() is True
        outcome = await store.get(doc_hash)
    return store, client_cls, outcome


# =============================================================================
# Availability
# =============================================================================


class TestAvailability:
    """Tests for connect/close lifecycle."""

    @pytest.mark.asyncio
    async def test_unconfigured_store_is_unavailable(self, clock):
        store = RemoteStore(base_url="", clock=clock)
        assert await store.connect() is False
        assert store.is_available() is False

    @pytest.mark.asyncio
    async def test_get_when_unavailable_returns_store_error(self, clock):
        """No connection yields StoreError, never NotFound."""
        store = RemoteStore(base_url=BASE_URL, clock=clock)

        outcome = await store.get("abc123")
        assert isinstance(outcome, StoreError)
        assert outcome.detail == "Database connection not available"
        assert outcome.code == ErrorCode.REMOTE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_connect_configures_client(self, clock):
        mock_client = make_client()
        with patch(CLIENT_PATH, return_value=mock_client) as client_cls:
            store = RemoteStore(base_url=BASE_URL + "/", timeout_seconds=3.5, clock=clock)
            assert await store.connect() is True

        assert store.is_available() is True
        kwargs = client_cls.call_args.kwargs
        assert kwargs["base_url"] == BASE_URL
        assert kwargs["timeout"] == 3.5

    @pytest.mark.asyncio
    async def test_close_makes_store_unavailable(self, clock):
        mock_client = make_client()
        with patch(CLIENT_PATH, return_value=mock_client):
            store = RemoteStore(base_url=BASE_URL, clock=clock)
            await store.connect()
            await store.close()

        mock_client.aclose.assert_awaited_once()
        assert store.is_available() is False
        assert isinstance(await store.get("abc123"), StoreError)


# =============================================================================
# Lookup
# =============================================================================


class TestRemoteGet:
    """Tests for RemoteStore.get outcome mapping."""

    @pytest.mark.asyncio
    async def test_found(self, clock):
        mock_client = make_client(make_response(200, remote_body()))
        _, _, outcome = await fetch(mock_client, clock)

        assert isinstance(outcome, Found)
        assert outcome.record.hash == "abc123"
        assert outcome.record.transaction_id == "5Tx9remote"
        assert outcome.record.payload.endswith(".pdf")
        mock_client.get.assert_awaited_once_with("/verification_documents/abc123")

    @pytest.mark.asyncio
    async def test_hash_is_path_escaped(self, clock):
        mock_client = make_client(make_response(404))
        await fetch(mock_client, clock, doc_hash="a/b c")
        mock_client.get.assert_awaited_once_with("/verification_documents/a%2Fb%20c")

    @pytest.mark.asyncio
    async def test_not_found(self, clock):
        mock_client = make_client(make_response(404))
        _, _, outcome = await fetch(mock_client, clock)
        assert isinstance(outcome, NotFound)

    @pytest.mark.asyncio
    async def test_expired_record(self, clock):
        """Past expiresAt yields Expired; the remote record is left alone."""
        body = remote_body(expires_at="2026-10-16T11:59:59Z")
        mock_client = make_client(make_response(200, body))
        _, _, outcome = await fetch(mock_client, clock)

        assert isinstance(outcome, Expired)
        assert outcome.expires_at.isoformat() == "2026-10-16T11:59:59+00:00"
        mock_client.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_expiry_boundary_is_expired(self, clock):
        body = remote_body(expires_at="2026-10-16T12:00:00Z")
        _, _, outcome = await fetch(make_client(make_response(200, body)), clock)
        assert isinstance(outcome, Expired)

    @pytest.mark.asyncio
    async def test_epoch_millisecond_timestamps(self, clock):
        body = remote_body(timestamp=1790847000000, expires_at=1793439000000)
        _, _, outcome = await fetch(make_client(make_response(200, body)), clock)
        assert isinstance(outcome, Found)
        assert outcome.record.timestamp.year == 2026

    @pytest.mark.asyncio
    async def test_missing_expires_at_is_store_error(self, clock):
        body = remote_body()
        del body["expiresAt"]
        _, _, outcome = await fetch(make_client(make_response(200, body)), clock)

        assert isinstance(outcome, StoreError)
        assert outcome.code == ErrorCode.RECORD_DECODE_FAILED
        assert "expiresAt" in outcome.detail

    @pytest.mark.asyncio
    async def test_invalid_json_is_store_error(self, clock):
        mock_client = make_client(make_response(200, content=b"<html>Not JSON</html>"))
        _, _, outcome = await fetch(mock_client, clock)

        assert isinstance(outcome, StoreError)
        assert outcome.code == ErrorCode.RECORD_DECODE_FAILED

    @pytest.mark.asyncio
    async def test_timeout_is_store_error(self, clock):
        mock_client = make_client(side_effect=httpx.TimeoutException("Timeout"))
        _, _, outcome = await fetch(mock_client, clock)

        assert isinstance(outcome, StoreError)
        assert outcome.code == ErrorCode.REMOTE_FETCH_FAILED
        assert outcome.detail.startswith("Error retrieving document:")
        assert "Timeout" in outcome.detail

    @pytest.mark.asyncio
    async def test_permission_denied_is_store_error(self, clock):
        mock_client = make_client(make_response(403))
        _, _, outcome = await fetch(mock_client, clock)

        assert isinstance(outcome, StoreError)
        assert "HTTP 403" in outcome.detail

    @pytest.mark.asyncio
    async def test_server_error_is_store_error(self, clock):
        mock_client = make_client(make_response(500))
        _, _, outcome = await fetch(mock_client, clock)

        assert isinstance(outcome, StoreError)
        assert "HTTP 500: Internal Server Error" in outcome.detail

    @pytest.mark.asyncio
    async def test_connection_error_is_store_error(self, clock):
        mock_client = make_client(side_effect=httpx.ConnectError("Connection refused"))
        _, _, outcome = await fetch(mock_client, clock)

        assert isinstance(outcome, StoreError)
        assert "Request failed" in outcome.detail

    @pytest.mark.asyncio
    async def test_non_object_body_is_store_error(self, clock):
        mock_client = make_client(make_response(200, ["abc123"]))
        _, _, outcome = await fetch(mock_client, clock)
        assert isinstance(outcome, StoreError)

    @pytest.mark.asyncio
    async def test_out_of_range_timestamp_is_store_error(self, clock):
        body = remote_body(timestamp=10**20)
        _, _, outcome = await fetch(make_client(make_response(200, body)), clock)

        assert isinstance(outcome, StoreError)
        assert outcome.code == ErrorCode.RECORD_DECODE_FAILED
        assert "Invalid timestamp" in outcome.detail

    @pytest.mark.asyncio
    async def test_mismatched_document_hash_is_store_error(self, clock):
        body = remote_body(doc_hash="def456")
        _, _, outcome = await fetch(make_client(make_response(200, body)), clock)

        assert isinstance(outcome, StoreError)
        assert outcome.code == ErrorCode.RECORD_DECODE_FAILED
