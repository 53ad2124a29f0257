"""
Tests for the aiohttp transport.
"""

import pytest
import asyncio
import aiohttp
from unittest.mock import AsyncMock, MagicMock, patch

from elc.api.http_client import AioHttpClient, ELCAPIResponse, HTTPClient, decode_body
from elc.api.request_shaper import FORM_CONTENT_TYPE, ShapedRequest
from elc.exceptions import TransportError


class MockAsyncContextManager:
    """Async context manager returning a canned response or raising."""

    def __init__(self, response=None, error=None):
        self._response = response
        self._error = error

    async def __aenter__(self):
        if self._error is not None:
            raise self._error
        return self._response

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


def mock_response(status, text):
    response = AsyncMock()
    response.status = status
    response.text = AsyncMock(return_value=text)
    return response


def patched_session(client, context_manager):
    """Patch _ensure_session to return a session serving context_manager."""
    session = MagicMock()
    session.get.return_value = context_manager
    session.post.return_value = context_manager

    async def mock_ensure_session():
        return session

    return session, patch.object(client, "_ensure_session", side_effect=mock_ensure_session)


class TestDecodeBody:
    """Test response body decoding."""

    def test_plain_json(self):
        """Test plain JSON bodies."""
        assert decode_body('[{"Route":"005"}]') == [{"Route": "005"}]

    def test_jsonp_wrapper_removed(self):
        """Test JSONP callback wrappers are stripped."""
        assert decode_body('jsonp({"Current":{"005":3}});') == {"Current": {"005": 3}}

    def test_jsonp_wrapper_without_semicolon(self):
        """Test wrappers without a trailing semicolon."""
        assert decode_body("jsonp([])") == []

    def test_invalid_json(self):
        """Test undecodable bodies raise TransportError."""
        with pytest.raises(TransportError):
            decode_body("<html>Server Error</html>")


class TestAioHttpClient:
    """Test AioHttpClient implementation."""

    def test_init_timeout(self):
        """Test timeout configuration."""
        client = AioHttpClient(timeout_seconds=15)
        assert client._timeout.total == 15
        assert client._session is None

    def test_default_timeout(self):
        """Test default timeout."""
        assert AioHttpClient()._timeout.total == 30

    @pytest.mark.asyncio
    async def test_ensure_session_creates_session(self):
        """Test a session is created with timeout and User-Agent."""
        client = AioHttpClient()

        with patch("elc.api.http_client.aiohttp.ClientSession") as mock_session_class:
            mock_session = AsyncMock()
            mock_session.closed = False
            mock_session_class.return_value = mock_session

            session = await client._ensure_session()

            assert session == mock_session
            call_args = mock_session_class.call_args
            assert call_args[1]["timeout"] == client._timeout
            assert call_args[1]["headers"]["User-Agent"].startswith("ELCClient/")

    @pytest.mark.asyncio
    async def test_ensure_session_reuses_open_session(self):
        """Test an open session is reused."""
        client = AioHttpClient()
        existing = AsyncMock()
        existing.closed = False
        client._session = existing

        assert await client._ensure_session() is existing

    @pytest.mark.asyncio
    async def test_get_success(self):
        """Test successful GET."""
        client = AioHttpClient()
        session, patcher = patched_session(
            client, MockAsyncContextManager(mock_response(200, '[{"Id":1}]'))
        )

        with patcher:
            response = await client.get("http://test/op?f=json")

        assert isinstance(response, ELCAPIResponse)
        assert response.status_code == 200
        assert response.data == [{"Id": 1}]
        session.get.assert_called_once_with("http://test/op?f=json")

    @pytest.mark.asyncio
    async def test_post_sends_form_body(self):
        """Test POST sends a urlencoded body."""
        client = AioHttpClient()
        session, patcher = patched_session(
            client, MockAsyncContextManager(mock_response(200, "[]"))
        )

        with patcher:
            response = await client.post("http://test/op", "f=json&locations=%5B%5D")

        assert response.data == []
        call_args = session.post.call_args
        assert call_args[0][0] == "http://test/op"
        assert call_args[1]["data"] == "f=json&locations=%5B%5D"
        assert call_args[1]["headers"]["Content-Type"] == FORM_CONTENT_TYPE

    @pytest.mark.asyncio
    async def test_get_jsonp_body(self):
        """Test JSONP responses are unwrapped."""
        client = AioHttpClient()
        _, patcher = patched_session(
            client, MockAsyncContextManager(mock_response(200, 'jsonp({"a":1});'))
        )

        with patcher:
            response = await client.get("http://test/op?f=json&callback=jsonp")

        assert response.data == {"a": 1}

    @pytest.mark.asyncio
    async def test_error_page_kept_as_text(self):
        """Test non-JSON bodies of error responses are kept as text."""
        client = AioHttpClient()
        _, patcher = patched_session(
            client, MockAsyncContextManager(mock_response(500, "<html>oops</html>"))
        )

        with patcher:
            response = await client.get("http://test/op")

        assert response.status_code == 500
        assert response.data == "<html>oops</html>"

    @pytest.mark.asyncio
    async def test_invalid_json_with_200(self):
        """Test non-JSON 200 responses raise TransportError."""
        client = AioHttpClient()
        _, patcher = patched_session(
            client, MockAsyncContextManager(mock_response(200, "not json"))
        )

        with patcher:
            with pytest.raises(TransportError):
                await client.get("http://test/op")

    @pytest.mark.asyncio
    async def test_empty_body(self):
        """Test empty bodies decode to None."""
        client = AioHttpClient()
        _, patcher = patched_session(
            client, MockAsyncContextManager(mock_response(204, ""))
        )

        with patcher:
            response = await client.get("http://test/op")

        assert response.data is None

    @pytest.mark.asyncio
    async def test_client_error(self):
        """Test aiohttp errors raise TransportError."""
        client = AioHttpClient()
        _, patcher = patched_session(
            client, MockAsyncContextManager(error=aiohttp.ClientError("Connection failed"))
        )

        with patcher:
            with pytest.raises(TransportError) as exc_info:
                await client.get("http://test/op")

        assert "Network error: Connection failed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test timeouts raise TransportError."""
        client = AioHttpClient()
        _, patcher = patched_session(
            client, MockAsyncContextManager(error=asyncio.TimeoutError())
        )

        with patcher:
            with pytest.raises(TransportError):
                await client.post("http://test/op", "f=json")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["get", "post"])
    async def test_undecodable_body(self, method):
        """Test bodies invalid in their charset raise TransportError."""
        client = AioHttpClient()
        response = mock_response(200, "")
        response.text = AsyncMock(
            side_effect=UnicodeDecodeError("utf-8", b"\xff\xfe", 0, 1, "invalid start byte")
        )
        _, patcher = patched_session(client, MockAsyncContextManager(response))

        with patcher:
            with pytest.raises(TransportError) as exc_info:
                if method == "get":
                    await client.get("http://test/op")
                else:
                    await client.post("http://test/op", "f=json")

        assert "Undecodable response body" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_close_with_session(self):
        """Test close closes an open session."""
        client = AioHttpClient()
        mock_session = AsyncMock()
        mock_session.closed = False
        client._session = mock_session

        await client.close()

        mock_session.close.assert_called_once()
        assert client._session is None

    @pytest.mark.asyncio
    async def test_close_without_session(self):
        """Test close without a session."""
        await AioHttpClient().close()


class TestHTTPClientSend:
    """Test dispatch of shaped requests."""

    @pytest.mark.asyncio
    async def test_send_get(self):
        """Test GET requests are dispatched to get()."""
        client = AioHttpClient()
        with patch.object(client, "get", new=AsyncMock(return_value="get")) as mock_get:
            assert await client.send(ShapedRequest("GET", "http://test/op?f=json")) == "get"
        mock_get.assert_called_once_with("http://test/op?f=json")

    @pytest.mark.asyncio
    async def test_send_post(self):
        """Test POST requests are dispatched to post()."""
        client = AioHttpClient()
        with patch.object(client, "post", new=AsyncMock(return_value="post")) as mock_post:
            assert await client.send(ShapedRequest("POST", "http://test/op", "f=json")) == "post"
        mock_post.assert_called_once_with("http://test/op", "f=json")

    def test_http_client_is_abstract(self):
        """Test the interface cannot be instantiated."""
        with pytest.raises(TypeError):
            HTTPClient()
