"""Tests for the nonce endpoint call."""

from collections.abc import Callable

import httpx
import pytest

from itwallet.core.callbacks import CallbackContext
from itwallet.core.errors import NonceParseError, NonceRequestError
from itwallet.oid4vci.nonce import fetch_nonce

NONCE_URL = "https://issuer.example.com/nonce"

MockHttp = Callable[..., httpx.AsyncClient]


def _callbacks(mock_http: MockHttp, response: httpx.Response) -> CallbackContext:
    return CallbackContext(http_client=mock_http(lambda request: response))


class TestFetchNonce:
    """Tests for fetch_nonce."""

    async def test_returns_c_nonce(self, mock_http: MockHttp) -> None:
        seen: list[httpx.Request] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"c_nonce": "fresh-nonce"})

        result = await fetch_nonce(
            CallbackContext(http_client=mock_http(_handler)), NONCE_URL
        )
        assert result.c_nonce == "fresh-nonce"
        assert seen[0].method == "POST"
        assert str(seen[0].url) == NONCE_URL

    async def test_missing_c_nonce(self, mock_http: MockHttp) -> None:
        callbacks = _callbacks(mock_http, httpx.Response(200, json={"nonce": "x"}))
        with pytest.raises(NonceParseError, match="Failed to parse nonce response"):
            await fetch_nonce(callbacks, NONCE_URL)

    async def test_unexpected_status(self, mock_http: MockHttp) -> None:
        callbacks = _callbacks(mock_http, httpx.Response(500, text="boom"))
        with pytest.raises(
            NonceRequestError, match="Unexpected error during nonce request"
        ) as exc_info:
            await fetch_nonce(callbacks, NONCE_URL)
        assert exc_info.value.status_code == 500

    async def test_transport_failure(self, mock_http: MockHttp) -> None:
        def _fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NonceRequestError, match="connection refused") as exc_info:
            await fetch_nonce(CallbackContext(http_client=mock_http(_fail)), NONCE_URL)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
