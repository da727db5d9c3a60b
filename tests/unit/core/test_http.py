"""Tests for the HTTP helpers."""

from collections.abc import Callable

import httpx
import pytest

from itwallet.core.callbacks import CallbackContext
from itwallet.core.errors import UnexpectedStatusCodeError
from itwallet.core.http import (
    has_status_or_raise,
    http_client_for,
    parse_raw_http_response,
)


def _response(status: int, **kwargs) -> httpx.Response:
    request = httpx.Request("GET", "https://rp.example.org/x")
    return httpx.Response(status, request=request, **kwargs)


class TestHasStatusOrRaise:
    """Tests for status checking."""

    def test_returns_response_on_expected_status(self) -> None:
        response = _response(200, text="ok")
        assert has_status_or_raise(response) is response

    def test_raises_with_status_code(self) -> None:
        with pytest.raises(UnexpectedStatusCodeError) as exc_info:
            has_status_or_raise(_response(404, json={"error": "missing"}))
        assert exc_info.value.status_code == 404
        assert exc_info.value.reason == {"error": "missing"}
        assert "Expected 200, got 404" in exc_info.value.message

    def test_other_success_codes_are_rejected(self) -> None:
        with pytest.raises(UnexpectedStatusCodeError):
            has_status_or_raise(_response(201, text="created"))

    def test_accepts_any_listed_status(self) -> None:
        response = _response(202, json={})
        assert has_status_or_raise(response, (200, 202)) is response

    def test_lists_every_expected_status(self) -> None:
        with pytest.raises(
            UnexpectedStatusCodeError, match="Expected 200, 202, got 500"
        ):
            has_status_or_raise(_response(500, text="boom"), (200, 202))


class TestParseRawHttpResponse:
    """Tests for body decoding."""

    def test_json_body(self) -> None:
        assert parse_raw_http_response(_response(200, json={"a": 1})) == {"a": 1}

    def test_text_body(self) -> None:
        assert parse_raw_http_response(_response(200, text="plain")) == "plain"


class TestHttpClientFor:
    """Tests for client selection."""

    async def test_yields_injected_client(
        self, mock_http: Callable[..., httpx.AsyncClient]
    ) -> None:
        client = mock_http(lambda request: httpx.Response(200))
        async with http_client_for(CallbackContext(http_client=client)) as used:
            assert used is client

    async def test_creates_client_when_missing(self) -> None:
        async with http_client_for(CallbackContext()) as used:
            assert isinstance(used, httpx.AsyncClient)
        assert used.is_closed
