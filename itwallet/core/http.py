"""HTTP helpers around the injected httpx client."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from itwallet.core.callbacks import CallbackContext
from itwallet.core.errors import UnexpectedStatusCodeError
from itwallet.core.settings import SdkSettings

logger = logging.getLogger(__name__)

CONTENT_TYPE_FORM_URLENCODED = "application/x-www-form-urlencoded"
CONTENT_TYPE_JSON = "application/json"
HEADER_CONTENT_TYPE = "Content-Type"
HTTP_OK = 200


@asynccontextmanager
async def http_client_for(
    callbacks: CallbackContext, settings: SdkSettings | None = None
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a short-lived one owned by this call."""
    if callbacks.http_client is not None:
        yield callbacks.http_client
        return
    timeout = (settings or SdkSettings()).http_timeout
    async with httpx.AsyncClient(timeout=timeout) as client:
        yield client


def parse_raw_http_response(response: httpx.Response) -> Any:
    """Return the body as JSON when declared so, else as text."""
    content_type = response.headers.get(HEADER_CONTENT_TYPE, "")
    if CONTENT_TYPE_JSON in content_type:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


def has_status_or_raise(
    response: httpx.Response, status: int | tuple[int, ...] = HTTP_OK
) -> httpx.Response:
    """Raise UnexpectedStatusCodeError unless the response has one of *status*."""
    expected = (status,) if isinstance(status, int) else status
    if response.status_code not in expected:
        logger.debug(
            "unexpected status %s from %s", response.status_code, response.request.url
        )
        raise UnexpectedStatusCodeError(
            f"Http request failed. Expected {', '.join(map(str, expected))}, got "
            f"{response.status_code}, url: {response.request.url}",
            status_code=response.status_code,
            reason=parse_raw_http_response(response),
        )
    return response
