"""Authorization request URL parameters and their validation."""

from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict

from itwallet.core.errors import InvalidRequestUriMethodError, Oid4vpError
from itwallet.crypto.jwt_decode import parse_with_error_handling
from itwallet.crypto.types import UrlString

RequestUriMethod = Literal["get", "post"]

_REQUEST_URI_METHODS = ("get", "post")
_QUERY_PARAMS = ("client_id", "request", "request_uri", "request_uri_method", "state")


class AuthorizationRequestUrlParams(BaseModel):
    """Query parameters of an authorization request URL (QR code)."""

    model_config = ConfigDict(extra="allow")

    client_id: str
    # by value: the signed request object itself
    request: str | None = None
    # by reference
    request_uri: UrlString | None = None
    request_uri_method: str | None = None
    state: str | None = None


def parse_authorization_request_url(url: str) -> AuthorizationRequestUrlParams:
    """Extract and shape-check the query parameters of *url*."""
    query = httpx.URL(url).params
    raw = {name: query.get(name) for name in _QUERY_PARAMS if name in query}
    return parse_with_error_handling(
        AuthorizationRequestUrlParams,
        raw,
        "Invalid authorization request url parameters",
    )


def validate_authorization_request_params(
    params: AuthorizationRequestUrlParams,
) -> AuthorizationRequestUrlParams:
    """Enforce request/request_uri exclusivity and normalise request_uri_method."""
    if params.request and params.request_uri:
        raise Oid4vpError(
            "request and request_uri cannot both be present in an authorization request"
        )
    if not params.request and not params.request_uri:
        raise Oid4vpError("Either request or request_uri parameter must be present")

    method: RequestUriMethod | None = None
    if params.request_uri_method:
        normalized = params.request_uri_method.lower()
        if normalized not in _REQUEST_URI_METHODS:
            raise InvalidRequestUriMethodError(
                f"Invalid request_uri_method: '{params.request_uri_method}'. "
                "Must be 'get' or 'post'"
            )
        if not params.request_uri:
            raise Oid4vpError(
                "request_uri_method can only be used with request_uri parameter"
            )
        method = normalized  # type: ignore[assignment]

    return params.model_copy(update={"request_uri_method": method})
