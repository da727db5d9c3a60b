"""DPoP proof schemas."""

from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel

from itwallet.crypto.types import Jwk, JwtHeader, JwtPayload, UrlString

DPOP_TYP = "dpop+jwt"

HttpMethod = Literal[
    "GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS", "TRACE", "CONNECT", "PATCH"
]


def _check_https(value: str) -> str:
    if not value.startswith("https://"):
        raise ValueError("htu must be an https url")
    return value


HttpsUrl = Annotated[UrlString, AfterValidator(_check_https)]


class DpopJwtHeader(JwtHeader):
    """DPoP header: the proof key travels inline."""

    typ: Literal["dpop+jwt"]  # type: ignore[assignment]
    jwk: Jwk  # type: ignore[assignment]


class DpopJwtPayload(JwtPayload):
    """DPoP claims bound to one HTTP request."""

    ath: str | None = None
    htm: HttpMethod
    htu: HttpsUrl
    iat: int  # type: ignore[assignment]
    jti: str  # type: ignore[assignment]


class VerifiedTokenDPoP(BaseModel):
    """A verified DPoP proof and the thumbprint of its key."""

    header: DpopJwtHeader
    payload: DpopJwtPayload
    jwk_thumbprint: str
