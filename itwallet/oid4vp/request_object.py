"""Request object (JAR) header and payload schemas."""

from typing import Any, Literal

from itwallet.crypto.types import JwtHeader, JwtPayload, NonEmptyStrList, UrlString
from itwallet.federation.verifier_metadata import ClientMetadata


class AuthorizationRequestHeader(JwtHeader):
    """JOSE header of a signed request object."""

    typ: Literal["oauth-authz-req+jwt"]  # type: ignore[assignment]
    x5c: NonEmptyStrList | None = None


class AuthorizationRequestObject(JwtPayload):
    """OpenID4VP request object; unknown claims are preserved."""

    client_id: str
    client_metadata: ClientMetadata | None = None
    dcql_query: dict[str, Any] | None = None
    nonce: str  # type: ignore[assignment]
    request_uri: UrlString | None = None
    request_uri_method: str | None = None
    response_mode: Literal["direct_post.jwt"]
    response_type: Literal["vp_token"]
    response_uri: UrlString | None = None
    scope: str | None = None
    state: str
    transaction_data: NonEmptyStrList | None = None
    transaction_data_hashes_alg: list[str] | None = None
    wallet_nonce: str | None = None
