"""Result types of the OpenID4VP operations."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from itwallet.crypto.types import Jwk, UrlString
from itwallet.oid4vp.request_object import (
    AuthorizationRequestHeader,
    AuthorizationRequestObject,
)
from itwallet.oid4vp.request_params import RequestUriMethod

SendBy = Literal["value", "reference"]

# DCQL credential query id -> presentation(s)
VpToken = dict[str, Any]


class ParsedAuthorizeRequest(BaseModel):
    """A request object whose signature has been verified."""

    model_config = ConfigDict(frozen=True)

    header: AuthorizationRequestHeader
    payload: AuthorizationRequestObject


class ParsedQrCode(BaseModel):
    """Parameters read from the authorization request URL."""

    client_id: str
    request_uri: str | None = None
    request_uri_method: RequestUriMethod | None = None


class FetchAuthorizationRequestResult(BaseModel):
    """Outcome of fetching and parsing an authorization request."""

    parsed_authorize_request: ParsedAuthorizeRequest
    parsed_qr_code: ParsedQrCode
    send_by: SendBy


class WalletMetadata(BaseModel):
    """Wallet capabilities sent to request_uri with POST."""

    model_config = ConfigDict(extra="allow")

    authorization_endpoint: str | None = None
    client_id_prefixes_supported: list[str] | None = None
    request_object_signing_alg_values_supported: list[str] | None = None
    response_modes_supported: list[str] | None = None
    response_types_supported: list[str] | None = None
    vp_formats_supported: dict[str, Any] | None = None


class AuthorizationResponsePayload(BaseModel):
    """Authorization response claims before JARM encryption."""

    model_config = ConfigDict(extra="allow")

    state: str
    vp_token: VpToken
    aud: str | None = None
    iss: str | None = None
    exp: int | None = None


class JarmResult(BaseModel):
    """The encrypted response and the relying party key it targets."""

    encryption_jwk: Jwk
    response_jwt: str


class AuthorizationResponseResult(BaseModel):
    """Output of create_authorization_response."""

    authorization_response_payload: AuthorizationResponsePayload
    jarm: JarmResult


class AuthorizationResponseSubmissionResult(BaseModel):
    """Relying party answer to a submitted authorization response."""

    model_config = ConfigDict(extra="allow")

    redirect_uri: UrlString | None = None
