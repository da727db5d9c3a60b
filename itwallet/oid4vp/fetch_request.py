"""Authorization request retrieval, by value or by reference."""

import logging

from itwallet.core.callbacks import CallbackContext
from itwallet.core.errors import (
    JwtParseError,
    Oid4vpError,
    SchemaValidationError,
    UnexpectedStatusCodeError,
)
from itwallet.core.http import (
    CONTENT_TYPE_FORM_URLENCODED,
    HEADER_CONTENT_TYPE,
    has_status_or_raise,
    http_client_for,
)
from itwallet.core.settings import SdkSettings
from itwallet.oid4vp.parse_request import parse_authorize_request
from itwallet.oid4vp.request_params import (
    RequestUriMethod,
    parse_authorization_request_url,
    validate_authorization_request_params,
)
from itwallet.oid4vp.types import (
    FetchAuthorizationRequestResult,
    ParsedQrCode,
    SendBy,
    WalletMetadata,
)

logger = logging.getLogger(__name__)

_PROPAGATED_ERRORS = (
    SchemaValidationError,
    JwtParseError,
    Oid4vpError,
    UnexpectedStatusCodeError,
)


async def fetch_request_object_jwt(
    callbacks: CallbackContext,
    request_uri: str,
    method: RequestUriMethod = "get",
    wallet_metadata: WalletMetadata | None = None,
    wallet_nonce: str | None = None,
    settings: SdkSettings | None = None,
) -> str:
    """Retrieve a request object JWT from request_uri with GET or POST."""
    async with http_client_for(callbacks, settings) as client:
        if method == "post":
            form: dict[str, str] = {}
            if wallet_metadata is not None:
                form["wallet_metadata"] = wallet_metadata.model_dump_json(
                    exclude_none=True
                )
            if wallet_nonce:
                form["wallet_nonce"] = wallet_nonce
            response = await client.post(
                request_uri,
                data=form,
                headers={HEADER_CONTENT_TYPE: CONTENT_TYPE_FORM_URLENCODED},
            )
        else:
            response = await client.get(request_uri)
    logger.debug("request_uri %s answered %s", method.upper(), response.status_code)
    has_status_or_raise(response)
    return response.text.strip()


async def fetch_authorization_request(
    callbacks: CallbackContext,
    authorize_request_url: str,
    wallet_metadata: WalletMetadata | None = None,
    wallet_nonce: str | None = None,
    settings: SdkSettings | None = None,
) -> FetchAuthorizationRequestResult:
    """Resolve the request object referenced by a QR code URL and parse it."""
    try:
        params = validate_authorization_request_params(
            parse_authorization_request_url(authorize_request_url)
        )
        send_by: SendBy
        if params.request:
            send_by = "value"
            request_object_jwt = params.request
            method = None
        else:
            send_by = "reference"
            method = params.request_uri_method or "get"
            request_object_jwt = await fetch_request_object_jwt(
                callbacks,
                params.request_uri,  # type: ignore[arg-type]
                method=method,  # type: ignore[arg-type]
                wallet_metadata=wallet_metadata,
                wallet_nonce=wallet_nonce,
                settings=settings,
            )
        logger.debug("authorization request sent by %s", send_by)
        parsed = await parse_authorize_request(callbacks, request_object_jwt)
    except _PROPAGATED_ERRORS:
        raise
    except Exception as exc:
        raise Oid4vpError(
            f"Unexpected error during fetch authorization request: {exc}"
        ) from exc

    return FetchAuthorizationRequestResult(
        parsed_authorize_request=parsed,
        parsed_qr_code=ParsedQrCode(
            client_id=params.client_id,
            request_uri=params.request_uri,
            request_uri_method=method,
        ),
        send_by=send_by,
    )
