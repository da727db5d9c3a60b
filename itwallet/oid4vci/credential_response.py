"""Credential endpoint call and response parsing."""

import logging

from itwallet.core.callbacks import CallbackContext
from itwallet.core.errors import (
    FetchCredentialResponseError,
    SchemaValidationError,
    UnexpectedStatusCodeError,
)
from itwallet.core.http import (
    CONTENT_TYPE_JSON,
    HEADER_CONTENT_TYPE,
    has_status_or_raise,
    http_client_for,
)
from itwallet.core.settings import SdkSettings
from itwallet.crypto.jwt_decode import parse_with_error_handling
from itwallet.oid4vci.types import (
    CredentialRequest,
    CredentialRequestV1_0,
    CredentialResponse,
    CredentialResponseV1_0,
    CredentialResponseV1_3,
)

logger = logging.getLogger(__name__)

HTTP_ACCEPTED = 202


async def fetch_credential_response(
    callbacks: CallbackContext,
    *,
    credential_endpoint: str,
    credential_request: CredentialRequest,
    access_token: str,
    dpop: str,
    settings: SdkSettings | None = None,
) -> CredentialResponse:
    """POST a credential request with its DPoP-bound access token.

    200 carries issued credentials, 202 a deferred issuance handle. The
    response schema follows the request shape: a single ``proof`` means 1.0.
    """
    try:
        async with http_client_for(callbacks, settings) as client:
            response = await client.post(
                credential_endpoint,
                json=credential_request.model_dump(exclude_none=True),
                headers={
                    "Authorization": f"DPoP {access_token}",
                    HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
                    "DPoP": dpop,
                },
            )
        logger.debug("credential endpoint answered %s", response.status_code)
        has_status_or_raise(response, (200, HTTP_ACCEPTED))
        if isinstance(credential_request, CredentialRequestV1_0):
            return parse_with_error_handling(
                CredentialResponseV1_0,
                response.json(),
                "Failed to parse credential response (v1.0)",
            )
        return parse_with_error_handling(
            CredentialResponseV1_3,
            response.json(),
            "Failed to parse credential response (v1.3)",
        )
    except (UnexpectedStatusCodeError, SchemaValidationError):
        raise
    except Exception as exc:
        raise FetchCredentialResponseError(
            f"Unexpected error during credential response: {exc}"
        ) from exc
