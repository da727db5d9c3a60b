"""Submission of the authorization response to the relying party."""

import logging

from itwallet.core.callbacks import CallbackContext
from itwallet.core.errors import (
    FetchAuthorizationResponseError,
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
from itwallet.crypto.jwt_decode import parse_with_error_handling
from itwallet.oid4vp.types import AuthorizationResponseSubmissionResult

logger = logging.getLogger(__name__)


async def fetch_authorization_response(
    callbacks: CallbackContext,
    authorization_response_jarm: str,
    presentation_response_uri: str,
    settings: SdkSettings | None = None,
) -> AuthorizationResponseSubmissionResult:
    """POST the JARM response to response_uri and return the redirect_uri, if any."""
    try:
        async with http_client_for(callbacks, settings) as client:
            response = await client.post(
                presentation_response_uri,
                data={"response": authorization_response_jarm},
                headers={HEADER_CONTENT_TYPE: CONTENT_TYPE_FORM_URLENCODED},
            )
        logger.debug("response_uri answered %s", response.status_code)
        has_status_or_raise(response)
        return parse_with_error_handling(
            AuthorizationResponseSubmissionResult,
            response.json(),
            "Invalid authorization response result",
        )
    except (UnexpectedStatusCodeError, SchemaValidationError):
        raise
    except Exception as exc:
        raise FetchAuthorizationResponseError(
            f"Unexpected error sending authorization response: {exc}"
        ) from exc
