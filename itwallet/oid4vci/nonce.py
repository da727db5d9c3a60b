"""Fresh c_nonce retrieval from the issuer nonce endpoint."""

import logging

import pydantic

from itwallet.core.callbacks import CallbackContext
from itwallet.core.errors import (
    NonceParseError,
    NonceRequestError,
    UnexpectedStatusCodeError,
)
from itwallet.core.http import has_status_or_raise, http_client_for
from itwallet.core.settings import SdkSettings
from itwallet.oid4vci.types import NonceResponse

logger = logging.getLogger(__name__)


async def fetch_nonce(
    callbacks: CallbackContext,
    nonce_url: str,
    settings: SdkSettings | None = None,
) -> NonceResponse:
    """POST to the nonce endpoint and return its ``c_nonce``."""
    try:
        async with http_client_for(callbacks, settings) as client:
            response = await client.post(nonce_url)
        has_status_or_raise(response)
        return NonceResponse.model_validate(response.json())
    except pydantic.ValidationError as exc:
        raise NonceParseError(f"Failed to parse nonce response: {exc}") from exc
    except UnexpectedStatusCodeError as exc:
        raise NonceRequestError(
            f"Unexpected error during nonce request: {exc}",
            status_code=exc.status_code,
        ) from exc
    except Exception as exc:
        logger.debug("nonce request to %s failed: %s", nonce_url, exc)
        raise NonceRequestError(
            f"Unexpected error during nonce request: {exc}"
        ) from exc
