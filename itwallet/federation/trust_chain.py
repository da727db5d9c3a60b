"""Relying party metadata recovery from an OpenID Federation trust chain.

Only the claimed metadata is read here. The chain signatures are validated
by a federation trust-chain validator outside this library.
"""

import logging
from collections.abc import Sequence

import pydantic

from itwallet.core.errors import JwtParseError, TrustChainExtractionError
from itwallet.crypto.jwt_decode import decode_jwt_unvalidated
from itwallet.federation.verifier_metadata import (
    VERIFIER_METADATA_IDENTIFIER,
    VerifierMetadataClaim,
)

logger = logging.getLogger(__name__)


def extract_rp_metadata(trust_chain: Sequence[str]) -> VerifierMetadataClaim:
    """Decode the leaf entity configuration and return its verifier metadata."""
    if not trust_chain:
        raise TrustChainExtractionError("trust_chain is empty")
    try:
        _, payload, _ = decode_jwt_unvalidated(trust_chain[0])
    except JwtParseError as exc:
        raise TrustChainExtractionError(
            f"Unable to decode the relying party entity configuration: {exc.message}"
        ) from exc

    metadata = payload.get("metadata")
    claim = (
        metadata.get(VERIFIER_METADATA_IDENTIFIER)
        if isinstance(metadata, dict)
        else None
    )
    if not isinstance(claim, dict):
        raise TrustChainExtractionError(
            f"metadata.{VERIFIER_METADATA_IDENTIFIER} not found "
            "in the entity configuration"
        )
    try:
        verifier_metadata = VerifierMetadataClaim.model_validate(claim)
    except pydantic.ValidationError as exc:
        raise TrustChainExtractionError(
            f"metadata.{VERIFIER_METADATA_IDENTIFIER}.jwks "
            "must contain at least one key"
        ) from exc
    logger.debug(
        "extracted %d relying party keys from trust chain",
        len(verifier_metadata.jwks.keys),
    )
    return verifier_metadata
