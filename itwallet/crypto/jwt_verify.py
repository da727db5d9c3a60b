"""Signer resolution and verification through the injected callback."""

import logging
from datetime import UTC, datetime

from pydantic import BaseModel

from itwallet.core.callbacks import CallbackContext, JwtToVerify
from itwallet.core.errors import JwtVerificationError
from itwallet.crypto.types import (
    JwtHeader,
    JwtPayload,
    JwtSigner,
    JwtSignerFederation,
    JwtSignerJwk,
    JwtSignerX5c,
)

logger = logging.getLogger(__name__)


def signer_from_header(header: JwtHeader) -> JwtSigner:
    """Derive the signer descriptor a JWT header points at."""
    if header.x5c:
        return JwtSignerX5c(alg=header.alg, x5c=header.x5c, kid=header.kid)
    if header.trust_chain:
        return JwtSignerFederation(
            alg=header.alg, kid=header.kid, trust_chain=header.trust_chain
        )
    if header.jwk is not None:
        return JwtSignerJwk(alg=header.alg, public_jwk=header.jwk, kid=header.kid)
    raise JwtVerificationError(
        "Unable to determine the signer: header has no x5c, trust_chain or jwk"
    )


def check_validity_window(
    payload: JwtPayload, now: datetime | None = None, skew: int = 0
) -> None:
    """Reject tokens that are expired or not yet valid."""
    ts = int((now or datetime.now(UTC)).timestamp())
    if payload.exp is not None and ts > payload.exp + skew:
        raise JwtVerificationError("jwt has expired")
    if payload.nbf is not None and ts < payload.nbf - skew:
        raise JwtVerificationError("jwt is not yet valid")


def _dump(model: BaseModel) -> dict:
    return model.model_dump(exclude_none=True)


async def verify_jwt(
    callbacks: CallbackContext,
    *,
    compact: str,
    header: JwtHeader,
    payload: JwtPayload,
    signer: JwtSigner,
    error_message: str,
    now: datetime | None = None,
    skew: int = 0,
) -> JwtSigner:
    """Verify a decoded JWT with the injected verifier and check its lifetime."""
    if callbacks.verify_jwt is None:
        raise JwtVerificationError(f"{error_message} verify_jwt callback missing")
    result = await callbacks.verify_jwt(
        signer,
        JwtToVerify(compact=compact, header=_dump(header), payload=_dump(payload)),
    )
    if not result.verified:
        raise JwtVerificationError(error_message)
    check_validity_window(payload, now=now, skew=skew)
    logger.debug("jwt verified with %s signer", signer.method)
    return signer
