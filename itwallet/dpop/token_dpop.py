"""DPoP proof creation and verification (RFC 9449)."""

import hashlib
import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import httpx

from itwallet.core.callbacks import CallbackContext, JwtToSign, SignJwtResult
from itwallet.core.errors import CreateTokenDPoPError, Oauth2Error
from itwallet.core.settings import SdkSettings
from itwallet.crypto.jwt_decode import b64url_encode, decode_jwt
from itwallet.crypto.jwt_verify import verify_jwt
from itwallet.crypto.keys import calculate_jwk_thumbprint
from itwallet.crypto.types import JwtSigner, JwtSignerJwk
from itwallet.dpop.types import (
    DPOP_TYP,
    DpopJwtHeader,
    DpopJwtPayload,
    VerifiedTokenDPoP,
)

logger = logging.getLogger(__name__)

JTI_LENGTH = 32


def htu_from_request_url(request_url: str) -> str:
    """Strip query and fragment from a request URL."""
    parts = urlsplit(request_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", "", ""))


def access_token_hash(access_token: str) -> str:
    """base64url SHA-256 of an access token, the ``ath`` claim."""
    return b64url_encode(hashlib.sha256(access_token.encode()).digest())


async def create_token_dpop(
    callbacks: CallbackContext,
    signer: JwtSigner,
    header: dict[str, Any],
    payload: dict[str, Any],
) -> SignJwtResult:
    """Sign a DPoP proof; ``typ`` is always ``dpop+jwt``."""
    jti = payload.get("jti") or b64url_encode(callbacks.generate_random(JTI_LENGTH))
    if callbacks.sign_jwt is None:
        raise CreateTokenDPoPError("sign_jwt callback is required to create a DPoP")
    try:
        return await callbacks.sign_jwt(
            signer,
            JwtToSign(
                header={**header, "typ": DPOP_TYP},
                payload={**payload, "jti": jti},
            ),
        )
    except Exception as exc:
        raise CreateTokenDPoPError(
            f"Error during jwt signature, details: {exc}"
        ) from exc


async def verify_token_dpop(
    callbacks: CallbackContext,
    dpop_jwt: str,
    request: httpx.Request,
    access_token: str | None = None,
    allowed_signing_algs: Sequence[str] | None = None,
    expected_jwk_thumbprint: str | None = None,
    expected_nonce: str | None = None,
    now: datetime | None = None,
    settings: SdkSettings | None = None,
) -> VerifiedTokenDPoP:
    """Check a DPoP proof against the request it accompanies, then its signature."""
    header, payload, _ = decode_jwt(dpop_jwt, DpopJwtHeader, DpopJwtPayload)

    if allowed_signing_algs and header.alg not in allowed_signing_algs:
        raise Oauth2Error(
            f"dpop jwt uses alg value '{header.alg}' but allowed dpop signing "
            f"alg values are {', '.join(allowed_signing_algs)}."
        )

    if expected_nonce:
        if not payload.nonce:
            raise Oauth2Error(
                "Dpop jwt does not have a nonce value, but expected nonce "
                f"value '{expected_nonce}'"
            )
        if payload.nonce != expected_nonce:
            raise Oauth2Error(
                f"Dpop jwt contains nonce value '{payload.nonce}', but expected "
                f"nonce value '{expected_nonce}'"
            )

    if request.method != payload.htm:
        raise Oauth2Error(
            f"Dpop jwt contains htm value '{payload.htm}', but expected htm "
            f"value '{request.method}'"
        )

    expected_htu = htu_from_request_url(str(request.url))
    if expected_htu != payload.htu:
        raise Oauth2Error(
            f"Dpop jwt contains htu value '{payload.htu}', but expected htu "
            f"value '{expected_htu}'."
        )

    if access_token:
        expected_ath = access_token_hash(access_token)
        if not payload.ath:
            raise Oauth2Error(
                "Dpop jwt does not have a ath value, but expected ath value "
                f"'{expected_ath}'."
            )
        if payload.ath != expected_ath:
            raise Oauth2Error(
                f"Dpop jwt contains ath value '{payload.ath}', but expected ath "
                f"value '{expected_ath}'."
            )

    thumbprint = calculate_jwk_thumbprint(header.jwk)
    if expected_jwk_thumbprint and expected_jwk_thumbprint != thumbprint:
        raise Oauth2Error(
            f"Dpop is signed with jwk with thumbprint value '{thumbprint}', but "
            f"expect jwk thumbprint value '{expected_jwk_thumbprint}'"
        )

    await verify_jwt(
        callbacks,
        compact=dpop_jwt,
        header=header,
        payload=payload,
        signer=JwtSignerJwk(alg=header.alg, public_jwk=header.jwk),
        error_message="dpop jwt verification failed",
        now=now,
        skew=(settings or SdkSettings()).jwt_clock_skew,
    )
    logger.debug("dpop verified for %s %s", payload.htm, payload.htu)
    return VerifiedTokenDPoP(header=header, payload=payload, jwk_thumbprint=thumbprint)
