"""Reference sign/verify callbacks backed by PyJWT and cryptography."""

import base64
import logging
from typing import Any

import jwt
from cryptography import x509

from itwallet.core.callbacks import (
    JwtToSign,
    JwtToVerify,
    SignJwtCallback,
    SignJwtResult,
    VerifyJwtResult,
)
from itwallet.crypto.types import Jwk, JwtSigner, JwtSignerJwk, JwtSignerX5c

logger = logging.getLogger(__name__)

_PRIVATE_MEMBERS = frozenset({"d", "p", "q", "dp", "dq", "qi", "oth", "k"})

_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iat": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


def public_jwk_from_private(private_jwk: dict[str, Any]) -> Jwk:
    """Strip private members from a JWK."""
    return Jwk.model_validate(
        {k: v for k, v in private_jwk.items() if k not in _PRIVATE_MEMBERS}
    )


def _verification_key(signer: JwtSigner) -> Any:
    if isinstance(signer, JwtSignerJwk):
        return jwt.PyJWK(signer.public_jwk.public_dict(), algorithm=signer.alg).key
    if isinstance(signer, JwtSignerX5c):
        cert = x509.load_der_x509_certificate(base64.b64decode(signer.x5c[0]))
        return cert.public_key()
    return None


async def verify_jwt_with_jwk(
    signer: JwtSigner, jwt_to_verify: JwtToVerify
) -> VerifyJwtResult:
    """Verify jwk and x5c signers; federation signers are never trusted here."""
    try:
        key = _verification_key(signer)
    except (jwt.PyJWTError, ValueError) as exc:
        logger.debug("unable to load verification key: %s", exc)
        return VerifyJwtResult(verified=False)
    if key is None:
        return VerifyJwtResult(verified=False)
    try:
        jwt.decode(
            jwt_to_verify.compact,
            key,
            algorithms=[signer.alg],
            options=_DECODE_OPTIONS,
        )
    except jwt.PyJWTError as exc:
        logger.debug("signature rejected: %s", exc)
        return VerifyJwtResult(verified=False)
    signer_jwk = signer.public_jwk if isinstance(signer, JwtSignerJwk) else None
    return VerifyJwtResult(verified=True, signer_jwk=signer_jwk)


def make_sign_jwt(private_jwk: dict[str, Any]) -> SignJwtCallback:
    """Build a sign_jwt callback holding *private_jwk*."""
    key = jwt.PyJWK(private_jwk).key
    public_jwk = public_jwk_from_private(private_jwk)

    async def sign_jwt(signer: JwtSigner, to_sign: JwtToSign) -> SignJwtResult:
        headers = dict(to_sign.header)
        alg = headers.pop("alg", None) or signer.alg
        token = jwt.encode(to_sign.payload, key, algorithm=alg, headers=headers)
        return SignJwtResult(jwt=token, signer_jwk=public_jwk)

    return sign_jwt
