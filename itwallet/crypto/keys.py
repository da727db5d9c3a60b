"""JWK lookup, thumbprints and encryption key selection."""

import hashlib
import json
import logging
from collections.abc import Sequence

from itwallet.core.errors import KeyNotFoundError
from itwallet.crypto.jwt_decode import b64url_encode
from itwallet.crypto.types import Jwk

logger = logging.getLogger(__name__)

# RFC 7638 required members per key type
_THUMBPRINT_MEMBERS = {
    "EC": ("crv", "kty", "x", "y"),
    "OKP": ("crv", "kty", "x"),
    "RSA": ("e", "kty", "n"),
    "oct": ("k", "kty"),
}

_KTY_FOR_ALG_PREFIX = (
    ("ECDH-ES", ("EC", "OKP")),
    ("RSA", ("RSA",)),
)


def find_key_by_kid(keys: Sequence[Jwk], kid: str | None = None) -> Jwk:
    """Return the key matching *kid*, or the only key when kid is omitted."""
    if not keys:
        raise KeyNotFoundError("The JWK set is empty")
    if kid is not None:
        for key in keys:
            if key.kid == kid:
                return key
        raise KeyNotFoundError(f"No key with kid '{kid}' found in the JWK set")
    if len(keys) > 1:
        raise KeyNotFoundError(
            "A kid is required to select a key from a JWK set with more than one key"
        )
    return keys[0]


def calculate_jwk_thumbprint(jwk: Jwk) -> str:
    """Compute the base64url SHA-256 JWK thumbprint (RFC 7638)."""
    members = _THUMBPRINT_MEMBERS.get(jwk.kty)
    if members is None:
        raise ValueError(f"Unsupported kty '{jwk.kty}' for thumbprint")
    data = jwk.public_dict()
    missing = [m for m in members if m not in data]
    if missing:
        raise ValueError(f"JWK is missing required members: {missing}")
    canonical = json.dumps(
        {m: data[m] for m in members}, separators=(",", ":"), sort_keys=True
    )
    return b64url_encode(hashlib.sha256(canonical.encode()).digest())


def is_encryption_key_for(jwk: Jwk, alg: str) -> bool:
    """Return True if *jwk* can receive a JWE using key management *alg*."""
    if jwk.use is not None and jwk.use != "enc":
        return False
    if jwk.alg is not None and jwk.alg != alg:
        return False
    for prefix, key_types in _KTY_FOR_ALG_PREFIX:
        if alg.startswith(prefix):
            return jwk.kty in key_types
    return False


def select_encryption_jwk(keys: Sequence[Jwk], alg: str) -> Jwk | None:
    """Return the first key compatible with *alg*, or None."""
    for key in keys:
        if is_encryption_key_for(key, alg):
            logger.debug("selected encryption key kid=%s for alg=%s", key.kid, alg)
            return key
    return None
