"""Capabilities injected by the host application."""

import secrets
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from itwallet.crypto.types import JweEncryptor, Jwk, JwtSigner


class JwtToVerify(BaseModel):
    """A compact JWT together with its decoded parts."""

    compact: str
    header: dict[str, Any]
    payload: dict[str, Any]


class VerifyJwtResult(BaseModel):
    """Outcome of a signature verification."""

    verified: bool
    signer_jwk: Jwk | None = None


class JwtToSign(BaseModel):
    """Header and claims to sign."""

    header: dict[str, Any]
    payload: dict[str, Any]


class SignJwtResult(BaseModel):
    """A signed compact JWT and the public key of its signer."""

    jwt: str
    signer_jwk: Jwk | None = None


class EncryptJweResult(BaseModel):
    """A compact JWE and the recipient key it was encrypted to."""

    jwe: str
    encryption_jwk: Jwk


VerifyJwtCallback = Callable[[JwtSigner, JwtToVerify], Awaitable[VerifyJwtResult]]
SignJwtCallback = Callable[[JwtSigner, JwtToSign], Awaitable[SignJwtResult]]
EncryptJweCallback = Callable[[JweEncryptor, str], Awaitable[EncryptJweResult]]
GenerateRandomCallback = Callable[[int], bytes]


class CallbackContext(BaseModel):
    """Bundle of injected capabilities; each operation uses a subset."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    http_client: httpx.AsyncClient | None = None
    verify_jwt: VerifyJwtCallback | None = None
    sign_jwt: SignJwtCallback | None = None
    encrypt_jwe: EncryptJweCallback | None = None
    generate_random: GenerateRandomCallback = Field(default=secrets.token_bytes)
