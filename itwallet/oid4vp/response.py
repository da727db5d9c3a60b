"""JARM authorization response construction."""

import logging
from datetime import UTC, datetime

from itwallet.core.callbacks import CallbackContext, JwtToSign
from itwallet.core.errors import (
    CreateAuthorizationResponseError,
    NoEncryptionKeyError,
)
from itwallet.core.settings import SdkSettings
from itwallet.crypto.jwt_decode import b64url_encode
from itwallet.crypto.keys import select_encryption_jwk
from itwallet.crypto.types import JweEncryptor, Jwk, JwtSigner
from itwallet.federation.verifier_metadata import (
    RelyingPartyCapabilities,
    RelyingPartyMetadata,
    resolve_rp_capabilities,
)
from itwallet.oid4vp.client_id import ClientIdPrefix, classify_client_id
from itwallet.oid4vp.request_object import AuthorizationRequestObject
from itwallet.oid4vp.types import (
    AuthorizationResponsePayload,
    AuthorizationResponseResult,
    JarmResult,
    VpToken,
)

logger = logging.getLogger(__name__)

DEFAULT_ENCRYPTION_ALG = "ECDH-ES"
DEFAULT_ENCRYPTION_ENC = "A256GCM"
APU_NONCE_LENGTH = 32


def resolve_response_capabilities(
    request_object: AuthorizationRequestObject,
    rp_metadata: RelyingPartyMetadata | None,
) -> RelyingPartyCapabilities:
    """Pick inline or external relying party metadata by client_id prefix."""
    prefix = classify_client_id(request_object.client_id)
    inline = request_object.client_metadata
    if prefix is ClientIdPrefix.X509_HASH:
        if inline is None:
            raise CreateAuthorizationResponseError(
                "client_metadata is required in the Request Object "
                "for x509_hash client_id"
            )
        return resolve_rp_capabilities(inline)
    if inline is not None:
        logger.warning("rejecting inline client_metadata for %s client_id", prefix)
        raise CreateAuthorizationResponseError(
            "client_metadata must not be present in the Request Object "
            f"for {prefix} client_id"
        )
    if rp_metadata is None:
        raise CreateAuthorizationResponseError(
            f"rp_metadata is required for {prefix} client_id"
        )
    return resolve_rp_capabilities(rp_metadata)


def resolve_encryption_alg(
    capabilities: RelyingPartyCapabilities, explicit: str | None = None
) -> str:
    """Explicit alg, then the v1.0 metadata alg, then ECDH-ES."""
    return explicit or capabilities.encrypted_response_alg or DEFAULT_ENCRYPTION_ALG


def resolve_encryption_enc(
    capabilities: RelyingPartyCapabilities, explicit: str | None = None
) -> str:
    """Explicit enc, v1.0 metadata enc, first listed v1.3 enc, then A256GCM."""
    if explicit:
        return explicit
    if capabilities.encrypted_response_enc:
        return capabilities.encrypted_response_enc
    if capabilities.enc_values_supported:
        return capabilities.enc_values_supported[0]
    return DEFAULT_ENCRYPTION_ENC


def resolve_signing_alg(
    capabilities: RelyingPartyCapabilities,
    signer: JwtSigner,
    explicit: str | None = None,
) -> str:
    """Explicit alg, then the v1.0 metadata alg, then the signer's own alg."""
    return explicit or capabilities.signed_response_alg or signer.alg


def _select_key(capabilities: RelyingPartyCapabilities, alg: str) -> Jwk:
    if not capabilities.jwks:
        raise NoEncryptionKeyError("The relying party key set is empty")
    key = select_encryption_jwk(capabilities.jwks, alg)
    if key is None:
        raise NoEncryptionKeyError(
            f"No relying party key is suitable for encryption with alg '{alg}'"
        )
    return key


async def create_authorization_response(
    callbacks: CallbackContext,
    *,
    request_object: AuthorizationRequestObject,
    vp_token: VpToken,
    rp_metadata: RelyingPartyMetadata | None = None,
    client_id: str | None = None,
    signer: JwtSigner | None = None,
    exp: int | None = None,
    authorization_encrypted_response_alg: str | None = None,
    authorization_encrypted_response_enc: str | None = None,
    authorization_signed_response_alg: str | None = None,
    settings: SdkSettings | None = None,
) -> AuthorizationResponseResult:
    """Build the authorization response and encrypt it to the relying party.

    When *signer* is given the payload is signed first (with ``aud``, ``iss``
    and ``exp``) and the resulting JWT is encrypted; otherwise the JSON
    payload is encrypted as is. ``apu`` carries fresh randomness and ``apv``
    the request nonce, binding the response to the request it answers.
    """
    try:
        capabilities = resolve_response_capabilities(request_object, rp_metadata)
        alg = resolve_encryption_alg(capabilities, authorization_encrypted_response_alg)
        enc = resolve_encryption_enc(capabilities, authorization_encrypted_response_enc)
        encryption_jwk = _select_key(capabilities, alg)
        logger.debug(
            "encrypting authorization response alg=%s enc=%s source=%s",
            alg,
            enc,
            capabilities.source,
        )

        payload = AuthorizationResponsePayload(
            state=request_object.state, vp_token=vp_token
        )
        if signer is not None:
            if client_id is None:
                raise CreateAuthorizationResponseError(
                    "client_id is required to sign an authorization response"
                )
            ttl = (settings or SdkSettings()).authorization_response_ttl
            payload = payload.model_copy(
                update={
                    "aud": request_object.client_id,
                    "iss": client_id,
                    "exp": (
                        exp
                        if exp is not None
                        else int(datetime.now(UTC).timestamp()) + ttl
                    ),
                }
            )
            plaintext = await _sign_payload(
                callbacks,
                signer,
                payload,
                resolve_signing_alg(
                    capabilities, signer, authorization_signed_response_alg
                ),
            )
        else:
            plaintext = payload.model_dump_json(exclude_none=True)

        if callbacks.encrypt_jwe is None:
            raise CreateAuthorizationResponseError(
                "encrypt_jwe callback is required to create an authorization response"
            )
        encryptor = JweEncryptor(
            alg=alg,
            enc=enc,
            public_jwk=encryption_jwk,
            kid=encryption_jwk.kid,
            apu=b64url_encode(callbacks.generate_random(APU_NONCE_LENGTH)),
            apv=b64url_encode(request_object.nonce),
        )
        encrypted = await callbacks.encrypt_jwe(encryptor, plaintext)
    except CreateAuthorizationResponseError:
        raise
    except Exception as exc:
        raise CreateAuthorizationResponseError(
            f"Unexpected error during authorization response creation: {exc}"
        ) from exc

    return AuthorizationResponseResult(
        authorization_response_payload=payload,
        jarm=JarmResult(
            encryption_jwk=encrypted.encryption_jwk, response_jwt=encrypted.jwe
        ),
    )


async def _sign_payload(
    callbacks: CallbackContext,
    signer: JwtSigner,
    payload: AuthorizationResponsePayload,
    alg: str,
) -> str:
    if callbacks.sign_jwt is None:
        raise CreateAuthorizationResponseError(
            "sign_jwt callback is required to sign an authorization response"
        )
    header = {"alg": alg}
    if signer.kid is not None:
        header["kid"] = signer.kid
    signed = await callbacks.sign_jwt(
        signer,
        JwtToSign(header=header, payload=payload.model_dump(exclude_none=True)),
    )
    return signed.jwt
