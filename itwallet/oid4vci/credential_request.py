"""Credential request creation, routed on the configured specs version."""

import logging
from datetime import UTC, datetime
from typing import Any

from itwallet.core.callbacks import CallbackContext, JwtToSign
from itwallet.core.errors import Oid4vciError, SchemaValidationError
from itwallet.core.settings import ItWalletSpecsVersion, SdkSettings
from itwallet.crypto.jwt_decode import parse_with_error_handling
from itwallet.crypto.types import JwtSignerJwk
from itwallet.oid4vci.types import (
    PROOF_JWT_TYP,
    CredentialRequest,
    CredentialRequestV1_0,
    CredentialRequestV1_3,
)

logger = logging.getLogger(__name__)

_SUPPORTED_VERSIONS = (ItWalletSpecsVersion.V1_0, ItWalletSpecsVersion.V1_3)


async def _sign_proof(
    callbacks: CallbackContext,
    signer: JwtSignerJwk,
    header: dict[str, Any],
    payload: dict[str, Any],
) -> str:
    if callbacks.sign_jwt is None:
        raise Oid4vciError("sign_jwt callback is required to create a proof jwt")
    result = await callbacks.sign_jwt(signer, JwtToSign(header=header, payload=payload))
    return result.jwt


async def create_credential_request(
    callbacks: CallbackContext,
    *,
    signer: JwtSignerJwk,
    client_id: str,
    issuer_identifier: str,
    nonce: str,
    credential_identifier: str,
    key_attestation: str | None = None,
    settings: SdkSettings | None = None,
) -> CredentialRequest:
    """Sign a proof JWT over the issuer nonce and wrap it in a credential request.

    1.0 sends a single ``proof`` object; 1.3 sends a ``proofs`` batch and
    requires a key attestation in the proof header.
    """
    settings = settings or SdkSettings()
    settings.supports("create_credential_request", _SUPPORTED_VERSIONS)
    header: dict[str, Any] = {
        "alg": signer.alg,
        "jwk": signer.public_jwk.public_dict(),
        "typ": PROOF_JWT_TYP,
    }
    payload = {
        "aud": issuer_identifier,
        "iat": int(datetime.now(UTC).timestamp()),
        "iss": client_id,
        "nonce": nonce,
    }
    if settings.is_version(ItWalletSpecsVersion.V1_3) and not key_attestation:
        raise Oid4vciError("key_attestation is required to create a credential request")
    try:
        if settings.is_version(ItWalletSpecsVersion.V1_0):
            jwt = await _sign_proof(callbacks, signer, header, payload)
            request: CredentialRequest = parse_with_error_handling(
                CredentialRequestV1_0,
                {
                    "credential_identifier": credential_identifier,
                    "proof": {"jwt": jwt, "proof_type": "jwt"},
                },
                "Invalid credential request",
            )
        else:
            header["key_attestation"] = key_attestation
            jwt = await _sign_proof(callbacks, signer, header, payload)
            request = parse_with_error_handling(
                CredentialRequestV1_3,
                {
                    "credential_identifier": credential_identifier,
                    "proofs": {"jwt": [jwt]},
                },
                "Invalid credential request",
            )
    except (SchemaValidationError, Oid4vciError):
        raise
    except Exception as exc:
        raise Oid4vciError(
            f"Unexpected error during create credential request: {exc}"
        ) from exc
    logger.debug(
        "created credential request for %s, specs version %s",
        credential_identifier,
        settings.it_wallet_specs_version.value,
    )
    return request
