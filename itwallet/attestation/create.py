"""Wallet attestation JWT creation, routed on the configured specs version."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from itwallet.attestation.types import (
    WALLET_ATTESTATION_TYP,
    WalletAttestationHeaderV1_0,
    WalletAttestationHeaderV1_3,
    WalletAttestationOptions,
    WalletAttestationOptionsV1_0,
    WalletAttestationOptionsV1_3,
    WalletAttestationPayloadV1_0,
    WalletAttestationPayloadV1_3,
)
from itwallet.core.callbacks import CallbackContext, JwtToSign
from itwallet.core.errors import ClientAttestationError, SchemaValidationError
from itwallet.core.settings import ItWalletSpecsVersion, SdkSettings
from itwallet.crypto.jwt_decode import decode_jwt
from itwallet.crypto.types import JwtSigner

logger = logging.getLogger(__name__)

_SUPPORTED_VERSIONS = (ItWalletSpecsVersion.V1_0, ItWalletSpecsVersion.V1_3)


def _timestamp(value: datetime) -> int:
    return int(value.timestamp())


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


async def _sign(
    callbacks: CallbackContext,
    signer: JwtSigner,
    header: dict[str, Any],
    payload: dict[str, Any],
) -> str:
    if callbacks.sign_jwt is None:
        raise ClientAttestationError(
            "sign_jwt callback is required to create a wallet attestation"
        )
    result = await callbacks.sign_jwt(signer, JwtToSign(header=header, payload=payload))
    return result.jwt


def _base_payload(
    options: WalletAttestationOptions, settings: SdkSettings, now: datetime
) -> tuple[dict[str, Any], datetime]:
    exp = options.expires_at or now + timedelta(seconds=settings.wallet_attestation_ttl)
    payload = {
        "cnf": {"jwk": options.dpop_jwk_public.public_dict()},
        "exp": _timestamp(exp),
        "iat": _timestamp(now),
        "iss": options.issuer,
        "sub": options.dpop_jwk_public.kid,
        "wallet_link": options.wallet_link,
        "wallet_name": options.wallet_name,
    }
    return payload, exp


async def _create_v1_0(
    callbacks: CallbackContext,
    options: WalletAttestationOptionsV1_0,
    settings: SdkSettings,
) -> str:
    payload, _ = _base_payload(options, settings, datetime.now(UTC))
    payload["aal"] = options.aal
    header = {
        "alg": options.signer.alg,
        "kid": options.signer.kid,
        "typ": WALLET_ATTESTATION_TYP,
        "trust_chain": options.signer.trust_chain,
    }
    jwt = await _sign(
        callbacks, options.signer, _drop_none(header), _drop_none(payload)
    )
    decode_jwt(jwt, WalletAttestationHeaderV1_0, WalletAttestationPayloadV1_0)
    return jwt


async def _create_v1_3(
    callbacks: CallbackContext,
    options: WalletAttestationOptionsV1_3,
    settings: SdkSettings,
) -> str:
    payload, exp = _base_payload(options, settings, datetime.now(UTC))
    if options.nbf is not None:
        if options.nbf >= exp:
            raise SchemaValidationError("nbf must be before exp")
        payload["nbf"] = _timestamp(options.nbf)
    if options.status is not None:
        payload["status"] = options.status.model_dump(exclude_none=True)
    header = {
        "alg": options.signer.alg,
        "kid": options.signer.kid,
        "typ": WALLET_ATTESTATION_TYP,
        "x5c": options.signer.x5c,
        "trust_chain": options.trust_chain,
    }
    jwt = await _sign(
        callbacks, options.signer, _drop_none(header), _drop_none(payload)
    )
    decode_jwt(jwt, WalletAttestationHeaderV1_3, WalletAttestationPayloadV1_3)
    return jwt


async def create_wallet_attestation_jwt(
    callbacks: CallbackContext,
    options: WalletAttestationOptions,
    settings: SdkSettings | None = None,
) -> str:
    """Sign a wallet attestation for the configured specs version.

    The produced JWT is decoded again against the version schema before
    being returned.
    """
    settings = settings or SdkSettings()
    settings.supports("create_wallet_attestation_jwt", _SUPPORTED_VERSIONS)
    try:
        if settings.is_version(ItWalletSpecsVersion.V1_0):
            if not isinstance(options, WalletAttestationOptionsV1_0):
                raise ClientAttestationError(
                    "Wallet attestation options do not match specs version 1.0"
                )
            jwt = await _create_v1_0(callbacks, options, settings)
        else:
            if not isinstance(options, WalletAttestationOptionsV1_3):
                raise ClientAttestationError(
                    "Wallet attestation options do not match specs version 1.3"
                )
            jwt = await _create_v1_3(callbacks, options, settings)
    except (SchemaValidationError, ClientAttestationError):
        raise
    except Exception as exc:
        raise ClientAttestationError(
            f"Unexpected error during wallet attestation creation: {exc}"
        ) from exc
    logger.debug(
        "created wallet attestation for specs version %s",
        settings.it_wallet_specs_version.value,
    )
    return jwt
