"""Wallet attestation JWT verification."""

import logging
from datetime import datetime

from itwallet.attestation.types import (
    VerifiedWalletAttestation,
    WalletAttestationHeaderV1_0,
    WalletAttestationHeaderV1_3,
    WalletAttestationPayloadV1_0,
    WalletAttestationPayloadV1_3,
)
from itwallet.core.callbacks import CallbackContext
from itwallet.core.settings import ItWalletSpecsVersion, SdkSettings
from itwallet.crypto.jwt_decode import decode_jwt
from itwallet.crypto.jwt_verify import signer_from_header, verify_jwt

logger = logging.getLogger(__name__)

_SUPPORTED_VERSIONS = (ItWalletSpecsVersion.V1_0, ItWalletSpecsVersion.V1_3)


async def verify_wallet_attestation_jwt(
    callbacks: CallbackContext,
    wallet_attestation_jwt: str,
    settings: SdkSettings | None = None,
    now: datetime | None = None,
) -> VerifiedWalletAttestation:
    """Decode against the version schemas, then verify signature and lifetime."""
    settings = settings or SdkSettings()
    settings.supports("verify_wallet_attestation_jwt", _SUPPORTED_VERSIONS)
    if settings.is_version(ItWalletSpecsVersion.V1_0):
        header_model, payload_model = (
            WalletAttestationHeaderV1_0,
            WalletAttestationPayloadV1_0,
        )
    else:
        header_model, payload_model = (
            WalletAttestationHeaderV1_3,
            WalletAttestationPayloadV1_3,
        )

    header, payload, _ = decode_jwt(wallet_attestation_jwt, header_model, payload_model)
    signer = await verify_jwt(
        callbacks,
        compact=wallet_attestation_jwt,
        header=header,
        payload=payload,
        signer=signer_from_header(header),
        error_message="wallet attestation verification failed.",
        now=now,
        skew=settings.jwt_clock_skew,
    )
    logger.debug("wallet attestation verified, iss=%s", payload.iss)
    return VerifiedWalletAttestation(header=header, payload=payload, signer=signer)
