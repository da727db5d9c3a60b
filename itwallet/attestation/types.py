"""Wallet attestation schemas for IT-Wallet 1.0 and 1.3."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from itwallet.crypto.types import (
    Jwk,
    JwtConfirmation,
    JwtHeader,
    JwtPayload,
    JwtSigner,
    JwtSignerFederation,
    JwtSignerX5c,
    NonEmptyStrList,
    UrlString,
)

WALLET_ATTESTATION_TYP = "oauth-client-attestation+jwt"
OAUTH_CLIENT_ATTESTATION_HEADER = "OAuth-Client-Attestation"
OAUTH_CLIENT_ATTESTATION_POP_HEADER = "OAuth-Client-Attestation-PoP"


class WalletAttestationConfirmation(JwtConfirmation):
    """``cnf`` claim holding the wallet instance key."""

    jwk: Jwk  # type: ignore[assignment]


class WalletAttestationHeaderV1_0(JwtHeader):
    """Header, 1.0: trust_chain is required."""

    typ: Literal["oauth-client-attestation+jwt"]  # type: ignore[assignment]
    trust_chain: NonEmptyStrList  # type: ignore[assignment]


class WalletAttestationPayloadV1_0(JwtPayload):
    """Payload, 1.0."""

    aal: str
    cnf: WalletAttestationConfirmation  # type: ignore[assignment]
    exp: int  # type: ignore[assignment]
    iat: int  # type: ignore[assignment]
    iss: str  # type: ignore[assignment]
    sub: str  # type: ignore[assignment]
    wallet_link: UrlString | None = None
    wallet_name: str | None = None


class WalletAttestationHeaderV1_3(JwtHeader):
    """Header, 1.3: x5c is required, trust_chain optional."""

    typ: Literal["oauth-client-attestation+jwt"]  # type: ignore[assignment]
    x5c: NonEmptyStrList  # type: ignore[assignment]


class StatusList(BaseModel):
    """Position of the attestation in a status list."""

    idx: int
    uri: str


class AttestationStatus(BaseModel):
    """``status`` claim used for revocation."""

    model_config = ConfigDict(extra="allow")

    status_list: StatusList


class WalletAttestationPayloadV1_3(JwtPayload):
    """Payload, 1.3: aal dropped, nbf and status added."""

    cnf: WalletAttestationConfirmation  # type: ignore[assignment]
    exp: int  # type: ignore[assignment]
    iat: int  # type: ignore[assignment]
    iss: str  # type: ignore[assignment]
    status: AttestationStatus | None = None
    sub: str  # type: ignore[assignment]
    wallet_link: UrlString | None = None
    wallet_name: str | None = None


class WalletAttestationOptionsV1_0(BaseModel):
    """Inputs to create a 1.0 wallet attestation."""

    issuer: str
    dpop_jwk_public: Jwk
    signer: JwtSignerFederation
    aal: str
    expires_at: datetime | None = None
    wallet_link: str | None = None
    wallet_name: str | None = None


class WalletAttestationOptionsV1_3(BaseModel):
    """Inputs to create a 1.3 wallet attestation."""

    issuer: str
    dpop_jwk_public: Jwk
    signer: JwtSignerX5c
    trust_chain: NonEmptyStrList | None = None
    expires_at: datetime | None = None
    nbf: datetime | None = None
    status: AttestationStatus | None = None
    wallet_link: str | None = None
    wallet_name: str | None = None


WalletAttestationOptions = WalletAttestationOptionsV1_0 | WalletAttestationOptionsV1_3


class VerifiedWalletAttestation(BaseModel):
    """A wallet attestation whose signature and lifetime were checked."""

    header: WalletAttestationHeaderV1_0 | WalletAttestationHeaderV1_3
    payload: WalletAttestationPayloadV1_0 | WalletAttestationPayloadV1_3
    signer: JwtSigner


class ClientAttestationHeaders(BaseModel):
    """Client attestation JWTs carried by an HTTP request."""

    valid: bool
    wallet_attestation: str | None = None
    client_attestation_pop: str | None = None
