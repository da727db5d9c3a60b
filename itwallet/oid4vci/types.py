"""Credential request, proof JWT and credential response schemas."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from itwallet.crypto.types import Jwk, JwtHeader, JwtPayload, NonEmptyStrList

PROOF_JWT_TYP = "openid4vci-proof+jwt"

PositiveInt = Annotated[int, Field(gt=0)]


class ProofJwtHeaderV1_0(JwtHeader):
    """Proof header: the holder key travels inline."""

    typ: Literal["openid4vci-proof+jwt"]  # type: ignore[assignment]
    jwk: Jwk  # type: ignore[assignment]


class ProofJwtHeaderV1_3(ProofJwtHeaderV1_0):
    """Proof header, 1.3: a key attestation is mandatory."""

    key_attestation: str


class ProofJwtPayload(JwtPayload):
    """Proof claims bound to the issuer and its nonce."""

    aud: str  # type: ignore[assignment]
    iat: int  # type: ignore[assignment]
    nonce: str  # type: ignore[assignment]


class JwtProof(BaseModel):
    """Single proof object, 1.0."""

    jwt: str
    proof_type: Literal["jwt"] = "jwt"


class JwtProofs(BaseModel):
    """Proofs object, 1.3."""

    jwt: NonEmptyStrList


class _CredentialRequestBase(BaseModel):
    model_config = ConfigDict(extra="allow")

    credential_identifier: str | None = None
    credential_configuration_id: str | None = None
    transaction_id: str | None = None

    @model_validator(mode="after")
    def _one_identifier(self):
        if self.credential_identifier and self.credential_configuration_id:
            raise ValueError(
                "credential_identifier and credential_configuration_id "
                "MUST NOT be used together"
            )
        if not self.credential_identifier and not self.credential_configuration_id:
            raise ValueError(
                "One of credential_identifier or credential_configuration_id "
                "MUST be present"
            )
        return self


class CredentialRequestV1_0(_CredentialRequestBase):
    """Credential request carrying a single ``proof``."""

    proof: JwtProof


class CredentialRequestV1_3(_CredentialRequestBase):
    """Credential request carrying a ``proofs`` batch."""

    proofs: JwtProofs


CredentialRequest = CredentialRequestV1_0 | CredentialRequestV1_3


class IssuedCredential(BaseModel):
    """One issued credential."""

    model_config = ConfigDict(extra="allow")

    credential: str


def _check_issuance_fields(
    credentials: list[IssuedCredential] | None,
    delay: int | None,
    delay_name: str,
    transaction_id: str | None,
    notification_id: str | None,
) -> None:
    if credentials is not None:
        if delay is not None or transaction_id is not None:
            raise ValueError(
                "credentials MUST NOT be present with deferred flow fields "
                f"({delay_name}/transaction_id)"
            )
        return
    if delay is None or transaction_id is None:
        raise ValueError(
            f"Both {delay_name} and transaction_id are REQUIRED when credentials "
            "is not present (deferred flow)"
        )
    if notification_id is not None:
        raise ValueError("notification_id MUST NOT be present if credentials is absent")


class CredentialResponseV1_0(BaseModel):
    """Immediate or deferred credential response, 1.0."""

    model_config = ConfigDict(extra="forbid")

    credentials: Annotated[list[IssuedCredential], Field(min_length=1)] | None = None
    lead_time: PositiveInt | None = None
    transaction_id: str | None = None
    notification_id: str | None = None

    @model_validator(mode="after")
    def _immediate_or_deferred(self):
        _check_issuance_fields(
            self.credentials,
            self.lead_time,
            "lead_time",
            self.transaction_id,
            self.notification_id,
        )
        return self


class CredentialResponseV1_3(BaseModel):
    """Immediate or deferred credential response, 1.3."""

    model_config = ConfigDict(extra="forbid")

    credentials: Annotated[list[IssuedCredential], Field(min_length=1)] | None = None
    interval: PositiveInt | None = None
    transaction_id: str | None = None
    notification_id: str | None = None

    @model_validator(mode="after")
    def _immediate_or_deferred(self):
        _check_issuance_fields(
            self.credentials,
            self.interval,
            "interval",
            self.transaction_id,
            self.notification_id,
        )
        return self


CredentialResponse = CredentialResponseV1_0 | CredentialResponseV1_3


class NonceResponse(BaseModel):
    """Body of the nonce endpoint."""

    model_config = ConfigDict(extra="allow")

    c_nonce: str
