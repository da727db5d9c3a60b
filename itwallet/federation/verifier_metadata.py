"""Relying party verifier metadata and its encryption capability projection."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from itwallet.crypto.types import Jwk, JwkSet, UrlString

VERIFIER_METADATA_IDENTIFIER = "openid_credential_verifier"

MetadataSource = Literal["client_metadata", "v1.0", "v1.3", "jwks"]


class VpFormatV1_0(BaseModel):
    """Algorithms accepted for one credential format (v1.0)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    alg: list[str] | None = None
    sd_jwt_alg_values: list[str] | None = Field(default=None, alias="sd-jwt_alg_values")


class VpFormatV1_3(BaseModel):
    """Algorithms accepted for one credential format (v1.3)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    alg: list[str] | None = None
    deviceauth_alg_values: list[int] | None = None
    issuerauth_alg_values: list[int] | None = None
    kb_jwt_alg_values: list[str] | None = Field(default=None, alias="kb-jwt_alg_values")
    sd_jwt_alg_values: list[str] | None = Field(default=None, alias="sd-jwt_alg_values")


class VerifierMetadataV1_0(BaseModel):
    """``openid_credential_verifier`` metadata, IT-Wallet 1.0."""

    model_config = ConfigDict(extra="allow")

    application_type: Literal["web"]
    authorization_encrypted_response_alg: str
    authorization_encrypted_response_enc: str
    authorization_signed_response_alg: str
    client_id: UrlString
    client_name: str
    erasure_endpoint: UrlString | None = None
    jwks: JwkSet
    request_uris: list[UrlString]
    response_uris: list[UrlString]
    vp_formats: dict[str, VpFormatV1_0]

    @field_validator("authorization_signed_response_alg")
    @classmethod
    def _signed_alg_not_none(cls, value: str) -> str:
        if value == "none":
            raise ValueError(
                "The authorization_signed_response_alg MUST not be 'none'."
            )
        return value


class VerifierMetadataV1_3(BaseModel):
    """``openid_credential_verifier`` metadata, IT-Wallet 1.3."""

    model_config = ConfigDict(extra="allow")

    application_type: Literal["web"]
    client_id: UrlString
    client_name: str
    encrypted_response_enc_values_supported: list[str]
    erasure_endpoint: UrlString | None = None
    jwks: JwkSet
    logo_uri: UrlString
    request_uris: list[UrlString]
    response_uris: list[UrlString]
    vp_formats_supported: dict[str, VpFormatV1_3]


class ClientMetadata(BaseModel):
    """Inline ``client_metadata`` carried by a request object."""

    model_config = ConfigDict(extra="allow")

    client_name: str | None = None
    encrypted_response_enc_values_supported: list[str] | None = None
    jwks: JwkSet
    logo_uri: UrlString | None = None
    vp_formats_supported: dict[str, dict[str, Any]]


class NonEmptyJwkSet(JwkSet):
    """JWK set with at least one key."""

    keys: Annotated[list[Jwk], Field(min_length=1)]


class VerifierMetadataClaim(BaseModel):
    """Loosely typed verifier metadata as claimed in an entity configuration."""

    model_config = ConfigDict(extra="allow")

    jwks: NonEmptyJwkSet


class RelyingPartyCapabilities(BaseModel):
    """Encryption capabilities of a relying party, whatever metadata they came from."""

    model_config = ConfigDict(frozen=True)

    source: MetadataSource
    jwks: list[Jwk]
    enc_values_supported: list[str] | None = None
    encrypted_response_alg: str | None = None
    encrypted_response_enc: str | None = None
    signed_response_alg: str | None = None


RelyingPartyMetadata = (
    VerifierMetadataV1_0 | VerifierMetadataV1_3 | ClientMetadata | JwkSet
)


def resolve_rp_capabilities(metadata: RelyingPartyMetadata) -> RelyingPartyCapabilities:
    """Project any supported metadata variant onto its capabilities."""
    if isinstance(metadata, VerifierMetadataV1_0):
        return RelyingPartyCapabilities(
            source="v1.0",
            jwks=metadata.jwks.keys,
            encrypted_response_alg=metadata.authorization_encrypted_response_alg,
            encrypted_response_enc=metadata.authorization_encrypted_response_enc,
            signed_response_alg=metadata.authorization_signed_response_alg,
        )
    if isinstance(metadata, VerifierMetadataV1_3):
        return RelyingPartyCapabilities(
            source="v1.3",
            jwks=metadata.jwks.keys,
            enc_values_supported=metadata.encrypted_response_enc_values_supported,
        )
    if isinstance(metadata, ClientMetadata):
        return RelyingPartyCapabilities(
            source="client_metadata",
            jwks=metadata.jwks.keys,
            enc_values_supported=metadata.encrypted_response_enc_values_supported,
        )
    return RelyingPartyCapabilities(source="jwks", jwks=metadata.keys)
