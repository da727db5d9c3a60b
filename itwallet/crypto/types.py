"""Type definitions for JWK, JWT and signer descriptors."""

from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
)

_any_url = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    _any_url.validate_python(value)
    return value


# Validated as a URL but kept as the original string.
UrlString = Annotated[str, AfterValidator(_check_url)]

NonEmptyStrList = Annotated[list[str], Field(min_length=1)]


class Jwk(BaseModel):
    """JSON Web Key; unknown members are preserved."""

    model_config = ConfigDict(extra="allow")

    kty: str
    kid: str | None = None
    use: str | None = None
    alg: str | None = None
    crv: str | None = None
    x: str | None = None
    y: str | None = None
    n: str | None = None
    e: str | None = None
    x5c: list[str] | None = None

    def public_dict(self) -> dict[str, Any]:
        """Serialize without unset members."""
        return self.model_dump(exclude_none=True)


class JwkSet(BaseModel):
    """JSON Web Key Set."""

    model_config = ConfigDict(extra="allow")

    keys: list[Jwk]


class JwtHeader(BaseModel):
    """Generic JOSE header."""

    model_config = ConfigDict(extra="allow")

    alg: str
    typ: str | None = None
    kid: str | None = None
    jwk: Jwk | None = None
    trust_chain: NonEmptyStrList | None = None
    x5c: list[str] | None = None

    @field_validator("alg")
    @classmethod
    def _alg_not_none(cls, value: str) -> str:
        if value == "none":
            raise ValueError("alg value 'none' is not allowed")
        return value


class JwtConfirmation(BaseModel):
    """``cnf`` claim."""

    model_config = ConfigDict(extra="allow")

    jwk: Jwk | None = None
    jkt: str | None = None


class JwtPayload(BaseModel):
    """Generic JWT claims set."""

    model_config = ConfigDict(extra="allow")

    iss: str | None = None
    sub: str | None = None
    aud: str | list[str] | None = None
    exp: int | None = None
    nbf: int | None = None
    iat: int | None = None
    jti: str | None = None
    nonce: str | None = None
    cnf: JwtConfirmation | None = None
    trust_chain: NonEmptyStrList | None = None


class JwtSignerJwk(BaseModel):
    """Signer identified by a public JWK."""

    method: Literal["jwk"] = "jwk"
    alg: str
    public_jwk: Jwk
    kid: str | None = None


class JwtSignerX5c(BaseModel):
    """Signer identified by an X.509 certificate chain."""

    method: Literal["x5c"] = "x5c"
    alg: str
    x5c: NonEmptyStrList
    kid: str | None = None


class JwtSignerFederation(BaseModel):
    """Signer identified by an OpenID Federation trust chain."""

    method: Literal["federation"] = "federation"
    alg: str
    kid: str | None = None
    trust_chain: NonEmptyStrList | None = None


JwtSigner = Annotated[
    JwtSignerJwk | JwtSignerX5c | JwtSignerFederation,
    Field(discriminator="method"),
]


class JweEncryptor(BaseModel):
    """Recipient key and parameters for a JWE encryption."""

    method: Literal["jwk"] = "jwk"
    alg: str
    enc: str
    public_jwk: Jwk
    kid: str | None = None
    # base64url encoded PartyUInfo / PartyVInfo
    apu: str | None = None
    apv: str | None = None
