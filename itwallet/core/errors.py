"""Error taxonomy shared by every SDK component."""

import json
from typing import Any

REASON_MAX_LENGTH = 200


class ItWalletError(Exception):
    """Base class for all SDK errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class JwtParseError(ItWalletError):
    """A compact JWT could not be split or base64url/JSON decoded."""


class SchemaValidationError(ItWalletError):
    """Decoded data does not match the expected shape."""

    def __init__(
        self, message: str, errors: list[dict[str, Any]] | None = None
    ) -> None:
        super().__init__(message)
        self.errors = errors or []


class JwtVerificationError(ItWalletError):
    """The injected verifier rejected a JWT signature or its validity window."""


class UnexpectedStatusCodeError(ItWalletError):
    """An HTTP response carried a status different from the expected one."""

    def __init__(self, message: str, status_code: int, reason: Any = None) -> None:
        super().__init__(
            _serialize_attrs(message=message, reason=reason, status_code=status_code),
            status_code=status_code,
        )
        self.reason = reason


class ItWalletSpecsVersionError(ItWalletError):
    """A feature was invoked for a specs version it does not support."""

    def __init__(
        self, feature: str, requested_version: str, supported_versions: list[str]
    ) -> None:
        super().__init__(
            f'Feature "{feature}" does not support version {requested_version}. '
            f"Supported versions: {', '.join(supported_versions)}"
        )
        self.feature = feature
        self.requested_version = requested_version
        self.supported_versions = supported_versions


class Oauth2Error(ItWalletError):
    """Generic OAuth2 failure (DPoP, client attestation)."""


class CreateTokenDPoPError(Oauth2Error):
    """A DPoP proof could not be produced."""


class ClientAttestationError(Oauth2Error):
    """A wallet attestation could not be produced."""


class Oid4vpError(ItWalletError):
    """Generic OpenID4VP failure."""


class InvalidRequestUriMethodError(Oid4vpError):
    """request_uri_method is neither get nor post."""


class ParseAuthorizeRequestError(Oid4vpError):
    """A request object failed signature verification or parsing."""


class TrustResolutionError(Oid4vpError):
    """No trusted key material could be resolved for a request object."""


class TrustChainExtractionError(TrustResolutionError):
    """Relying party metadata could not be read from a trust chain."""


class KeyNotFoundError(TrustResolutionError):
    """No key in a JWK set matches the requested kid."""


class CreateAuthorizationResponseError(Oid4vpError):
    """An authorization response could not be built."""


class NoEncryptionKeyError(CreateAuthorizationResponseError):
    """The relying party publishes no key usable for the chosen JWE alg."""


class FetchAuthorizationResponseError(Oid4vpError):
    """An authorization response could not be submitted."""


class Oid4vciError(ItWalletError):
    """Generic OpenID4VCI failure."""


class FetchCredentialResponseError(Oid4vciError):
    """A credential request could not be sent or its answer read."""


class NonceRequestError(Oid4vciError):
    """The nonce endpoint could not be reached or answered unexpectedly."""


class NonceParseError(Oid4vciError):
    """The nonce endpoint answered with an unexpected body."""


def _serialize_attrs(**attrs: Any) -> str:
    """Format non-empty attributes as ``key=value`` pairs."""
    parts = []
    for key, value in attrs.items():
        if value is None:
            continue
        if isinstance(value, list):
            value = f"({', '.join(str(v) for v in value)})"
        elif not isinstance(value, str):
            value = json.dumps(value, default=str)
        if key == "reason":
            value = value[:REASON_MAX_LENGTH]
        parts.append(f"{key}={value}")
    return " ".join(parts)
