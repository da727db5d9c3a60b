"""SDK settings loaded from environment variables."""

from enum import StrEnum

from pydantic_settings import BaseSettings, SettingsConfigDict

from itwallet.core.errors import ItWalletSpecsVersionError

AUTHORIZATION_RESPONSE_TTL_DEFAULT = 600
WALLET_ATTESTATION_TTL_DEFAULT = 5_184_000
HTTP_TIMEOUT_DEFAULT = 10.0


class ItWalletSpecsVersion(StrEnum):
    """Supported versions of the IT-Wallet technical specifications."""

    V1_0 = "1.0"
    V1_3 = "1.3"


class SdkSettings(BaseSettings):
    """Protocol and transport settings shared by every SDK operation."""

    model_config = SettingsConfigDict(env_prefix="ITWALLET_")

    it_wallet_specs_version: ItWalletSpecsVersion = ItWalletSpecsVersion.V1_3
    authorization_response_ttl: int = AUTHORIZATION_RESPONSE_TTL_DEFAULT
    wallet_attestation_ttl: int = WALLET_ATTESTATION_TTL_DEFAULT
    http_timeout: float = HTTP_TIMEOUT_DEFAULT
    jwt_clock_skew: int = 0

    def is_version(self, version: ItWalletSpecsVersion) -> bool:
        """Return True if the configured specs version matches."""
        return self.it_wallet_specs_version == version

    def supports(
        self, feature: str, versions: tuple[ItWalletSpecsVersion, ...]
    ) -> None:
        """Raise if *feature* is not available for the configured version."""
        if self.it_wallet_specs_version not in versions:
            raise ItWalletSpecsVersionError(
                feature,
                self.it_wallet_specs_version.value,
                [v.value for v in versions],
            )
