"""Tests for relying party metadata extraction from trust chains."""

from collections.abc import Callable

import pytest

from itwallet.core.errors import TrustChainExtractionError
from itwallet.federation.trust_chain import extract_rp_metadata

KEY = {"kty": "EC", "kid": "rp-1", "crv": "P-256", "x": "x", "y": "y"}


class TestExtractRpMetadata:
    """Tests for extract_rp_metadata."""

    def test_reads_first_entry(self, build_entity_configuration: Callable) -> None:
        chain = [build_entity_configuration([KEY]), "not-even-a-jwt"]
        metadata = extract_rp_metadata(chain)
        assert metadata.jwks.keys[0].kid == "rp-1"

    def test_empty_chain(self) -> None:
        with pytest.raises(TrustChainExtractionError, match="empty"):
            extract_rp_metadata([])

    def test_undecodable_entry(self) -> None:
        with pytest.raises(TrustChainExtractionError, match="Unable to decode"):
            extract_rp_metadata(["garbage"])

    def test_missing_verifier_metadata(self, build_unsigned_jwt: Callable) -> None:
        payload = {"metadata": {"federation_entity": {}}}
        entry = build_unsigned_jwt({"alg": "ES256"}, payload)
        with pytest.raises(
            TrustChainExtractionError, match="openid_credential_verifier"
        ):
            extract_rp_metadata([entry])

    def test_missing_metadata(self, build_unsigned_jwt: Callable) -> None:
        entry = build_unsigned_jwt({"alg": "ES256"}, {"iss": "https://rp.example.org"})
        with pytest.raises(TrustChainExtractionError):
            extract_rp_metadata([entry])

    def test_empty_jwks(self, build_entity_configuration: Callable) -> None:
        with pytest.raises(TrustChainExtractionError, match="at least one key"):
            extract_rp_metadata([build_entity_configuration([])])

    def test_malformed_jwks(self, build_unsigned_jwt: Callable) -> None:
        entry = build_unsigned_jwt(
            {"alg": "ES256"},
            {"metadata": {"openid_credential_verifier": {"jwks": {"keys": "nope"}}}},
        )
        with pytest.raises(TrustChainExtractionError):
            extract_rp_metadata([entry])
