"""Tests for client attestation header extraction."""

from itwallet.attestation.headers import extract_client_attestation_jwts_from_headers

ATTESTATION = "eyJhbGciOiJFUzI1NiJ9.eyJpc3MiOiJ3cCJ9.c2ln"
POP = "eyJhbGciOiJFUzI1NiJ9.eyJpc3MiOiJ3aSJ9.c2ln"


class TestExtractClientAttestationJwts:
    """Tests for extract_client_attestation_jwts_from_headers."""

    def test_both_present(self) -> None:
        result = extract_client_attestation_jwts_from_headers(
            {
                "OAuth-Client-Attestation": ATTESTATION,
                "OAuth-Client-Attestation-PoP": POP,
            }
        )
        assert result.valid
        assert result.wallet_attestation == ATTESTATION
        assert result.client_attestation_pop == POP

    def test_header_names_are_case_insensitive(self) -> None:
        result = extract_client_attestation_jwts_from_headers(
            {
                "oauth-client-attestation": ATTESTATION,
                "oauth-client-attestation-pop": POP,
            }
        )
        assert result.valid
        assert result.wallet_attestation == ATTESTATION

    def test_neither_present(self) -> None:
        result = extract_client_attestation_jwts_from_headers(
            {"Accept": "application/json"}
        )
        assert result.valid
        assert result.wallet_attestation is None
        assert result.client_attestation_pop is None

    def test_only_one_present(self) -> None:
        result = extract_client_attestation_jwts_from_headers(
            {"OAuth-Client-Attestation": ATTESTATION}
        )
        assert not result.valid

    def test_not_a_compact_jwt(self) -> None:
        result = extract_client_attestation_jwts_from_headers(
            {
                "OAuth-Client-Attestation": ATTESTATION,
                "OAuth-Client-Attestation-PoP": "opaque",
            }
        )
        assert not result.valid
