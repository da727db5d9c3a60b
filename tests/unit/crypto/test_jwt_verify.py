"""Tests for signer resolution and callback-backed verification."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from itwallet.core.callbacks import CallbackContext, VerifyJwtResult
from itwallet.core.errors import JwtVerificationError
from itwallet.crypto.jwt_verify import (
    check_validity_window,
    signer_from_header,
    verify_jwt,
)
from itwallet.crypto.types import (
    Jwk,
    JwtHeader,
    JwtPayload,
    JwtSignerFederation,
    JwtSignerJwk,
    JwtSignerX5c,
)

JWK = Jwk(kty="EC", crv="P-256", x="x", y="y")
NOW = datetime(2030, 1, 1, tzinfo=UTC)
NOW_TS = int(NOW.timestamp())


class TestSignerFromHeader:
    """Tests for header-driven signer selection."""

    def test_x5c_wins(self) -> None:
        header = JwtHeader(alg="ES256", x5c=["cert"], trust_chain=["tc"], jwk=JWK)
        assert isinstance(signer_from_header(header), JwtSignerX5c)

    def test_trust_chain(self) -> None:
        header = JwtHeader(alg="ES256", kid="k", trust_chain=["a", "b"])
        signer = signer_from_header(header)
        assert isinstance(signer, JwtSignerFederation)
        assert signer.trust_chain == ["a", "b"]
        assert signer.kid == "k"

    def test_jwk(self) -> None:
        signer = signer_from_header(JwtHeader(alg="ES256", jwk=JWK))
        assert isinstance(signer, JwtSignerJwk)
        assert signer.public_jwk == JWK

    def test_no_key_material(self) -> None:
        with pytest.raises(
            JwtVerificationError, match="Unable to determine the signer"
        ):
            signer_from_header(JwtHeader(alg="ES256", kid="k"))


class TestValidityWindow:
    """Tests for exp/nbf checks."""

    def test_expired(self) -> None:
        with pytest.raises(JwtVerificationError, match="expired"):
            check_validity_window(JwtPayload(exp=NOW_TS - 1), now=NOW)

    def test_not_yet_valid(self) -> None:
        with pytest.raises(JwtVerificationError, match="not yet valid"):
            check_validity_window(JwtPayload(nbf=NOW_TS + 10), now=NOW)

    def test_skew_allows_small_drift(self) -> None:
        payload = JwtPayload(exp=NOW_TS - 5, nbf=NOW_TS + 5)
        check_validity_window(payload, now=NOW, skew=10)


class TestVerifyJwt:
    """Tests for verify_jwt."""

    async def test_passes_signer_and_parts(self) -> None:
        verify = AsyncMock(return_value=VerifyJwtResult(verified=True))
        signer = JwtSignerJwk(alg="ES256", public_jwk=JWK)
        result = await verify_jwt(
            CallbackContext(verify_jwt=verify),
            compact="a.b.c",
            header=JwtHeader(alg="ES256"),
            payload=JwtPayload(iss="me"),
            signer=signer,
            error_message="failed",
            now=NOW,
        )
        assert result is signer
        called_signer, to_verify = verify.await_args.args
        assert called_signer is signer
        assert to_verify.compact == "a.b.c"
        assert to_verify.payload == {"iss": "me"}

    async def test_rejected_signature(self) -> None:
        verify = AsyncMock(return_value=VerifyJwtResult(verified=False))
        with pytest.raises(JwtVerificationError, match="custom failure"):
            await verify_jwt(
                CallbackContext(verify_jwt=verify),
                compact="a.b.c",
                header=JwtHeader(alg="ES256"),
                payload=JwtPayload(),
                signer=JwtSignerJwk(alg="ES256", public_jwk=JWK),
                error_message="custom failure",
            )

    async def test_missing_callback(self) -> None:
        with pytest.raises(JwtVerificationError, match="verify_jwt callback missing"):
            await verify_jwt(
                CallbackContext(),
                compact="a.b.c",
                header=JwtHeader(alg="ES256"),
                payload=JwtPayload(),
                signer=JwtSignerJwk(alg="ES256", public_jwk=JWK),
                error_message="failed",
            )
