"""Shared test fixtures for the itwallet SDK."""

import json
from collections.abc import AsyncIterator, Callable
from typing import Any, NamedTuple

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import ec
from jwt.algorithms import ECAlgorithm
from jwt.utils import base64url_encode

from itwallet.core.callbacks import CallbackContext
from itwallet.crypto.pyjwt_callbacks import verify_jwt_with_jwk

RP_CLIENT_ID = "openid_federation:https://rp.example.org"
RP_KID = "rp-sig-1"


class EcKey(NamedTuple):
    private_key: ec.EllipticCurvePrivateKey
    private_jwk: dict[str, Any]
    public_jwk: dict[str, Any]


def make_ec_key(kid: str, **members: str) -> EcKey:
    private_key = ec.generate_private_key(ec.SECP256R1())
    private_jwk = ECAlgorithm.to_jwk(private_key, as_dict=True)
    private_jwk.update(kid=kid, **members)
    public_jwk = {k: v for k, v in private_jwk.items() if k != "d"}
    return EcKey(private_key, private_jwk, public_jwk)


def sign_es256(header: dict[str, Any], payload: dict[str, Any], key: EcKey) -> str:
    return jwt.encode(payload, key.private_key, algorithm="ES256", headers=header)


def _segment(data: dict[str, Any]) -> str:
    return base64url_encode(json.dumps(data).encode()).decode()


def unsigned_jwt(header: dict[str, Any], payload: dict[str, Any]) -> str:
    return f"{_segment(header)}.{_segment(payload)}.signature"


def entity_configuration(keys: list[dict[str, Any]]) -> str:
    return unsigned_jwt(
        {"alg": "ES256", "typ": "entity-statement+jwt"},
        {
            "iss": "https://rp.example.org",
            "sub": "https://rp.example.org",
            "metadata": {"openid_credential_verifier": {"jwks": {"keys": keys}}},
        },
    )


@pytest.fixture
def ec_key_factory() -> Callable[..., EcKey]:
    """Generate fresh P-256 keys."""
    return make_ec_key


@pytest.fixture
def rp_key() -> EcKey:
    """Relying party request object signing key."""
    return make_ec_key(RP_KID)


@pytest.fixture
def sign_jwt_es256() -> Callable[[dict[str, Any], dict[str, Any], EcKey], str]:
    """Sign a JWT with an EcKey."""
    return sign_es256


@pytest.fixture
def build_unsigned_jwt() -> Callable[[dict[str, Any], dict[str, Any]], str]:
    """Build a compact JWT with a dummy signature."""
    return unsigned_jwt


@pytest.fixture
def build_entity_configuration() -> Callable[[list[dict[str, Any]]], str]:
    """Build an unsigned entity configuration publishing verifier keys."""
    return entity_configuration


@pytest.fixture
def request_object_payload() -> dict[str, Any]:
    """Valid request object claims for a federation relying party."""
    return {
        "iss": RP_CLIENT_ID,
        "client_id": RP_CLIENT_ID,
        "response_type": "vp_token",
        "response_mode": "direct_post.jwt",
        "response_uri": "https://rp.example.org/response",
        "nonce": "request-nonce-123",
        "state": "state-abc",
        "dcql_query": {"credentials": [{"id": "pid", "format": "dc+sd-jwt"}]},
    }


@pytest.fixture
def federation_request_object(
    rp_key: EcKey, request_object_payload: dict[str, Any]
) -> str:
    """Request object signed by the relying party with its trust chain attached."""
    header = {
        "alg": "ES256",
        "typ": "oauth-authz-req+jwt",
        "kid": RP_KID,
        "trust_chain": [entity_configuration([rp_key.public_jwk]), "anchor-statement"],
    }
    return sign_es256(header, request_object_payload, rp_key)


@pytest.fixture
def callbacks() -> CallbackContext:
    """Callbacks verifying with PyJWT."""
    return CallbackContext(verify_jwt=verify_jwt_with_jwk)


@pytest.fixture
async def mock_http() -> AsyncIterator[Callable[..., httpx.AsyncClient]]:
    """Build AsyncClients backed by a handler; closed at teardown."""
    clients: list[httpx.AsyncClient] = []

    def _factory(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _factory
    for client in clients:
        await client.aclose()
