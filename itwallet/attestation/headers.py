"""Client attestation extraction from HTTP request headers."""

from collections.abc import Mapping

import httpx

from itwallet.attestation.types import (
    OAUTH_CLIENT_ATTESTATION_HEADER,
    OAUTH_CLIENT_ATTESTATION_POP_HEADER,
    ClientAttestationHeaders,
)
from itwallet.crypto.jwt_decode import is_compact_jwt


def extract_client_attestation_jwts_from_headers(
    headers: httpx.Headers | Mapping[str, str],
) -> ClientAttestationHeaders:
    """Read the attestation and PoP headers; both or neither must be present."""
    lookup = httpx.Headers(headers)
    attestation = lookup.get(OAUTH_CLIENT_ATTESTATION_HEADER)
    pop = lookup.get(OAUTH_CLIENT_ATTESTATION_POP_HEADER)

    if not attestation and not pop:
        return ClientAttestationHeaders(valid=True)
    if not attestation or not pop:
        return ClientAttestationHeaders(valid=False)
    if not is_compact_jwt(attestation) or not is_compact_jwt(pop):
        return ClientAttestationHeaders(valid=False)
    return ClientAttestationHeaders(
        valid=True, wallet_attestation=attestation, client_attestation_pop=pop
    )
