"""Client identifier prefix classification."""

from enum import StrEnum


class ClientIdPrefix(StrEnum):
    """Trust framework a ``client_id`` belongs to."""

    NONE = "none"
    OPENID_FEDERATION = "openid_federation"
    X509_HASH = "x509_hash"


# Both the ':' and the legacy '#' delimiter are in use.
_PREFIX_DELIMITERS = (":", "#")

_ORDERED_PREFIXES = (ClientIdPrefix.X509_HASH, ClientIdPrefix.OPENID_FEDERATION)


def classify_client_id(client_id: str) -> ClientIdPrefix:
    """Map a client_id to its prefix; anything unrecognised is NONE."""
    for prefix in _ORDERED_PREFIXES:
        for delimiter in _PREFIX_DELIMITERS:
            if client_id.startswith(f"{prefix.value}{delimiter}"):
                return prefix
    return ClientIdPrefix.NONE


def requires_trust_chain(prefix: ClientIdPrefix) -> bool:
    """Return True for prefixes whose keys come from a federation trust chain."""
    return prefix in (ClientIdPrefix.OPENID_FEDERATION, ClientIdPrefix.NONE)
