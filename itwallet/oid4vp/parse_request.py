"""Request object parsing and trust resolution.

The parser runs as a small state machine::

    DECODING -> CLASSIFYING -> RESOLVING_SIGNER -> VERIFYING -> VERIFIED
                                                           \\-> REJECTED

Header, payload and trust material are all checked before the injected
verifier is called, so a malformed token never reaches it.

For ``openid_federation`` and unprefixed client ids the relying party key is
looked up by ``kid`` in the metadata claimed by the first trust chain entry,
and the signature is verified against that JWK (``jwk`` signer). Validating
the trust chain itself is left to the caller's federation validator.
``exp`` is not checked here.
"""

import logging
from enum import StrEnum

from itwallet.core.callbacks import CallbackContext, JwtToVerify
from itwallet.core.errors import (
    ItWalletError,
    ParseAuthorizeRequestError,
    TrustResolutionError,
)
from itwallet.crypto.jwt_decode import decode_jwt
from itwallet.crypto.keys import find_key_by_kid
from itwallet.crypto.types import JwtSigner, JwtSignerJwk, JwtSignerX5c
from itwallet.federation.trust_chain import extract_rp_metadata
from itwallet.oid4vp.client_id import (
    ClientIdPrefix,
    classify_client_id,
    requires_trust_chain,
)
from itwallet.oid4vp.request_object import (
    AuthorizationRequestHeader,
    AuthorizationRequestObject,
)
from itwallet.oid4vp.types import ParsedAuthorizeRequest

logger = logging.getLogger(__name__)


class ParseState(StrEnum):
    """States of the request object parser."""

    DECODING = "decoding"
    CLASSIFYING = "classifying"
    RESOLVING_SIGNER = "resolving_signer"
    VERIFYING = "verifying"
    VERIFIED = "verified"
    REJECTED = "rejected"


class AuthorizeRequestParser:
    """Single-use parser for one request object."""

    def __init__(self, callbacks: CallbackContext) -> None:
        self.callbacks = callbacks
        self.state = ParseState.DECODING

    def _enter(self, state: ParseState) -> None:
        logger.debug("request object parser: %s -> %s", self.state, state)
        self.state = state

    async def parse(self, request_object_jwt: str) -> ParsedAuthorizeRequest:
        """Run the parser to a terminal state."""
        try:
            header, payload = self._decode(request_object_jwt)
            self._enter(ParseState.CLASSIFYING)
            prefix = classify_client_id(payload.client_id)
            self._enter(ParseState.RESOLVING_SIGNER)
            signer = self._resolve_signer(prefix, header)
            self._enter(ParseState.VERIFYING)
            await self._verify(request_object_jwt, header, payload, signer)
        except Exception:
            self._enter(ParseState.REJECTED)
            raise
        self._enter(ParseState.VERIFIED)
        return ParsedAuthorizeRequest(header=header, payload=payload)

    def _decode(
        self, request_object_jwt: str
    ) -> tuple[AuthorizationRequestHeader, AuthorizationRequestObject]:
        decoded = decode_jwt(
            request_object_jwt,
            header_model=AuthorizationRequestHeader,
            payload_model=AuthorizationRequestObject,
        )
        return decoded.header, decoded.payload

    def _resolve_signer(
        self, prefix: ClientIdPrefix, header: AuthorizationRequestHeader
    ) -> JwtSigner:
        if prefix is ClientIdPrefix.X509_HASH:
            if not header.x5c:
                raise TrustResolutionError(
                    "x5c required in the request object header for x509_hash client_id"
                )
            logger.debug("resolved x5c signer")
            return JwtSignerX5c(alg=header.alg, x5c=header.x5c, kid=header.kid)

        if requires_trust_chain(prefix):
            if not header.trust_chain:
                raise TrustResolutionError(
                    "trust_chain required in the request object header "
                    f"for {prefix} client_id"
                )
            if header.kid is None:
                raise TrustResolutionError(
                    f"kid required in the request object header for {prefix} client_id"
                )
            metadata = extract_rp_metadata(header.trust_chain)
            jwk = find_key_by_kid(metadata.jwks.keys, header.kid)
            logger.debug("resolved jwk signer from trust chain, kid=%s", header.kid)
            return JwtSignerJwk(alg=header.alg, public_jwk=jwk, kid=header.kid)

        raise TrustResolutionError(f"Unsupported client_id prefix: {prefix}")

    async def _verify(
        self,
        request_object_jwt: str,
        header: AuthorizationRequestHeader,
        payload: AuthorizationRequestObject,
        signer: JwtSigner,
    ) -> None:
        if self.callbacks.verify_jwt is None:
            raise ParseAuthorizeRequestError(
                "verify_jwt callback is required to parse a Request Object"
            )
        try:
            result = await self.callbacks.verify_jwt(
                signer,
                JwtToVerify(
                    compact=request_object_jwt,
                    header=header.model_dump(exclude_none=True),
                    payload=payload.model_dump(exclude_none=True),
                ),
            )
        except ItWalletError:
            raise
        except Exception as exc:
            raise ParseAuthorizeRequestError(
                f"Unexpected error during Request Object parsing: {exc}"
            ) from exc
        if not result.verified:
            raise ParseAuthorizeRequestError("Error verifying Request Object signature")


async def parse_authorize_request(
    callbacks: CallbackContext, request_object_jwt: str
) -> ParsedAuthorizeRequest:
    """Decode, resolve trust for and verify a signed request object."""
    return await AuthorizeRequestParser(callbacks).parse(request_object_jwt)
