"""Compact JWT decoding and schema validation, without signature checks."""

import binascii
import json
from typing import Any, Generic, NamedTuple, TypeVar

import pydantic
from jwt.utils import base64url_decode, base64url_encode

from itwallet.core.errors import JwtParseError, SchemaValidationError
from itwallet.crypto.types import JwtHeader, JwtPayload

HeaderT = TypeVar("HeaderT", bound=pydantic.BaseModel)
PayloadT = TypeVar("PayloadT", bound=pydantic.BaseModel)
ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)

JWT_SEGMENTS = 3
SAFE_DUMP_MAX_LENGTH = 200


class DecodedJwt(NamedTuple, Generic[HeaderT, PayloadT]):
    """Header and payload of a compact JWT, validated but not verified."""

    header: HeaderT
    payload: PayloadT
    signature: str


def b64url_encode(data: bytes | str) -> str:
    """Base64url-encode without padding."""
    raw = data.encode() if isinstance(data, str) else data
    return base64url_encode(raw).decode("ascii")


def b64url_decode(data: str) -> bytes:
    """Base64url-decode, tolerating missing padding."""
    return base64url_decode(data.encode("ascii"))


def _decode_json_segment(segment: str, name: str) -> dict[str, Any]:
    try:
        decoded = json.loads(b64url_decode(segment))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise JwtParseError(f"Error parsing JWT {name}. {exc}") from exc
    if not isinstance(decoded, dict):
        raise JwtParseError(f"Error parsing JWT {name}. Not a JSON object")
    return decoded


def parse_with_error_handling(
    model: type[ModelT], data: Any, message: str | None = None
) -> ModelT:
    """Validate *data* against *model*, raising SchemaValidationError."""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        raise SchemaValidationError(
            message or f"Error validating schema with data {_safe_dump(data)}",
            errors=exc.errors(include_url=False, include_context=False),
        ) from exc


def decode_jwt_unvalidated(jwt: str) -> tuple[dict[str, Any], dict[str, Any], str]:
    """Split and JSON-decode a compact JWT without any schema."""
    parts = jwt.split(".")
    if len(parts) != JWT_SEGMENTS:
        raise JwtParseError("Jwt is not a valid jwt, unable to decode")
    header_part, payload_part, signature = parts
    header = _decode_json_segment(header_part, "header")
    payload = _decode_json_segment(payload_part, "payload")
    return header, payload, signature


def decode_jwt(
    jwt: str,
    header_model: type[HeaderT] = JwtHeader,  # type: ignore[assignment]
    payload_model: type[PayloadT] = JwtPayload,  # type: ignore[assignment]
) -> DecodedJwt[HeaderT, PayloadT]:
    """Decode a compact JWT and validate header and payload shapes."""
    raw_header, raw_payload, signature = decode_jwt_unvalidated(jwt)
    header = parse_with_error_handling(
        header_model, raw_header, "Error validating jwt header"
    )
    payload = parse_with_error_handling(
        payload_model, raw_payload, "Error validating jwt payload"
    )
    return DecodedJwt(header=header, payload=payload, signature=signature)


def is_compact_jwt(value: str) -> bool:
    """Return True if *value* looks like a three-segment compact JWT."""
    parts = value.split(".")
    return len(parts) == JWT_SEGMENTS and all(
        part and all(c.isalnum() or c in "-_" for c in part) for part in parts
    )


def _safe_dump(data: Any) -> str:
    try:
        dumped = json.dumps(data, default=str)
    except (TypeError, ValueError):
        return "[unserializable]"
    if len(dumped) > SAFE_DUMP_MAX_LENGTH:
        return f"{dumped[:SAFE_DUMP_MAX_LENGTH]}..."
    return dumped
