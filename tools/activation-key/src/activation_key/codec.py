"""
Compact token encoding and decoding.

A token is ``base64url(header) "." base64url(payload) "." base64url(signature)``.
Decoding keeps the first two segments verbatim as the signing input, since
re-serialising the JSON is not guaranteed to reproduce the signed bytes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from . import base64url
from .errors import InvalidPayload, MalformedEncoding, MalformedToken

__all__ = ["DecodedToken", "decode", "encode", "assemble", "parse_payload"]


@dataclass(frozen=True)
class DecodedToken:
    """Holds the decoded parts of a compact token."""

    header: dict[str, Any]
    payload: dict[str, Any]
    signature: bytes
    signing_input: bytes

    @property
    def signature_b64(self) -> str:
        """The signature segment in base64url form."""
        return base64url.encode(self.signature)


def _reject_constant(name: str):
    raise ValueError(f"Non-finite number {name} is not valid JSON")


def _loads(text: str):
    return json.loads(text, parse_constant=_reject_constant)


def _decode_segment(segment: str, label: str) -> dict[str, Any]:
    """Decode a single base64url-encoded JSON object segment."""
    try:
        raw = base64url.decode(segment)
        value = _loads(raw.decode("utf-8"))
    except (MalformedEncoding, ValueError, RecursionError) as exc:
        raise MalformedToken(f"Could not decode {label}: {exc}") from exc

    if not isinstance(value, dict):
        raise MalformedToken(
            f"Could not decode {label}: expected a JSON object, got {type(value).__name__}."
        )
    return value


def _dump_json(value: dict[str, Any]) -> bytes:
    try:
        text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise InvalidPayload(f"Payload is not JSON serialisable: {exc}") from exc
    return text.encode("utf-8")


def decode(token: str) -> DecodedToken:
    """
    Decode a compact token string into its components.

    Signature verification is **not** performed here.

    Raises:
        MalformedToken: If the token does not have exactly three segments,
            or a segment cannot be decoded.
    """
    if not isinstance(token, str):
        raise MalformedToken(f"Token must be a string, got {type(token).__name__}.")

    parts = token.split(".")
    if len(parts) != 3:
        raise MalformedToken(
            f"Invalid token format: expected 3 parts (header.payload.signature), "
            f"got {len(parts)}."
        )

    header = _decode_segment(parts[0], "header")
    payload = _decode_segment(parts[1], "payload")

    try:
        signature = base64url.decode(parts[2])
    except MalformedEncoding as exc:
        raise MalformedToken(f"Could not decode signature: {exc}") from exc

    return DecodedToken(
        header=header,
        payload=payload,
        signature=signature,
        signing_input=f"{parts[0]}.{parts[1]}".encode("ascii"),
    )


def encode(header: dict[str, Any], payload: dict[str, Any]) -> str:
    """Serialise header and payload and return the signing input ``h.p``.

    Raises:
        InvalidPayload: If a value cannot be written as strict JSON (for
            example a set, or NaN).
    """
    return f"{base64url.encode(_dump_json(header))}.{base64url.encode(_dump_json(payload))}"


def assemble(signing_input: str, signature: bytes) -> str:
    """Append the base64url signature segment to a signing input."""
    return f"{signing_input}.{base64url.encode(signature)}"


def parse_payload(text: str) -> dict[str, Any]:
    """
    Parse operator-supplied payload text.

    Raises:
        InvalidPayload: If the text is not JSON or not a JSON object.
    """
    try:
        value = _loads(text)
    except (TypeError, ValueError, RecursionError) as exc:
        raise InvalidPayload(f"Invalid JSON payload: {exc}") from exc

    if not isinstance(value, dict):
        raise InvalidPayload(f"Payload must be a JSON object, got {type(value).__name__}.")
    return value
