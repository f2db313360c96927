"""
Unpadded base64url encoding used for every token segment.
"""

from __future__ import annotations

import base64
import binascii
import re

from .errors import MalformedEncoding

__all__ = ["encode", "decode"]

# Alphabet characters followed by at most two trailing '=' pad characters.
_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*(={0,2})")


def _add_base64_padding(data: str) -> str:
    """Add padding characters for base64url decoding."""
    padding = len(data) % 4
    if padding:
        data += "=" * (4 - padding)
    return data


def encode(data: bytes) -> str:
    """Encode *data* as base64url without trailing ``=`` padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def decode(text: str) -> bytes:
    """
    Decode a base64url string, with or without padding.

    Raises:
        MalformedEncoding: On characters outside the base64url alphabet,
            a length that cannot hold whole bytes, wrong padding, or
            non-zero trailing bits.
    """
    if not isinstance(text, str):
        raise MalformedEncoding(f"Expected str, got {type(text).__name__}.")

    match = _B64URL_RE.fullmatch(text)
    if match is None:
        raise MalformedEncoding("Invalid character in base64url data.")

    pad = match.group(1)
    body = text[: len(text) - len(pad)]
    if len(body) % 4 == 1:
        raise MalformedEncoding(f"Invalid base64url length: {len(body)}.")
    if pad and (len(body) + len(pad)) % 4:
        raise MalformedEncoding("Incorrect base64url padding.")

    try:
        raw = base64.urlsafe_b64decode(_add_base64_padding(body))
    except (binascii.Error, ValueError) as exc:
        raise MalformedEncoding(f"Could not decode base64url data: {exc}") from exc

    # Reject encodings that carry data in the unused low bits of the last
    # character, so every byte string has exactly one accepted text form.
    if encode(raw) != body:
        raise MalformedEncoding("Non-canonical base64url data.")

    return raw
