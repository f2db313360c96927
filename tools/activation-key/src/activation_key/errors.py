"""
Exception hierarchy for activation key encoding, signing, and key handling.

The verify path never raises these to its caller: every failure there is
folded into a ``ValidationResult``.
"""

from __future__ import annotations

__all__ = [
    "ActivationKeyError",
    "MalformedEncoding",
    "MalformedToken",
    "UnsupportedAlgorithm",
    "SigningKeyUnavailable",
    "InvalidPayload",
    "InvalidKeyMaterial",
]


class ActivationKeyError(Exception):
    """Base class for all activation key errors."""


class MalformedEncoding(ActivationKeyError):
    """Raised when a segment is not valid unpadded base64url."""


class MalformedToken(ActivationKeyError):
    """Raised when a token does not have the header.payload.signature shape."""


class UnsupportedAlgorithm(ActivationKeyError):
    """Raised for an algorithm outside ES256/ES512, or one that does not fit the key."""


class SigningKeyUnavailable(ActivationKeyError):
    """Raised when a sign request is made with a key pair that has no private key."""


class InvalidPayload(ActivationKeyError):
    """Raised when the payload is not a JSON object."""


class InvalidKeyMaterial(ActivationKeyError):
    """Raised when PEM text cannot be loaded as an elliptic-curve key."""
