"""Activation key codec, signer, and verifier (ES256 / ES512 compact tokens)."""

from .algorithms import SUPPORTED_ALGORITHMS, Algorithm
from .codec import DecodedToken, decode
from .errors import (
    ActivationKeyError,
    InvalidKeyMaterial,
    InvalidPayload,
    MalformedEncoding,
    MalformedToken,
    SigningKeyUnavailable,
    UnsupportedAlgorithm,
)
from .keys import KeyPair, KeyRing, generate_key_pair
from .metadata import ActivationKeyMetadata
from .metadata import extract as extract_metadata
from .signer import sign
from .verifier import ValidationResult, verify

__version__ = "1.0.0"

__all__ = [
    "Algorithm",
    "SUPPORTED_ALGORITHMS",
    "DecodedToken",
    "decode",
    "extract_metadata",
    "sign",
    "verify",
    "KeyPair",
    "KeyRing",
    "generate_key_pair",
    "ActivationKeyMetadata",
    "ValidationResult",
    "ActivationKeyError",
    "MalformedEncoding",
    "MalformedToken",
    "UnsupportedAlgorithm",
    "SigningKeyUnavailable",
    "InvalidPayload",
    "InvalidKeyMaterial",
]
