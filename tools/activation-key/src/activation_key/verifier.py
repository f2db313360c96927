"""
Signature verification for activation keys.

Every failure, structural or cryptographic, is reported as a
``ValidationResult`` with one generic message.  The specific cause is kept
in ``ValidationResult.reason`` for debug logging only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from . import codec
from .algorithms import Algorithm
from .errors import InvalidKeyMaterial, MalformedToken, UnsupportedAlgorithm
from .keys import KeyPair, key_algorithm, load_public_key

__all__ = ["ValidationResult", "verify", "NO_KEY_SELECTED", "INVALID_SIGNATURE"]

logger = logging.getLogger(__name__)

NO_KEY_SELECTED = "No key selected"
INVALID_SIGNATURE = "Invalid signature"


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: str | None = None
    reason: str = field(default="ok", repr=False, compare=False)


def _invalid(reason: str) -> ValidationResult:
    logger.debug("Activation key rejected: %s", reason)
    return ValidationResult(False, INVALID_SIGNATURE, reason=reason)


def verify(
    token: str,
    key: KeyPair | None,
    *,
    expected_algorithm: Algorithm | str | None = None,
) -> ValidationResult:
    """
    Check the signature of *token* against the public key of *key*.

    The header ``alg`` must name a supported algorithm, agree with
    *expected_algorithm* when one is given, and match both the curve of the
    public key and the signature length before any cryptographic check runs.
    """
    if key is None:
        return ValidationResult(False, NO_KEY_SELECTED, reason="no_key")

    try:
        decoded = codec.decode(token)
    except MalformedToken as exc:
        return _invalid(f"malformed_token: {exc}")

    try:
        algorithm = Algorithm.parse(decoded.header.get("alg"))
        if expected_algorithm is not None and algorithm is not Algorithm.parse(expected_algorithm):
            return _invalid(f"algorithm_mismatch: token={algorithm} expected={expected_algorithm}")
    except UnsupportedAlgorithm as exc:
        return _invalid(f"unsupported_algorithm: {exc}")

    if len(decoded.signature) != algorithm.signature_size:
        return _invalid(
            f"signature_length: {len(decoded.signature)} bytes for {algorithm}"
        )

    try:
        public_key = load_public_key(key)
    except InvalidKeyMaterial as exc:
        return _invalid(f"key_unusable: {exc}")

    key_alg = key_algorithm(public_key)
    if key_alg is not algorithm:
        return _invalid(f"curve_mismatch: token={algorithm} key={key_alg}")

    size = algorithm.coordinate_size
    r = int.from_bytes(decoded.signature[:size], "big")
    s = int.from_bytes(decoded.signature[size:], "big")

    try:
        public_key.verify(
            encode_dss_signature(r, s),
            decoded.signing_input,
            ec.ECDSA(algorithm.hash_algorithm),
        )
    except InvalidSignature:
        return _invalid("bad_signature")

    return ValidationResult(True)
