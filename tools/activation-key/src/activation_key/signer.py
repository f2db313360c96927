"""
Produce signed activation keys.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature

from . import codec
from .algorithms import Algorithm
from .errors import InvalidPayload, SigningKeyUnavailable, UnsupportedAlgorithm
from .keys import KeyPair, key_algorithm, load_private_key

__all__ = ["TOKEN_TYPE", "sign", "epoch_seconds"]

logger = logging.getLogger(__name__)

TOKEN_TYPE = "JWT"


def epoch_seconds(moment: datetime) -> int:
    """Whole epoch seconds for *moment*; naive datetimes are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return math.floor(moment.timestamp())


def _raw_signature(der: bytes, algorithm: Algorithm) -> bytes:
    """Convert a DER ECDSA signature into fixed-width R||S."""
    r, s = decode_dss_signature(der)
    size = algorithm.coordinate_size
    return r.to_bytes(size, "big") + s.to_bytes(size, "big")


def sign(
    payload: dict[str, Any],
    algorithm: Algorithm | str,
    key: KeyPair | None,
    expiry: datetime | None = None,
) -> str:
    """
    Sign *payload* with the private key of *key* and return a compact token.

    ``exp`` is overwritten when *expiry* is given.  Without *expiry* an
    existing ``exp`` is kept, and a payload with no ``exp`` at all gets the
    current time.  Every other claim is passed through unchanged.

    Raises:
        SigningKeyUnavailable: If *key* is missing or has no private key.
        UnsupportedAlgorithm: If *algorithm* is not ES256/ES512 or does not
            match the curve of the private key.
        InvalidPayload: If *payload* is not a dict.
        InvalidKeyMaterial: If the private key PEM cannot be loaded.
    """
    if key is None or not key.can_sign:
        raise SigningKeyUnavailable(
            "No private key available for signing"
            + (f" (key pair {key.id!r} is verify-only)." if key is not None else ".")
        )

    algorithm = Algorithm.parse(algorithm)

    if not isinstance(payload, dict):
        raise InvalidPayload(f"Payload must be a JSON object, got {type(payload).__name__}.")

    private_key = load_private_key(key)
    key_alg = key_algorithm(private_key)
    if key_alg is not algorithm:
        raise UnsupportedAlgorithm(
            f"Key pair {key.id!r} is a {key_alg} key and cannot sign with {algorithm}."
        )

    claims = dict(payload)
    if expiry is not None:
        claims["exp"] = epoch_seconds(expiry)
    elif "exp" not in claims:
        claims["exp"] = epoch_seconds(datetime.now(timezone.utc))

    header = {"alg": algorithm.value, "typ": TOKEN_TYPE}
    signing_input = codec.encode(header, claims)

    der = private_key.sign(signing_input.encode("ascii"), ec.ECDSA(algorithm.hash_algorithm))
    token = codec.assemble(signing_input, _raw_signature(der, algorithm))

    logger.debug("Signed %s activation key with key pair %s", algorithm, key.id)
    return token
