"""
The closed set of signing algorithms an activation key may use.
"""

from __future__ import annotations

from enum import Enum

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from .errors import UnsupportedAlgorithm

__all__ = ["Algorithm", "SUPPORTED_ALGORITHMS", "DEFAULT_ALGORITHM"]


class Algorithm(str, Enum):
    """ECDSA algorithm identifiers as they appear in the token header."""

    ES256 = "ES256"
    ES512 = "ES512"

    @classmethod
    def parse(cls, value: object) -> "Algorithm":
        """Return the member for *value*, or raise UnsupportedAlgorithm."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value == value:
                    return member
        raise UnsupportedAlgorithm(f"Unsupported algorithm: {value!r}")

    @property
    def curve(self) -> ec.EllipticCurve:
        if self is Algorithm.ES256:
            return ec.SECP256R1()
        return ec.SECP521R1()

    @property
    def hash_algorithm(self) -> hashes.HashAlgorithm:
        if self is Algorithm.ES256:
            return hashes.SHA256()
        return hashes.SHA512()

    @property
    def coordinate_size(self) -> int:
        """Byte width of each of R and S in the raw signature."""
        return (self.curve.key_size + 7) // 8

    @property
    def signature_size(self) -> int:
        """Byte length of the raw R||S signature (64 for ES256, 132 for ES512)."""
        return 2 * self.coordinate_size

    @classmethod
    def for_curve(cls, curve: ec.EllipticCurve) -> "Algorithm":
        """Map an elliptic curve back to the algorithm that uses it."""
        for member in cls:
            if member.curve.name == curve.name:
                return member
        raise UnsupportedAlgorithm(f"No supported algorithm for curve {curve.name}")

    def __str__(self) -> str:
        return self.value


SUPPORTED_ALGORITHMS = tuple(Algorithm)

DEFAULT_ALGORITHM = Algorithm.ES512
