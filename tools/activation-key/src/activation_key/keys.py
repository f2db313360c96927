"""
Key pair values and the helpers that turn them into usable EC keys.

A ``KeyPair`` only carries PEM text and identifying metadata; it has no
behaviour of its own.  The collection of pairs (``KeyRing``) belongs to the
caller and is passed explicitly into sign/verify calls.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Iterator, Union

from cryptography.exceptions import UnsupportedAlgorithm as CryptoUnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .algorithms import Algorithm
from .errors import InvalidKeyMaterial, UnsupportedAlgorithm

__all__ = [
    "KeyPair",
    "KeyRing",
    "generate_key_pair",
    "load_private_key",
    "load_public_key",
    "key_algorithm",
    "public_only",
    "write_key_pair",
]

logger = logging.getLogger(__name__)

ECKey = Union[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey]


@dataclass(frozen=True)
class KeyPair:
    """An asymmetric key pair; ``private_key`` is None for verify-only pairs."""

    id: str
    name: str
    public_key: str
    private_key: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def can_sign(self) -> bool:
        return bool(self.private_key)

    def __repr__(self) -> str:
        """Keep private key material out of repr output."""
        return (
            f"KeyPair(id={self.id!r}, name={self.name!r}, "
            f"private_key={'***redacted***' if self.private_key else None}, "
            f"created_at={self.created_at.isoformat()!r})"
        )


class KeyRing:
    """Ordered, caller-owned collection of key pairs, indexed by id."""

    def __init__(self, pairs: Iterable[KeyPair] = (), default_id: str | None = None) -> None:
        self._pairs: dict[str, KeyPair] = {}
        self.default_id = default_id
        for pair in pairs:
            self.add(pair)

    def add(self, pair: KeyPair) -> None:
        if pair.id in self._pairs:
            raise ValueError(f"Duplicate key pair id: {pair.id!r}")
        self._pairs[pair.id] = pair

    def get(self, key_id: str | None) -> KeyPair | None:
        if key_id is None:
            return None
        return self._pairs.get(key_id)

    def default(self) -> KeyPair | None:
        """Return the configured default pair, else the first one added."""
        if self.default_id is not None and self.default_id in self._pairs:
            return self._pairs[self.default_id]
        return next(iter(self._pairs.values()), None)

    def __iter__(self) -> Iterator[KeyPair]:
        return iter(self._pairs.values())

    def __len__(self) -> int:
        return len(self._pairs)

    def __contains__(self, key_id: object) -> bool:
        return key_id in self._pairs


def _check_ec_key(key: object, label: str) -> ECKey:
    if not isinstance(key, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
        raise InvalidKeyMaterial(f"{label} is not an elliptic-curve key.")
    try:
        Algorithm.for_curve(key.curve)
    except UnsupportedAlgorithm as exc:
        raise InvalidKeyMaterial(f"{label}: {exc}") from exc
    return key


def load_private_key(pair: KeyPair) -> ec.EllipticCurvePrivateKey:
    """
    Load the private key of *pair*.

    Raises:
        InvalidKeyMaterial: If the PEM is missing, unreadable, or not a
            supported EC key.
    """
    if not pair.private_key:
        raise InvalidKeyMaterial(f"Key pair {pair.id!r} has no private key.")
    try:
        key = serialization.load_pem_private_key(pair.private_key.encode("utf-8"), password=None)
    except (ValueError, TypeError, CryptoUnsupportedAlgorithm) as exc:
        raise InvalidKeyMaterial(f"Could not load private key {pair.id!r}: {exc}") from exc
    return _check_ec_key(key, f"Private key {pair.id!r}")


def load_public_key(pair: KeyPair) -> ec.EllipticCurvePublicKey:
    """
    Load the public key of *pair*.

    Raises:
        InvalidKeyMaterial: If the PEM is unreadable or not a supported EC key.
    """
    try:
        key = serialization.load_pem_public_key(pair.public_key.encode("utf-8"))
    except (ValueError, TypeError, AttributeError, CryptoUnsupportedAlgorithm) as exc:
        raise InvalidKeyMaterial(f"Could not load public key {pair.id!r}: {exc}") from exc
    return _check_ec_key(key, f"Public key {pair.id!r}")


def key_algorithm(key: ECKey) -> Algorithm:
    """Return the algorithm matching the curve of an EC key."""
    return Algorithm.for_curve(key.curve)


def generate_key_pair(
    algorithm: Algorithm | str,
    name: str,
    key_id: str | None = None,
) -> KeyPair:
    """Generate a fresh EC key pair on the curve of *algorithm*."""
    algorithm = Algorithm.parse(algorithm)
    private_key = ec.generate_private_key(algorithm.curve)

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    public_pem = (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("utf-8")
    )

    pair = KeyPair(
        id=key_id or uuid.uuid4().hex,
        name=name,
        public_key=public_pem,
        private_key=private_pem,
    )
    logger.debug("Generated %s key pair %s (%s)", algorithm, pair.id, name)
    return pair


def public_only(pair: KeyPair) -> KeyPair:
    """Return a copy of *pair* without its private key."""
    return dataclasses.replace(pair, private_key=None)


def write_key_pair(pair: KeyPair, directory: str) -> dict[str, str]:
    """
    Write ``<id>.key`` (if present) and ``<id>.pub`` into *directory*.

    Returns a dict with the written paths: {"public": ..., "private": ...}.
    Existing files are never overwritten.
    """
    os.makedirs(directory, exist_ok=True)
    paths = {"public": os.path.join(directory, f"{pair.id}.pub")}
    if pair.private_key:
        paths["private"] = os.path.join(directory, f"{pair.id}.key")

    for path in paths.values():
        if os.path.exists(path):
            raise FileExistsError(f"Refusing to overwrite existing key file: {path}")

    if pair.private_key:
        fd = os.open(paths["private"], os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(pair.private_key)

    with open(paths["public"], "w", encoding="utf-8") as fh:
        fh.write(pair.public_key)

    logger.debug("Wrote key pair %s to %s", pair.id, directory)
    return paths
