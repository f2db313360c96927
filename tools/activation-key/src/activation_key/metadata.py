"""
Best-effort metadata projection of an activation key (no key required).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from . import codec
from .algorithms import Algorithm
from .errors import MalformedToken, UnsupportedAlgorithm

__all__ = ["ActivationKeyMetadata", "extract"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivationKeyMetadata:
    algorithm: Algorithm | None = None
    issued_at: datetime | None = None
    expires_at: datetime | None = None


def _timestamp(value: object) -> datetime | None:
    """Convert numeric epoch seconds to an aware UTC datetime."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def extract(token: str) -> ActivationKeyMetadata | None:
    """Read ``alg``, ``iat`` and ``exp``; return None if the token cannot be decoded."""
    try:
        decoded = codec.decode(token)
    except MalformedToken as exc:
        logger.debug("No metadata: %s", exc)
        return None

    try:
        algorithm = Algorithm.parse(decoded.header.get("alg"))
    except UnsupportedAlgorithm:
        algorithm = None

    return ActivationKeyMetadata(
        algorithm=algorithm,
        issued_at=_timestamp(decoded.payload.get("iat")),
        expires_at=_timestamp(decoded.payload.get("exp")),
    )
