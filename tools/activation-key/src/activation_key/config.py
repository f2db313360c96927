"""
Configuration loading, validation, and typed models.

Supports:
  - YAML config file (signing defaults and key pair locations)
  - Environment variable overrides (ACTIVATION_KEY_CONFIG, ACTIVATION_KEY_DEFAULT_KEY)
  - CLI argument merging via merge_cli_overrides()
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path

import yaml

from .algorithms import DEFAULT_ALGORITHM, Algorithm
from .errors import InvalidKeyMaterial, UnsupportedAlgorithm
from .keys import KeyPair, KeyRing, load_private_key, load_public_key

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "PROJECT_ROOT",
    "ENV_CONFIG_PATH",
    "ENV_DEFAULT_KEY",
    "ConfigError",
    "SigningConfig",
    "KeyEntry",
    "KeysConfig",
    "AppConfig",
    "resolve_config_path",
    "load_config",
    "load_key_ring",
    "key_directory",
    "merge_cli_overrides",
]

logger = logging.getLogger(__name__)

# Project root directory (the tool directory, two levels up from src/activation_key)
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "config.yaml")

# Environment variable names
ENV_CONFIG_PATH = "ACTIVATION_KEY_CONFIG"
ENV_DEFAULT_KEY = "ACTIVATION_KEY_DEFAULT_KEY"


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


# ---------------------------------------------------------------------------
# Typed configuration models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SigningConfig:
    algorithm: Algorithm = DEFAULT_ALGORITHM
    validity_days: int = 365


@dataclass(frozen=True)
class KeyEntry:
    """Location of one key pair on disk."""

    id: str
    public_key: str
    name: str = ""
    private_key: str = ""


@dataclass(frozen=True)
class KeysConfig:
    directory: str = "keys"
    default: str | None = None
    pairs: tuple[KeyEntry, ...] = ()


@dataclass(frozen=True)
class AppConfig:
    signing: SigningConfig = field(default_factory=SigningConfig)
    keys: KeysConfig = field(default_factory=KeysConfig)
    verbose: bool = False


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def resolve_config_path(cli_path: str | None) -> str:
    """CLI --config wins, then ACTIVATION_KEY_CONFIG, then the default path."""
    return cli_path or os.environ.get(ENV_CONFIG_PATH) or DEFAULT_CONFIG_PATH


def _parse_signing(raw: dict) -> SigningConfig:
    section = raw.get("signing") or {}
    if not isinstance(section, dict):
        raise ConfigError("'signing' must be a mapping")

    try:
        algorithm = Algorithm.parse(section.get("algorithm", DEFAULT_ALGORITHM.value))
    except UnsupportedAlgorithm as e:
        raise ConfigError(f"signing.algorithm: {e}") from e

    try:
        validity_days = int(section.get("validity_days", 365))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"signing.validity_days must be an integer: {e}") from e
    if validity_days <= 0:
        raise ConfigError("signing.validity_days must be positive")

    return SigningConfig(algorithm=algorithm, validity_days=validity_days)


def _parse_keys(raw: dict) -> KeysConfig:
    section = raw.get("keys") or {}
    if not isinstance(section, dict):
        raise ConfigError("'keys' must be a mapping")

    pairs_raw = section.get("pairs") or []
    if not isinstance(pairs_raw, list):
        raise ConfigError("keys.pairs must be a list")

    entries: list[KeyEntry] = []
    seen: set[str] = set()
    for idx, item in enumerate(pairs_raw):
        if not isinstance(item, dict):
            raise ConfigError(f"keys.pairs[{idx}] must be a mapping")
        key_id = str(item.get("id", "") or "")
        public_key = str(item.get("public_key", "") or "")
        if not key_id or not public_key:
            raise ConfigError(f"keys.pairs[{idx}] needs both 'id' and 'public_key'")
        if key_id in seen:
            raise ConfigError(f"Duplicate key pair id in config: {key_id!r}")
        seen.add(key_id)
        entries.append(KeyEntry(
            id=key_id,
            public_key=public_key,
            name=str(item.get("name", "") or key_id),
            private_key=str(item.get("private_key", "") or ""),
        ))

    default = os.environ.get(ENV_DEFAULT_KEY) or section.get("default") or None

    return KeysConfig(
        directory=str(section.get("directory", "keys") or "keys"),
        default=default,
        pairs=tuple(entries),
    )


def load_config(config_path: str) -> AppConfig:
    """Load and validate the YAML configuration file.

    Raises:
        ConfigError: If the config file is missing or contains invalid values.
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(
            f"Config file not found: {config_path}\n"
            "Copy config/config.yaml.example to config/config.yaml and fill in your values."
        )

    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Invalid config file format: expected YAML mapping, got {type(raw).__name__}")

    config = AppConfig(signing=_parse_signing(raw), keys=_parse_keys(raw))

    logger.debug("Config loaded from %s (%d key pair(s))", config_path, len(config.keys.pairs))
    return config


def _resolve(base_dir: str, path: str) -> str:
    """Resolve a potentially relative path against base_dir."""
    if os.path.isabs(path):
        return path
    return os.path.join(base_dir, path)


def key_directory(cfg: AppConfig, base_dir: str = PROJECT_ROOT) -> str:
    """Absolute path of the configured key directory."""
    return _resolve(base_dir, cfg.keys.directory)


def _file_time(path: str) -> datetime:
    return datetime.fromtimestamp(os.path.getmtime(path), tz=timezone.utc)


def _read_pem(path: str, key_id: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return fh.read()
    except OSError as e:
        raise ConfigError(f"Cannot read key file for {key_id!r}: {path} ({e.strerror})") from e


def load_key_ring(cfg: AppConfig, base_dir: str = PROJECT_ROOT) -> KeyRing:
    """Read every configured key pair from disk into a new KeyRing.

    Key file paths are relative to ``keys.directory``, which in turn is
    relative to *base_dir*.

    Raises:
        ConfigError: If a key file is missing or does not hold a usable EC key.
    """
    key_dir = key_directory(cfg, base_dir)
    ring = KeyRing(default_id=cfg.keys.default)
    for entry in cfg.keys.pairs:
        public_path = _resolve(key_dir, entry.public_key)
        pair = KeyPair(
            id=entry.id,
            name=entry.name or entry.id,
            public_key=_read_pem(public_path, entry.id),
            private_key=_read_pem(_resolve(key_dir, entry.private_key), entry.id) if entry.private_key else None,
            created_at=_file_time(public_path),
        )
        try:
            load_public_key(pair)
            if pair.private_key:
                load_private_key(pair)
        except InvalidKeyMaterial as e:
            raise ConfigError(str(e)) from e
        ring.add(pair)

    if cfg.keys.default and cfg.keys.default not in ring:
        logger.warning("Default key %r is not among the configured key pairs", cfg.keys.default)

    return ring


# ---------------------------------------------------------------------------
# CLI override merging
# ---------------------------------------------------------------------------

def merge_cli_overrides(cfg: AppConfig, args) -> AppConfig:
    """Merge CLI arguments over loaded config, returning a new AppConfig.

    ``args`` may carry ``algorithm``, ``key`` and ``verbose`` attributes;
    missing or None attributes keep the configured value.

    Raises:
        ConfigError: If a merged value fails validation.
    """
    signing = cfg.signing
    algorithm = getattr(args, "algorithm", None)
    if algorithm is not None:
        try:
            signing = replace(signing, algorithm=Algorithm.parse(algorithm))
        except UnsupportedAlgorithm as e:
            raise ConfigError(str(e)) from e

    keys = cfg.keys
    key_id = getattr(args, "key", None)
    if key_id is not None:
        keys = replace(keys, default=key_id)

    return AppConfig(
        signing=signing,
        keys=keys,
        verbose=bool(getattr(args, "verbose", False)),
    )
