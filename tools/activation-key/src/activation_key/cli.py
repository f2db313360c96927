"""
CLI entry point for the activation-key tool.

Commands:
    decode  — show header, payload, signature and metadata of a token
    sign    — sign a JSON payload (or re-sign an existing token's payload)
    verify  — check a token's signature against a configured key pair
    keygen  — generate a new ES256 / ES512 key pair
    keys    — list configured key pairs
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime, timedelta, timezone

from . import codec, metadata, signer, verifier
from .algorithms import Algorithm
from .config import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    ConfigError,
    key_directory,
    load_config,
    load_key_ring,
    merge_cli_overrides,
    resolve_config_path,
)
from .errors import ActivationKeyError, InvalidKeyMaterial, SigningKeyUnavailable, UnsupportedAlgorithm
from .keys import KeyRing, generate_key_pair, key_algorithm, load_public_key, write_key_pair
from .logging_setup import setup_logging
from .samples import EXAMPLE_ACTIVATION_KEY

__all__ = ["main"]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Output formatting
# ---------------------------------------------------------------------------

def _print_json(label: str, data: dict) -> None:
    """Print a labelled JSON section."""
    print(f"\n{label}:")
    print(json.dumps(data, indent=4, ensure_ascii=False))


def _fmt_time(value: datetime | None) -> str:
    return value.isoformat() if value is not None else "-"


def _print_metadata(meta: metadata.ActivationKeyMetadata | None) -> None:
    print("\nMetadata:")
    if meta is None:
        print("  (unavailable)")
        return
    print(f"  Algorithm:  {meta.algorithm.value if meta.algorithm else '-'}")
    print(f"  Issued at:  {_fmt_time(meta.issued_at)}")
    print(f"  Expires at: {_fmt_time(meta.expires_at)}")


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------

def _read_token(args: argparse.Namespace) -> str:
    """Resolve the token from --example, --stdin, the argument, or a prompt."""
    if getattr(args, "example", False):
        return EXAMPLE_ACTIVATION_KEY
    if getattr(args, "stdin", False):
        token = sys.stdin.read().strip()
        if not token:
            raise ActivationKeyError("No token received on stdin.")
        return token
    if args.token:
        return args.token.strip()
    return input("Please enter your activation key: ").strip()


def _read_payload(args: argparse.Namespace) -> dict:
    if args.payload_file:
        if args.payload_file == "-":
            text = sys.stdin.read()
        else:
            with open(args.payload_file, encoding="utf-8") as fh:
                text = fh.read()
    else:
        text = args.payload if args.payload is not None else "{}"
    return codec.parse_payload(text)


def _parse_expiry(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    try:
        moment = datetime.fromisoformat(value)
    except ValueError as exc:
        raise ActivationKeyError(f"Invalid --expires value {value!r}: {exc}") from exc
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _load_settings(args: argparse.Namespace) -> AppConfig:
    """Load the config file; a missing file at the default location means defaults."""
    path = resolve_config_path(args.config)
    if path == DEFAULT_CONFIG_PATH and not os.path.exists(path):
        logger.debug("No config at %s, using defaults", path)
        cfg = AppConfig()
    else:
        cfg = load_config(path)
    return merge_cli_overrides(cfg, args)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_decode(args: argparse.Namespace, cfg: AppConfig, ring: KeyRing) -> int:
    token = _read_token(args)
    result = codec.decode(token)
    _print_json("Header", result.header)
    _print_json("Payload", result.payload)
    print(f"\nSignature (base64url encoded):\n{result.signature_b64}")
    _print_metadata(metadata.extract(token))
    return 0


def cmd_sign(args: argparse.Namespace, cfg: AppConfig, ring: KeyRing) -> int:
    algorithm = cfg.signing.algorithm
    if args.from_token:
        decoded = codec.decode(args.from_token.strip())
        payload = decoded.payload
        if args.algorithm is None:
            try:
                algorithm = Algorithm.parse(decoded.header.get("alg"))
            except UnsupportedAlgorithm:
                logger.warning("Token algorithm not supported, signing with %s", algorithm)
    else:
        payload = _read_payload(args)

    expiry = None
    if args.expires:
        expiry = _parse_expiry(args.expires)
    elif args.days is not None:
        expiry = datetime.now(timezone.utc) + timedelta(days=args.days)
    elif "exp" not in payload:
        expiry = datetime.now(timezone.utc) + timedelta(days=cfg.signing.validity_days)

    key = ring.get(cfg.keys.default) if cfg.keys.default else ring.default()
    if key is None:
        raise SigningKeyUnavailable(
            f"Key pair {cfg.keys.default!r} not found." if cfg.keys.default
            else "No key pairs configured. Run 'keygen' first."
        )
    token = signer.sign(payload, algorithm, key, expiry)
    print(token)
    return 0


def cmd_verify(args: argparse.Namespace, cfg: AppConfig, ring: KeyRing) -> int:
    token = _read_token(args)
    key = ring.get(cfg.keys.default) if cfg.keys.default else ring.default()
    result = verifier.verify(token, key, expected_algorithm=args.algorithm)
    if result.is_valid:
        print(f"Valid (key: {key.id})")
        return 0
    print(f"Error: {result.error}")
    return 1


def cmd_keygen(args: argparse.Namespace, cfg: AppConfig, ring: KeyRing) -> int:
    pair = generate_key_pair(cfg.signing.algorithm, args.name, key_id=args.id)
    out_dir = args.out or key_directory(cfg)
    paths = write_key_pair(pair, out_dir)
    print(f"Generated {cfg.signing.algorithm} key pair {pair.id!r} ({pair.name})")
    print(f"  Private key: {paths['private']}")
    print(f"  Public key:  {paths['public']}")
    print("\nAdd it to config.yaml under keys.pairs:")
    print(f"  - id: {pair.id}")
    print(f"    name: {pair.name}")
    print(f"    private_key: {pair.id}.key")
    print(f"    public_key: {pair.id}.pub")
    return 0


def cmd_keys(args: argparse.Namespace, cfg: AppConfig, ring: KeyRing) -> int:
    if not len(ring):
        print("No key pairs configured.")
        return 0
    default = ring.default()
    for pair in ring:
        try:
            alg = key_algorithm(load_public_key(pair)).value
        except InvalidKeyMaterial:
            alg = "?"
        marker = "*" if default is not None and pair.id == default.id else " "
        usage = "sign" if pair.can_sign else "verify-only"
        print(f"{marker} {pair.id:<24} {alg:<6} {usage:<12} {pair.name}")
    return 0


COMMANDS = {
    "decode": cmd_decode,
    "sign": cmd_sign,
    "verify": cmd_verify,
    "keygen": cmd_keygen,
    "keys": cmd_keys,
}

# Commands that read the configured key pairs; decode and keygen work without them.
KEY_COMMANDS = frozenset({"sign", "verify", "keys"})


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _add_token_source(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "token",
        nargs="?",
        default=None,
        help="Activation key string (prompts interactively if omitted)",
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        default=False,
        help="Read the activation key from stdin (for piping)",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    algorithms = [a.value for a in Algorithm]

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML config file (default: config/config.yaml, "
             "or $ACTIVATION_KEY_CONFIG)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        default=False,
        help="Enable verbose (debug) logging on the console",
    )
    common.add_argument(
        "--log-dir",
        default=None,
        metavar="DIR",
        help="Directory for the debug log file (default: logs/)",
    )

    parser = argparse.ArgumentParser(
        prog="activation-key",
        allow_abbrev=False,
        description="Create, decode, and validate activation keys (ES256 / ES512 signed tokens).",
        epilog="Examples:\n"
               "  %(prog)s decode --example\n"
               "  %(prog)s keygen 'Release key' --algorithm ES512 --id release\n"
               "  %(prog)s sign --payload '{\"sub\": \"user-1\"}' --key release --days 30\n"
               "  %(prog)s verify <token> --key release\n",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_decode = sub.add_parser("decode", parents=[common], help="Decode a token without verifying it")
    _add_token_source(p_decode)
    p_decode.add_argument(
        "--example",
        action="store_true",
        default=False,
        help="Decode the bundled sample activation key",
    )

    p_sign = sub.add_parser("sign", parents=[common], help="Sign a payload into a new token")
    src = p_sign.add_mutually_exclusive_group()
    src.add_argument("--payload", "-p", default=None, help="Payload as a JSON object (default: {})")
    src.add_argument("--payload-file", "-f", default=None, metavar="FILE",
                     help="Read the payload JSON from FILE ('-' for stdin)")
    src.add_argument("--from-token", default=None, metavar="TOKEN",
                     help="Re-sign the payload of an existing activation key")
    p_sign.add_argument("--algorithm", "-a", choices=algorithms, default=None,
                        help="Signing algorithm (default: from config, or the token with --from-token)")
    p_sign.add_argument("--key", "-k", default=None, help="Key pair id (default: from config)")
    exp = p_sign.add_mutually_exclusive_group()
    exp.add_argument("--expires", "-e", default=None, metavar="ISO8601",
                     help="Expiry date/time, overrides any exp in the payload")
    exp.add_argument("--days", "-d", type=int, default=None,
                     help="Expire N days from now, overrides any exp in the payload")

    p_verify = sub.add_parser("verify", parents=[common], help="Verify a token's signature")
    _add_token_source(p_verify)
    p_verify.add_argument("--key", "-k", default=None, help="Key pair id (default: from config)")
    p_verify.add_argument("--algorithm", "-a", choices=algorithms, default=None,
                          help="Only accept tokens signed with this algorithm")

    p_keygen = sub.add_parser("keygen", parents=[common], help="Generate a new key pair")
    p_keygen.add_argument("name", help="Display name for the key pair")
    p_keygen.add_argument("--algorithm", "-a", choices=algorithms, default=None,
                          help="Key algorithm (default: from config)")
    p_keygen.add_argument("--id", default=None, help="Key pair id (default: random)")
    p_keygen.add_argument("--out", "-o", default=None, metavar="DIR",
                          help="Output directory (default: keys.directory from config)")

    sub.add_parser("keys", parents=[common], help="List configured key pairs")

    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    log_path = setup_logging(verbose=args.verbose, log_dir=args.log_dir)
    logger.debug("activation-key %s (log: %s)", args.command, log_path)

    try:
        cfg = _load_settings(args)
        ring = load_key_ring(cfg) if args.command in KEY_COMMANDS else KeyRing()
        code = COMMANDS[args.command](args, cfg, ring)
    except (ActivationKeyError, ConfigError, OSError) as exc:
        logger.debug("%s failed: %s", args.command, exc)
        print(f"Error: {exc}")
        sys.exit(1)
    except (EOFError, KeyboardInterrupt):
        print()
        sys.exit(130)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
