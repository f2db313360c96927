import json
from datetime import datetime, timezone

import pytest

from activation_key import base64url, codec
from activation_key.algorithms import Algorithm
from activation_key.keys import KeyPair, public_only
from activation_key.samples import EXAMPLE_ACTIVATION_KEY
from activation_key.signer import sign
from activation_key.verifier import INVALID_SIGNATURE, NO_KEY_SELECTED, ValidationResult, verify

EXPIRY = datetime(2030, 1, 1, tzinfo=timezone.utc)


def _resign_segments(token: str, header=None, payload=None) -> str:
    """Replace header and/or payload but keep the original signature."""
    decoded = codec.decode(token)
    signing_input = codec.encode(
        header if header is not None else decoded.header,
        payload if payload is not None else decoded.payload,
    )
    return codec.assemble(signing_input, decoded.signature)


def test_round_trip(signing_pair) -> None:
    algorithm, pair = signing_pair
    token = sign({"sub": "user-1", "seats": 5}, algorithm, pair, EXPIRY)
    result = verify(token, pair)
    assert result == ValidationResult(True)
    assert result.error is None


def test_verify_only_pair_verifies(signing_pair) -> None:
    algorithm, pair = signing_pair
    token = sign({"sub": "user-1"}, algorithm, pair, EXPIRY)
    assert verify(token, public_only(pair)).is_valid is True


def test_cross_key_rejected(es256_pair, es256_other_pair, es512_pair, es512_other_pair) -> None:
    token = sign({"sub": "user-1"}, Algorithm.ES256, es256_pair, EXPIRY)
    result = verify(token, es256_other_pair)
    assert result == ValidationResult(False, INVALID_SIGNATURE)
    assert result.reason == "bad_signature"

    token = sign({"sub": "user-1"}, Algorithm.ES512, es512_pair, EXPIRY)
    assert verify(token, es512_other_pair).is_valid is False


def test_signature_bit_flips_rejected(es256_pair) -> None:
    token = sign({"sub": "user-1"}, Algorithm.ES256, es256_pair, EXPIRY)
    decoded = codec.decode(token)
    signing_input = token.rsplit(".", 1)[0]

    for byte_index in range(len(decoded.signature)):
        for bit in (0, 7):
            sig = bytearray(decoded.signature)
            sig[byte_index] ^= 1 << bit
            tampered = codec.assemble(signing_input, bytes(sig))
            assert verify(tampered, es256_pair).is_valid is False


def test_payload_bit_flips_rejected(es256_pair) -> None:
    token = sign({"sub": "user-1", "seats": 5}, Algorithm.ES256, es256_pair, EXPIRY)
    header_seg, payload_seg, sig_seg = token.split(".")
    raw = base64url.decode(payload_seg)

    checked = 0
    for index in range(len(raw)):
        flipped = bytearray(raw)
        flipped[index] ^= 0x01
        try:
            json.loads(bytes(flipped).decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            continue
        tampered = f"{header_seg}.{base64url.encode(bytes(flipped))}.{sig_seg}"
        assert verify(tampered, es256_pair).is_valid is False
        checked += 1
    assert checked > 0


def test_modified_claims_rejected(es512_pair) -> None:
    token = sign({"sub": "user-1", "isTrial": True}, Algorithm.ES512, es512_pair, EXPIRY)
    tampered = _resign_segments(token, payload={"sub": "user-1", "isTrial": False,
                                                "exp": codec.decode(token).payload["exp"]})
    assert verify(tampered, es512_pair).is_valid is False


def test_reserialised_signing_input_is_not_used(es256_pair) -> None:
    # Same claims, different JSON bytes: the signature no longer matches.
    token = sign({"sub": "user-1"}, Algorithm.ES256, es256_pair, EXPIRY)
    header_seg, payload_seg, sig_seg = token.split(".")
    spaced = base64url.encode(json.dumps(codec.decode(token).payload, indent=1).encode("utf-8"))
    assert verify(f"{header_seg}.{spaced}.{sig_seg}", es256_pair).is_valid is False


@pytest.mark.parametrize("token", ["", "garbage", "a.b", "a.b.c.d", EXAMPLE_ACTIVATION_KEY, None])
def test_no_key_selected(token) -> None:
    result = verify(token, None)
    assert result == ValidationResult(False, NO_KEY_SELECTED)
    assert result.error == "No key selected"


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c", "a.b.c.d", "....", None, 12345])
def test_malformed_tokens_are_invalid_signature(es256_pair, token) -> None:
    result = verify(token, es256_pair)
    assert result.is_valid is False
    assert result.error == "Invalid signature"


@pytest.mark.parametrize("alg", ["HS256", "none", "RS256", None, 256, "es256"])
def test_unsupported_header_algorithm(es256_pair, alg) -> None:
    token = sign({"sub": "user-1"}, Algorithm.ES256, es256_pair, EXPIRY)
    tampered = _resign_segments(token, header={"alg": alg, "typ": "JWT"})
    result = verify(tampered, es256_pair)
    assert result == ValidationResult(False, INVALID_SIGNATURE)
    assert result.reason.startswith("unsupported_algorithm")


def test_header_algorithm_swap_rejected_before_crypto(es256_pair) -> None:
    token = sign({"sub": "user-1"}, Algorithm.ES256, es256_pair, EXPIRY)
    tampered = _resign_segments(token, header={"alg": "ES512", "typ": "JWT"})
    result = verify(tampered, es256_pair)
    assert result.is_valid is False
    assert result.reason.startswith("signature_length")


def test_curve_mismatch_rejected(es256_pair, es512_pair) -> None:
    token = sign({"sub": "user-1"}, Algorithm.ES512, es512_pair, EXPIRY)
    result = verify(token, es256_pair)
    assert result == ValidationResult(False, INVALID_SIGNATURE)
    assert result.reason.startswith("curve_mismatch")


def test_expected_algorithm_pin(es256_pair) -> None:
    token = sign({"sub": "user-1"}, Algorithm.ES256, es256_pair, EXPIRY)
    assert verify(token, es256_pair, expected_algorithm="ES256").is_valid is True
    assert verify(token, es256_pair, expected_algorithm=Algorithm.ES256).is_valid is True

    result = verify(token, es256_pair, expected_algorithm=Algorithm.ES512)
    assert result.is_valid is False
    assert result.reason.startswith("algorithm_mismatch")

    assert verify(token, es256_pair, expected_algorithm="HS256").is_valid is False


def test_unusable_public_key(es256_pair) -> None:
    token = sign({"sub": "user-1"}, Algorithm.ES256, es256_pair, EXPIRY)
    broken = KeyPair(id="broken", name="Broken", public_key="not a pem")
    result = verify(token, broken)
    assert result == ValidationResult(False, INVALID_SIGNATURE)
    assert result.reason.startswith("key_unusable")


def test_example_key_does_not_verify_with_local_key(es512_pair) -> None:
    assert verify(EXAMPLE_ACTIVATION_KEY, es512_pair).is_valid is False


def test_reason_hidden_from_repr(es256_pair) -> None:
    result = verify("a.b", es256_pair)
    assert "malformed" not in repr(result)


@pytest.mark.parametrize(
    "payload_text",
    ['{"exp":' + "1" * 5000 + "}", "[" * 100000 + "]" * 100000, '{"exp": NaN}'],
)
def test_hostile_payload_is_invalid_not_raised(es256_pair, payload_text: str) -> None:
    header_seg = base64url.encode(b'{"alg":"ES256","typ":"JWT"}')
    token = f"{header_seg}.{base64url.encode(payload_text.encode('ascii'))}.{'A' * 86}"
    result = verify(token, es256_pair)
    assert result == ValidationResult(False, INVALID_SIGNATURE)
    assert result.reason.startswith("malformed_token")
