import pytest

from activation_key import base64url
from activation_key.errors import MalformedEncoding


def test_encode_is_unpadded_urlsafe() -> None:
    assert base64url.encode(b"\xfb\xff") == "-_8"
    assert base64url.encode(b"a") == "YQ"
    assert base64url.encode(b"") == ""


def test_decode_accepts_padded_and_unpadded() -> None:
    assert base64url.decode("YQ") == b"a"
    assert base64url.decode("YQ==") == b"a"
    assert base64url.decode("YWI") == b"ab"
    assert base64url.decode("YWI=") == b"ab"
    assert base64url.decode("-_8") == b"\xfb\xff"


def test_decode_empty_string() -> None:
    assert base64url.decode("") == b""


@pytest.mark.parametrize(
    "text",
    [
        "+/8",      # standard alphabet, not urlsafe
        "YQ==YQ",   # padding in the middle
        "Y Q",
        "YQ\n",
        "é",
        "A",        # 6 bits cannot form a byte
        "YQ=",      # wrong padding length
        "YWI==",
        "YR",       # non-zero trailing bits
    ],
)
def test_decode_rejects_malformed(text: str) -> None:
    with pytest.raises(MalformedEncoding):
        base64url.decode(text)


def test_decode_rejects_non_string() -> None:
    with pytest.raises(MalformedEncoding):
        base64url.decode(b"YQ")  # type: ignore[arg-type]
