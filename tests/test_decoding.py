import pytest

from relay_engine.decoding import U64_MAX, decode_bytes, decode_text, decode_u64
from relay_engine.errors import EventDecodeError


@pytest.mark.parametrize("value,expected", [
    ("0", 0),
    ("7", 7),
    (7, 7),
    (str(U64_MAX), U64_MAX),
])
def test_decode_u64(value, expected):
    assert decode_u64(value, "job_id") == expected


@pytest.mark.parametrize("value", [
    "-1", "1.5", "", "0x10", "\u00b2", "\u0663",
    True, None, 1.0, -1, U64_MAX + 1, str(U64_MAX + 1),
])
def test_decode_u64_rejects(value):
    with pytest.raises(EventDecodeError, match="job_id"):
        decode_u64(value, "job_id")


def test_decode_bytes_from_array():
    assert decode_bytes([1, 2, 255], "key") == b"\x01\x02\xff"
    assert decode_bytes([], "key") == b""


def test_decode_bytes_from_hex():
    assert decode_bytes("0x0102ff", "key") == b"\x01\x02\xff"


def test_decode_bytes_from_unprefixed_hex():
    key = bytes(range(32))
    assert decode_bytes(key.hex(), "buyer_public_key") == key
    assert decode_bytes("0102FF", "key") == b"\x01\x02\xff"


def test_decode_bytes_from_base64():
    assert decode_bytes("AQID", "key") == b"\x01\x02\x03"
    assert decode_bytes("AQIDBA==", "key") == b"\x01\x02\x03\x04"


@pytest.mark.parametrize("value", [[256], [-1], ["1"], [True], "0xzz", "not base64!", 12, None])
def test_decode_bytes_rejects(value):
    with pytest.raises(EventDecodeError):
        decode_bytes(value, "key")


def test_decode_text():
    assert decode_text(list(b"blob-1"), "blob") == "blob-1"
    assert decode_text("blob-1", "blob") == "blob-1"


def test_decode_text_rejects_invalid_utf8():
    with pytest.raises(EventDecodeError):
        decode_text([0xFF, 0xFE], "blob")
