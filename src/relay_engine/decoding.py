"""Ledger JSON field decoding

Move values reach us through the JSON-RPC layer in more than one shape: u64
is a decimal string (sometimes a number) and vector<u8> is either an array of
byte values or a string. Each decoder accepts exactly the shapes listed in
its docstring and raises ``EventDecodeError`` for anything else.
"""

import base64
import binascii
import string
from typing import Any

from .errors import EventDecodeError

U64_MAX = 2 ** 64 - 1


def decode_u64(value: Any, field: str) -> int:
    """u64 from a decimal string or a JSON integer"""
    if isinstance(value, bool):
        raise EventDecodeError(f"{field}: expected u64, got boolean")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            raise EventDecodeError(f"{field}: {value!r} is not a decimal u64")
        number = int(value)
    else:
        raise EventDecodeError(f"{field}: expected u64, got {type(value).__name__}")

    if not 0 <= number <= U64_MAX:
        raise EventDecodeError(f"{field}: {number} is out of u64 range")
    return number


def _byte_array(value: list, field: str) -> bytes:
    for item in value:
        if isinstance(item, bool) or not isinstance(item, int) or not 0 <= item <= 255:
            raise EventDecodeError(f"{field}: {item!r} is not a byte value")
    return bytes(value)


def _byte_string(value: str, field: str) -> bytes:
    if value.startswith("0x"):
        try:
            return bytes.fromhex(value[2:])
        except ValueError as e:
            raise EventDecodeError(f"{field}: {value!r} is not valid hex") from e
    if all(c in string.hexdigits for c in value) and len(value) % 2 == 0:
        return bytes.fromhex(value)
    try:
        return base64.b64decode(value, validate=True)
    except (ValueError, binascii.Error) as e:
        raise EventDecodeError(f"{field}: {value!r} is neither hex nor base64") from e


def decode_bytes(value: Any, field: str) -> bytes:
    """vector<u8> from one of two variants

    - array of byte values: taken as is
    - string: hex with or without ``0x``, base64 when not hex
    """
    if isinstance(value, list):
        return _byte_array(value, field)
    if isinstance(value, str):
        return _byte_string(value, field)
    raise EventDecodeError(f"{field}: expected byte array or string, got {type(value).__name__}")


def decode_text(value: Any, field: str) -> str:
    """UTF-8 text stored as vector<u8>

    - array of byte values: decoded as UTF-8
    - string: already text, returned unchanged
    """
    if isinstance(value, list):
        try:
            return _byte_array(value, field).decode("utf-8")
        except UnicodeDecodeError as e:
            raise EventDecodeError(f"{field}: bytes are not valid UTF-8") from e
    if isinstance(value, str):
        return value
    raise EventDecodeError(f"{field}: expected byte array or string, got {type(value).__name__}")
