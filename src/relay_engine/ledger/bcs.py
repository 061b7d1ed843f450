"""BCS encoding of the training result

Layout of the Move struct passed to ``complete_job``::

    struct MLTrainingResponse {
        model_blob_id: vector<u8>,
        accuracy: u64,
        final_loss: u64,
        num_samples: u64,
        model_hash: vector<u8>,
    }

``vector<u8>`` is a ULEB128 length followed by the bytes, ``u64`` is 8 bytes
little-endian. Accuracy, loss and sample count are floored to integers.
"""

import math
import struct

from ..decoding import U64_MAX
from ..errors import EncodingError

BLOB_ID_ENCODINGS = ("utf8", "hex")


def encode_uleb128(value: int) -> bytes:
    if value < 0:
        raise EncodingError(f"ULEB128 cannot encode negative value {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def encode_u64(value: int) -> bytes:
    if not 0 <= value <= U64_MAX:
        raise EncodingError(f"{value} is out of u64 range")
    return struct.pack("<Q", value)


def encode_bytes(value: bytes) -> bytes:
    return encode_uleb128(len(value)) + bytes(value)


def truncate_u64(value, field: str) -> int:
    """Drop the fractional part of a metric"""
    if isinstance(value, float) and not math.isfinite(value):
        raise EncodingError(f"{field} is not finite: {value}")
    number = math.floor(value)
    if number < 0:
        raise EncodingError(f"{field} is negative: {value}")
    return number


def blob_id_bytes(blob_id: str, encoding: str = "utf8") -> bytes:
    if encoding == "utf8":
        return blob_id.encode("utf-8")
    if encoding == "hex":
        try:
            return bytes.fromhex(blob_id[2:] if blob_id.startswith("0x") else blob_id)
        except ValueError as e:
            raise EncodingError(f"model blob id {blob_id!r} is not hex") from e
    raise EncodingError(f"Unknown blob id encoding {encoding!r}, expected one of {BLOB_ID_ENCODINGS}")


def encode_training_result(result, blob_id_encoding: str = "utf8") -> bytes:
    """Serialize a ``TrainingResult`` into the on-chain layout"""
    return b"".join([
        encode_bytes(blob_id_bytes(result.model_blob_id, blob_id_encoding)),
        encode_u64(truncate_u64(result.accuracy, "accuracy")),
        encode_u64(truncate_u64(result.final_loss, "final_loss")),
        encode_u64(truncate_u64(result.num_samples, "num_samples")),
        encode_bytes(bytes(result.model_hash)),
    ])
