"""Operator keypair

Ed25519 signing in the Sui scheme:
- address: blake2b-256(flag || public key)
- signature: base64(flag || ed25519(blake2b-256(intent || tx bytes)) || public key)
"""

import base64
import binascii
import hashlib

from nacl.signing import SigningKey

ED25519_FLAG = 0x00
TRANSACTION_INTENT = bytes([0, 0, 0])  # TransactionData, V0, Sui


def _blake2b256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


class Ed25519Signer:
    """Signs transactions with the operator key"""

    def __init__(self, seed: bytes):
        if len(seed) != 32:
            raise ValueError(f"Ed25519 seed must be 32 bytes, got {len(seed)}")
        self._key = SigningKey(seed)

    @classmethod
    def from_base64(cls, secret: str) -> "Ed25519Signer":
        """Load a base64 exported secret

        Accepts a 32 byte seed, a 33 byte flag-prefixed Sui export or a 64
        byte seed + public key.
        """
        try:
            raw = base64.b64decode(secret, validate=True)
        except (ValueError, binascii.Error) as e:
            raise ValueError("Operator private key is not valid base64") from e

        if len(raw) == 33 and raw[0] == ED25519_FLAG:
            raw = raw[1:]
        elif len(raw) == 64:
            raw = raw[:32]
        return cls(raw)

    @property
    def public_key(self) -> bytes:
        return bytes(self._key.verify_key)

    @property
    def address(self) -> str:
        return "0x" + _blake2b256(bytes([ED25519_FLAG]) + self.public_key).hex()

    def sign_transaction(self, tx_bytes_b64: str) -> str:
        """Serialized signature for base64 transaction bytes"""
        tx_bytes = base64.b64decode(tx_bytes_b64)
        digest = _blake2b256(TRANSACTION_INTENT + tx_bytes)
        signature = self._key.sign(digest).signature
        return base64.b64encode(bytes([ED25519_FLAG]) + signature + self.public_key).decode("ascii")
