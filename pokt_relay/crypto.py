"""
pokt_relay.crypto
-----------------
Digest and signature primitives for relay authentication:

- SHA3-256: fixed 32-byte digest over canonical bytes
- Ed25519: detached signatures, always computed over a digest
- Pocket key conventions: hex public keys, 20-byte hex addresses

Keys are immutable once loaded and safe to share across threads.
"""

from __future__ import annotations
from typing import Tuple
import hashlib

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import ed25519

from .errors import EncodingError, SigningError
from .utils import hexd, hexe

DIGEST_SIZE = 32
ADDRESS_SIZE = 20


def digest(data: bytes) -> bytes:
    return hashlib.sha3_256(data).digest()


def _require_digest(d: bytes) -> None:
    if not isinstance(d, (bytes, bytearray)) or len(d) != DIGEST_SIZE:
        raise SigningError(f"signing operates on {DIGEST_SIZE}-byte digests only")


class PublicKey:
    def __init__(self, raw: bytes):
        try:
            self._key = ed25519.Ed25519PublicKey.from_public_bytes(bytes(raw))
        except ValueError as e:
            raise SigningError(f"invalid ed25519 public key: {e}") from e
        self._raw = bytes(raw)

    @classmethod
    def from_hex(cls, s: str) -> "PublicKey":
        return cls(hexd(s))

    def raw_bytes(self) -> bytes:
        return self._raw

    def raw_hex(self) -> str:
        return hexe(self._raw)

    def address(self) -> str:
        # Pocket address: truncated sha256 of the raw public key
        return hashlib.sha256(self._raw).digest()[:ADDRESS_SIZE].hex()

    def verify(self, d: bytes, sig: bytes) -> bool:
        try:
            self._key.verify(sig, d)
            return True
        except InvalidSignature:
            return False

    def __eq__(self, other) -> bool:
        return isinstance(other, PublicKey) and other._raw == self._raw

    def __hash__(self) -> int:
        return hash(self._raw)

    def __repr__(self) -> str:
        return f"PublicKey({self.raw_hex()})"


class PrivateKey:
    """
    Ed25519 private key.

    Accepts the 32-byte seed or the 64-byte ``seed || public key`` form
    used by Pocket keyfiles. ``sign`` only ever accepts a digest.
    """

    def __init__(self, key: ed25519.Ed25519PrivateKey):
        self._key = key
        self._pub = PublicKey(key.public_key().public_bytes_raw())

    @classmethod
    def generate(cls) -> "PrivateKey":
        return cls(ed25519.Ed25519PrivateKey.generate())

    @classmethod
    def from_bytes(cls, raw: bytes) -> "PrivateKey":
        if len(raw) not in (32, 64):
            raise SigningError(f"ed25519 private key must be 32 or 64 bytes, got {len(raw)}")
        key = cls(ed25519.Ed25519PrivateKey.from_private_bytes(raw[:32]))
        if len(raw) == 64 and raw[32:] != key.public_key().raw_bytes():
            raise SigningError("private key does not match its embedded public key")
        return key

    @classmethod
    def from_hex(cls, s: str) -> "PrivateKey":
        return cls.from_bytes(hexd(s.strip()))

    def public_key(self) -> PublicKey:
        return self._pub

    def to_hex(self) -> str:
        return hexe(self._key.private_bytes_raw() + self._pub.raw_bytes())

    def sign(self, d: bytes) -> bytes:
        _require_digest(d)
        try:
            return self._key.sign(bytes(d))
        except Exception as e:
            raise SigningError(f"ed25519 signing failed: {e}") from e

    def __repr__(self) -> str:
        return f"PrivateKey(pub={self._pub.raw_hex()})"


def generate_keypair() -> Tuple[PrivateKey, PublicKey]:
    sk = PrivateKey.generate()
    return sk, sk.public_key()


def sign(priv: PrivateKey, d: bytes) -> str:
    """Sign a digest and return the signature as lowercase hex."""
    return hexe(priv.sign(d))


def verify(pub_hex: str, d: bytes, sig_hex: str) -> bool:
    if len(d) != DIGEST_SIZE:
        return False
    try:
        pub = PublicKey.from_hex(pub_hex)
        sig = bytes.fromhex(sig_hex)
    except (EncodingError, SigningError, ValueError):
        return False
    return pub.verify(d, sig)
