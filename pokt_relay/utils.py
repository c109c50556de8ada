"""
pokt_relay.utils
----------------
Lightweight helpers for hex encoding, entropy draws and canonical JSON serialization.
These functions keep relay hashing and signing deterministic, byte-for-byte
compatible with a Go ``encoding/json`` verifier.
"""

from __future__ import annotations
import json, secrets
from typing import Any

from .errors import EncodingError

# encoding/json escapes these even with non-ASCII output enabled
_GO_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def hexe(b: bytes) -> str:
    return b.hex()


def hexd(s: str) -> bytes:
    try:
        return bytes.fromhex(s)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"invalid hex string: {s!r}") from e


def go_json(obj: Any) -> bytes:
    """
    Compact JSON in the key order of ``obj`` (dicts are emitted as built,
    never re-sorted), escaped the way Go's ``json.Marshal`` escapes strings.
    """
    try:
        text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        # The escaped characters can only occur inside string literals.
        for ch, esc in _GO_ESCAPES.items():
            if ch in text:
                text = text.replace(ch, esc)
        # lone surrogates have no UTF-8 encoding
        return text.encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"record is not canonically encodable: {e}") from e


def new_entropy(bits: int = 63) -> int:
    """Cryptographically random, non-negative entropy that fits a signed int64."""
    if not 1 <= bits <= 63:
        raise ValueError(f"entropy bits must be within 1..63, got {bits}")
    return secrets.randbits(bits)
