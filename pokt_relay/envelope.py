"""
pokt_relay.envelope
-------------------
Defines the relay records (payload, metadata, AAT, proof) and their two
canonical encodings.

Key features:
- Transport form: compact JSON, fields in the fixed order of the wire schema
- Proof signing form: a distinct positional record in which the signature is
  blanked and the AAT is replaced by its digest (``token``)
- Records are frozen; builders in ``pokt_relay.proof`` only yield complete ones
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict
import re

from .constants import DEFAULT_RELAY_METHOD, DEFAULT_RELAY_PATH
from .errors import EncodingError
from .utils import go_json, hexe

_CHAIN_RE = re.compile(r"^[0-9a-fA-F]{4}$")


def _require_int(name: str, value: Any) -> None:
    # bool is an int subclass but never a valid height/entropy
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{name} must be an integer, got {type(value).__name__}")
    if not -(2 ** 63) <= value < 2 ** 63:
        raise EncodingError(f"{name} does not fit in int64: {value}")


def _require_str(name: str, value: Any) -> None:
    if not isinstance(value, str):
        raise EncodingError(f"{name} must be a string, got {type(value).__name__}")


def validate_chain(blockchain: str) -> str:
    _require_str("blockchain", blockchain)
    if not _CHAIN_RE.match(blockchain):
        raise EncodingError(f"blockchain must be a 4 hex digit code, got {blockchain!r}")
    return blockchain


@dataclass(frozen=True)
class RelayPayload:
    data: str
    method: str = DEFAULT_RELAY_METHOD
    path: str = DEFAULT_RELAY_PATH
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        for name in ("data", "method", "path"):
            _require_str(name, getattr(self, name))
        for k, v in self.headers.items():
            _require_str("header name", k)
            _require_str(f"header {k}", v)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data,
            # map-typed field: keys sorted like any Go map
            "headers": {k: self.headers[k] for k in sorted(self.headers)},
            "method": self.method,
            "path": self.path,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RelayPayload":
        return cls(
            data=data.get("data", ""),
            method=data.get("method", DEFAULT_RELAY_METHOD),
            path=data.get("path", DEFAULT_RELAY_PATH),
            headers=dict(data.get("headers") or {}),
        )


@dataclass(frozen=True)
class RelayMetadata:
    block_height: int

    def __post_init__(self):
        _require_int("block_height", self.block_height)

    def to_dict(self) -> Dict[str, Any]:
        return {"block_height": self.block_height}

    @classmethod
    def from_dict(cls, data: dict) -> "RelayMetadata":
        return cls(block_height=data.get("block_height", 0))


@dataclass(frozen=True)
class AAT:
    app_pub_key: str
    client_pub_key: str
    version: str
    signature: str = ""   # lowercase hex, empty until signed

    def __post_init__(self):
        for name in ("app_pub_key", "client_pub_key", "version", "signature"):
            _require_str(name, getattr(self, name))

    def to_dict(self, include_sig: bool = True) -> Dict[str, Any]:
        return {
            "app_pub_key": self.app_pub_key,
            "client_pub_key": self.client_pub_key,
            "signature": self.signature if include_sig else "",
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AAT":
        return cls(
            app_pub_key=data.get("app_pub_key", ""),
            client_pub_key=data.get("client_pub_key", ""),
            version=data.get("version", ""),
            signature=data.get("signature") or "",
        )


@dataclass(frozen=True)
class RelayProof:
    entropy: int
    session_block_height: int
    servicer_pub_key: str
    blockchain: str
    request_hash: str
    aat: AAT
    signature: str = ""

    def __post_init__(self):
        _require_int("entropy", self.entropy)
        _require_int("session_block_height", self.session_block_height)
        validate_chain(self.blockchain)
        for name in ("servicer_pub_key", "request_hash", "signature"):
            _require_str(name, getattr(self, name))
        if not isinstance(self.aat, AAT):
            raise EncodingError("proof must embed a full AAT")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aat": self.aat.to_dict(),
            "blockchain": self.blockchain,
            "entropy": self.entropy,
            "request_hash": self.request_hash,
            "servicer_pub_key": self.servicer_pub_key,
            "session_block_height": self.session_block_height,
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RelayProof":
        return cls(
            entropy=data.get("entropy", 0),
            session_block_height=data.get("session_block_height", 0),
            servicer_pub_key=data.get("servicer_pub_key", ""),
            blockchain=data.get("blockchain", ""),
            request_hash=data.get("request_hash", ""),
            aat=AAT.from_dict(data.get("aat") or {}),
            signature=data.get("signature") or "",
        )


# --------- Transport form ----------
def to_transport_bytes(record) -> bytes:
    """Wire encoding of any relay record (payload, meta, AAT, proof)."""
    return go_json(record.to_dict())


def aat_signing_bytes(aat: AAT) -> bytes:
    # The AAT is signed (and referenced by proofs) with its signature blanked.
    return go_json(aat.to_dict(include_sig=False))


def request_transport_bytes(payload: RelayPayload, meta: RelayMetadata) -> bytes:
    return go_json({"payload": payload.to_dict(), "meta": meta.to_dict()})


def relay_body(payload: RelayPayload, meta: RelayMetadata, proof: RelayProof) -> Dict[str, Any]:
    return {"meta": meta.to_dict(), "payload": payload.to_dict(), "proof": proof.to_dict()}


def relay_body_bytes(payload: RelayPayload, meta: RelayMetadata, proof: RelayProof) -> bytes:
    return go_json(relay_body(payload, meta, proof))


# --------- Proof signing form ----------
def to_proof_signing_bytes(proof: RelayProof, aat_digest: bytes) -> bytes:
    """
    The record a client key actually signs for a proof.

    Field order is fixed and differs from the transport form; ``signature``
    is always the empty string and ``token`` is the hex AAT digest in place
    of the embedded AAT.
    """
    body = {
        "entropy": proof.entropy,
        "session_block_height": proof.session_block_height,
        "servicer_pub_key": proof.servicer_pub_key,
        "blockchain": proof.blockchain,
        "signature": "",
        "token": hexe(aat_digest),
        "request_hash": proof.request_hash,
    }
    return go_json(body)
