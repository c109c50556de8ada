"""
pokt_relay
==========
Signed relay construction for Pocket Network service nodes.

Provides:
- AAT and relay proof builders with Go-compatible canonical encodings
- SHA3-256 / Ed25519 digest and signature primitives
- Session height tracking with server-driven correction
- Relay orchestration over pluggable transports (HTTP, in-process)
"""

from .config import RelayConfig
from .crypto import PrivateKey, PublicKey
from .envelope import AAT, RelayMetadata, RelayPayload, RelayProof
from .proof import build_aat, build_proof, request_hash, verify_aat, verify_proof
from .relay import RelayClient, RelayOutcome, RelayStatus
from .session import SessionState

__version__ = "0.1.0"
