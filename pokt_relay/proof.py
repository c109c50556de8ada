"""
pokt_relay.proof
----------------
Builders for the two signed artifacts of a relay:

- AAT: the application key delegates relay authority to a client key
- RelayProof: the client key authorizes exactly one request, bound to a
  session height, a chain and the request hash, and referencing the AAT
  by digest

Both follow the same discipline: canonical bytes -> SHA3-256 -> Ed25519.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Optional

from .constants import AAT_VERSION, DEFAULT_ENTROPY_BITS
from .crypto import PrivateKey, digest, sign, verify
from .envelope import (
    AAT, RelayMetadata, RelayPayload, RelayProof,
    aat_signing_bytes, request_transport_bytes, to_proof_signing_bytes, validate_chain,
)
from .utils import hexe, new_entropy


# --------- AAT ----------
def aat_digest(aat: AAT) -> bytes:
    """Digest the app key signs; proofs carry it hex encoded as ``token``."""
    return digest(aat_signing_bytes(aat))


def build_aat(app_priv: PrivateKey, client_pub_key: str, version: str = AAT_VERSION) -> AAT:
    unsigned = AAT(
        app_pub_key=app_priv.public_key().raw_hex(),
        client_pub_key=client_pub_key,
        version=version,
    )
    return replace(unsigned, signature=sign(app_priv, aat_digest(unsigned)))


def verify_aat(aat: AAT) -> bool:
    if not aat.signature:
        return False
    return verify(aat.app_pub_key, aat_digest(aat), aat.signature)


# --------- Request hash ----------
def request_hash(payload: RelayPayload, meta: RelayMetadata) -> str:
    return hexe(digest(request_transport_bytes(payload, meta)))


# --------- Proof ----------
def build_proof(
    client_priv: PrivateKey,
    servicer_pub_key: str,
    blockchain: str,
    req_hash: str,
    session_height: int,
    aat: AAT,
    entropy: Optional[int] = None,
    entropy_bits: int = DEFAULT_ENTROPY_BITS,
) -> RelayProof:
    """
    Sign a proof for one relay.

    ``session_height`` is taken as given and must match the session height
    stamped into the request metadata. ``entropy`` is drawn from a CSPRNG
    unless supplied.
    """
    validate_chain(blockchain)
    unsigned = RelayProof(
        entropy=new_entropy(entropy_bits) if entropy is None else entropy,
        session_block_height=session_height,
        servicer_pub_key=servicer_pub_key,
        blockchain=blockchain,
        request_hash=req_hash,
        aat=aat,
    )
    proof_digest = digest(to_proof_signing_bytes(unsigned, aat_digest(aat)))
    return replace(unsigned, signature=sign(client_priv, proof_digest))


def verify_proof(proof: RelayProof, client_pub_key: Optional[str] = None) -> bool:
    """
    Check the proof signature against the client key.

    Defaults to the client key the embedded AAT delegates to.
    """
    if not proof.signature:
        return False
    pub = client_pub_key or proof.aat.client_pub_key
    proof_digest = digest(to_proof_signing_bytes(proof, aat_digest(proof.aat)))
    return verify(pub, proof_digest, proof.signature)
