import json
from dataclasses import replace

from pokt_relay.constants import ETHEREUM
from pokt_relay.crypto import PrivateKey, digest, verify
from pokt_relay.envelope import (
    RelayMetadata, RelayPayload, aat_signing_bytes, relay_body_bytes, to_proof_signing_bytes,
)
from pokt_relay.proof import aat_digest, build_aat, build_proof, request_hash, verify_aat, verify_proof

ETH_BLOCK_NUMBER = '{"jsonrpc":"2.0","method":"eth_blockNumber","params":[],"id":1}'


def test_aat_self_consistency(app_key, servicer_key):
    aat = build_aat(app_key, servicer_key.public_key().raw_hex())
    assert aat.app_pub_key == app_key.public_key().raw_hex()
    assert aat.version == "0.0.1"
    assert aat.signature == aat.signature.lower()
    assert verify(aat.app_pub_key, digest(aat_signing_bytes(aat)), aat.signature)
    assert verify_aat(aat)


def test_tampered_aat_fails_verification(app_key, servicer_key):
    aat = build_aat(app_key, servicer_key.public_key().raw_hex())
    assert not verify_aat(replace(aat, client_pub_key=PrivateKey.generate().public_key().raw_hex()))
    assert not verify_aat(replace(aat, signature=""))


def test_proof_self_consistency(app_key, servicer_key):
    aat = build_aat(app_key, servicer_key.public_key().raw_hex())
    meta = RelayMetadata(5)
    req = request_hash(RelayPayload(data=ETH_BLOCK_NUMBER), meta)
    proof = build_proof(servicer_key, "S", ETHEREUM, req, 5, aat)

    signing_digest = digest(to_proof_signing_bytes(proof, aat_digest(aat)))
    assert verify(servicer_key.public_key().raw_hex(), signing_digest, proof.signature)
    assert verify_proof(proof)
    assert proof.aat == aat
    assert proof.session_block_height == 5


def test_proof_signature_does_not_cover_a_different_height(app_key, servicer_key):
    aat = build_aat(app_key, servicer_key.public_key().raw_hex())
    proof = build_proof(servicer_key, "S", ETHEREUM, "ab" * 32, 5, aat)
    assert not verify_proof(replace(proof, session_block_height=6))
    assert not verify_proof(replace(proof, entropy=proof.entropy + 1))


def test_request_hash_binding():
    meta = RelayMetadata(5)
    base = request_hash(RelayPayload(data=ETH_BLOCK_NUMBER), meta)
    assert len(base) == 64
    assert base == request_hash(RelayPayload(data=ETH_BLOCK_NUMBER), RelayMetadata(5))
    assert base != request_hash(RelayPayload(data=ETH_BLOCK_NUMBER.replace("1}", "2}")), meta)
    assert base != request_hash(RelayPayload(data=ETH_BLOCK_NUMBER), RelayMetadata(6))


def test_entropy_differs_between_proofs(app_key, servicer_key):
    aat = build_aat(app_key, servicer_key.public_key().raw_hex())
    entropies = {
        build_proof(servicer_key, "S", ETHEREUM, "ab" * 32, 5, aat).entropy
        for _ in range(20)
    }
    assert len(entropies) == 20
    assert all(0 <= e < 2 ** 63 for e in entropies)


def test_narrow_entropy_range(app_key, servicer_key):
    aat = build_aat(app_key, servicer_key.public_key().raw_hex())
    proof = build_proof(servicer_key, "S", ETHEREUM, "ab" * 32, 5, aat, entropy_bits=32)
    assert 0 <= proof.entropy < 2 ** 32


def test_builder_uses_supplied_entropy(app_key, servicer_key):
    aat = build_aat(app_key, servicer_key.public_key().raw_hex())
    proof = build_proof(servicer_key, "S", ETHEREUM, "ab" * 32, 5, aat, entropy=42)
    assert proof.entropy == 42
    assert verify_proof(proof)


def test_scenario_eth_block_number(app_key, servicer_key):
    aat = build_aat(app_key, "B", version="0.0.1")
    assert aat.client_pub_key == "B"

    payload = RelayPayload(data=ETH_BLOCK_NUMBER)
    meta = RelayMetadata(5)
    req = request_hash(payload, meta)
    client_pub = servicer_key.public_key().raw_hex()

    first = build_proof(servicer_key, "S", "0021", req, 5, aat)
    second = build_proof(servicer_key, "S", "0021", req, 5, aat)

    assert len(first.request_hash) == 64
    assert len(first.signature) == 128
    assert verify_proof(first, client_pub)
    assert verify_proof(second, client_pub)

    a = json.loads(relay_body_bytes(payload, meta, first))
    b = json.loads(relay_body_bytes(payload, meta, second))
    assert a["proof"]["entropy"] != b["proof"]["entropy"]
    assert a["proof"]["signature"] != b["proof"]["signature"]
    for p in (a, b):
        p["proof"].pop("entropy")
        p["proof"].pop("signature")
    assert a == b
