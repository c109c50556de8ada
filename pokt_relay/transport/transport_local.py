# pokt_relay/transport/transport_local.py
from __future__ import annotations
import json, threading
from collections import OrderedDict, deque
from typing import Any, Callable, Deque, Dict, Iterable, Optional, Tuple

from pokt_relay.constants import ETHEREUM, HARMONY, IPFS
from pokt_relay.crypto import PrivateKey, digest, sign
from pokt_relay.envelope import (
    RelayMetadata, RelayPayload, RelayProof, relay_body_bytes,
)
from pokt_relay.errors import EncodingError
from pokt_relay.logger import get_logger
from pokt_relay.proof import request_hash, verify_aat, verify_proof
from pokt_relay.transport.transport_base import BaseTransport, RelayResponse
from pokt_relay.utils import go_json

log = get_logger("POKT.Transport.Local")

Handler = Callable[[str, RelayPayload], str]

# pocket-core relay error codes
CODE_INVALID_SESSION = 14
CODE_INVALID_PROOF = 60


def _echo_handler(blockchain: str, payload: RelayPayload) -> str:
    return json.dumps({"jsonrpc": "2.0", "id": 1, "result": "0x0"})


class LocalAdapter(BaseTransport):
    """
    In-process service node.

    Relays are serialized to wire bytes, parsed back and checked the way a
    remote node checks them: AAT signature, proof signature, request hash,
    session height and replayed proofs. A stale session height is answered
    with a 400 carrying a dispatch with the expected height.
    """
    name = "local"

    def __init__(
        self,
        node_key: PrivateKey,
        session_height: int = 0,
        block_height: Optional[int] = None,
        chains: Iterable[str] = (ETHEREUM, HARMONY, IPFS),
        handler: Optional[Handler] = None,
        service_url: str = "http://localhost:8081",
        max_history: int = 1000,
        max_seen: int = 10000,
    ):
        self.node_key = node_key
        self._lock = threading.Lock()
        self._session_height = session_height
        self.block_height = block_height if block_height is not None else session_height
        self.chains = list(chains)
        self.handler = handler or _echo_handler
        self.service_url = service_url
        self.max_seen = max_seen
        # most recent parsed relay bodies, oldest dropped first
        self.relays: Deque[Dict[str, Any]] = deque(maxlen=max_history)
        # (request_hash, entropy) of served proofs in the current session
        self._seen: "OrderedDict[Tuple[str, int], None]" = OrderedDict()

    @property
    def session_height(self) -> int:
        with self._lock:
            return self._session_height

    @session_height.setter
    def session_height(self, height: int) -> None:
        with self._lock:
            if height != self._session_height:
                self._seen.clear()
            self._session_height = height

    @property
    def public_key(self) -> str:
        return self.node_key.public_key().raw_hex()

    def node_record(self) -> Dict[str, Any]:
        return {
            "address": self.node_key.public_key().address(),
            "chains": list(self.chains),
            "jailed": False,
            "public_key": self.public_key,
            "service_url": self.service_url,
        }

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def query_height(self) -> int:
        return self.block_height

    def query_node(self, address: str) -> Optional[Dict[str, Any]]:
        if address != self.node_key.public_key().address():
            return None
        return self.node_record()

    # ------------------------------------------------------------------
    # Relay
    # ------------------------------------------------------------------
    def submit_relay(self, payload: RelayPayload, meta: RelayMetadata, proof: RelayProof) -> RelayResponse:
        wire = relay_body_bytes(payload, meta, proof)
        log.info(f"[LOCAL RELAY] chain={proof.blockchain} bytes={len(wire)}")
        return self.handle_relay(wire)

    def handle_relay(self, wire: bytes) -> RelayResponse:
        try:
            body = json.loads(wire)
            payload = RelayPayload.from_dict(body["payload"])
            meta = RelayMetadata.from_dict(body["meta"])
            proof = RelayProof.from_dict(body["proof"])
        except (ValueError, KeyError, TypeError, AttributeError, EncodingError) as e:
            return self._error(CODE_INVALID_PROOF, f"malformed relay: {e}")
        with self._lock:
            self.relays.append(body)
        session_height = self.session_height

        if proof.servicer_pub_key != self.public_key:
            return self._error(CODE_INVALID_PROOF, "the servicer public key does not match this node")
        if proof.blockchain not in self.chains:
            return self._error(CODE_INVALID_PROOF, f"the blockchain {proof.blockchain} is not supported by this node")
        if not verify_aat(proof.aat):
            return self._error(CODE_INVALID_PROOF, "the application authentication token signature is invalid")
        if not verify_proof(proof):
            return self._error(CODE_INVALID_PROOF, "the proof signature is invalid")
        if request_hash(payload, meta) != proof.request_hash:
            return self._error(CODE_INVALID_PROOF, "the request hash does not match the payload")
        if meta.block_height != session_height or proof.session_block_height != session_height:
            log.info(f"[LOCAL RELAY] stale session {proof.session_block_height}, expected {session_height}")
            return self._stale_session(proof, session_height)

        if not self._mark_served((proof.request_hash, proof.entropy)):
            return self._error(CODE_INVALID_PROOF, "the relay proof is a duplicate")

        result = self.handler(proof.blockchain, payload)
        resp_sig = sign(self.node_key, digest(result.encode("utf-8")))
        return RelayResponse(200, go_json({"response": result, "signature": resp_sig}).decode("utf-8"))

    def _mark_served(self, key: Tuple[str, int]) -> bool:
        with self._lock:
            if key in self._seen:
                return False
            self._seen[key] = None
            while len(self._seen) > self.max_seen:
                self._seen.popitem(last=False)
            return True

    def _error(self, code: int, message: str) -> RelayResponse:
        log.info(f"[LOCAL RELAY] rejected: {message}")
        body = {"error": {"code": code, "codespace": "pocketcore", "message": message}}
        return RelayResponse(400, go_json(body).decode("utf-8"))

    def _stale_session(self, proof: RelayProof, session_height: int) -> RelayResponse:
        body = {
            "error": {
                "code": CODE_INVALID_SESSION,
                "codespace": "pocketcore",
                "message": "the block height passed is invalid",
            },
            "dispatch": {
                "block_height": self.block_height,
                "session": {
                    "header": {
                        "app_public_key": proof.aat.app_pub_key,
                        "chain": proof.blockchain,
                        "session_height": session_height,
                    },
                    "key": "",
                    "nodes": [self.node_record()],
                },
            },
        }
        return RelayResponse(400, go_json(body).decode("utf-8"))
