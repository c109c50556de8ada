"""
pokt_relay.relay
----------------
Relay orchestration: build, sign, submit and interpret one relay.

    Building -> Signed -> Submitted -> Accepted
                                     | RejectedWithCorrection
                                     | RejectedOther
                                     | TransportFailed

Every failure comes back as a typed ``RelayOutcome``; nothing is retried
here. On ``REJECTED_WITH_CORRECTION`` the session height has already been
corrected and the caller decides whether and when to send the relay again.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional
import secrets

from .config import RelayConfig
from .constants import AAT_VERSION, DEFAULT_ENTROPY_BITS, DEFAULT_RELAY_METHOD, DEFAULT_RELAY_PATH, ETHEREUM, HARMONY
from .crypto import PrivateKey
from .directory import NodeDirectory
from .envelope import RelayMetadata, RelayPayload, RelayProof
from .errors import (
    EncodingError, NodeNotFound, RejectedOther, RejectedWithCorrection,
    RelayError, SigningError, TransportError, UnexpectedResponse,
)
from .logger import get_logger
from .proof import build_aat, build_proof, request_hash
from .session import SessionState

log = get_logger("POKT.Relay")


class RelayStatus(str, Enum):
    ACCEPTED = "accepted"
    REJECTED_WITH_CORRECTION = "rejected_with_correction"
    REJECTED_OTHER = "rejected_other"
    TRANSPORT_FAILED = "transport_failed"
    UNEXPECTED_RESPONSE = "unexpected_response"
    NODE_NOT_FOUND = "node_not_found"
    ENCODING_FAILED = "encoding_failed"
    SIGNING_FAILED = "signing_failed"


@dataclass
class RelayOutcome:
    status: RelayStatus
    body: Optional[str] = None
    status_code: Optional[int] = None
    corrected_height: Optional[int] = None
    error: Optional[RelayError] = None
    proof: Optional[RelayProof] = None

    @property
    def ok(self) -> bool:
        return self.status is RelayStatus.ACCEPTED

    @property
    def retry_required(self) -> bool:
        return self.status is RelayStatus.REJECTED_WITH_CORRECTION

    def raise_for_status(self) -> None:
        if self.error is not None:
            raise self.error


class RelayClient:
    """
    Sends signed relays through a transport.

    The client (servicer) key signs proofs; an app key, drawn at random from
    ``app_keys`` per relay, signs the AAT delegating to the client key.
    The session state is owned by the client and may be shared with others.
    """

    def __init__(
        self,
        servicer_key: PrivateKey,
        app_keys: List[PrivateKey],
        transport,
        session: Optional[SessionState] = None,
        directory: Optional[NodeDirectory] = None,
        aat_version: str = AAT_VERSION,
        entropy_bits: int = DEFAULT_ENTROPY_BITS,
    ):
        if not app_keys:
            raise ValueError("at least one app key is required")
        if isinstance(entropy_bits, bool) or not isinstance(entropy_bits, int) or not 1 <= entropy_bits <= 63:
            raise ValueError(f"entropy_bits must be within 1..63, got {entropy_bits!r}")
        self.servicer_key = servicer_key
        self.app_keys = list(app_keys)
        self.transport = transport
        self.session = session or SessionState()
        self.directory = directory or NodeDirectory(transport)
        self.aat_version = aat_version
        self.entropy_bits = entropy_bits

    @classmethod
    def from_config(cls, config: RelayConfig, transport=None, session: Optional[SessionState] = None) -> "RelayClient":
        if transport is None:
            from .transport import transport_factory
            transport = transport_factory(config)
        return cls(
            servicer_key=config.servicer_key,
            app_keys=config.app_keys,
            transport=transport,
            session=session,
            aat_version=config.aat_version,
            entropy_bits=config.entropy_bits,
        )

    def query_height(self) -> int:
        height = self.transport.query_height()
        log.info(f"[HEIGHT] current height {height}")
        return height

    def relay(
        self,
        blockchain: str,
        data: str,
        method: str = DEFAULT_RELAY_METHOD,
        path: str = DEFAULT_RELAY_PATH,
        headers: Optional[Dict[str, str]] = None,
    ) -> RelayOutcome:
        client_pub = self.servicer_key.public_key()
        address = client_pub.address()

        try:
            node = self.directory.lookup_service_node(address)
        except TransportError as e:
            log.error(f"[RELAY] node lookup failed: {e}")
            return RelayOutcome(RelayStatus.TRANSPORT_FAILED, error=e)
        if node is None:
            log.error(f"[RELAY] could not find service node for key {client_pub.raw_hex()}")
            return RelayOutcome(RelayStatus.NODE_NOT_FOUND, error=NodeNotFound(address))

        # Building -> Signed
        try:
            height = self.session.current()
            meta = RelayMetadata(block_height=height)
            payload = RelayPayload(data=data, method=method, path=path, headers=dict(headers or {}))
            aat = build_aat(secrets.choice(self.app_keys), client_pub.raw_hex(), self.aat_version)
            proof = build_proof(
                self.servicer_key,
                node.public_key,
                blockchain,
                request_hash(payload, meta),
                height,
                aat,
                entropy_bits=self.entropy_bits,
            )
        except EncodingError as e:
            log.error(f"[RELAY] encoding failed: {e}")
            return RelayOutcome(RelayStatus.ENCODING_FAILED, error=e)
        except SigningError as e:
            log.error(f"[RELAY] signing failed: {e}")
            return RelayOutcome(RelayStatus.SIGNING_FAILED, error=e)

        # Signed -> Submitted
        log.info(f"[RELAY] chain={blockchain} session_height={height} request_hash={proof.request_hash}")
        try:
            res = self.transport.submit_relay(payload, meta, proof)
        except TransportError as e:
            log.error(f"[RELAY] submit failed: {e}")
            return RelayOutcome(RelayStatus.TRANSPORT_FAILED, error=e, proof=proof)
        if res is None:
            log.error("[RELAY] no response, please check the RPC endpoint")
            return RelayOutcome(RelayStatus.TRANSPORT_FAILED, error=TransportError("no response from the RPC endpoint"), proof=proof)

        return self._interpret(res, proof)

    def _interpret(self, res, proof: RelayProof) -> RelayOutcome:
        code = res.status_code
        if res.status_class == 2:
            return RelayOutcome(RelayStatus.ACCEPTED, body=res.body, status_code=code, proof=proof)

        if res.status_class == 4:
            if not isinstance(res.json(), dict):
                log.error(f"[RELAY] unparseable {code} response: {res.body!r}")
                return RelayOutcome(
                    RelayStatus.TRANSPORT_FAILED, body=res.body, status_code=code,
                    error=TransportError(f"unparseable {code} response"), proof=proof,
                )
            message = res.error_message()
            new_height = res.corrected_height()
            if new_height is not None:
                self.session.correct(new_height)
                log.info("[RELAY] the session block height has been updated, re-send the relay")
                return RelayOutcome(
                    RelayStatus.REJECTED_WITH_CORRECTION, body=res.body, status_code=code,
                    corrected_height=new_height, error=RejectedWithCorrection(new_height, message), proof=proof,
                )
            log.error(f"[RELAY] error sending relay: {message}")
            return RelayOutcome(
                RelayStatus.REJECTED_OTHER, body=res.body, status_code=code,
                error=RejectedOther(message or res.body, code), proof=proof,
            )

        log.error(f"[RELAY] unexpected status code: {code}")
        return RelayOutcome(
            RelayStatus.UNEXPECTED_RESPONSE, body=res.body, status_code=code,
            error=UnexpectedResponse(code, res.body), proof=proof,
        )


def relay_hmy(client: RelayClient) -> RelayOutcome:
    data = '{"jsonrpc":"2.0", "method":"hmyv2_blockNumber", "params":[], "id":1}'
    return client.relay(HARMONY, data)


def relay_eth(client: RelayClient) -> RelayOutcome:
    data = '{"jsonrpc":"2.0", "method":"eth_blockNumber", "params":[], "id":1}'
    return client.relay(ETHEREUM, data)
