# pokt_relay/transport/transport_http.py
import requests
from typing import Any, Dict, Optional

from pokt_relay.constants import DEFAULT_TIMEOUT, QUERY_HEIGHT_PATH, QUERY_NODE_PATH, RELAY_PATH
from pokt_relay.envelope import RelayMetadata, RelayPayload, RelayProof, relay_body_bytes
from pokt_relay.logger import get_logger
from pokt_relay.utils import go_json
from pokt_relay.transport.transport_base import (
    BaseTransport, RelayResponse, TransportError, TransportPermanentError, TransportTransientError,
)

log = get_logger("POKT.Transport.HTTP")


class HTTPAdapter(BaseTransport):
    """
    HTTP transport for a Pocket node's v1 RPC.

    Features:
    - Relay bodies are posted as the exact canonical bytes that were hashed.
    - Connection failures and timeouts surface as ``TransportTransientError``.
    """
    name = "http"

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http = session or requests.Session()

    def _post(self, path: str, data: bytes) -> requests.Response:
        url = f"{self.base_url}{path}"
        headers = {"Content-Type": "application/json"}
        log.debug(f"[HTTP POST] → {url} | bytes={len(data)}")
        try:
            return self._http.post(url, data=data, headers=headers, timeout=self.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            log.error(f"[HTTP POST] {url} unreachable: {e}")
            raise TransportTransientError(f"{url}: {e}") from e
        except requests.RequestException as e:
            log.error(f"[HTTP POST] {url} failed: {e}")
            raise TransportError(f"{url}: {e}") from e

    # ------------------------------------------------------------------
    # Relay
    # ------------------------------------------------------------------
    def submit_relay(self, payload: RelayPayload, meta: RelayMetadata, proof: RelayProof) -> RelayResponse:
        res = self._post(RELAY_PATH, relay_body_bytes(payload, meta, proof))
        log.info(f"[HTTP RELAY] {res.status_code} {res.reason} | chain={proof.blockchain}")
        return RelayResponse(status_code=res.status_code, body=res.text)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def query_height(self) -> int:
        res = self._post(QUERY_HEIGHT_PATH, b"{}")
        if not res.ok:
            log.error(f"[HTTP HEIGHT] {res.status_code}: {res.text}")
            raise TransportPermanentError(f"error querying height: {res.status_code} {res.text}")
        try:
            return int(res.json()["height"])
        except (ValueError, KeyError, TypeError) as e:
            raise TransportPermanentError(f"malformed height response: {res.text!r}") from e

    def query_node(self, address: str) -> Optional[Dict[str, Any]]:
        res = self._post(QUERY_NODE_PATH, go_json({"address": address}))
        if res.status_code != 200:
            log.info(f"[HTTP NODE] {res.status_code} for {address}")
            return None
        try:
            node = res.json()
        except ValueError:
            log.error(f"[HTTP NODE] unparseable node response for {address}")
            return None
        return node if isinstance(node, dict) else None

    def close(self) -> None:
        self._http.close()
