from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional
import json

from pokt_relay.envelope import RelayMetadata, RelayPayload, RelayProof
from pokt_relay.errors import TransportError, TransportPermanentError, TransportTransientError

__all__ = [
    "BaseTransport",
    "RelayResponse",
    "TransportError",
    "TransportPermanentError",
    "TransportTransientError",
]


@dataclass
class RelayResponse:
    status_code: int
    body: str = ""

    @property
    def status_class(self) -> int:
        return self.status_code // 100

    def json(self) -> Optional[Any]:
        try:
            return json.loads(self.body)
        except (TypeError, ValueError):
            return None

    def error_message(self) -> Optional[str]:
        data = self.json()
        if not isinstance(data, dict):
            return None
        err = data.get("error")
        if isinstance(err, dict):
            return err.get("message")
        if isinstance(err, str):
            return err
        return None

    def corrected_height(self) -> Optional[int]:
        """Session height carried by a dispatch in a rejection, if any."""
        data = self.json()
        if not isinstance(data, dict):
            return None
        try:
            height = data["dispatch"]["session"]["header"]["session_height"]
        except (KeyError, TypeError):
            return None
        if isinstance(height, bool) or not isinstance(height, int) or height < 0:
            return None
        return height


class BaseTransport:
    """
    Relay transport contract.

    ``submit_relay`` returns a ``RelayResponse`` for any HTTP-level answer
    and raises ``TransportError`` when no answer was obtained.
    """
    name: str = "base"

    def submit_relay(
        self,
        payload: RelayPayload,
        meta: RelayMetadata,
        proof: RelayProof,
    ) -> RelayResponse:
        raise NotImplementedError

    def query_height(self) -> int:
        raise NotImplementedError

    def query_node(self, address: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def healthz(self) -> dict:
        return {"status": "ok", "transport": self.name}

    def close(self) -> None:
        return
