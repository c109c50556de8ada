# pokt_relay/directory.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .logger import get_logger

log = get_logger("POKT.Directory")


@dataclass(frozen=True)
class ServiceNode:
    public_key: str
    address: str = ""
    service_url: str = ""
    chains: List[str] = field(default_factory=list)
    jailed: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceNode":
        return cls(
            public_key=data["public_key"],
            address=data.get("address", ""),
            service_url=data.get("service_url", ""),
            chains=list(data.get("chains") or []),
            jailed=bool(data.get("jailed", False)),
        )


class NodeDirectory:
    """Resolves the service node for an address through a transport's node query."""

    def __init__(self, transport):
        self.transport = transport

    def lookup_service_node(self, address: str) -> Optional[ServiceNode]:
        record = self.transport.query_node(address)
        if not record or not record.get("public_key"):
            log.info(f"[DIRECTORY] no service node for {address}")
            return None
        return ServiceNode.from_dict(record)
