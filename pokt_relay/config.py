"""
pokt_relay.config
-----------------
Relay client configuration, from the environment or an explicit dict.

Environment variables:
    POKT_ENDPOINT              node RPC base URL (``/v1`` paths are appended)
    POKT_APP_PRIVATE_KEYS      comma separated hex app keys
    POKT_SERVICER_PRIVATE_KEY  hex client/servicer key
    POKT_AAT_VERSION           AAT version string
    POKT_ENTROPY_BITS          proof entropy width, 1..63
    POKT_TIMEOUT               HTTP timeout in seconds
    POKT_TRANSPORT             "http" | "local"
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional
import os, secrets

from .constants import AAT_VERSION, DEFAULT_ENDPOINT, DEFAULT_ENTROPY_BITS, DEFAULT_TIMEOUT
from .crypto import PrivateKey


def _split_keys(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [k.strip() for k in raw.split(",") if k.strip()]


@dataclass
class RelayConfig:
    servicer_private_key: str
    app_private_keys: List[str] = field(default_factory=list)
    pocket_endpoint: str = DEFAULT_ENDPOINT
    aat_version: str = AAT_VERSION
    entropy_bits: int = DEFAULT_ENTROPY_BITS
    timeout: float = DEFAULT_TIMEOUT
    transport: str = "http"

    def __post_init__(self):
        if not self.servicer_private_key:
            raise ValueError("servicer private key is required")
        if not self.app_private_keys:
            raise ValueError("at least one app private key is required")
        if not 1 <= int(self.entropy_bits) <= 63:
            raise ValueError(f"entropy_bits must be within 1..63, got {self.entropy_bits}")
        # fail at load time rather than on the first relay
        self._servicer_key = PrivateKey.from_hex(self.servicer_private_key)
        self._app_keys = [PrivateKey.from_hex(k) for k in self.app_private_keys]

    @classmethod
    def from_dict(cls, data: dict) -> "RelayConfig":
        keys = data.get("app_private_keys") or []
        if isinstance(keys, str):
            keys = _split_keys(keys)
        return cls(
            servicer_private_key=data.get("servicer_private_key", ""),
            app_private_keys=list(keys),
            pocket_endpoint=data.get("pocket_endpoint", DEFAULT_ENDPOINT),
            aat_version=data.get("aat_version", AAT_VERSION),
            entropy_bits=int(data.get("entropy_bits", DEFAULT_ENTROPY_BITS)),
            timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
            transport=data.get("transport", "http"),
        )

    @classmethod
    def from_env(cls) -> "RelayConfig":
        return cls(
            servicer_private_key=os.getenv("POKT_SERVICER_PRIVATE_KEY", ""),
            app_private_keys=_split_keys(os.getenv("POKT_APP_PRIVATE_KEYS")),
            pocket_endpoint=os.getenv("POKT_ENDPOINT", DEFAULT_ENDPOINT),
            aat_version=os.getenv("POKT_AAT_VERSION", AAT_VERSION),
            entropy_bits=int(os.getenv("POKT_ENTROPY_BITS", DEFAULT_ENTROPY_BITS)),
            timeout=float(os.getenv("POKT_TIMEOUT", DEFAULT_TIMEOUT)),
            transport=os.getenv("POKT_TRANSPORT", "http").lower(),
        )

    @property
    def servicer_key(self) -> PrivateKey:
        return self._servicer_key

    @property
    def app_keys(self) -> List[PrivateKey]:
        return list(self._app_keys)

    def random_app_private_key(self) -> PrivateKey:
        return secrets.choice(self._app_keys)
