# pokt_relay/transport/__init__.py
import os
from typing import Optional

from pokt_relay.config import RelayConfig
from pokt_relay.constants import DEFAULT_ENDPOINT
from pokt_relay.transport.transport_base import BaseTransport, RelayResponse
from pokt_relay.transport.transport_http import HTTPAdapter
from pokt_relay.transport.transport_local import LocalAdapter


def transport_factory(config: Optional[RelayConfig] = None) -> BaseTransport:
    """
    mode (config.transport, else POKT_TRANSPORT):
      - "http"  → Pocket node v1 RPC at the configured endpoint
      - "local" → in-process service node keyed by the servicer key
    """
    mode = (config.transport if config else os.getenv("POKT_TRANSPORT", "http")).lower()

    if mode == "http":
        if config:
            return HTTPAdapter(config.pocket_endpoint, timeout=config.timeout)
        return HTTPAdapter(os.getenv("POKT_ENDPOINT", DEFAULT_ENDPOINT))

    if mode == "local":
        if config is None:
            raise ValueError("local transport needs a config carrying the servicer key")
        return LocalAdapter(config.servicer_key)

    raise ValueError(f"Unknown transport: {mode}")


__all__ = ["BaseTransport", "RelayResponse", "HTTPAdapter", "LocalAdapter", "transport_factory"]
