"""
pokt_relay.errors
-----------------
Error taxonomy for relay construction and submission.

Builders raise these directly. The relay orchestrator never raises for a
failed relay; it returns a ``RelayOutcome`` carrying one of these instances.
"""

from __future__ import annotations
from typing import Optional


class RelayError(Exception):
    pass


class EncodingError(RelayError):
    """A record could not be canonically serialized."""


class SigningError(RelayError):
    """The underlying key operation failed."""


class NodeNotFound(RelayError):
    def __init__(self, address: str):
        super().__init__(f"no service node found for address {address}")
        self.address = address


class TransportError(RelayError):
    pass


class TransportTransientError(TransportError):
    pass


class TransportPermanentError(TransportError):
    pass


class RejectedWithCorrection(RelayError):
    """The relay carried a stale session height; the session has been corrected."""

    def __init__(self, new_height: int, message: Optional[str] = None):
        super().__init__(message or f"session block height corrected to {new_height}, retry the relay")
        self.new_height = new_height
        self.message = message


class RejectedOther(RelayError):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnexpectedResponse(RelayError):
    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"unexpected status code: {status_code}")
        self.status_code = status_code
        self.body = body
