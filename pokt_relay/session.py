# pokt_relay/session.py
from __future__ import annotations
import threading

from .logger import get_logger

log = get_logger("POKT.Session")


class SessionState:
    """
    Current session block height for one relay client.

    Starts at 0 (unknown). ``correct`` is the only mutator and is called by
    the relay orchestrator when a node reports the height it expects.
    """

    def __init__(self, height: int = 0):
        self._lock = threading.Lock()
        self._height = int(height)

    def current(self) -> int:
        with self._lock:
            return self._height

    def correct(self, new_height: int) -> None:
        if isinstance(new_height, bool) or not isinstance(new_height, int) or new_height < 0:
            raise ValueError(f"invalid session height: {new_height!r}")
        with self._lock:
            old, self._height = self._height, new_height
        log.info(f"[SESSION] height corrected {old} -> {new_height}")

    def __repr__(self) -> str:
        return f"SessionState(height={self.current()})"
