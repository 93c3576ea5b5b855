"""Waiting queue and pairing table shared by the matching and relay handlers."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

# match_or_enqueue outcomes
DUPLICATE = "duplicate"
BUSY = "busy"
ENQUEUED = "enqueued"
MATCHED = "matched"


@dataclass
class WaitingEntry:
    """A client that asked to be matched and has no peer yet."""

    connection_id: str
    wallet_address: str
    enqueued_at: float


@dataclass
class PairedConnection:
    """One direction of a pairing; ``wallet_address`` is this side's own."""

    peer_connection_id: str
    wallet_address: str


@dataclass
class MatchResult:
    status: str
    peer_connection_id: Optional[str] = None
    peer_wallet_address: Optional[str] = None


@dataclass
class Release:
    peer_connection_id: Optional[str] = None
    waiting_wallet_address: Optional[str] = None


class SessionRegistry:
    """
    Owns the two session tables:
      - waiting: wallet address -> WaitingEntry, oldest first
      - pairs:   connection id  -> PairedConnection, always symmetric

    Every public method takes ``_lock`` for its whole read-decide-mutate
    sequence and never yields, so callers on the event loop, the sweeper
    task and foreign threads all see each call as one atomic step.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._waiting: "OrderedDict[str, WaitingEntry]" = OrderedDict()
        self._pairs: Dict[str, PairedConnection] = {}

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def match_or_enqueue(self, connection_id: str, wallet_address: str) -> MatchResult:
        with self._lock:
            if wallet_address in self._waiting:
                return MatchResult(DUPLICATE)
            if connection_id in self._pairs or self._waiting_address_of(connection_id):
                return MatchResult(BUSY)

            peer = next(
                (e for addr, e in self._waiting.items() if addr != wallet_address),
                None,
            )
            if peer is None:
                self._waiting[wallet_address] = WaitingEntry(
                    connection_id=connection_id,
                    wallet_address=wallet_address,
                    enqueued_at=self._clock(),
                )
                return MatchResult(ENQUEUED)

            del self._waiting[peer.wallet_address]
            self._pairs[connection_id] = PairedConnection(peer.connection_id, wallet_address)
            self._pairs[peer.connection_id] = PairedConnection(connection_id, peer.wallet_address)
            return MatchResult(MATCHED, peer.connection_id, peer.wallet_address)

    def release(self, connection_id: str) -> Release:
        """Drop *connection_id* from both tables, unpairing its peer if any."""

        with self._lock:
            out = Release()
            pair = self._pairs.pop(connection_id, None)
            if pair is not None:
                self._pairs.pop(pair.peer_connection_id, None)
                out.peer_connection_id = pair.peer_connection_id

            addr = self._waiting_address_of(connection_id)
            if addr is not None:
                del self._waiting[addr]
                out.waiting_wallet_address = addr
            return out

    def expire_waiting(self, max_inactive_ms: float) -> List[WaitingEntry]:
        """Remove and return waiting entries enqueued more than *max_inactive_ms* ago."""

        with self._lock:
            cutoff = self._clock() - max_inactive_ms / 1000.0
            expired = [e for e in self._waiting.values() if e.enqueued_at < cutoff]
            for e in expired:
                del self._waiting[e.wallet_address]
            return expired

    def reset(self) -> None:
        with self._lock:
            self._waiting.clear()
            self._pairs.clear()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def pairing_of(self, connection_id: str) -> Optional[PairedConnection]:
        with self._lock:
            return self._pairs.get(connection_id)

    def waiting_entry(self, wallet_address: str) -> Optional[WaitingEntry]:
        with self._lock:
            return self._waiting.get(wallet_address)

    def waiting_entries(self) -> List[WaitingEntry]:
        with self._lock:
            return list(self._waiting.values())

    @property
    def waiting_count(self) -> int:
        with self._lock:
            return len(self._waiting)

    @property
    def paired_count(self) -> int:
        """Number of pairs, not of paired connections."""
        with self._lock:
            return len(self._pairs) // 2

    def _waiting_address_of(self, connection_id: str) -> Optional[str]:
        for addr, entry in self._waiting.items():
            if entry.connection_id == connection_id:
                return addr
        return None


__all__ = [
    "BUSY",
    "DUPLICATE",
    "ENQUEUED",
    "MATCHED",
    "MatchResult",
    "PairedConnection",
    "Release",
    "SessionRegistry",
    "WaitingEntry",
]
