"""Event names and outbound payloads exchanged with clients."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel

# client -> server
READY = "ready"
SIGNAL = "signal"

# server -> client
CONNECTED = "connected"
MATCHED = "matched"
PEER_DISCONNECTED = "peerDisconnected"
ERROR = "error"

INVALID_WALLET_MESSAGE = "Invalid wallet address"
READY_FAILED_MESSAGE = "Failed to process ready signal"


class ConnectedEvent(BaseModel):
    id: str


class MatchedEvent(BaseModel):
    peer: str
    initiator: bool


class SignalEvent(BaseModel):
    signal: Dict[str, Any]


class ErrorEvent(BaseModel):
    message: str
