"""Addressable, best-effort event delivery over WebSockets."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Union

import orjson
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError
from starlette.websockets import WebSocketState

from .validation import is_valid_connection_id

logger = logging.getLogger(__name__)


class Envelope(BaseModel):
    """Wire frame: ``{"event": <name>, "data": <payload>}``."""

    event: str
    data: Any = None


class FrameError(ValueError):
    """Raised for frames that are not a JSON ``{event, data}`` envelope."""


def encode_frame(event: str, data: Any = None) -> str:
    frame: Dict[str, Any] = {"event": event}
    if data is not None:
        frame["data"] = data
    return orjson.dumps(frame).decode("utf-8")


def decode_frame(raw: Union[str, bytes]) -> Envelope:
    try:
        return Envelope.model_validate(orjson.loads(raw))
    except (orjson.JSONDecodeError, ValidationError) as exc:
        raise FrameError("malformed frame") from exc


class Connection:
    def __init__(self, ws: WebSocket, connection_id: str):
        self.ws = ws
        self.connection_id = connection_id
        self._lock = asyncio.Lock()

    @property
    def open(self) -> bool:
        return (
            self.ws.application_state == WebSocketState.CONNECTED
            and self.ws.client_state == WebSocketState.CONNECTED
        )

    async def send(self, event: str, data: Any = None) -> bool:
        text = encode_frame(event, data)
        async with self._lock:
            if not self.open:
                return False
            try:
                await self.ws.send_text(text)
            except (WebSocketDisconnect, RuntimeError, OSError) as exc:
                logger.debug("send to %s failed: %s", self.connection_id, exc)
                return False
        return True


class ConnectionHub:
    """
    Live connections by id. ``emit`` is fire-and-forget: addressing an id
    that has gone away, or a socket that closes mid-send, is a silent no-op
    reported only through the return value.
    """

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def add(self, connection: Connection) -> None:
        self._connections[connection.connection_id] = connection

    def discard(self, connection_id: str) -> Optional[Connection]:
        return self._connections.pop(connection_id, None)

    def __len__(self) -> int:
        return len(self._connections)

    async def emit(self, connection_id: str, event: str, data: Any = None) -> bool:
        if not is_valid_connection_id(connection_id):
            return False
        conn = self._connections.get(connection_id)
        if conn is None:
            logger.debug("dropping %s for unknown connection %s", event, connection_id)
            return False
        return await conn.send(event, data)

    def clear(self) -> None:
        self._connections.clear()


__all__ = [
    "Connection",
    "ConnectionHub",
    "Envelope",
    "FrameError",
    "decode_frame",
    "encode_frame",
]
