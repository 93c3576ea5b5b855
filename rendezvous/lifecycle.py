"""Disconnect cleanup and expiry of idle waiting entries."""

from __future__ import annotations

import asyncio
import logging

from . import events
from .registry import SessionRegistry
from .transport import ConnectionHub

logger = logging.getLogger(__name__)


class LifecycleManager:
    def __init__(self, registry: SessionRegistry, hub: ConnectionHub):
        self.registry = registry
        self.hub = hub

    async def on_disconnect(self, connection_id: str) -> None:
        released = self.registry.release(connection_id)
        if released.peer_connection_id is not None:
            logger.info("%s left; notifying peer %s", connection_id, released.peer_connection_id)
            await self.hub.emit(released.peer_connection_id, events.PEER_DISCONNECTED)
        if released.waiting_wallet_address is not None:
            logger.info("removed %s from waiting list", released.waiting_wallet_address)

    def sweep_inactive(self, max_inactive_ms: float) -> int:
        """Drop waiting entries older than *max_inactive_ms*; pairings are never swept."""

        expired = self.registry.expire_waiting(max_inactive_ms)
        for entry in expired:
            logger.info(
                "expired waiting entry %s (connection %s)",
                entry.wallet_address,
                entry.connection_id,
            )
        return len(expired)

    async def run_sweeper(self, max_inactive_ms: float, interval_ms: float) -> None:
        while True:
            await asyncio.sleep(interval_ms / 1000.0)
            try:
                self.sweep_inactive(max_inactive_ms)
            except Exception:
                logger.exception("inactive session sweep failed")
