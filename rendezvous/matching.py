"""Pair ``ready`` clients first-come first-served."""

from __future__ import annotations

import logging
from typing import Any

from . import events
from .registry import BUSY, DUPLICATE, ENQUEUED, SessionRegistry
from .transport import ConnectionHub
from .validation import is_valid_wallet_address

logger = logging.getLogger(__name__)


class MatchingEngine:
    def __init__(self, registry: SessionRegistry, hub: ConnectionHub):
        self.registry = registry
        self.hub = hub

    async def on_ready(self, connection_id: str, wallet_address: Any) -> None:
        """
        Match *connection_id* with the oldest waiting client of a different
        wallet, or queue it. The requester that completes a match is the
        initiator; the side that was waiting answers.
        """

        if not is_valid_wallet_address(wallet_address):
            logger.info("rejecting ready from %s: invalid wallet address", connection_id)
            await self.hub.emit(
                connection_id,
                events.ERROR,
                events.ErrorEvent(message=events.INVALID_WALLET_MESSAGE).model_dump(),
            )
            return

        result = self.registry.match_or_enqueue(connection_id, wallet_address)

        if result.status == DUPLICATE:
            logger.info("%s already waiting", wallet_address)
            return
        if result.status == BUSY:
            logger.info("ignoring ready from %s: already waiting or paired", connection_id)
            return
        if result.status == ENQUEUED:
            logger.info("added to waiting list: %s", wallet_address)
            return

        peer_id = result.peer_connection_id
        logger.info("matched %s <-> %s", wallet_address, result.peer_wallet_address)
        await self.hub.emit(
            connection_id,
            events.MATCHED,
            events.MatchedEvent(peer=peer_id, initiator=True).model_dump(),
        )
        await self.hub.emit(
            peer_id,
            events.MATCHED,
            events.MatchedEvent(peer=connection_id, initiator=False).model_dump(),
        )
