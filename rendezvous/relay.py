"""Forward negotiation payloads between the two sides of a pairing."""

from __future__ import annotations

import logging
from typing import Any

from . import events
from .registry import SessionRegistry
from .transport import ConnectionHub
from .validation import is_valid_signal_payload, sanitize_signal_payload

logger = logging.getLogger(__name__)


class SignalingRelay:
    """
    Opaque pass-through between exactly two parties. Signals from unpaired
    connections, malformed payloads and signals to a peer that has already
    gone are all dropped without telling the sender.
    """

    def __init__(self, registry: SessionRegistry, hub: ConnectionHub):
        self.registry = registry
        self.hub = hub

    async def on_signal(self, connection_id: str, payload: Any) -> bool:
        pairing = self.registry.pairing_of(connection_id)
        if pairing is None:
            logger.debug("dropping signal from unpaired connection %s", connection_id)
            return False
        if not is_valid_signal_payload(payload):
            logger.debug("dropping malformed signal from %s", connection_id)
            return False

        clean = sanitize_signal_payload(payload)
        peer_id = pairing.peer_connection_id
        logger.debug("forwarding signal from %s to %s", connection_id, peer_id)
        return await self.hub.emit(
            peer_id,
            events.SIGNAL,
            events.SignalEvent(signal=clean["signal"]).model_dump(),
        )
