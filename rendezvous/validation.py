"""Shape checks for client-supplied identities and signaling payloads."""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping

# Solana-style base58: no 0, I, O or l
_WALLET_RE = re.compile(r"[1-9A-HJ-NP-Za-km-z]{32,44}")

SIGNAL_FIELDS = ("type", "sdp", "candidate", "usernameFragment", "sdpMLineIndex", "sdpMid")


def is_valid_wallet_address(address: Any) -> bool:
    if not isinstance(address, str):
        return False
    return _WALLET_RE.fullmatch(address) is not None


def is_valid_signal_payload(data: Any) -> bool:
    """Return True when *data* carries an object ``signal`` and, optionally, a string ``peer``."""

    if not isinstance(data, Mapping):
        return False
    if not isinstance(data.get("signal"), Mapping):
        return False
    peer = data.get("peer")
    if peer is not None and not isinstance(peer, str):
        return False
    return True


def is_valid_connection_id(connection_id: Any) -> bool:
    return isinstance(connection_id, str) and len(connection_id) > 0


def sanitize_signal_payload(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Project ``signal`` down to the WebRTC negotiation fields.

    Every allow-listed key is present in the result; absent ones map to
    ``None``. Anything else the client put in ``signal`` is discarded.
    """

    signal = data["signal"]
    return {
        "signal": {name: signal.get(name) for name in SIGNAL_FIELDS},
        "peer": data.get("peer"),
    }


__all__ = [
    "SIGNAL_FIELDS",
    "is_valid_connection_id",
    "is_valid_signal_payload",
    "is_valid_wallet_address",
    "sanitize_signal_payload",
]
