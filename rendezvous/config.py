"""Environment-driven settings for the rendezvous server."""

from __future__ import annotations

import os
from typing import List

HOST = os.getenv("SIGNAL_HOST", "0.0.0.0")
PORT = int(os.getenv("SIGNAL_PORT", "3001"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS: List[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
]

# session.maxInactiveTime / session.cleanupInterval, both in milliseconds
SESSION_MAX_INACTIVE_MS = int(os.getenv("SESSION_MAX_INACTIVE_MS", "300000"))
SESSION_CLEANUP_INTERVAL_MS = int(os.getenv("SESSION_CLEANUP_INTERVAL_MS", "60000"))

WS_PING_INTERVAL_S = float(os.getenv("WS_PING_INTERVAL_S", "25"))
WS_PING_TIMEOUT_S = float(os.getenv("WS_PING_TIMEOUT_S", "20"))
