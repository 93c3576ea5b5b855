import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from . import config, events
from .lifecycle import LifecycleManager
from .matching import MatchingEngine
from .registry import SessionRegistry
from .relay import SignalingRelay
from .transport import Connection, ConnectionHub, Envelope, FrameError, decode_frame

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# Core state
# ------------------------------------------------------------------------------
REGISTRY = SessionRegistry()
HUB = ConnectionHub()
MATCHING = MatchingEngine(REGISTRY, HUB)
RELAY = SignalingRelay(REGISTRY, HUB)
LIFECYCLE = LifecycleManager(REGISTRY, HUB)

_STARTED_AT = time.monotonic()


def reset_state():
    """Reset in-memory session state (used by tests)."""
    REGISTRY.reset()
    HUB.clear()


# ------------------------------------------------------------------------------
# Startup
# ------------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = asyncio.create_task(
        LIFECYCLE.run_sweeper(config.SESSION_MAX_INACTIVE_MS, config.SESSION_CLEANUP_INTERVAL_MS)
    )
    logger.info("signaling server ready")

    yield

    sweeper.cancel()


app = FastAPI(title="wallet rendezvous relay", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# ------------------------------------------------------------------------------
# Event dispatch
# ------------------------------------------------------------------------------
async def dispatch(connection_id: str, envelope: Envelope):
    """Route one inbound event; no handler failure escapes to the socket loop."""

    if envelope.event == events.READY:
        data = envelope.data if isinstance(envelope.data, dict) else {}
        try:
            await MATCHING.on_ready(connection_id, data.get("walletAddress"))
        except Exception:
            logger.exception("error in ready handler for %s", connection_id)
            await HUB.emit(
                connection_id,
                events.ERROR,
                events.ErrorEvent(message=events.READY_FAILED_MESSAGE).model_dump(),
            )

    elif envelope.event == events.SIGNAL:
        try:
            await RELAY.on_signal(connection_id, envelope.data)
        except Exception:
            logger.exception("error in signal handler for %s", connection_id)

    else:
        logger.debug("ignoring unknown event %r from %s", envelope.event, connection_id)


# ------------------------------------------------------------------------------
# WebSocket endpoint: /ws
# ------------------------------------------------------------------------------
@app.websocket("/ws")
async def signaling_socket(ws: WebSocket):
    await ws.accept()
    connection_id = uuid.uuid4().hex
    conn = Connection(ws, connection_id)
    HUB.add(conn)
    logger.info("user connected: %s", connection_id)
    await conn.send(events.CONNECTED, events.ConnectedEvent(id=connection_id).model_dump())

    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue
            try:
                envelope = decode_frame(raw)
            except FrameError:
                logger.debug("dropping malformed frame from %s", connection_id)
                continue
            await dispatch(connection_id, envelope)
    except Exception:
        logger.exception("connection %s failed", connection_id)
        if conn.open:
            await ws.close(code=1011)
    finally:
        HUB.discard(connection_id)
        try:
            await LIFECYCLE.on_disconnect(connection_id)
        except Exception:
            logger.exception("error handling disconnect of %s", connection_id)
        logger.info("user disconnected: %s", connection_id)


# ------------------------------------------------------------------------------
# HTTP endpoints
# ------------------------------------------------------------------------------
class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float


class SessionStats(BaseModel):
    waiting: int
    paired: int
    connections: int


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime=time.monotonic() - _STARTED_AT,
    )


@app.get("/sessions", response_model=SessionStats)
async def session_stats() -> SessionStats:
    """Counts of waiting clients, active pairs and open sockets."""

    return SessionStats(
        waiting=REGISTRY.waiting_count,
        paired=REGISTRY.paired_count,
        connections=len(HUB),
    )


def main():
    import uvicorn

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    logger.info("signaling server starting on %s:%s", config.HOST, config.PORT)
    uvicorn.run(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower(),
        ws_ping_interval=config.WS_PING_INTERVAL_S,
        ws_ping_timeout=config.WS_PING_TIMEOUT_S,
    )


if __name__ == "__main__":
    main()
