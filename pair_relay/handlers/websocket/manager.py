"""Primary WebSocket connection handler orchestration."""

from __future__ import annotations

import time
import logging

from websockets.asyncio.server import ServerConnection

from pair_relay.state import Connection, RuntimeDeps
from pair_relay.state.transport import Transport
from pair_relay.config.protocol import MSG_CONNECTION_READY, CLOSE_AT_CAPACITY_REASON, CLOSE_TRY_AGAIN_LATER_CODE

from .disconnect import handle_disconnect
from .message_loop import run_message_loop
from .transport import WebSocketTransport
from .handshake import start_handshake_timer
from .errors import close_quietly, safe_send_message

logger = logging.getLogger(__name__)


async def open_connection(transport: Transport, runtime_deps: RuntimeDeps) -> Connection | None:
    """Admit a socket as PENDING and announce it; None when the server is full."""
    registry = runtime_deps.registry
    if not registry.can_admit():
        logger.warning("rejecting connection: at capacity (%d)", registry.get_connection_count())
        await close_quietly(transport, code=CLOSE_TRY_AGAIN_LATER_CODE, reason=CLOSE_AT_CAPACITY_REASON)
        return None

    conn = registry.open(transport)
    start_handshake_timer(conn, runtime_deps)
    await safe_send_message(transport, MSG_CONNECTION_READY, clientId=conn.connection_id)
    return conn


async def handle_websocket_connection(ws: ServerConnection, runtime_deps: RuntimeDeps) -> None:
    conn = await open_connection(WebSocketTransport(ws), runtime_deps)
    if conn is None:
        return

    logger.info(
        "WebSocket connection accepted id=%s remote=%s. Active: %s",
        conn.connection_id,
        ws.remote_address,
        runtime_deps.registry.get_connection_count(),
    )
    try:
        await run_message_loop(conn, ws, runtime_deps)
    finally:
        await handle_disconnect(conn, runtime_deps)
        logger.info(
            "WebSocket connection closed id=%s uid=%s after %.1fs. Active: %s",
            conn.connection_id,
            conn.uid,
            time.monotonic() - conn.connected_at,
            runtime_deps.registry.get_connection_count(),
        )


__all__ = ["handle_websocket_connection", "open_connection"]
