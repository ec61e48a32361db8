"""Per-connection frame processing and receive loop."""

from __future__ import annotations

import logging
from typing import Any
from collections.abc import AsyncIterable

from websockets.exceptions import ConnectionClosed

from pair_relay.state import Connection, RuntimeDeps
from pair_relay.state.messages import HANDSHAKE_MESSAGES
from pair_relay.errors import MalformedMessageError, UnknownMessageTypeError
from pair_relay.config.protocol import ERROR_INVALID_MESSAGE, ERROR_HANDSHAKE_COMPLETED, ERROR_UNKNOWN_TYPE_PREFIX

from .dispatch import HANDLERS
from .errors import send_error
from .parser import parse_client_message

logger = logging.getLogger(__name__)


async def process_frame(conn: Connection, raw: str | bytes, runtime_deps: RuntimeDeps) -> None:
    if not runtime_deps.registry.owns(conn):
        return

    try:
        msg = parse_client_message(raw)
    except MalformedMessageError as exc:
        logger.info("connection %s sent malformed frame: %s", conn.connection_id, exc)
        await send_error(conn.transport, ERROR_INVALID_MESSAGE)
        return
    except UnknownMessageTypeError as exc:
        logger.info("connection %s sent %s", conn.connection_id, exc)
        await send_error(conn.transport, f"{ERROR_UNKNOWN_TYPE_PREFIX}: {exc.msg_type}")
        return

    is_handshake = isinstance(msg, HANDSHAKE_MESSAGES)
    if conn.is_pending and not is_handshake:
        await send_error(conn.transport, ERROR_INVALID_MESSAGE)
        return
    if not conn.is_pending and is_handshake:
        await send_error(conn.transport, ERROR_HANDSHAKE_COMPLETED)
        return

    handler = HANDLERS[type(msg)]
    await handler(conn, runtime_deps, msg)


async def run_message_loop(conn: Connection, frames: AsyncIterable[Any], runtime_deps: RuntimeDeps) -> None:
    try:
        async for raw in frames:
            await process_frame(conn, raw, runtime_deps)
            if not runtime_deps.registry.owns(conn):
                # Superseded or timed out; the close is already under way.
                return
    except ConnectionClosed:
        return


__all__ = ["process_frame", "run_message_loop"]
