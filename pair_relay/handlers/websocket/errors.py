"""Send helpers and error replies for relay connections."""

from __future__ import annotations

import logging
from typing import Any

import orjson
from websockets.exceptions import ConnectionClosed

from pair_relay.state.transport import Transport
from pair_relay.config.protocol import KEY_TYPE, MSG_ERROR

logger = logging.getLogger(__name__)


def encode_message(msg_type: str, **fields: Any) -> str:
    return orjson.dumps({KEY_TYPE: msg_type, **fields}).decode("utf-8")


async def safe_send_text(transport: Transport, text: str) -> bool:
    try:
        await transport.send_text(text)
    except ConnectionClosed:
        return False
    except Exception:
        logger.debug("WebSocket send failed", exc_info=True)
        return False
    return True


async def safe_send_bytes(transport: Transport, data: bytes) -> bool:
    try:
        await transport.send_bytes(data)
    except ConnectionClosed:
        return False
    except Exception:
        logger.debug("WebSocket binary send failed", exc_info=True)
        return False
    return True


async def safe_send_message(transport: Transport, msg_type: str, **fields: Any) -> bool:
    return await safe_send_text(transport, encode_message(msg_type, **fields))


async def send_error(transport: Transport, message: str) -> bool:
    return await safe_send_message(transport, MSG_ERROR, error=message)


async def close_quietly(transport: Transport, *, code: int, reason: str) -> None:
    try:
        await transport.close(code=code, reason=reason)
    except Exception:
        logger.debug("WebSocket close failed", exc_info=True)


__all__ = [
    "close_quietly",
    "encode_message",
    "safe_send_bytes",
    "safe_send_message",
    "safe_send_text",
    "send_error",
]
