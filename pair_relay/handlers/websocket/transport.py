"""Adapter from a ``websockets`` server connection to the relay transport surface."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from websockets.protocol import State
from websockets.exceptions import ConnectionClosed
from websockets.asyncio.server import ServerConnection

logger = logging.getLogger(__name__)


class WebSocketTransport:
    def __init__(self, ws: ServerConnection) -> None:
        self._ws = ws

    @property
    def is_open(self) -> bool:
        return self._ws.state is State.OPEN

    @property
    def write_backlogged(self) -> bool:
        """True once the write buffer is past its high-water mark, where sends block on drain."""
        transport = self._ws.transport
        if transport is None or transport.is_closing():
            return False
        _low, high = transport.get_write_buffer_limits()
        return transport.get_write_buffer_size() > high

    async def send_text(self, text: str) -> None:
        await self._ws.send(text)

    async def send_bytes(self, data: bytes) -> None:
        await self._ws.send(data)

    async def close(self, *, code: int = 1000, reason: str = "") -> None:
        await self._ws.close(code=code, reason=reason)

    def abort(self) -> None:
        # Hard kill for half-open sockets: no closing handshake.
        self._ws.transport.abort()

    async def ping(self, on_pong: Callable[[], None]) -> bool:
        try:
            pong_waiter = await self._ws.ping()
        except ConnectionClosed:
            return False

        def _done(fut: asyncio.Future) -> None:
            if fut.cancelled() or fut.exception() is not None:
                return
            on_pong()

        pong_waiter.add_done_callback(_done)
        return True


__all__ = ["WebSocketTransport"]
