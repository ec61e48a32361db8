"""Transport surface the relay handlers depend on."""

from __future__ import annotations

from typing import Protocol
from collections.abc import Callable


class Transport(Protocol):
    @property
    def is_open(self) -> bool: ...

    @property
    def write_backlogged(self) -> bool: ...

    async def send_text(self, text: str) -> None: ...

    async def send_bytes(self, data: bytes) -> None: ...

    async def close(self, *, code: int = 1000, reason: str = "") -> None: ...

    def abort(self) -> None: ...

    async def ping(self, on_pong: Callable[[], None]) -> bool: ...


__all__ = ["Transport"]
