"""Per-socket ephemeral connection state."""

from __future__ import annotations

import time
import asyncio
from enum import Enum
from dataclasses import field, dataclass

from .transport import Transport


class ConnectionState(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass(slots=True, eq=False)
class Connection:
    connection_id: str
    transport: Transport
    state: ConnectionState = ConnectionState.PENDING
    uid: str | None = None
    is_alive: bool = True
    handshake_timer: asyncio.TimerHandle | None = None
    connected_at: float = field(default_factory=time.monotonic)

    @property
    def is_pending(self) -> bool:
        return self.state is ConnectionState.PENDING

    @property
    def is_active(self) -> bool:
        return self.state is ConnectionState.ACTIVE

    def cancel_handshake_timer(self) -> None:
        if self.handshake_timer is not None:
            self.handshake_timer.cancel()
            self.handshake_timer = None


__all__ = ["Connection", "ConnectionState"]
