"""Per-socket connection registry with admission control."""

from __future__ import annotations

import uuid

from pair_relay.state.transport import Transport
from pair_relay.state.connection import Connection, ConnectionState


class ConnectionRegistry:
    """Owns every open connection and the UID -> live connection index.

    All mutation happens on the event loop thread, so no locking is needed.
    """

    def __init__(self, *, max_connections: int) -> None:
        self._max = max(1, int(max_connections))
        self._connections: dict[str, Connection] = {}
        self._by_uid: dict[str, str] = {}

    def can_admit(self) -> bool:
        return len(self._connections) < self._max

    def open(self, transport: Transport) -> Connection:
        conn = Connection(connection_id=str(uuid.uuid4()), transport=transport)
        self._connections[conn.connection_id] = conn
        return conn

    def get(self, connection_id: str | None) -> Connection | None:
        if connection_id is None:
            return None
        return self._connections.get(connection_id)

    def owns(self, conn: Connection) -> bool:
        return self._connections.get(conn.connection_id) is conn

    def bind(self, conn: Connection, uid: str) -> None:
        """Move a connection to ACTIVE under ``uid`` and stop its handshake timer."""
        conn.cancel_handshake_timer()
        conn.uid = uid
        conn.state = ConnectionState.ACTIVE
        self._by_uid[uid] = conn.connection_id

    def for_uid(self, uid: str | None) -> Connection | None:
        if not uid:
            return None
        conn = self._connections.get(self._by_uid.get(uid, ""))
        if conn is None or not conn.is_active:
            return None
        return conn

    def remove(self, conn: Connection) -> bool:
        """Drop the entry; returns False when the registry no longer owned it."""
        conn.cancel_handshake_timer()
        conn.state = ConnectionState.CLOSED
        if self._connections.get(conn.connection_id) is not conn:
            return False
        del self._connections[conn.connection_id]
        if conn.uid is not None and self._by_uid.get(conn.uid) == conn.connection_id:
            del self._by_uid[conn.uid]
        return True

    def connections(self) -> list[Connection]:
        return list(self._connections.values())

    def active(self) -> list[Connection]:
        return [conn for conn in self._connections.values() if conn.is_active]

    def get_connection_count(self) -> int:
        return len(self._connections)

    def __len__(self) -> int:
        return len(self._connections)


__all__ = ["ConnectionRegistry"]
