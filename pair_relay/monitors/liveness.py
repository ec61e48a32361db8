"""Protocol-level heartbeat that terminates half-open sockets."""

from __future__ import annotations

import logging

from pair_relay.state.connection import Connection
from pair_relay.runtime.tasks import BackgroundTasks
from pair_relay.handlers.registry import ConnectionRegistry

from .periodic import PeriodicWorker

logger = logging.getLogger(__name__)


def _mark_alive(conn: Connection) -> None:
    conn.is_alive = True


class LivenessMonitor(PeriodicWorker):
    """Every interval, abort connections that missed the previous pong, then ping the rest.

    Pings are spawned rather than awaited: a ping waits for the socket's write
    buffer to drain, and one stalled peer must not hold up the sweep. An
    aborted socket ends its message loop, so cleanup runs through the regular
    disconnect path.
    """

    name = "liveness monitor"

    def __init__(self, registry: ConnectionRegistry, tasks: BackgroundTasks, *, interval_s: float) -> None:
        super().__init__(interval_s=interval_s)
        self._registry = registry
        self._tasks = tasks

    async def tick(self) -> None:
        await self.sweep()

    async def sweep(self) -> int:
        terminated = 0
        for conn in self._registry.connections():
            if not conn.is_alive:
                logger.info("connection %s (uid=%s) missed heartbeat; terminating", conn.connection_id, conn.uid)
                conn.transport.abort()
                terminated += 1
                continue
            conn.is_alive = False
            self._tasks.spawn(conn.transport.ping(lambda conn=conn: _mark_alive(conn)))
        return terminated


__all__ = ["LivenessMonitor"]
