"""Server status snapshot and its periodic log line."""

from __future__ import annotations

import logging
from typing import Any

from pair_relay.state.session import Role
from pair_relay.sessions.store import SessionStore
from pair_relay.handlers.registry import ConnectionRegistry

from .periodic import PeriodicWorker

logger = logging.getLogger(__name__)


def server_status(sessions: SessionStore, registry: ConnectionRegistry) -> dict[str, Any]:
    askers = helpers = unassigned = 0
    for conn in registry.active():
        session = sessions.get(conn.uid)
        role = session.role if session is not None else None
        if role is Role.ASKER:
            askers += 1
        elif role is Role.HELPER:
            helpers += 1
        else:
            unassigned += 1

    counts = sessions.counts()
    return {
        "connections": len(registry),
        "askers": askers,
        "helpers": helpers,
        "unassigned": unassigned,
        "pairs": counts["paired_sessions"] // 2,
        "sessions": counts["sessions"],
    }


def log_server_status(sessions: SessionStore, registry: ConnectionRegistry) -> dict[str, Any]:
    status = server_status(sessions, registry)
    logger.info(
        "status: connections=%d askers=%d helpers=%d unassigned=%d pairs=%d sessions=%d",
        status["connections"],
        status["askers"],
        status["helpers"],
        status["unassigned"],
        status["pairs"],
        status["sessions"],
    )
    return status


class StatusReporter(PeriodicWorker):
    name = "status reporter"

    def __init__(self, sessions: SessionStore, registry: ConnectionRegistry, *, interval_s: float) -> None:
        super().__init__(interval_s=interval_s)
        self._sessions = sessions
        self._registry = registry

    async def tick(self) -> None:
        log_server_status(self._sessions, self._registry)


__all__ = ["StatusReporter", "log_server_status", "server_status"]
