"""Periodic purge of expired sessions."""

from __future__ import annotations

import logging

from pair_relay.sessions.store import SessionStore
from pair_relay.handlers.registry import ConnectionRegistry

from .periodic import PeriodicWorker

logger = logging.getLogger(__name__)


class SessionJanitor(PeriodicWorker):
    name = "session janitor"

    def __init__(self, sessions: SessionStore, registry: ConnectionRegistry, *, interval_s: float) -> None:
        super().__init__(interval_s=interval_s)
        self._sessions = sessions
        self._registry = registry

    async def tick(self) -> None:
        self.sweep()

    def sweep(self, now: float | None = None) -> list[str]:
        # A peer with a live socket is still present even if it has been quiet.
        for conn in self._registry.active():
            self._sessions.touch(conn.uid)

        expired = self._sessions.purge_expired(now)
        if expired:
            logger.info("purged %d expired session(s); %d remaining", len(expired), len(self._sessions))
        return expired


__all__ = ["SessionJanitor"]
