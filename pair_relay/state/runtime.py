"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from pair_relay.state.settings import AppSettings
    from pair_relay.runtime.tasks import BackgroundTasks
    from pair_relay.sessions.store import SessionStore
    from pair_relay.monitors.status import StatusReporter
    from pair_relay.monitors.janitor import SessionJanitor
    from pair_relay.monitors.liveness import LivenessMonitor
    from pair_relay.handlers.registry import ConnectionRegistry


@dataclass(slots=True)
class RuntimeDeps:
    settings: AppSettings
    sessions: SessionStore
    registry: ConnectionRegistry
    tasks: BackgroundTasks
    liveness: LivenessMonitor
    janitor: SessionJanitor
    status: StatusReporter

    def start(self) -> None:
        self.liveness.start()
        self.janitor.start()
        self.status.start()

    async def shutdown(self) -> None:
        for worker in (self.liveness, self.janitor, self.status):
            try:
                await worker.stop()
            except Exception:
                logger.exception("runtime shutdown: %s stop failed", worker.name)
        await self.tasks.cancel_all()


__all__ = ["RuntimeDeps"]
