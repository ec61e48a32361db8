"""Runtime dependency construction (session store, registry, background workers)."""

from __future__ import annotations

import logging

from pair_relay.state import RuntimeDeps
from pair_relay.state.settings import AppSettings
from pair_relay.monitors.status import StatusReporter
from pair_relay.sessions.store import TimeFn, SessionStore
from pair_relay.monitors.janitor import SessionJanitor
from pair_relay.monitors.liveness import LivenessMonitor
from pair_relay.handlers.registry import ConnectionRegistry

from .tasks import BackgroundTasks
from .settings import load_settings

logger = logging.getLogger(__name__)


def build_runtime_deps(settings: AppSettings | None = None, *, now_fn: TimeFn | None = None) -> RuntimeDeps:
    settings = settings or load_settings()

    sessions = SessionStore(ttl_s=settings.sessions.ttl_s, now_fn=now_fn)
    registry = ConnectionRegistry(max_connections=settings.server.max_concurrent_connections)
    tasks = BackgroundTasks()

    deps = RuntimeDeps(
        settings=settings,
        sessions=sessions,
        registry=registry,
        tasks=tasks,
        liveness=LivenessMonitor(registry, tasks, interval_s=settings.heartbeat.interval_s),
        janitor=SessionJanitor(sessions, registry, interval_s=settings.sessions.purge_interval_s),
        status=StatusReporter(sessions, registry, interval_s=settings.sessions.status_log_interval_s),
    )
    logger.debug(
        "runtime deps built: ttl=%ss heartbeat=%ss max_connections=%d",
        settings.sessions.ttl_s,
        settings.heartbeat.interval_s,
        settings.server.max_concurrent_connections,
    )
    return deps


__all__ = ["RuntimeDeps", "build_runtime_deps"]
