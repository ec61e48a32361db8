from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest
from support.fakes import FakeTransport, make_deps, connect_new, open_pending

from pair_relay.monitors.liveness import LivenessMonitor
from pair_relay.handlers.websocket.manager import open_connection


class _StalledTransport(FakeTransport):
    """Ping blocks like a send waiting on a write buffer that never drains."""

    def __init__(self) -> None:
        super().__init__()
        self.ping_started = asyncio.Event()

    async def ping(self, on_pong: Callable[[], None]) -> bool:
        self.ping_started.set()
        await asyncio.Event().wait()
        return True


async def _settle() -> None:
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_sweep_pings_and_pong_restores_liveness() -> None:
    deps = make_deps()
    conn, transport = await connect_new(deps)

    assert await deps.liveness.sweep() == 0
    await _settle()
    assert conn.is_alive is False
    assert len(transport.pong_callbacks) == 1

    transport.answer_pings()
    assert conn.is_alive is True

    assert await deps.liveness.sweep() == 0
    assert not transport.aborted


@pytest.mark.asyncio
async def test_sweep_terminates_silent_connections() -> None:
    deps = make_deps()
    alive, alive_tx = await connect_new(deps)
    silent, silent_tx = await open_pending(deps)

    await deps.liveness.sweep()
    await _settle()
    alive_tx.answer_pings()

    assert await deps.liveness.sweep() == 1
    assert silent_tx.aborted
    assert not alive_tx.aborted


@pytest.mark.asyncio
async def test_stalled_ping_does_not_hold_up_sweep() -> None:
    deps = make_deps()
    stalled_tx = _StalledTransport()
    stalled = await open_connection(stalled_tx, deps)
    assert stalled is not None
    _, silent_tx = await open_pending(deps)

    try:
        await asyncio.wait_for(deps.liveness.sweep(), timeout=1.0)
        await asyncio.wait_for(stalled_tx.ping_started.wait(), timeout=1.0)

        assert await asyncio.wait_for(deps.liveness.sweep(), timeout=1.0) == 2
        assert stalled_tx.aborted
        assert silent_tx.aborted
    finally:
        await deps.tasks.cancel_all()


@pytest.mark.asyncio
async def test_monitor_loop_runs_on_interval() -> None:
    deps = make_deps()
    _, transport = await connect_new(deps)
    monitor = LivenessMonitor(deps.registry, deps.tasks, interval_s=0.01)

    monitor.start()
    try:
        await asyncio.sleep(0.1)
    finally:
        await monitor.stop()
        await deps.tasks.cancel_all()

    assert transport.aborted
    assert not monitor.running
