"""Real relay server on an ephemeral port plus small receive helpers."""

from __future__ import annotations

import json
import asyncio
import dataclasses
from typing import Any
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from support.fakes import make_settings

from pair_relay.state import RuntimeDeps
from pair_relay.server import running_server
from pair_relay.state.settings import ClientSettings
from pair_relay.runtime.dependencies import build_runtime_deps

RECV_TIMEOUT_S = 3.0


@asynccontextmanager
async def relay_server(**session_overrides: Any) -> AsyncIterator[tuple[RuntimeDeps, str]]:
    deps = build_runtime_deps(make_settings(**session_overrides))
    async with running_server(deps, host="127.0.0.1", port=0) as server:
        port = server.sockets[0].getsockname()[1]
        yield deps, f"ws://127.0.0.1:{port}"


def client_settings(url: str, **overrides: Any) -> ClientSettings:
    return dataclasses.replace(make_settings().client, server_url=url, **overrides)


async def recv_json(ws: Any, timeout: float = RECV_TIMEOUT_S) -> dict[str, Any]:
    raw = await asyncio.wait_for(ws.recv(), timeout=timeout)
    assert isinstance(raw, str), f"expected text frame, got {raw!r}"
    return json.loads(raw)


async def handshake(ws: Any, payload: dict[str, Any] | None = None) -> dict[str, Any]:
    ready = await recv_json(ws)
    assert ready["type"] == "connection-ready"
    await ws.send(json.dumps(payload or {"type": "new-connection"}))
    return await recv_json(ws)


async def wait_for_event(
    events: list[tuple[str, dict[str, Any]]],
    name: str,
    *,
    count: int = 1,
    timeout: float = RECV_TIMEOUT_S,
) -> dict[str, Any]:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        matches = [payload for event, payload in events if event == name]
        if len(matches) >= count:
            return matches[count - 1]
        if loop.time() >= deadline:
            raise AssertionError(f"event {name!r} x{count} not seen; got {[e for e, _ in events]}")
        await asyncio.sleep(0.01)
