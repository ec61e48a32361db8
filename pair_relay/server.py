"""Relay WebSocket server: health checks, runtime wiring and graceful shutdown."""

from __future__ import annotations

import signal
import asyncio
import logging
import functools
from http import HTTPStatus
from contextlib import suppress, asynccontextmanager
from collections.abc import Callable, AsyncIterator

import orjson
from websockets.http11 import Request, Response
from websockets.asyncio.server import Server, ServerConnection, serve

from pair_relay.state import RuntimeDeps
from pair_relay.config.server import HEALTH_PATHS
from pair_relay.monitors.status import server_status
from pair_relay.runtime.dependencies import build_runtime_deps
from pair_relay.handlers.websocket.manager import handle_websocket_connection

logger = logging.getLogger(__name__)


def _health_responder(runtime_deps: RuntimeDeps) -> Callable[[ServerConnection, Request], Response | None]:
    def process_request(connection: ServerConnection, request: Request) -> Response | None:
        path = request.path.split("?", 1)[0]
        if path not in HEALTH_PATHS:
            return None
        body = {"status": "ok", **server_status(runtime_deps.sessions, runtime_deps.registry)}
        response = connection.respond(HTTPStatus.OK, orjson.dumps(body).decode("utf-8"))
        del response.headers["Content-Type"]
        response.headers["Content-Type"] = "application/json"
        return response

    return process_request


@asynccontextmanager
async def running_server(
    runtime_deps: RuntimeDeps | None = None,
    *,
    host: str | None = None,
    port: int | None = None,
) -> AsyncIterator[Server]:
    deps = runtime_deps or build_runtime_deps()
    settings = deps.settings.server
    bind_host = settings.host if host is None else host
    bind_port = settings.port if port is None else port

    async with serve(
        functools.partial(handle_websocket_connection, runtime_deps=deps),
        bind_host,
        bind_port,
        process_request=_health_responder(deps),
        max_size=settings.max_message_bytes,
        # Heartbeats are driven by the liveness monitor.
        ping_interval=None,
    ) as server:
        deps.start()
        sockname = server.sockets[0].getsockname() if server.sockets else (bind_host, bind_port)
        logger.info("relay server listening on %s:%s", sockname[0], sockname[1])
        try:
            yield server
        finally:
            await deps.shutdown()
            logger.info("relay server shutting down")


async def serve_forever(runtime_deps: RuntimeDeps | None = None, *, host: str | None = None, port: int | None = None) -> None:
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    async with running_server(runtime_deps, host=host, port=port):
        await stop.wait()


__all__ = ["running_server", "serve_forever"]
