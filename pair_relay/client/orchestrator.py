"""Reconnecting relay client.

``RelayClient`` owns a single logical connection to the relay. Each transport
it opens is tagged with a generation number; events from a transport that is
no longer current (superseded by a retry, a manual reconnect or a
disconnect) are ignored. A connect attempt resolves exactly once: success on
``connected``/``reconnected``, failure on transport error, early close or
timeout.
"""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable, Awaitable

import orjson
from websockets.exceptions import ConnectionClosed
from websockets.asyncio.client import ClientConnection, connect

from pair_relay.state.settings import ClientSettings
from pair_relay.runtime.settings import load_client_settings
from pair_relay.state.client import ClientResult, SavedConnection
from pair_relay.config.server import DEFAULT_WS_MAX_MESSAGE_BYTES
from pair_relay.config.protocol import (
    KEY_TYPE,
    MSG_PING,
    MSG_PAIRED,
    MSG_ROLE_SET,
    MSG_CONNECTED,
    MSG_RECONNECT,
    MSG_SET_ROLE,
    MSG_RECONNECTED,
    MSG_STOP_AUDIO,
    MSG_SEND_ANSWER,
    MSG_START_AUDIO,
    AUDIO_BYTE_BY_TYPE,
    AUDIO_TYPE_BY_BYTE,
    MSG_SEND_QUESTION,
    MSG_NEW_CONNECTION,
    MSG_CONNECTION_READY,
)

from .backoff import backoff_delay

logger = logging.getLogger(__name__)

EVENT_DISCONNECTED = "disconnected"
EVENT_RECONNECTING = "reconnecting"
EVENT_RECONNECT_FAILED = "reconnect-failed"
EVENT_AUDIO_FRAME = "audio-frame"

ERROR_ALREADY_CONNECTED = "Already connected"
ERROR_NO_SERVER_URL = "No relay server URL configured"
ERROR_CONNECTION_TIMEOUT = "Connection timeout"
ERROR_CLOSED_EARLY = "Connection closed before handshake completed"
ERROR_CANCELLED = "Connection attempt cancelled"
ERROR_NOTHING_TO_RESUME = "No previous connection to resume"
REASON_MAX_ATTEMPTS = "Max attempts reached"

EventCallback = Callable[[str, dict[str, Any]], None]
ConnectFn = Callable[[str], Awaitable[Any]]


async def open_relay_connection(url: str) -> ClientConnection:
    return await connect(url, max_size=DEFAULT_WS_MAX_MESSAGE_BYTES)


def _encode(payload: dict[str, Any]) -> str:
    return orjson.dumps(payload).decode("utf-8")


class RelayClient:
    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        on_event: EventCallback | None = None,
        connect_fn: ConnectFn | None = None,
    ) -> None:
        self._settings = settings or load_client_settings()
        self._on_event = on_event
        self._connect_fn = connect_fn or open_relay_connection

        self._ws: Any | None = None
        self._generation = 0
        self._pending: asyncio.Future[ClientResult] | None = None
        self._saved: SavedConnection | None = None
        self._attempts = 0

        self._connected = False
        self._ready_seen = False
        self._client_id: str | None = None
        self._uid: str | None = None
        self._role: str | None = None
        self._paired_with: str | None = None

        self._reader_task: asyncio.Task | None = None
        self._keepalive_task: asyncio.Task | None = None
        self._backoff_task: asyncio.Task | None = None
        self._backoff_sleeping = False

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def uid(self) -> str | None:
        return self._uid

    @property
    def reconnect_attempts(self) -> int:
        return self._attempts

    def status(self) -> dict[str, Any]:
        return {
            "connected": self._connected,
            "clientId": self._client_id,
            "uid": self._uid,
            "role": self._role,
            "pairedWith": self._paired_with,
            "serverUrl": self._saved.server_url if self._saved is not None else None,
            "reconnectAttempts": self._attempts,
            "reconnecting": self._backoff_task is not None and not self._backoff_task.done(),
        }

    # Connection lifecycle

    async def connect(
        self,
        role: str,
        pair_with_uid: str | None = None,
        *,
        server_url: str | None = None,
        existing_uid: str | None = None,
    ) -> ClientResult:
        # A retry that already opened its socket owns the attempt; let it finish.
        if self._ws is not None or self._attempt_in_flight():
            return ClientResult(success=False, error=ERROR_ALREADY_CONNECTED)
        self._cancel_sleeping_retry()
        self._attempts = 0
        return await self._open(role, pair_with_uid, server_url=server_url, existing_uid=existing_uid)

    async def reconnect(self) -> ClientResult:
        """Manually re-open with the saved parameters, resuming the saved UID."""
        saved = self._saved
        if saved is None:
            return ClientResult(success=False, error=ERROR_NOTHING_TO_RESUME)
        # An in-flight retry is failed with ERROR_CANCELLED by the retire below.
        self._cancel_sleeping_retry()
        self._attempts = 0
        await self._retire_transport()
        return await self._open(
            saved.role,
            saved.pair_with_uid,
            server_url=saved.server_url,
            existing_uid=saved.uid,
        )

    async def disconnect(self) -> None:
        self._saved = None
        self._cancel_backoff()
        await self._retire_transport()
        logger.info("relay client disconnected")

    async def _open(
        self,
        role: str,
        pair_with_uid: str | None,
        *,
        server_url: str | None,
        existing_uid: str | None,
    ) -> ClientResult:
        if self._ws is not None:
            return ClientResult(success=False, error=ERROR_ALREADY_CONNECTED)

        url = (server_url or self._settings.server_url or "").strip()
        if not url:
            return ClientResult(success=False, error=ERROR_NO_SERVER_URL)

        self._saved = SavedConnection(role=role, pair_with_uid=pair_with_uid, server_url=url, uid=existing_uid)
        self._generation += 1
        generation = self._generation
        pending: asyncio.Future[ClientResult] = asyncio.get_running_loop().create_future()
        self._pending = pending
        self._ready_seen = False

        timeout_s = self._settings.connect_timeout_s
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_s
        logger.info("connecting to %s (resume uid=%s)", url, existing_uid)

        try:
            ws = await asyncio.wait_for(self._connect_fn(url), timeout=timeout_s)
        except TimeoutError:
            return self._fail_attempt(generation, ERROR_CONNECTION_TIMEOUT)
        except Exception as exc:
            logger.warning("relay connect to %s failed: %s", url, exc)
            return self._fail_attempt(generation, str(exc) or type(exc).__name__)

        if generation != self._generation:
            await self._close_transport(ws)
            return ClientResult(success=False, error=ERROR_CANCELLED)

        self._ws = ws
        self._reader_task = asyncio.create_task(self._read_loop(ws, generation))

        try:
            return await asyncio.wait_for(asyncio.shield(pending), timeout=max(0.0, deadline - loop.time()))
        except TimeoutError:
            logger.warning("no handshake reply from %s within %ss", url, timeout_s)
            self._resolve(generation, ClientResult(success=False, error=ERROR_CONNECTION_TIMEOUT))
            if self._is_current(ws, generation):
                await self._retire_transport()
            return pending.result()

    def _fail_attempt(self, generation: int, error: str) -> ClientResult:
        result = ClientResult(success=False, error=error)
        self._resolve(generation, result)
        return result

    def _resolve(self, generation: int, result: ClientResult) -> None:
        pending = self._pending
        if generation != self._generation or pending is None or pending.done():
            return
        pending.set_result(result)

    def _attempt_in_flight(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def _is_current(self, ws: Any, generation: int) -> bool:
        return generation == self._generation and ws is self._ws

    async def _retire_transport(self) -> None:
        """Detach the current transport so its late events are ignored, then close it."""
        self._generation += 1
        ws = self._ws
        self._ws = None
        self._connected = False
        pending = self._pending
        if pending is not None and not pending.done():
            pending.set_result(ClientResult(success=False, error=ERROR_CANCELLED))
        self._cancel_task(self._keepalive_task)
        self._keepalive_task = None
        if ws is not None:
            await self._close_transport(ws)
        self._cancel_task(self._reader_task)
        self._reader_task = None

    async def _close_transport(self, ws: Any) -> None:
        with contextlib.suppress(Exception):
            await asyncio.wait_for(ws.close(), timeout=self._settings.close_wait_s)

    # Inbound

    async def _read_loop(self, ws: Any, generation: int) -> None:
        try:
            async for raw in ws:
                if not self._is_current(ws, generation):
                    return
                if isinstance(raw, (bytes, bytearray)):
                    self._handle_binary(bytes(raw))
                else:
                    await self._handle_text(ws, generation, raw)
        except ConnectionClosed:
            pass
        finally:
            self._on_transport_closed(ws, generation)

    def _handle_binary(self, data: bytes) -> None:
        if not data:
            return
        self._emit(EVENT_AUDIO_FRAME, {"audioType": AUDIO_TYPE_BY_BYTE.get(data[0]), "data": data[1:]})

    async def _handle_text(self, ws: Any, generation: int, raw: str) -> None:
        try:
            msg = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.warning("ignoring unparseable relay message")
            return
        if not isinstance(msg, dict) or not isinstance(msg.get(KEY_TYPE), str):
            return
        msg_type = msg[KEY_TYPE]

        if msg_type == MSG_CONNECTION_READY:
            if self._ready_seen:
                return
            self._ready_seen = True
            self._client_id = msg.get("clientId")
            await self._send_handshake(ws)
            return

        if msg_type in (MSG_CONNECTED, MSG_RECONNECTED):
            self._on_handshake_complete(ws, generation, msg, resumed=msg_type == MSG_RECONNECTED)
        elif msg_type == MSG_ROLE_SET:
            self._role = msg.get("role")
        elif msg_type == MSG_PAIRED:
            self._paired_with = msg.get("pairedWithUID")

        self._emit(msg_type, msg)

    async def _send_handshake(self, ws: Any) -> None:
        saved = self._saved
        if saved is not None and saved.uid:
            payload = {
                KEY_TYPE: MSG_RECONNECT,
                "uid": saved.uid,
                "role": saved.role,
                "pairWithUID": saved.pair_with_uid,
            }
        else:
            payload = {KEY_TYPE: MSG_NEW_CONNECTION}
        with contextlib.suppress(ConnectionClosed):
            await ws.send(_encode(payload))

    def _on_handshake_complete(self, ws: Any, generation: int, msg: dict[str, Any], *, resumed: bool) -> None:
        uid = msg.get("uid")
        if self._saved is not None:
            self._saved.uid = uid
        self._uid = uid
        self._attempts = 0
        self._connected = True
        if resumed:
            self._role = msg.get("role") or self._role
            self._paired_with = msg.get("pairedWith")
        else:
            self._paired_with = None
        logger.info("relay %s uid=%s", "session resumed" if resumed else "connected", uid)
        self._start_keepalive(ws, generation)
        self._resolve(generation, ClientResult(success=True, uid=uid, resumed=resumed))

    def _on_transport_closed(self, ws: Any, generation: int) -> None:
        if not self._is_current(ws, generation):
            return
        was_connected = self._connected
        self._ws = None
        self._connected = False
        self._cancel_task(self._keepalive_task)
        self._keepalive_task = None

        pending = self._pending
        if pending is not None and not pending.done():
            pending.set_result(ClientResult(success=False, error=ERROR_CLOSED_EARLY))
            return
        if was_connected:
            logger.info("relay connection lost")
            self._emit(EVENT_DISCONNECTED, {})
            self._schedule_reconnect()

    # Reconnect

    def _schedule_reconnect(self) -> None:
        saved = self._saved
        if saved is None:
            return
        max_attempts = self._settings.max_reconnect_attempts
        if self._attempts >= max_attempts:
            logger.warning("giving up after %d reconnect attempts", self._attempts)
            self._emit(EVENT_RECONNECT_FAILED, {"reason": REASON_MAX_ATTEMPTS})
            return

        delay = backoff_delay(
            self._attempts,
            self._settings.reconnect_base_delay_s,
            self._settings.reconnect_max_delay_s,
        )
        logger.info("reconnecting in %.1fs (attempt %d/%d)", delay, self._attempts + 1, max_attempts)
        self._emit(EVENT_RECONNECTING, {"attempt": self._attempts + 1, "delay": delay})
        self._backoff_task = asyncio.create_task(self._reconnect_after(delay))

    async def _reconnect_after(self, delay: float) -> None:
        self._backoff_sleeping = True
        try:
            await asyncio.sleep(delay)
        finally:
            self._backoff_sleeping = False
        self._attempts += 1
        saved = self._saved
        if saved is None:
            return
        result = await self._open(
            saved.role,
            saved.pair_with_uid,
            server_url=saved.server_url,
            existing_uid=saved.uid,
        )
        # Cancelled means a manual reconnect or disconnect took over.
        if not result.success and result.error not in (ERROR_ALREADY_CONNECTED, ERROR_CANCELLED):
            self._schedule_reconnect()

    def _cancel_sleeping_retry(self) -> None:
        if self._backoff_sleeping:
            self._cancel_backoff()

    def _cancel_backoff(self) -> None:
        self._cancel_task(self._backoff_task)
        self._backoff_task = None
        self._backoff_sleeping = False

    @staticmethod
    def _cancel_task(task: asyncio.Task | None) -> None:
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()

    # Keepalive

    def _start_keepalive(self, ws: Any, generation: int) -> None:
        self._cancel_task(self._keepalive_task)
        interval_s = self._settings.keepalive_interval_s
        if interval_s <= 0:
            self._keepalive_task = None
            return
        self._keepalive_task = asyncio.create_task(self._keepalive_loop(ws, generation, interval_s))

    async def _keepalive_loop(self, ws: Any, generation: int, interval_s: float) -> None:
        try:
            while True:
                await asyncio.sleep(interval_s)
                if not self._is_current(ws, generation):
                    return
                await ws.send(_encode({KEY_TYPE: MSG_PING}))
        except ConnectionClosed:
            return

    # Outbound

    async def _send(self, payload: dict[str, Any]) -> bool:
        ws = self._ws
        if ws is None or not self._connected:
            return False
        try:
            await ws.send(_encode(payload))
        except ConnectionClosed:
            return False
        return True

    async def set_role(self, role: str, pair_with_uid: str | None = None) -> bool:
        if self._saved is not None:
            self._saved.role = role
            self._saved.pair_with_uid = pair_with_uid
        return await self._send({KEY_TYPE: MSG_SET_ROLE, "role": role, "pairWithUID": pair_with_uid})

    async def send_question(self, question: str) -> bool:
        return await self._send({KEY_TYPE: MSG_SEND_QUESTION, "question": question})

    async def send_answer(self, answer: str) -> bool:
        return await self._send({KEY_TYPE: MSG_SEND_ANSWER, "answer": answer})

    async def start_audio(self, audio_type: str) -> bool:
        return await self._send({KEY_TYPE: MSG_START_AUDIO, "audioType": audio_type})

    async def stop_audio(self, audio_type: str) -> bool:
        return await self._send({KEY_TYPE: MSG_STOP_AUDIO, "audioType": audio_type})

    async def send_audio_frame(self, audio_type: str, pcm: bytes) -> bool:
        header = AUDIO_BYTE_BY_TYPE.get(audio_type)
        if header is None:
            raise ValueError(f"unknown audio type {audio_type!r}")
        ws = self._ws
        if ws is None or not self._connected:
            return False
        try:
            await ws.send(bytes((header,)) + bytes(pcm))
        except ConnectionClosed:
            return False
        return True

    def _emit(self, name: str, payload: dict[str, Any]) -> None:
        if self._on_event is None:
            return
        try:
            self._on_event(name, payload)
        except Exception:
            logger.exception("relay client event callback failed for %s", name)


__all__ = [
    "EVENT_AUDIO_FRAME",
    "EVENT_DISCONNECTED",
    "EVENT_RECONNECTING",
    "EVENT_RECONNECT_FAILED",
    "RelayClient",
    "open_relay_connection",
]
