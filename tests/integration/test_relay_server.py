from __future__ import annotations

import json
import asyncio

import pytest
from helpers import recv_json, handshake, relay_server
from websockets.exceptions import ConnectionClosed
from websockets.asyncio.client import connect


@pytest.mark.asyncio
async def test_full_pairing_relay_and_resume_scenario() -> None:
    async with relay_server() as (deps, url):
        asker = await connect(url)
        helper = await connect(url)
        try:
            asker_uid = (await handshake(asker))["uid"]
            helper_uid = (await handshake(helper))["uid"]

            await asker.send(json.dumps({"type": "set-role", "role": "asker"}))
            assert await recv_json(asker) == {"type": "role-set", "role": "asker", "uid": asker_uid}

            await helper.send(json.dumps({"type": "set-role", "role": "helper", "pairWithUID": asker_uid}))
            assert await recv_json(helper) == {"type": "paired", "pairedWithUID": asker_uid, "role": "helper"}
            assert await recv_json(helper) == {"type": "role-set", "role": "helper", "uid": helper_uid}
            assert await recv_json(asker) == {"type": "paired", "pairedWithUID": helper_uid, "role": "asker"}

            await asker.send(json.dumps({"type": "send-question", "question": "what is X?"}))
            assert await recv_json(helper) == {
                "type": "question-received",
                "question": "what is X?",
                "from": asker_uid,
            }

            await helper.send(json.dumps({"type": "send-answer", "answer": "X is Y"}))
            assert await recv_json(asker) == {"type": "answer-received", "answer": "X is Y", "from": helper_uid}

            frame = b"\x01" + bytes(range(256)) * 4
            await asker.send(frame)
            assert await asyncio.wait_for(helper.recv(), timeout=3) == frame

            await helper.close()
            notice = await recv_json(asker)
            assert notice["type"] == "partner-disconnected"
            assert notice["canReconnect"] is True
            assert 1790 <= notice["reconnectWindow"] <= 1800

            helper = await connect(url)
            resumed = await handshake(helper, {"type": "reconnect", "uid": helper_uid, "role": "helper"})
            assert resumed == {"type": "reconnected", "uid": helper_uid, "role": "helper", "pairedWith": asker_uid}
            assert await recv_json(asker) == {"type": "partner-reconnected", "partnerUID": helper_uid}
            assert deps.sessions.get(helper_uid).paired_with == asker_uid
        finally:
            await asker.close()
            await helper.close()


@pytest.mark.asyncio
async def test_second_socket_for_uid_supersedes_first() -> None:
    async with relay_server() as (deps, url):
        async with connect(url) as first, connect(url) as second:
            uid = (await handshake(first))["uid"]
            reply = await handshake(second, {"type": "reconnect", "uid": uid})
            assert reply["type"] == "reconnected"

            with pytest.raises(ConnectionClosed) as exc_info:
                await asyncio.wait_for(first.recv(), timeout=3)
            assert exc_info.value.rcvd is not None
            assert exc_info.value.rcvd.code == 4009

            await second.send(json.dumps({"type": "ping"}))
            assert await recv_json(second) == {"type": "pong"}
            assert [conn.uid for conn in deps.registry.active()] == [uid]


@pytest.mark.asyncio
async def test_malformed_input_keeps_connection_open() -> None:
    async with relay_server() as (_deps, url):
        async with connect(url) as ws:
            await handshake(ws)
            await ws.send("definitely not json")
            assert await recv_json(ws) == {"type": "error", "error": "Invalid message format"}
            await ws.send(b"\x09\x09")
            assert await recv_json(ws) == {"type": "error", "error": "Invalid message format"}
            await ws.send(json.dumps({"type": "ping"}))
            assert await recv_json(ws) == {"type": "pong"}


@pytest.mark.asyncio
async def test_silent_socket_is_dropped_after_handshake_timeout() -> None:
    async with relay_server(handshake_timeout_s=0.1) as (deps, url):
        async with connect(url) as ws:
            assert (await recv_json(ws))["type"] == "connection-ready"
            with pytest.raises(ConnectionClosed) as exc_info:
                await asyncio.wait_for(ws.recv(), timeout=3)
            assert exc_info.value.rcvd is not None
            assert exc_info.value.rcvd.code == 4008
        assert len(deps.registry) == 0


@pytest.mark.asyncio
async def test_health_endpoint_reports_status() -> None:
    async with relay_server() as (_deps, url):
        port = int(url.rsplit(":", 1)[1])
        reader, writer = await asyncio.open_connection("127.0.0.1", port)
        try:
            writer.write(b"GET /health HTTP/1.1\r\nHost: 127.0.0.1\r\n\r\n")
            await writer.drain()
            data = await asyncio.wait_for(reader.read(), timeout=3)
        finally:
            writer.close()

        status_line, _, rest = data.partition(b"\r\n")
        assert b"200" in status_line
        body = json.loads(rest.split(b"\r\n\r\n", 1)[1])
        assert body["status"] == "ok"
        assert body["connections"] == 0
