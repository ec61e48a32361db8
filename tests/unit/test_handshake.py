from __future__ import annotations

import asyncio
import dataclasses

import pytest
from support.fakes import (
    TTL_S,
    FakeClock,
    FakeTransport,
    make_deps,
    send_json,
    connect_new,
    connect_pair,
    open_pending,
    make_settings,
)

from pair_relay.state import Role
from pair_relay.runtime.dependencies import build_runtime_deps
from pair_relay.handlers.websocket.manager import open_connection
from pair_relay.handlers.websocket.disconnect import handle_disconnect
from pair_relay.handlers.websocket.message_loop import process_frame


@pytest.mark.asyncio
async def test_open_connection_announces_pending_connection() -> None:
    deps = make_deps()
    conn, transport = await open_pending(deps)

    assert conn.is_pending
    assert conn.handshake_timer is not None
    assert transport.messages() == [{"type": "connection-ready", "clientId": conn.connection_id}]


@pytest.mark.asyncio
async def test_new_connection_assigns_uid_and_session() -> None:
    deps = make_deps()
    conn, transport = await connect_new(deps)

    reply = transport.last()
    assert reply["type"] == "connected"
    assert reply["clientId"] == conn.connection_id
    assert reply["uid"] == conn.uid
    assert len(conn.uid) == 8
    assert deps.sessions.get(conn.uid).connection_id == conn.connection_id
    assert deps.registry.for_uid(conn.uid) is conn
    assert conn.handshake_timer is None


@pytest.mark.asyncio
async def test_messages_before_handshake_are_rejected() -> None:
    deps = make_deps()
    conn, transport = await open_pending(deps)
    transport.clear()

    await send_json(conn, deps, {"type": "set-role", "role": "asker"})
    await process_frame(conn, b"\x00\x01\x02", deps)

    assert transport.messages() == [
        {"type": "error", "error": "Invalid message format"},
        {"type": "error", "error": "Invalid message format"},
    ]
    assert conn.is_pending


@pytest.mark.asyncio
async def test_second_handshake_is_rejected() -> None:
    deps = make_deps()
    conn, transport = await connect_new(deps)
    uid = conn.uid

    await send_json(conn, deps, {"type": "new-connection"})
    await send_json(conn, deps, {"type": "reconnect", "uid": uid})

    assert transport.messages("error") == [
        {"type": "error", "error": "Handshake already completed"},
        {"type": "error", "error": "Handshake already completed"},
    ]
    assert conn.uid == uid
    assert len(deps.sessions) == 1


@pytest.mark.asyncio
async def test_reconnect_with_unknown_uid_falls_back_to_new_identity() -> None:
    deps = make_deps()
    conn, transport = await open_pending(deps)

    await send_json(conn, deps, {"type": "reconnect", "uid": "DEADBEEF", "role": "helper"})

    reply = transport.last()
    assert reply["type"] == "connected"
    assert reply["uid"] != "DEADBEEF"
    assert "DEADBEEF" not in deps.sessions


@pytest.mark.asyncio
async def test_reconnect_after_ttl_yields_new_uid() -> None:
    clock = FakeClock()
    deps = make_deps(clock)
    conn, _ = await connect_new(deps)
    old_uid = conn.uid
    await handle_disconnect(conn, deps)

    clock.advance(TTL_S + 1)
    fresh, transport = await open_pending(deps)
    await send_json(fresh, deps, {"type": "reconnect", "uid": old_uid})

    assert transport.last()["type"] == "connected"
    assert fresh.uid != old_uid


@pytest.mark.asyncio
async def test_reconnect_within_ttl_restores_pairing_and_notifies_partner() -> None:
    clock = FakeClock()
    deps = make_deps(clock)
    (asker, asker_tx), (helper, _) = await connect_pair(deps)
    helper_uid = helper.uid
    await handle_disconnect(helper, deps)
    asker_tx.clear()

    clock.advance(600)
    fresh, fresh_tx = await open_pending(deps)
    await send_json(fresh, deps, {"type": "reconnect", "uid": helper_uid, "role": "helper"})

    assert fresh_tx.last() == {"type": "reconnected", "uid": helper_uid, "role": "helper", "pairedWith": asker.uid}
    assert asker_tx.messages() == [{"type": "partner-reconnected", "partnerUID": helper_uid}]
    assert deps.registry.for_uid(helper_uid) is fresh
    assert deps.sessions.get(helper_uid).connection_id == fresh.connection_id
    assert deps.sessions.get(helper_uid).last_seen == clock.now


@pytest.mark.asyncio
async def test_reconnect_keeps_stored_role_when_none_given() -> None:
    deps = make_deps()
    conn, _ = await connect_new(deps)
    await send_json(conn, deps, {"type": "set-role", "role": "asker"})
    await handle_disconnect(conn, deps)

    fresh, transport = await open_pending(deps)
    await send_json(fresh, deps, {"type": "reconnect", "uid": conn.uid, "role": "bogus"})

    assert transport.last()["role"] == "asker"
    assert deps.sessions.get(conn.uid).role is Role.ASKER


@pytest.mark.asyncio
async def test_reconnect_supersedes_live_connection() -> None:
    deps = make_deps()
    (asker, asker_tx), (helper, helper_tx) = await connect_pair(deps)

    fresh, fresh_tx = await open_pending(deps)
    await send_json(fresh, deps, {"type": "reconnect", "uid": helper.uid})
    await asyncio.sleep(0)

    assert fresh_tx.last()["type"] == "reconnected"
    assert deps.registry.for_uid(helper.uid) is fresh
    assert not deps.registry.owns(helper)
    assert helper_tx.closed and helper_tx.close_code == 4009
    assert [c for c in deps.registry.active() if c.uid == helper.uid] == [fresh]

    asker_tx.clear()
    assert not await handle_disconnect(helper, deps)
    assert asker_tx.messages() == []

    # Frames still in flight on the superseded socket are ignored.
    await send_json(helper, deps, {"type": "send-answer", "answer": "late"})
    assert asker_tx.messages() == []


@pytest.mark.asyncio
async def test_reconnect_clears_pairing_when_partner_expired() -> None:
    clock = FakeClock()
    deps = make_deps(clock)
    (asker, _), (helper, _) = await connect_pair(deps)
    await handle_disconnect(helper, deps)

    clock.advance(1000)
    await handle_disconnect(asker, deps)
    clock.advance(900)

    fresh, transport = await open_pending(deps)
    await send_json(fresh, deps, {"type": "reconnect", "uid": asker.uid, "role": "asker"})

    assert transport.last() == {"type": "reconnected", "uid": asker.uid, "role": "asker", "pairedWith": None}
    assert deps.sessions.get(asker.uid).paired_with is None
    assert deps.sessions.get(helper.uid).paired_with is None


@pytest.mark.asyncio
async def test_handshake_timeout_closes_pending_connection() -> None:
    deps = make_deps(handshake_timeout_s=0.01)
    conn, transport = await open_pending(deps)

    await asyncio.sleep(0.05)

    assert transport.closed
    assert transport.close_code == 4008
    assert not deps.registry.owns(conn)
    assert not await handle_disconnect(conn, deps)


@pytest.mark.asyncio
async def test_handshake_timer_is_cancelled_by_handshake() -> None:
    deps = make_deps(handshake_timeout_s=0.01)
    conn, transport = await connect_new(deps)

    await asyncio.sleep(0.05)

    assert not transport.closed
    assert deps.registry.owns(conn)


@pytest.mark.asyncio
async def test_connections_beyond_capacity_are_refused() -> None:
    settings = make_settings()
    settings = dataclasses.replace(
        settings, server=dataclasses.replace(settings.server, max_concurrent_connections=2)
    )
    deps = build_runtime_deps(settings, now_fn=FakeClock())
    await open_pending(deps)
    await open_pending(deps)

    rejected = FakeTransport()
    assert await open_connection(rejected, deps) is None
    assert rejected.closed and rejected.close_code == 1013
    assert rejected.messages() == []
    assert deps.registry.get_connection_count() == 2
