"""Handshake state machine: new identities, resumption and connection supersession."""

from __future__ import annotations

import asyncio
import logging

from pair_relay.state import Role, Session, Connection, RuntimeDeps
from pair_relay.sessions.uid import generate_uid
from pair_relay.state.messages import Reconnect, NewConnection
from pair_relay.config.protocol import (
    MSG_CONNECTED,
    MSG_RECONNECTED,
    CLOSE_SUPERSEDED_CODE,
    MSG_PARTNER_RECONNECTED,
    CLOSE_SUPERSEDED_REASON,
    CLOSE_HANDSHAKE_TIMEOUT_CODE,
    CLOSE_HANDSHAKE_TIMEOUT_REASON,
)

from .errors import close_quietly, safe_send_message

logger = logging.getLogger(__name__)


def start_handshake_timer(conn: Connection, runtime_deps: RuntimeDeps) -> None:
    timeout_s = runtime_deps.settings.sessions.handshake_timeout_s
    if timeout_s <= 0:
        return
    loop = asyncio.get_running_loop()
    conn.handshake_timer = loop.call_later(timeout_s, expire_handshake, conn, runtime_deps)


def expire_handshake(conn: Connection, runtime_deps: RuntimeDeps) -> None:
    conn.handshake_timer = None
    if not conn.is_pending or not runtime_deps.registry.owns(conn):
        return
    logger.info("connection %s sent no handshake; closing", conn.connection_id)
    runtime_deps.registry.remove(conn)
    runtime_deps.tasks.spawn(
        close_quietly(conn.transport, code=CLOSE_HANDSHAKE_TIMEOUT_CODE, reason=CLOSE_HANDSHAKE_TIMEOUT_REASON)
    )


def supersede(old: Connection, runtime_deps: RuntimeDeps) -> None:
    """Retire an older socket bound to a UID that just re-handshook elsewhere."""
    runtime_deps.registry.remove(old)
    logger.info("connection %s superseded for uid=%s", old.connection_id, old.uid)
    runtime_deps.tasks.spawn(close_quietly(old.transport, code=CLOSE_SUPERSEDED_CODE, reason=CLOSE_SUPERSEDED_REASON))


def _drop_stale_pairing(session: Session, runtime_deps: RuntimeDeps) -> None:
    partner_uid = session.paired_with
    if partner_uid is None:
        return
    if runtime_deps.registry.for_uid(partner_uid) is not None:
        return
    if runtime_deps.sessions.get_resumable(partner_uid) is not None:
        return
    logger.info("uid=%s partner %s expired; clearing pairing", session.uid, partner_uid)
    runtime_deps.sessions.clear_pairing(session.uid)


async def handle_new_connection(
    conn: Connection,
    runtime_deps: RuntimeDeps,
    _msg: NewConnection | None = None,
) -> None:
    uid = generate_uid()
    runtime_deps.sessions.create(uid, connection_id=conn.connection_id)
    runtime_deps.registry.bind(conn, uid)
    logger.info("new session uid=%s connection=%s", uid, conn.connection_id)
    await safe_send_message(conn.transport, MSG_CONNECTED, clientId=conn.connection_id, uid=uid)


async def handle_reconnect(conn: Connection, runtime_deps: RuntimeDeps, msg: Reconnect) -> None:
    session = runtime_deps.sessions.get_resumable(msg.uid)
    if session is None:
        logger.info("uid=%s not resumable; issuing a new identity", msg.uid)
        await handle_new_connection(conn, runtime_deps)
        return

    uid = session.uid
    previous = runtime_deps.registry.for_uid(uid)
    if previous is not None and previous is not conn:
        supersede(previous, runtime_deps)

    role = Role.parse(msg.role)
    if role is not None:
        session.role = role
    _drop_stale_pairing(session, runtime_deps)

    runtime_deps.registry.bind(conn, uid)
    runtime_deps.sessions.attach(uid, conn.connection_id)
    partner = runtime_deps.registry.for_uid(session.paired_with)
    logger.info("session resumed uid=%s role=%s paired_with=%s", uid, session.role, session.paired_with)

    await safe_send_message(
        conn.transport,
        MSG_RECONNECTED,
        uid=uid,
        role=session.role.value if session.role is not None else None,
        pairedWith=session.paired_with,
    )
    if partner is not None:
        await safe_send_message(partner.transport, MSG_PARTNER_RECONNECTED, partnerUID=uid)


__all__ = [
    "expire_handshake",
    "handle_new_connection",
    "handle_reconnect",
    "start_handshake_timer",
    "supersede",
]
