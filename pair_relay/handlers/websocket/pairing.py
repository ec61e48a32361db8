"""Role selection and helper -> asker pairing."""

from __future__ import annotations

import logging

from pair_relay.state import Role, Connection, RuntimeDeps
from pair_relay.state.messages import SetRole
from pair_relay.config.protocol import MSG_PAIRED, MSG_ROLE_SET, ERROR_INVALID_ROLE, ERROR_ASKER_NOT_FOUND

from .errors import send_error, safe_send_message

logger = logging.getLogger(__name__)


async def handle_set_role(conn: Connection, runtime_deps: RuntimeDeps, msg: SetRole) -> None:
    role = Role.parse(msg.role)
    if role is None:
        logger.info("uid=%s sent invalid role %r", conn.uid, msg.role)
        await send_error(conn.transport, ERROR_INVALID_ROLE)
        return

    sessions = runtime_deps.sessions
    session = sessions.set_role(conn.uid, role)
    if session is None:
        logger.warning("connection %s has no session for uid=%s", conn.connection_id, conn.uid)
        return
    logger.info("uid=%s set role %s", session.uid, role.value)

    if role is Role.HELPER and msg.pair_with_uid:
        target = sessions.get(msg.pair_with_uid)
        if target is None or target.role is not Role.ASKER or not sessions.set_pairing(session.uid, target.uid):
            await send_error(conn.transport, ERROR_ASKER_NOT_FOUND)
        else:
            asker_conn = runtime_deps.registry.for_uid(target.uid)
            logger.info("paired helper=%s with asker=%s", session.uid, target.uid)
            await safe_send_message(conn.transport, MSG_PAIRED, pairedWithUID=target.uid, role=Role.HELPER.value)
            if asker_conn is not None:
                await safe_send_message(
                    asker_conn.transport, MSG_PAIRED, pairedWithUID=session.uid, role=Role.ASKER.value
                )

    await safe_send_message(conn.transport, MSG_ROLE_SET, role=role.value, uid=session.uid)


__all__ = ["handle_set_role"]
