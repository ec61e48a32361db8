"""Socket close handling: keep the session warm and tell the partner."""

from __future__ import annotations

import logging

from pair_relay.state import Connection, RuntimeDeps
from pair_relay.config.protocol import MSG_PARTNER_DISCONNECTED

from .errors import safe_send_message

logger = logging.getLogger(__name__)


async def handle_disconnect(conn: Connection, runtime_deps: RuntimeDeps) -> bool:
    """Returns False when the connection was already retired (superseded or timed out)."""
    if not runtime_deps.registry.remove(conn):
        return False
    if conn.uid is None:
        return True

    sessions = runtime_deps.sessions
    session = sessions.touch(conn.uid)
    if session is None:
        return True
    logger.info("uid=%s disconnected; resumable for %ss", session.uid, sessions.seconds_remaining(session.uid))

    partner = runtime_deps.registry.for_uid(session.paired_with)
    if partner is not None:
        await safe_send_message(
            partner.transport,
            MSG_PARTNER_DISCONNECTED,
            canReconnect=True,
            reconnectWindow=sessions.seconds_remaining(session.uid),
        )
    return True


__all__ = ["handle_disconnect"]
