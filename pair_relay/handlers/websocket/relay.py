"""Text and audio relay between paired peers."""

from __future__ import annotations

import logging

from pair_relay.state import Role, Connection, RuntimeDeps
from pair_relay.state.messages import (
    Ping,
    StopAudio,
    AudioFrame,
    SendAnswer,
    StartAudio,
    AudioStream,
    SendQuestion,
)
from pair_relay.config.protocol import (
    MSG_PONG,
    MSG_AUDIO_STARTED,
    MSG_AUDIO_STOPPED,
    MSG_AUDIO_RECEIVED,
    MSG_ANSWER_RECEIVED,
    ERROR_NO_ASKER_PAIRED,
    MSG_QUESTION_RECEIVED,
    ERROR_NO_HELPER_PAIRED,
)

from .errors import send_error, safe_send_bytes, safe_send_message

logger = logging.getLogger(__name__)


def _partner_connection(
    conn: Connection,
    runtime_deps: RuntimeDeps,
    *,
    role: Role | None = None,
) -> Connection | None:
    """Live connection of the sender's partner; ``role`` additionally filters on the partner's role."""
    session = runtime_deps.sessions.get(conn.uid)
    if session is None or session.paired_with is None:
        return None
    if role is not None:
        partner = runtime_deps.sessions.get(session.paired_with)
        if partner is None or partner.role is not role:
            return None
    return runtime_deps.registry.for_uid(session.paired_with)


def _sender_role(conn: Connection, runtime_deps: RuntimeDeps) -> Role | None:
    session = runtime_deps.sessions.get(conn.uid)
    return session.role if session is not None else None


async def handle_send_question(conn: Connection, runtime_deps: RuntimeDeps, msg: SendQuestion) -> None:
    if _sender_role(conn, runtime_deps) is not Role.ASKER:
        logger.info("dropping send-question from non-asker uid=%s", conn.uid)
        return
    helper = _partner_connection(conn, runtime_deps, role=Role.HELPER)
    if helper is None:
        await send_error(conn.transport, ERROR_NO_HELPER_PAIRED)
        return
    await safe_send_message(helper.transport, MSG_QUESTION_RECEIVED, question=msg.question, **{"from": conn.uid})


async def handle_send_answer(conn: Connection, runtime_deps: RuntimeDeps, msg: SendAnswer) -> None:
    if _sender_role(conn, runtime_deps) is not Role.HELPER:
        logger.info("dropping send-answer from non-helper uid=%s", conn.uid)
        return
    asker = _partner_connection(conn, runtime_deps, role=Role.ASKER)
    if asker is None:
        await send_error(conn.transport, ERROR_NO_ASKER_PAIRED)
        return
    await safe_send_message(asker.transport, MSG_ANSWER_RECEIVED, answer=msg.answer, **{"from": conn.uid})


async def _forward_audio_control(conn: Connection, runtime_deps: RuntimeDeps, msg_type: str, audio_type: object) -> None:
    partner = _partner_connection(conn, runtime_deps)
    if partner is None:
        logger.debug("no live partner for uid=%s; dropping %s", conn.uid, msg_type)
        return
    await safe_send_message(partner.transport, msg_type, audioType=audio_type, **{"from": conn.uid})


async def handle_start_audio(conn: Connection, runtime_deps: RuntimeDeps, msg: StartAudio) -> None:
    await _forward_audio_control(conn, runtime_deps, MSG_AUDIO_STARTED, msg.audio_type)


async def handle_stop_audio(conn: Connection, runtime_deps: RuntimeDeps, msg: StopAudio) -> None:
    await _forward_audio_control(conn, runtime_deps, MSG_AUDIO_STOPPED, msg.audio_type)


async def handle_audio_stream(conn: Connection, runtime_deps: RuntimeDeps, msg: AudioStream) -> None:
    partner = _partner_connection(conn, runtime_deps)
    if partner is None:
        return
    await safe_send_message(
        partner.transport,
        MSG_AUDIO_RECEIVED,
        audioType=msg.audio_type,
        data=msg.data,
        **{"from": conn.uid},
    )


async def handle_audio_frame(conn: Connection, runtime_deps: RuntimeDeps, msg: AudioFrame) -> None:
    # Lossy path: no partner, no error.
    partner = _partner_connection(conn, runtime_deps)
    if partner is None:
        return
    # A stalled partner would block this sender's loop on drain; drop instead.
    if partner.transport.write_backlogged:
        logger.debug("dropping audio frame for backlogged partner %s", partner.uid)
        return
    await safe_send_bytes(partner.transport, msg.frame)


async def handle_ping(conn: Connection, runtime_deps: RuntimeDeps, _msg: Ping) -> None:
    runtime_deps.sessions.touch(conn.uid)
    await safe_send_message(conn.transport, MSG_PONG)


__all__ = [
    "handle_audio_frame",
    "handle_audio_stream",
    "handle_ping",
    "handle_send_answer",
    "handle_send_question",
    "handle_start_audio",
    "handle_stop_audio",
]
