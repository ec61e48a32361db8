"""Dispatch table from parsed message variants to their handlers."""

from __future__ import annotations

from typing import Any
from collections.abc import Callable, Awaitable

from pair_relay.state import Connection, RuntimeDeps
from pair_relay.state.messages import (
    Ping,
    SetRole,
    Reconnect,
    StopAudio,
    AudioFrame,
    SendAnswer,
    StartAudio,
    AudioStream,
    SendQuestion,
    NewConnection,
)

from .pairing import handle_set_role
from .handshake import handle_reconnect, handle_new_connection
from .relay import (
    handle_ping,
    handle_stop_audio,
    handle_audio_frame,
    handle_send_answer,
    handle_start_audio,
    handle_audio_stream,
    handle_send_question,
)

HandlerFn = Callable[[Connection, RuntimeDeps, Any], Awaitable[None]]

HANDLERS: dict[type, HandlerFn] = {
    NewConnection: handle_new_connection,
    Reconnect: handle_reconnect,
    SetRole: handle_set_role,
    SendQuestion: handle_send_question,
    SendAnswer: handle_send_answer,
    StartAudio: handle_start_audio,
    StopAudio: handle_stop_audio,
    AudioStream: handle_audio_stream,
    AudioFrame: handle_audio_frame,
    Ping: handle_ping,
}

__all__ = ["HANDLERS", "HandlerFn"]
