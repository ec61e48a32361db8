"""Client frame parsing into typed message variants."""

from __future__ import annotations

from typing import Any
from collections.abc import Callable

import orjson

from pair_relay.errors import MalformedMessageError, UnknownMessageTypeError
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
    ClientMessage,
    NewConnection,
)
from pair_relay.config.protocol import (
    MSG_PING,
    KEY_TYPE,
    MSG_SET_ROLE,
    MSG_RECONNECT,
    MSG_STOP_AUDIO,
    MSG_START_AUDIO,
    MSG_SEND_ANSWER,
    MSG_AUDIO_STREAM,
    AUDIO_TYPE_BY_BYTE,
    MSG_SEND_QUESTION,
    MSG_NEW_CONNECTION,
)


def _optional_str(msg: dict[str, Any], key: str) -> str | None:
    value = msg.get(key)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


_BUILDERS: dict[str, Callable[[dict[str, Any]], ClientMessage]] = {
    MSG_NEW_CONNECTION: lambda _msg: NewConnection(),
    MSG_RECONNECT: lambda msg: Reconnect(
        uid=_optional_str(msg, "uid"),
        role=_optional_str(msg, "role"),
        pair_with_uid=_optional_str(msg, "pairWithUID"),
    ),
    MSG_SET_ROLE: lambda msg: SetRole(role=msg.get("role"), pair_with_uid=_optional_str(msg, "pairWithUID")),
    MSG_SEND_QUESTION: lambda msg: SendQuestion(question=msg.get("question")),
    MSG_SEND_ANSWER: lambda msg: SendAnswer(answer=msg.get("answer")),
    MSG_START_AUDIO: lambda msg: StartAudio(audio_type=msg.get("audioType")),
    MSG_STOP_AUDIO: lambda msg: StopAudio(audio_type=msg.get("audioType")),
    MSG_AUDIO_STREAM: lambda msg: AudioStream(audio_type=msg.get("audioType"), data=msg.get("data")),
    MSG_PING: lambda _msg: Ping(),
}


def parse_audio_frame(data: bytes) -> AudioFrame | None:
    if not data:
        return None
    audio_type = AUDIO_TYPE_BY_BYTE.get(data[0])
    if audio_type is None:
        return None
    return AudioFrame(audio_type=audio_type, frame=data)


def parse_client_message(raw: str | bytes) -> ClientMessage:
    """Parse one inbound frame.

    Binary frames whose first byte is a known audio type are audio; any other
    frame must be a UTF-8 JSON object with a known ``type``. An audio header
    byte (0x00/0x01) can never start a JSON document, so checking it first
    does not shadow JSON sent as binary.
    """
    if isinstance(raw, (bytes, bytearray, memoryview)):
        data = bytes(raw)
        frame = parse_audio_frame(data)
        if frame is not None:
            return frame
        raw = data

    try:
        msg = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise MalformedMessageError(f"invalid JSON: {exc}") from exc

    if not isinstance(msg, dict):
        raise MalformedMessageError("message must be a JSON object")

    msg_type = msg.get(KEY_TYPE)
    if not isinstance(msg_type, str) or not msg_type.strip():
        raise MalformedMessageError("message missing non-empty 'type'")

    builder = _BUILDERS.get(msg_type.strip())
    if builder is None:
        raise UnknownMessageTypeError(msg_type.strip())
    return builder(msg)


__all__ = ["parse_audio_frame", "parse_client_message"]
