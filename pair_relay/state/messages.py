"""Inbound client message variants (dataclasses only).

Every frame a peer sends parses into exactly one of these types; dispatch is a
lookup on the concrete type.
"""

from __future__ import annotations

from typing import Any
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class NewConnection:
    pass


@dataclass(frozen=True, slots=True)
class Reconnect:
    uid: str | None = None
    role: str | None = None
    pair_with_uid: str | None = None


@dataclass(frozen=True, slots=True)
class SetRole:
    role: Any
    pair_with_uid: str | None = None


@dataclass(frozen=True, slots=True)
class SendQuestion:
    question: Any


@dataclass(frozen=True, slots=True)
class SendAnswer:
    answer: Any


@dataclass(frozen=True, slots=True)
class StartAudio:
    audio_type: Any


@dataclass(frozen=True, slots=True)
class StopAudio:
    audio_type: Any


@dataclass(frozen=True, slots=True)
class AudioStream:
    audio_type: Any
    data: Any


@dataclass(frozen=True, slots=True)
class Ping:
    pass


@dataclass(frozen=True, slots=True)
class AudioFrame:
    """Binary audio: first byte selects system (0) or mic (1)."""

    audio_type: str
    frame: bytes


ClientMessage = (
    NewConnection
    | Reconnect
    | SetRole
    | SendQuestion
    | SendAnswer
    | StartAudio
    | StopAudio
    | AudioStream
    | Ping
    | AudioFrame
)

HANDSHAKE_MESSAGES: tuple[type, ...] = (NewConnection, Reconnect)

__all__ = [
    "AudioFrame",
    "AudioStream",
    "ClientMessage",
    "HANDSHAKE_MESSAGES",
    "NewConnection",
    "Ping",
    "Reconnect",
    "SendAnswer",
    "SendQuestion",
    "SetRole",
    "StartAudio",
    "StopAudio",
]
