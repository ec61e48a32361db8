"""Shared error types for the pairing relay."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MalformedMessageError(Exception):
    """Raised when a frame is neither a JSON object nor a recognized audio frame."""

    reason: str

    def __str__(self) -> str:
        return self.reason


@dataclass(frozen=True, slots=True)
class UnknownMessageTypeError(Exception):
    """Raised for well-formed JSON whose ``type`` the relay does not handle."""

    msg_type: str

    def __str__(self) -> str:
        return f"unknown message type {self.msg_type!r}"


__all__ = ["MalformedMessageError", "UnknownMessageTypeError"]
