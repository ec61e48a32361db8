"""Stable, time-bounded peer session records."""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass

from pair_relay.config.protocol import ROLE_ASKER, ROLE_HELPER


class Role(str, Enum):
    ASKER = ROLE_ASKER
    HELPER = ROLE_HELPER

    @classmethod
    def parse(cls, value: object) -> Role | None:
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(slots=True)
class Session:
    """Server-side record of a peer, keyed by its shareable UID.

    Outlives the socket that created it: disconnects only refresh
    ``last_seen``, and the record stays resumable until the TTL elapses.
    ``connection_id`` is a back-reference to the last bound connection, not
    an ownership link.
    """

    uid: str
    last_seen: float
    role: Role | None = None
    paired_with: str | None = None
    connection_id: str | None = None


__all__ = ["Role", "Session"]
