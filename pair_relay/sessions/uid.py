"""Short, human-shareable session identifiers."""

from __future__ import annotations

import secrets

from pair_relay.config.sessions import UID_BYTES


def generate_uid() -> str:
    # 4 random bytes -> 8 uppercase hex chars; collisions overwrite, never reject.
    return secrets.token_hex(UID_BYTES).upper()


__all__ = ["generate_uid"]
