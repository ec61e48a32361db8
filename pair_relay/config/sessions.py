"""Session lifetime and server-side timer configuration."""

from __future__ import annotations

ENV_SESSION_TTL_S = "SESSION_TTL_S"
ENV_SESSION_PURGE_INTERVAL_S = "SESSION_PURGE_INTERVAL_S"
ENV_HANDSHAKE_TIMEOUT_S = "HANDSHAKE_TIMEOUT_S"
ENV_HEARTBEAT_INTERVAL_S = "HEARTBEAT_INTERVAL_S"
ENV_STATUS_LOG_INTERVAL_S = "STATUS_LOG_INTERVAL_S"

# A disconnected peer can resume its UID and pairing for 30 minutes.
DEFAULT_SESSION_TTL_S = 30 * 60.0
DEFAULT_SESSION_PURGE_INTERVAL_S = 5 * 60.0

# Sockets that never send new-connection/reconnect are dropped after this.
DEFAULT_HANDSHAKE_TIMEOUT_S = 10.0

DEFAULT_HEARTBEAT_INTERVAL_S = 30.0
DEFAULT_STATUS_LOG_INTERVAL_S = 5 * 60.0

UID_BYTES = 4

__all__ = [
    "DEFAULT_HANDSHAKE_TIMEOUT_S",
    "DEFAULT_HEARTBEAT_INTERVAL_S",
    "DEFAULT_SESSION_PURGE_INTERVAL_S",
    "DEFAULT_SESSION_TTL_S",
    "DEFAULT_STATUS_LOG_INTERVAL_S",
    "ENV_HANDSHAKE_TIMEOUT_S",
    "ENV_HEARTBEAT_INTERVAL_S",
    "ENV_SESSION_PURGE_INTERVAL_S",
    "ENV_SESSION_TTL_S",
    "ENV_STATUS_LOG_INTERVAL_S",
    "UID_BYTES",
]
