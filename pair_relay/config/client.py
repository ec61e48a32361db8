"""Reconnecting client configuration."""

from __future__ import annotations

ENV_RELAY_SERVER_URL = "RELAY_SERVER_URL"
ENV_CLIENT_CONNECT_TIMEOUT_S = "CLIENT_CONNECT_TIMEOUT_S"
ENV_CLIENT_KEEPALIVE_INTERVAL_S = "CLIENT_KEEPALIVE_INTERVAL_S"
ENV_CLIENT_RECONNECT_BASE_DELAY_S = "CLIENT_RECONNECT_BASE_DELAY_S"
ENV_CLIENT_RECONNECT_MAX_DELAY_S = "CLIENT_RECONNECT_MAX_DELAY_S"
ENV_CLIENT_MAX_RECONNECT_ATTEMPTS = "CLIENT_MAX_RECONNECT_ATTEMPTS"
ENV_CLIENT_CLOSE_WAIT_S = "CLIENT_CLOSE_WAIT_S"

DEFAULT_RELAY_SERVER_URL = "ws://127.0.0.1:8080"

# No definitive connected/reconnected reply within this window fails the attempt.
DEFAULT_CLIENT_CONNECT_TIMEOUT_S = 10.0

# Application-level ping; refreshes the server-side last_seen of the session.
DEFAULT_CLIENT_KEEPALIVE_INTERVAL_S = 30.0

# Backoff: min(base * 2**attempt, max), attempts capped.
DEFAULT_CLIENT_RECONNECT_BASE_DELAY_S = 1.0
DEFAULT_CLIENT_RECONNECT_MAX_DELAY_S = 30.0
DEFAULT_CLIENT_MAX_RECONNECT_ATTEMPTS = 10

# How long a manual reconnect waits for the old socket to finish closing.
DEFAULT_CLIENT_CLOSE_WAIT_S = 1.0

__all__ = [
    "DEFAULT_CLIENT_CLOSE_WAIT_S",
    "DEFAULT_CLIENT_CONNECT_TIMEOUT_S",
    "DEFAULT_CLIENT_KEEPALIVE_INTERVAL_S",
    "DEFAULT_CLIENT_MAX_RECONNECT_ATTEMPTS",
    "DEFAULT_CLIENT_RECONNECT_BASE_DELAY_S",
    "DEFAULT_CLIENT_RECONNECT_MAX_DELAY_S",
    "DEFAULT_RELAY_SERVER_URL",
    "ENV_CLIENT_CLOSE_WAIT_S",
    "ENV_CLIENT_CONNECT_TIMEOUT_S",
    "ENV_CLIENT_KEEPALIVE_INTERVAL_S",
    "ENV_CLIENT_MAX_RECONNECT_ATTEMPTS",
    "ENV_CLIENT_RECONNECT_BASE_DELAY_S",
    "ENV_CLIENT_RECONNECT_MAX_DELAY_S",
    "ENV_RELAY_SERVER_URL",
]
