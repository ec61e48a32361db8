"""Environment parsing for runtime settings."""

from __future__ import annotations

import os

from pair_relay.state.settings import (
    AppSettings,
    ClientSettings,
    ServerSettings,
    SessionSettings,
    HeartbeatSettings,
)
from pair_relay.config.server import (
    ENV_WS_HOST,
    ENV_WS_PORT,
    DEFAULT_WS_HOST,
    DEFAULT_WS_PORT,
    ENV_WS_MAX_MESSAGE_BYTES,
    DEFAULT_WS_MAX_MESSAGE_BYTES,
    ENV_MAX_CONCURRENT_CONNECTIONS,
    DEFAULT_MAX_CONCURRENT_CONNECTIONS,
)
from pair_relay.config.sessions import (
    ENV_SESSION_TTL_S,
    DEFAULT_SESSION_TTL_S,
    ENV_HANDSHAKE_TIMEOUT_S,
    ENV_HEARTBEAT_INTERVAL_S,
    ENV_STATUS_LOG_INTERVAL_S,
    DEFAULT_HANDSHAKE_TIMEOUT_S,
    DEFAULT_HEARTBEAT_INTERVAL_S,
    ENV_SESSION_PURGE_INTERVAL_S,
    DEFAULT_STATUS_LOG_INTERVAL_S,
    DEFAULT_SESSION_PURGE_INTERVAL_S,
)
from pair_relay.config.client import (
    ENV_RELAY_SERVER_URL,
    ENV_CLIENT_CLOSE_WAIT_S,
    DEFAULT_RELAY_SERVER_URL,
    DEFAULT_CLIENT_CLOSE_WAIT_S,
    ENV_CLIENT_CONNECT_TIMEOUT_S,
    DEFAULT_CLIENT_CONNECT_TIMEOUT_S,
    ENV_CLIENT_KEEPALIVE_INTERVAL_S,
    ENV_CLIENT_MAX_RECONNECT_ATTEMPTS,
    ENV_CLIENT_RECONNECT_BASE_DELAY_S,
    ENV_CLIENT_RECONNECT_MAX_DELAY_S,
    DEFAULT_CLIENT_KEEPALIVE_INTERVAL_S,
    DEFAULT_CLIENT_MAX_RECONNECT_ATTEMPTS,
    DEFAULT_CLIENT_RECONNECT_BASE_DELAY_S,
    DEFAULT_CLIENT_RECONNECT_MAX_DELAY_S,
)


def _str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _load_server_settings() -> ServerSettings:
    port = _int_env(ENV_WS_PORT, DEFAULT_WS_PORT)
    if not 0 <= port <= 65535:
        raise ValueError(f"{ENV_WS_PORT} must be between 0 and 65535, got {port}")

    return ServerSettings(
        host=_str_env(ENV_WS_HOST, DEFAULT_WS_HOST),
        port=port,
        max_concurrent_connections=_int_env(ENV_MAX_CONCURRENT_CONNECTIONS, DEFAULT_MAX_CONCURRENT_CONNECTIONS),
        max_message_bytes=_int_env(ENV_WS_MAX_MESSAGE_BYTES, DEFAULT_WS_MAX_MESSAGE_BYTES),
    )


def _load_session_settings() -> SessionSettings:
    ttl_s = _float_env(ENV_SESSION_TTL_S, DEFAULT_SESSION_TTL_S)
    if ttl_s <= 0:
        ttl_s = DEFAULT_SESSION_TTL_S

    return SessionSettings(
        ttl_s=ttl_s,
        purge_interval_s=_float_env(ENV_SESSION_PURGE_INTERVAL_S, DEFAULT_SESSION_PURGE_INTERVAL_S),
        handshake_timeout_s=_float_env(ENV_HANDSHAKE_TIMEOUT_S, DEFAULT_HANDSHAKE_TIMEOUT_S),
        status_log_interval_s=_float_env(ENV_STATUS_LOG_INTERVAL_S, DEFAULT_STATUS_LOG_INTERVAL_S),
    )


def _load_heartbeat_settings() -> HeartbeatSettings:
    return HeartbeatSettings(interval_s=_float_env(ENV_HEARTBEAT_INTERVAL_S, DEFAULT_HEARTBEAT_INTERVAL_S))


def load_client_settings() -> ClientSettings:
    base = _float_env(ENV_CLIENT_RECONNECT_BASE_DELAY_S, DEFAULT_CLIENT_RECONNECT_BASE_DELAY_S)
    cap = _float_env(ENV_CLIENT_RECONNECT_MAX_DELAY_S, DEFAULT_CLIENT_RECONNECT_MAX_DELAY_S)

    return ClientSettings(
        server_url=_str_env(ENV_RELAY_SERVER_URL, DEFAULT_RELAY_SERVER_URL),
        connect_timeout_s=_float_env(ENV_CLIENT_CONNECT_TIMEOUT_S, DEFAULT_CLIENT_CONNECT_TIMEOUT_S),
        keepalive_interval_s=_float_env(ENV_CLIENT_KEEPALIVE_INTERVAL_S, DEFAULT_CLIENT_KEEPALIVE_INTERVAL_S),
        reconnect_base_delay_s=base,
        reconnect_max_delay_s=max(base, cap),
        max_reconnect_attempts=_int_env(ENV_CLIENT_MAX_RECONNECT_ATTEMPTS, DEFAULT_CLIENT_MAX_RECONNECT_ATTEMPTS),
        close_wait_s=_float_env(ENV_CLIENT_CLOSE_WAIT_S, DEFAULT_CLIENT_CLOSE_WAIT_S),
    )


def load_settings() -> AppSettings:
    return AppSettings(
        server=_load_server_settings(),
        sessions=_load_session_settings(),
        heartbeat=_load_heartbeat_settings(),
        client=load_client_settings(),
    )


__all__ = ["load_client_settings", "load_settings"]
