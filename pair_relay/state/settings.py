"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ServerSettings:
    host: str
    port: int
    max_concurrent_connections: int
    max_message_bytes: int


@dataclass(frozen=True, slots=True)
class SessionSettings:
    ttl_s: float
    purge_interval_s: float
    handshake_timeout_s: float
    status_log_interval_s: float


@dataclass(frozen=True, slots=True)
class HeartbeatSettings:
    interval_s: float


@dataclass(frozen=True, slots=True)
class ClientSettings:
    server_url: str
    connect_timeout_s: float
    keepalive_interval_s: float
    reconnect_base_delay_s: float
    reconnect_max_delay_s: float
    max_reconnect_attempts: int
    close_wait_s: float


@dataclass(frozen=True, slots=True)
class AppSettings:
    server: ServerSettings
    sessions: SessionSettings
    heartbeat: HeartbeatSettings
    client: ClientSettings


__all__ = [
    "AppSettings",
    "ClientSettings",
    "HeartbeatSettings",
    "ServerSettings",
    "SessionSettings",
]
