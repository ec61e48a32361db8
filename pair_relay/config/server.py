"""Relay server bind and admission configuration."""

from __future__ import annotations

ENV_WS_HOST = "WS_HOST"
ENV_WS_PORT = "WS_PORT"
ENV_MAX_CONCURRENT_CONNECTIONS = "MAX_CONCURRENT_CONNECTIONS"
ENV_WS_MAX_MESSAGE_BYTES = "WS_MAX_MESSAGE_BYTES"

# Bind to all interfaces so remote askers/helpers can reach a VM deployment.
DEFAULT_WS_HOST = "0.0.0.0"
DEFAULT_WS_PORT = 8080

DEFAULT_MAX_CONCURRENT_CONNECTIONS = 500

# Audio frames are raw PCM chunks; 4 MiB leaves plenty of headroom per frame.
DEFAULT_WS_MAX_MESSAGE_BYTES = 4 * 1024 * 1024

HEALTH_PATHS = frozenset({"/health", "/healthz"})

__all__ = [
    "DEFAULT_MAX_CONCURRENT_CONNECTIONS",
    "DEFAULT_WS_HOST",
    "DEFAULT_WS_MAX_MESSAGE_BYTES",
    "DEFAULT_WS_PORT",
    "ENV_MAX_CONCURRENT_CONNECTIONS",
    "ENV_WS_HOST",
    "ENV_WS_MAX_MESSAGE_BYTES",
    "ENV_WS_PORT",
    "HEALTH_PATHS",
]
