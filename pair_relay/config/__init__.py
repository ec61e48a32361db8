"""Configuration module exports (env names and defaults only)."""

from .server import DEFAULT_WS_HOST, DEFAULT_WS_PORT
from .sessions import DEFAULT_SESSION_TTL_S

__all__ = [
    "DEFAULT_SESSION_TTL_S",
    "DEFAULT_WS_HOST",
    "DEFAULT_WS_PORT",
]
