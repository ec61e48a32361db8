from .runtime import RuntimeDeps
from .session import Role, Session
from .settings import AppSettings
from .connection import Connection, ConnectionState

__all__ = ["AppSettings", "Connection", "ConnectionState", "Role", "RuntimeDeps", "Session"]
