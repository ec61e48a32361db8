from .uid import generate_uid
from .store import SessionStore

__all__ = ["SessionStore", "generate_uid"]
