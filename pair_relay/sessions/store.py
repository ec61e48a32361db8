"""Session table keyed by UID, durable until its TTL elapses."""

from __future__ import annotations

import time
import logging
from collections.abc import Callable

from pair_relay.state.session import Role, Session

logger = logging.getLogger(__name__)

TimeFn = Callable[[], float]


class SessionStore:
    """In-memory UID -> Session index.

    Expiry is advisory: ``get`` still returns a stale session until the
    periodic purge removes it. Only ``get_resumable`` enforces the TTL, for
    reconnect validation.
    """

    def __init__(self, *, ttl_s: float, now_fn: TimeFn | None = None) -> None:
        self.ttl_s = max(0.0, float(ttl_s))
        self._now = now_fn or time.monotonic
        self._sessions: dict[str, Session] = {}

    def now(self) -> float:
        return self._now()

    def create(self, uid: str, *, connection_id: str | None = None) -> Session:
        previous = self._sessions.get(uid)
        if previous is not None:
            logger.warning("uid collision on %s; overwriting previous session", uid)
            self._unlink_partner(previous)
        session = Session(uid=uid, last_seen=self._now(), connection_id=connection_id)
        self._sessions[uid] = session
        return session

    def get(self, uid: str | None) -> Session | None:
        if not uid:
            return None
        return self._sessions.get(uid)

    def is_expired(self, session: Session, now: float | None = None) -> bool:
        current = self._now() if now is None else now
        return (current - session.last_seen) >= self.ttl_s

    def get_resumable(self, uid: str | None) -> Session | None:
        session = self.get(uid)
        if session is None or self.is_expired(session):
            return None
        return session

    def touch(self, uid: str | None) -> Session | None:
        session = self.get(uid)
        if session is not None:
            session.last_seen = self._now()
        return session

    def attach(self, uid: str, connection_id: str) -> Session | None:
        session = self.touch(uid)
        if session is not None:
            session.connection_id = connection_id
        return session

    def set_role(self, uid: str, role: Role) -> Session | None:
        session = self.touch(uid)
        if session is not None:
            session.role = role
        return session

    def set_pairing(self, uid_a: str, uid_b: str) -> bool:
        """Pair two sessions symmetrically, dropping any previous partner of either."""
        a = self._sessions.get(uid_a)
        b = self._sessions.get(uid_b)
        if a is None or b is None or a is b:
            return False

        for session in (a, b):
            if session.paired_with not in (None, uid_a, uid_b):
                logger.info(
                    "pairing %s<->%s displaces previous pair %s<->%s",
                    uid_a,
                    uid_b,
                    session.uid,
                    session.paired_with,
                )
                self._unlink_partner(session)

        now = self._now()
        a.paired_with, b.paired_with = b.uid, a.uid
        a.last_seen = b.last_seen = now
        return True

    def clear_pairing(self, uid: str) -> None:
        session = self._sessions.get(uid)
        if session is not None:
            self._unlink_partner(session)

    def seconds_remaining(self, uid: str) -> int:
        session = self._sessions.get(uid)
        if session is None:
            return 0
        return max(0, int(self.ttl_s - (self._now() - session.last_seen)))

    def purge_expired(self, now: float | None = None) -> list[str]:
        current = self._now() if now is None else now
        expired = [
            uid for uid, session in self._sessions.items() if (current - session.last_seen) > self.ttl_s
        ]
        for uid in expired:
            self._sessions.pop(uid, None)

        # A surviving partner must never point at a purged UID.
        if expired:
            gone = set(expired)
            for session in self._sessions.values():
                if session.paired_with in gone:
                    session.paired_with = None
        return expired

    def counts(self) -> dict[str, int]:
        paired = sum(1 for s in self._sessions.values() if s.paired_with is not None)
        return {"sessions": len(self._sessions), "paired_sessions": paired}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, uid: object) -> bool:
        return uid in self._sessions

    def _unlink_partner(self, session: Session) -> None:
        partner_uid = session.paired_with
        session.paired_with = None
        if partner_uid is None:
            return
        partner = self._sessions.get(partner_uid)
        if partner is not None and partner.paired_with == session.uid:
            partner.paired_with = None


__all__ = ["SessionStore"]
