"""Client-side connection state (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class SavedConnection:
    """Parameters of the last connect call, replayed by automatic retries."""

    role: str
    pair_with_uid: str | None
    server_url: str
    uid: str | None = None


@dataclass(frozen=True, slots=True)
class ClientResult:
    success: bool
    error: str | None = None
    uid: str | None = None
    resumed: bool = False


__all__ = ["ClientResult", "SavedConnection"]
