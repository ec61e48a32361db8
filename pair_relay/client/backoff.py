"""Reconnect delay schedule."""

from __future__ import annotations

# 2**32 seconds is far past any sane cap; keeps the float math bounded.
_MAX_EXPONENT = 32


def backoff_delay(attempt: int, base_s: float, cap_s: float) -> float:
    """Delay before retry number ``attempt + 1``: ``min(base * 2**attempt, cap)``."""
    exponent = min(max(0, int(attempt)), _MAX_EXPONENT)
    return min(float(base_s) * (2**exponent), float(cap_s))


__all__ = ["backoff_delay"]
