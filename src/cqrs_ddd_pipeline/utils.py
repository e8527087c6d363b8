"""Common utility functions and helpers."""

from __future__ import annotations

from datetime import timedelta


def to_seconds(ttl: float | timedelta | None) -> float | None:
    """Normalize a TTL given as seconds or ``timedelta`` to seconds."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)
