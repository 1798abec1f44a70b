"""Helper utilities for Friemon."""

from datetime import datetime, timezone


def get_now() -> datetime:
    """Get the current UTC datetime."""
    return datetime.now(timezone.utc)


def percent(part: int, whole: int) -> float:
    """``part`` as a percentage of ``whole``; 0 when ``whole`` is 0."""
    if whole == 0:
        return 0.0
    return (part / whole) * 100
