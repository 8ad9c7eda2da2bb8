"""Shared time utilities used across the booking engine."""

import math
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC. Naive values are taken to be UTC already.

    Examples:
        >>> to_utc(datetime(2025, 1, 10, 9, 0)).isoformat()
        '2025-01-10T09:00:00+00:00'
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: datetime) -> datetime:
    """Strip tzinfo after converting to UTC, for storage columns without zone."""
    return to_utc(value).replace(tzinfo=None)


def minutes_between(a: datetime, b: datetime) -> int:
    """Absolute distance between two instants in whole minutes, halves rounded up."""
    minutes = abs((to_utc(a) - to_utc(b)).total_seconds()) / 60
    return math.floor(minutes + 0.5)


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open interval overlap: [start_a, end_a) intersects [start_b, end_b)."""
    return start_a < end_b and end_a > start_b
