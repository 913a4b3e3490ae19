"""Time utilities."""
from __future__ import annotations

import math
from datetime import datetime, timezone


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: datetime | None) -> str | None:
    """Serialize datetime as ISO string, passing None through."""
    if value is None:
        return None
    return ensure_utc(value).isoformat()


def seconds_until(deadline: datetime, now: datetime) -> int:
    """Whole seconds left until deadline, rounded up, never negative."""
    remaining = (deadline - now).total_seconds()
    if remaining <= 0:
        return 0
    return math.ceil(remaining)
