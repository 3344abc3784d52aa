# Overview: Clock and timestamp helpers shared by the quota window, sessions and API payloads.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server clock in UTC, tz stripped (the form stored in every timestamp column)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc_naive(dt: datetime) -> datetime:
    """
    Bring a database or caller timestamp into the canonical UTC-naive form.

    Postgres hands back aware values for timezone=True columns while SQLite
    hands back naive ones; window arithmetic needs one shape.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 second precision with a trailing 'Z'; naive input counts as UTC."""
    if dt is None:
        return None
    return as_utc_naive(dt).replace(microsecond=0).isoformat() + "Z"


def format_countdown(seconds: int) -> str:
    """Render a second count as HH:MM:SS (hours are not wrapped at 24)."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
