"""
Time helpers for cache invalidation, routine parsing and report dates.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def is_file_stale(path: Path, *, max_age_minutes: int) -> bool:
    """
    Determine if a file is older than the supplied minutes.
    Non-existent files are considered stale.
    """
    if max_age_minutes <= 0:
        return True

    if not path.exists():
        return True

    age_seconds = utc_now().timestamp() - path.stat().st_mtime
    return age_seconds > max_age_minutes * 60


def get_local_now(timezone_name: Optional[str]) -> datetime:
    try:
        tz = ZoneInfo(timezone_name) if timezone_name else timezone.utc
    except (TypeError, ValueError, ZoneInfoNotFoundError):
        tz = timezone.utc
    return datetime.now(tz)


def yesterday_of(day: date) -> date:
    return day - timedelta(days=1)


def hour_of(value: str) -> int:
    """Return the hour component of an HH:MM string."""
    return int(value.split(":", 1)[0])


def hour_after(value: str) -> str:
    """
    Return the HH:00 one hour after an HH:MM string.

    Evening commutes are modelled as one hour long; 23:xx wraps to 00:00.
    """
    return f"{(hour_of(value) + 1) % 24:02d}:00"
