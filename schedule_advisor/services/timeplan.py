"""Clock-time helpers for HH:MM start times."""

from __future__ import annotations

from datetime import time
from typing import Optional

MINUTES_PER_DAY = 24 * 60


def parse_time_string(time_str: str) -> time:
    """Parse an ``HH:MM`` string into a ``datetime.time``."""
    hours, minutes = [int(x) for x in time_str.strip().split(":")[:2]]
    return time(hours, minutes)


def to_minutes(time_str: Optional[str]) -> Optional[int]:
    """Minutes after midnight, or None for a missing/unparseable time."""
    if not time_str:
        return None
    try:
        t = parse_time_string(time_str)
    except ValueError:
        return None
    return t.hour * 60 + t.minute


def format_minutes(total_minutes: float) -> str:
    total = int(round(total_minutes)) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def add_hours_to_time(time_str: str, hours: float) -> str:
    """Add hours to an HH:MM time, wrapping at midnight."""
    start = to_minutes(time_str)
    if start is None:
        return time_str
    return format_minutes(start + hours * 60)


def end_minutes(time_str: Optional[str], hours: float) -> Optional[int]:
    """End of a slot in minutes after midnight (wrapped at 24h)."""
    start = to_minutes(time_str)
    if start is None:
        return None
    return int(round(start + hours * 60)) % MINUTES_PER_DAY
