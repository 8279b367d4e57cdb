"""Clock helpers and study-day bucketing.

A "study day" starts at 05:00 local time rather than midnight, so a session
started at 01:30 counts toward the previous calendar day. Every daily figure in
study-rank (daily totals, streaks, daily achievements) keys off the string
returned by study_date(), never off the raw calendar date.
"""

from __future__ import annotations

import random
import string
import time
from datetime import date, datetime, timedelta

DAY_START_HOUR = 5

_ID_ALPHABET = string.ascii_lowercase + string.digits


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def generate_id(timestamp: int | None = None) -> str:
    """Return an opaque unique id: '<ms>-<9 random base36 chars>'."""
    ms = timestamp if timestamp is not None else now_ms()
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{ms}-{suffix}"


def study_date(timestamp: float | None = None) -> str:
    """Return the study day (YYYY-MM-DD) a millisecond timestamp belongs to.

    Local hours 00:00-04:59 are attributed to the previous calendar day.
    """
    ms = timestamp if timestamp is not None else now_ms()
    moment = datetime.fromtimestamp(ms / 1000)
    day = moment.date()
    if moment.hour < DAY_START_HOUR:
        day -= timedelta(days=1)
    return day.isoformat()


def shift_date(date_str: str, days: int) -> str:
    """Move a YYYY-MM-DD string by a number of calendar days."""
    return (date.fromisoformat(date_str) + timedelta(days=days)).isoformat()


def format_clock(total_seconds: float) -> str:
    """Format seconds as HH:MM:SS. Hours are not wrapped at 24."""
    total = int(total_seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    seconds = total % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_duration(total_seconds: float) -> str:
    """Human-readable duration: '1h 5m', '45m', '2h' or 'Less than a minute'."""
    hours = int(total_seconds // 3600)
    minutes = int((total_seconds % 3600) // 60)

    if hours == 0 and minutes == 0:
        return "Less than a minute"
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"


def day_abbrev(date_str: str) -> str:
    """Short weekday name for a date string: '2024-01-01' -> 'Mon'."""
    return date.fromisoformat(date_str).strftime("%a")


def formatted_date(date_str: str) -> str:
    """Month and day for a date string: '2024-01-05' -> 'Jan 5'."""
    day = date.fromisoformat(date_str)
    return f"{day.strftime('%b')} {day.day}"
