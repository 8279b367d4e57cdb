"""Streak tracking for study-rank.

A study day qualifies for a streak when its total closed-session time reaches
a per-day minimum (1 hour by default).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from study_rank.clock import study_date
from study_rank.models import StudySession

SECONDS_PER_HOUR = 3600


@dataclass
class StreakInfo:
    current_streak: int
    longest_streak: int
    total_days_studied: int
    total_hours_all_time: float


def _parse_date(d: str) -> date:
    """Parse a YYYY-MM-DD string to a date object."""
    return date.fromisoformat(d)


def daily_totals(sessions: list[StudySession]) -> dict[str, int]:
    """Map study date -> total seconds over closed sessions."""
    totals: dict[str, int] = {}
    for session in sessions:
        if not session.is_closed:
            continue
        totals[session.date] = totals.get(session.date, 0) + session.duration
    return totals


def get_streak_from_dates(qualifying: set[str], reference_date: str) -> int:
    """Count consecutive qualifying days backwards from reference_date."""
    if not qualifying:
        return 0

    streak = 0
    current = _parse_date(reference_date)
    while current.isoformat() in qualifying:
        streak += 1
        current -= timedelta(days=1)

    return streak


def _longest_run(qualifying: set[str]) -> int:
    """Longest run of qualifying dates separated by exactly one calendar day."""
    sorted_dates = sorted(qualifying)
    longest = 0
    streak = 0
    for i, current in enumerate(sorted_dates):
        if i > 0 and (_parse_date(current) - _parse_date(sorted_dates[i - 1])).days == 1:
            streak += 1
        else:
            streak = 1
        longest = max(longest, streak)
    return longest


def calculate_streak(
    sessions: list[StudySession], min_daily_hours: float = 1, today: str | None = None
) -> StreakInfo:
    """Calculate streak information from the session log.

    Rules:
    - A day qualifies if its total is >= min_daily_hours
    - Current streak counts back from today if today qualifies, otherwise from
      yesterday (an unfinished today does not break a live streak)
    - Longest streak is never reported below the current streak
    """
    today_str = today or study_date()
    totals = daily_totals(sessions)
    threshold = min_daily_hours * SECONDS_PER_HOUR
    qualifying = {d for d, seconds in totals.items() if seconds >= threshold}

    anchor = today_str
    if totals.get(today_str, 0) < threshold:
        anchor = (_parse_date(today_str) - timedelta(days=1)).isoformat()
    current_streak = get_streak_from_dates(qualifying, anchor)

    longest = max(_longest_run(qualifying), current_streak)

    return StreakInfo(
        current_streak=current_streak,
        longest_streak=longest,
        total_days_studied=len(totals),
        total_hours_all_time=sum(totals.values()) / SECONDS_PER_HOUR,
    )


def consecutive_days_with_min_hours(
    sessions: list[StudySession], min_hours: float, up_to: str | None = None
) -> int:
    """Count consecutive days ending at up_to (default today) with >= min_hours each.

    Unlike calculate_streak, the anchor never shifts to yesterday.
    """
    totals = daily_totals(sessions)
    threshold = min_hours * SECONDS_PER_HOUR
    qualifying = {d for d, seconds in totals.items() if seconds >= threshold}
    return get_streak_from_dates(qualifying, up_to or study_date())
