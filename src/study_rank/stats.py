"""Derived statistics over the session log.

Pure functions: they take the full list of sessions and recompute everything
on each call. Nothing here mutates its input or touches storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from study_rank.clock import shift_date, study_date
from study_rank.models import StudySession
from study_rank.streaks import daily_totals
from study_rank.subjects import GENERAL_SUBJECT_ID

HEATMAP_WEEKS = 13

# Upper bounds (exclusive, seconds) for heatmap intensities 1-4; 5 is anything above.
_INTENSITY_BOUNDS = (1800, 3600, 7200, 14400)


@dataclass
class DailySummary:
    date: str
    total_seconds: int
    session_count: int
    longest_session_seconds: int


@dataclass
class HeatmapCell:
    date: str
    total_seconds: int
    intensity: int  # 0-5


def closed_sessions(sessions: list[StudySession]) -> list[StudySession]:
    return [s for s in sessions if s.is_closed]


def daily_summary(sessions: list[StudySession], date_str: str) -> DailySummary:
    """Summarize the closed sessions attributed to one study day."""
    day_sessions = [s for s in sessions if s.date == date_str and s.is_closed]
    return DailySummary(
        date=date_str,
        total_seconds=sum(s.duration for s in day_sessions),
        session_count=len(day_sessions),
        longest_session_seconds=max((s.duration for s in day_sessions), default=0),
    )


def window_summaries(
    sessions: list[StudySession], days: int = 7, today: str | None = None
) -> list[DailySummary]:
    """Daily summaries for the last `days` study days ending today, oldest first."""
    today_str = today or study_date()
    return [daily_summary(sessions, shift_date(today_str, -i)) for i in range(days - 1, -1, -1)]


def longest_session(sessions: list[StudySession]) -> int:
    """Longest closed session ever, in seconds."""
    return max((s.duration for s in sessions if s.is_closed), default=0)


def recent_sessions(sessions: list[StudySession], n: int = 5) -> list[StudySession]:
    """The n most recently started closed sessions, newest first."""
    return sorted(closed_sessions(sessions), key=lambda s: s.start_time, reverse=True)[:n]


def subject_breakdown(sessions: list[StudySession], limit: int | None = 6) -> list[tuple[str, int]]:
    """Total seconds per subject id, largest first. Untagged time is 'general'."""
    totals: dict[str, int] = {}
    for session in closed_sessions(sessions):
        key = session.subject or GENERAL_SUBJECT_ID
        totals[key] = totals.get(key, 0) + session.duration
    return sorted(totals.items(), key=lambda x: x[1], reverse=True)[:limit]


def goal_progress(total_seconds: int, goal_hours: float) -> float:
    """Percent of the daily goal reached, capped at 100."""
    if goal_hours <= 0:
        return 100.0
    return min(total_seconds / (goal_hours * 3600) * 100, 100.0)


def intensity(total_seconds: int) -> int:
    """Heatmap intensity bucket: 0 = nothing, 5 = four hours or more."""
    if total_seconds <= 0:
        return 0
    for level, bound in enumerate(_INTENSITY_BOUNDS, start=1):
        if total_seconds < bound:
            return level
    return len(_INTENSITY_BOUNDS) + 1


def heatmap(
    sessions: list[StudySession], weeks: int = HEATMAP_WEEKS, today: str | None = None
) -> list[list[HeatmapCell]]:
    """Contribution grid: columns are Sunday-started weeks, the last one ends today.

    The first column is aligned to a Sunday, so the grid can span a few more
    days than weeks * 7. The last week may be shorter than seven days.
    """
    today_date = date.fromisoformat(today or study_date())
    first = today_date - timedelta(days=weeks * 7 - 1)
    # date.weekday(): Monday=0 ... Sunday=6
    first -= timedelta(days=(first.weekday() + 1) % 7)
    totals = daily_totals(sessions)

    grid: list[list[HeatmapCell]] = []
    week: list[HeatmapCell] = []
    current = first
    while current <= today_date:
        key = current.isoformat()
        seconds = totals.get(key, 0)
        week.append(HeatmapCell(date=key, total_seconds=seconds, intensity=intensity(seconds)))
        if len(week) == 7:
            grid.append(week)
            week = []
        current += timedelta(days=1)
    if week:
        grid.append(week)
    return grid


def get_period_dates(period: str, today: str | None = None) -> tuple[str, str]:
    """Return (start_date, end_date) ISO strings for a period name.

    period: "week" | "month" | "year" | "all-time"
    """
    ref = date.fromisoformat(today or study_date())

    if period == "week":
        return ((ref - timedelta(days=6)).isoformat(), ref.isoformat())

    if period == "month":
        start = ref.replace(day=1)
        if ref.month == 12:
            end = ref.replace(month=12, day=31)
        else:
            end = ref.replace(month=ref.month + 1, day=1) - timedelta(days=1)
        return (start.isoformat(), end.isoformat())

    if period == "year":
        start = ref.replace(month=1, day=1)
        end = ref.replace(month=12, day=31)
        return (start.isoformat(), end.isoformat())

    # all-time
    return ("0000-01-01", ref.isoformat())


def period_summary(sessions: list[StudySession], start_date: str, end_date: str) -> dict:
    """Aggregate closed sessions whose study date falls in [start_date, end_date]."""
    in_period = [s for s in closed_sessions(sessions) if start_date <= s.date <= end_date]
    totals = daily_totals(in_period)

    total_seconds = sum(totals.values())
    active_days = len(totals)
    busiest_day = max(totals.items(), key=lambda x: x[1], default=None)

    return {
        "total_seconds": total_seconds,
        "session_count": len(in_period),
        "active_days": active_days,
        "avg_seconds_per_active_day": total_seconds // active_days if active_days else 0,
        "busiest_day": busiest_day[0] if busiest_day else None,
        "busiest_day_seconds": busiest_day[1] if busiest_day else 0,
        "longest_session_seconds": longest_session(in_period),
        "best_run": _calculate_period_run(sorted(totals)),
        "top_subjects": subject_breakdown(in_period, limit=3),
    }


def _calculate_period_run(sorted_dates: list[str]) -> int:
    """Longest run of consecutive active dates in the period (any amount of time)."""
    best = 0
    run = 0
    prev: date | None = None
    for d in sorted_dates:
        current = date.fromisoformat(d)
        if prev is not None and (current - prev).days == 1:
            run += 1
        else:
            run = 1
        best = max(best, run)
        prev = current
    return best
