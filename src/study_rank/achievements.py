"""Achievement definitions and checking for study-rank."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from study_rank.clock import study_date
from study_rank.models import StudySession
from study_rank.stats import daily_summary, longest_session
from study_rank.streaks import calculate_streak, consecutive_days_with_min_hours


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Category(str, Enum):
    FOCUS = "focus"
    DAILY = "daily"
    STREAK = "streak"
    LIFETIME = "lifetime"


@dataclass
class AchievementDef:
    id: str
    title: str
    description: str
    icon: str
    category: Category
    rarity: Rarity
    target: float
    check_field: str


@dataclass
class AchievementStatus:
    definition: AchievementDef
    progress: float  # 0.0 to 1.0
    unlocked: bool


def _focus(id: str, title: str, minutes: int, icon: str, rarity: Rarity, description: str) -> AchievementDef:
    return AchievementDef(id, title, description, icon, Category.FOCUS, rarity, minutes * 60, "focus_seconds")


def _daily(id: str, title: str, minutes: int, icon: str, rarity: Rarity, description: str) -> AchievementDef:
    return AchievementDef(id, title, description, icon, Category.DAILY, rarity, minutes * 60, "today_seconds")


def _streak(id: str, title: str, days: int, field: str, icon: str, rarity: Rarity, description: str) -> AchievementDef:
    return AchievementDef(id, title, description, icon, Category.STREAK, rarity, days, field)


def _lifetime(id: str, title: str, target: int, field: str, icon: str, rarity: Rarity, description: str) -> AchievementDef:
    return AchievementDef(id, title, description, icon, Category.LIFETIME, rarity, target, field)


ACHIEVEMENTS: list[AchievementDef] = [
    # Focus: longest single session
    AchievementDef(
        id="focus_first",
        title="First Step",
        description="Complete your first study session",
        icon="\U0001f331",
        category=Category.FOCUS,
        rarity=Rarity.COMMON,
        target=1,
        check_field="session_count",
    ),
    _focus("focus_15m", "Warming Up", 15, "\U0001f525", Rarity.COMMON, "Study for 15 minutes straight"),
    _focus("focus_30m", "Half Hour Hero", 30, "⚡", Rarity.COMMON, "Study for 30 minutes straight"),
    _focus("focus_1h", "Hour Power", 60, "\U0001f4aa", Rarity.UNCOMMON, "Study for 1 hour straight"),
    _focus("focus_1h30", "Ninety Niner", 90, "\U0001f3af", Rarity.UNCOMMON, "Study for 1.5 hours straight"),
    _focus("focus_2h", "Deep Focus", 120, "\U0001f9e0", Rarity.RARE, "Study for 2 hours straight"),
    _focus("focus_3h", "Marathon Mind", 180, "\U0001f3c3", Rarity.RARE, "Study for 3 hours straight"),
    _focus("focus_4h", "Ultra Focus", 240, "\U0001f9be", Rarity.EPIC, "Study for 4 hours straight"),
    _focus("focus_5h", "Unstoppable", 300, "\U0001f451", Rarity.LEGENDARY, "Study for 5 hours straight"),
    # Daily: total time in the current study day
    _daily("daily_30m", "Day Starter", 30, "☀️", Rarity.COMMON, "Study 30 minutes in a single day"),
    _daily("daily_1h", "First Hour", 60, "\U0001f4d6", Rarity.COMMON, "Study 1 hour in a single day"),
    _daily("daily_2h", "Getting Serious", 120, "\U0001f4da", Rarity.COMMON, "Study 2 hours in a single day"),
    _daily("daily_3h", "Half Day Scholar", 180, "\U0001f392", Rarity.UNCOMMON, "Study 3 hours in a single day"),
    _daily("daily_5h", "Dedicated", 300, "\U0001f3c5", Rarity.UNCOMMON, "Study 5 hours in a single day"),
    _daily("daily_7h", "Full Day Scholar", 420, "\U0001f393", Rarity.RARE, "Study 7 hours in a single day"),
    _daily("daily_10h", "Study Machine", 600, "\U0001f916", Rarity.EPIC, "Study 10 hours in a single day"),
    _daily("daily_12h", "Legendary Day", 720, "⭐", Rarity.LEGENDARY, "Study 12 hours in a single day"),
    # Streak: consecutive qualifying days
    _streak("streak_2d", "Two Day Streak", 2, "streak_1h", "\U0001f517", Rarity.COMMON,
            "Study 1+ hour for 2 consecutive days"),
    _streak("streak_3d", "Hatrick", 3, "streak_1h", "\U0001f3a9", Rarity.COMMON,
            "Study 1+ hour for 3 consecutive days"),
    _streak("streak_3d_3h", "Consistent Performer", 3, "streak_3h", "\U0001f504", Rarity.UNCOMMON,
            "Study 3+ hours/day for 3 consecutive days"),
    _streak("streak_5d", "Workweek Warrior", 5, "streak_1h", "⚔️", Rarity.UNCOMMON,
            "Study 1+ hour for 5 consecutive days"),
    _streak("streak_7d", "Week Champion", 7, "streak_1h", "\U0001f3c6", Rarity.RARE,
            "Study 1+ hour for 7 consecutive days"),
    _streak("streak_7d_3h", "Iron Week", 7, "streak_3h", "\U0001f6e1️", Rarity.RARE,
            "Study 3+ hours/day for a full week"),
    _streak("streak_14d", "Two Week Champion", 14, "streak_1h", "\U0001f48e", Rarity.EPIC,
            "Study 1+ hour for 14 consecutive days"),
    _streak("streak_30d", "Month Master", 30, "streak_1h", "\U0001f31f", Rarity.EPIC,
            "Study 1+ hour for 30 consecutive days"),
    _streak("streak_7d_5h", "Beast Mode Week", 7, "streak_5h", "\U0001f981", Rarity.EPIC,
            "Study 5+ hours/day for a full week"),
    _streak("streak_60d", "Diamond Discipline", 60, "streak_1h", "\U0001f4a0", Rarity.LEGENDARY,
            "Study 1+ hour for 60 consecutive days"),
    _streak("streak_100d", "Century Legend", 100, "streak_1h", "\U0001f3db️", Rarity.LEGENDARY,
            "Study 1+ hour for 100 consecutive days"),
    # Lifetime: accumulated hours
    _lifetime("lifetime_1h", "First Hour Total", 1, "lifetime_hours", "\U0001f388", Rarity.COMMON,
              "Accumulate 1 hour of total study time"),
    _lifetime("lifetime_10h", "10 Hour Club", 10, "lifetime_hours", "\U0001f51f", Rarity.COMMON,
              "Accumulate 10 hours of total study time"),
    _lifetime("lifetime_25h", "25 Hour Club", 25, "lifetime_hours", "\U0001f4ca", Rarity.UNCOMMON,
              "Accumulate 25 hours of total study time"),
    _lifetime("lifetime_50h", "50 Hour Club", 50, "lifetime_hours", "\U0001f396️", Rarity.UNCOMMON,
              "Accumulate 50 hours of total study time"),
    _lifetime("lifetime_100h", "Centurion", 100, "lifetime_hours", "\U0001f4af", Rarity.RARE,
              "Accumulate 100 hours of total study time"),
    _lifetime("lifetime_250h", "Scholar", 250, "lifetime_hours", "\U0001f9d9", Rarity.RARE,
              "Accumulate 250 hours of total study time"),
    _lifetime("lifetime_500h", "Master", 500, "lifetime_hours", "\U0001f3f0", Rarity.EPIC,
              "Accumulate 500 hours of total study time"),
    _lifetime("lifetime_1000h", "Grand Master", 1000, "lifetime_hours", "\U0001f30d", Rarity.LEGENDARY,
              "Accumulate 1000 hours of total study time"),
    # Session count milestones
    _lifetime("sessions_10", "Getting a Habit", 10, "session_count", "\U0001f511", Rarity.COMMON,
              "Complete 10 study sessions"),
    _lifetime("sessions_50", "Dedicated Learner", 50, "session_count", "\U0001f4dd", Rarity.UNCOMMON,
              "Complete 50 study sessions"),
    _lifetime("sessions_100", "Session Centurion", 100, "session_count", "\U0001f3aa", Rarity.RARE,
              "Complete 100 study sessions"),
    _lifetime("sessions_500", "Session Master", 500, "session_count", "\U0001f5ff", Rarity.EPIC,
              "Complete 500 study sessions"),
]

_BY_ID: dict[str, AchievementDef] = {a.id: a for a in ACHIEVEMENTS}


def build_achievement_stats(
    sessions: list[StudySession],
    current_session_duration: int | None = None,
    today: str | None = None,
) -> dict:
    """Aggregate the values the achievement rules are checked against.

    current_session_duration is the just-finished session's total, so focus
    achievements can fire even if that session is not yet in `sessions`.
    A session with pauses in it counts as one focus block of its active time.
    """
    today_str = today or study_date()
    streak_info = calculate_streak(sessions, 1, today=today_str)
    longest = longest_session(sessions)
    focus_seconds = max(current_session_duration or 0, longest)

    return {
        "session_count": sum(1 for s in sessions if s.is_closed),
        "focus_seconds": focus_seconds,
        "today_seconds": daily_summary(sessions, today_str).total_seconds,
        "streak_1h": streak_info.current_streak,
        "streak_3h": consecutive_days_with_min_hours(sessions, 3, up_to=today_str),
        "streak_5h": consecutive_days_with_min_hours(sessions, 5, up_to=today_str),
        "lifetime_hours": streak_info.total_hours_all_time,
    }


def check_achievements(stats: dict) -> list[AchievementStatus]:
    """Check all achievements against aggregated stats.

    stats dict should have keys matching check_field values (see
    build_achievement_stats). Progress is min(current/target, 1.0).
    """
    results: list[AchievementStatus] = []
    for achievement in ACHIEVEMENTS:
        current_value = stats.get(achievement.check_field, 0)
        progress = min(current_value / achievement.target, 1.0) if achievement.target > 0 else 0.0
        results.append(
            AchievementStatus(
                definition=achievement,
                progress=progress,
                unlocked=progress >= 1.0,
            )
        )
    return results


def get_newly_unlocked(
    sessions: list[StudySession],
    already_unlocked: Iterable[str],
    current_session_duration: int | None = None,
    today: str | None = None,
) -> list[str]:
    """Return ids of achievements satisfied now but not in already_unlocked.

    Ids come back in catalog order, each at most once. Running this twice with
    the same log and the updated unlocked set yields an empty list.
    """
    seen = set(already_unlocked)
    stats = build_achievement_stats(sessions, current_session_duration, today=today)
    newly: list[str] = []
    for status in check_achievements(stats):
        achievement_id = status.definition.id
        if status.unlocked and achievement_id not in seen:
            newly.append(achievement_id)
            seen.add(achievement_id)
    return newly


def get_closest_achievements(statuses: list[AchievementStatus], n: int = 3) -> list[AchievementStatus]:
    """Return the N achievements closest to being unlocked (highest progress < 1.0)."""
    in_progress = [s for s in statuses if not s.unlocked]
    in_progress.sort(key=lambda s: s.progress, reverse=True)
    return in_progress[:n]


def get_achievement_def(achievement_id: str) -> AchievementDef | None:
    return _BY_ID.get(achievement_id)


def get_achievements_by_category(category: Category | str) -> list[AchievementDef]:
    return [a for a in ACHIEVEMENTS if a.category == category]
