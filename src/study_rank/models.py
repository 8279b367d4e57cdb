"""Core records shared by the timer, the statistics engine and storage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MIN_DAILY_GOAL_HOURS = 1.0
MAX_DAILY_GOAL_HOURS = 16.0


class Theme(str, Enum):
    MIDNIGHT = "midnight"
    FOREST = "forest"
    SUNSET = "sunset"
    OCEAN = "ocean"
    CHERRY = "cherry"
    LAVENDER = "lavender"


class Wallpaper(str, Enum):
    DEFAULT = "default"
    AURORA = "aurora"
    NEBULA = "nebula"
    GRID = "grid"
    GRADIENT_FLOW = "gradient-flow"
    BOKEH = "bokeh"


@dataclass(frozen=True)
class StudySession:
    """One finalized study interval. Timestamps are milliseconds since the epoch."""

    id: str
    start_time: float
    end_time: float | None
    duration: int  # whole seconds
    date: str  # study day, YYYY-MM-DD
    subject: str | None = None

    @property
    def is_closed(self) -> bool:
        return self.end_time is not None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": self.duration,
            "date": self.date,
        }
        if self.subject:
            data["subject"] = self.subject
        return data

    @classmethod
    def from_dict(cls, data: dict) -> StudySession:
        return cls(
            id=str(data["id"]),
            start_time=data["startTime"],
            end_time=data.get("endTime"),
            duration=int(data["duration"]),
            date=str(data["date"]),
            subject=data.get("subject") or None,
        )


@dataclass(frozen=True)
class UnlockedAchievement:
    id: str
    unlocked_at: int  # ms

    def to_dict(self) -> dict:
        return {"id": self.id, "unlockedAt": self.unlocked_at}

    @classmethod
    def from_dict(cls, data: dict) -> UnlockedAchievement:
        return cls(id=str(data["id"]), unlocked_at=int(data["unlockedAt"]))


def clamp_goal_hours(hours: float) -> float:
    """Keep the daily goal inside the supported 1-16 hour range."""
    return max(MIN_DAILY_GOAL_HOURS, min(float(hours), MAX_DAILY_GOAL_HOURS))


@dataclass
class AppSettings:
    theme: Theme = Theme.MIDNIGHT
    wallpaper: Wallpaper = Wallpaper.DEFAULT
    daily_goal_hours: float = 5.0
    sound_enabled: bool = True

    def to_dict(self) -> dict:
        return {
            "theme": self.theme.value,
            "wallpaper": self.wallpaper.value,
            "dailyGoalHours": self.daily_goal_hours,
            "soundEnabled": self.sound_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> AppSettings:
        """Merge stored settings over the defaults.

        Missing keys and unknown theme/wallpaper ids fall back to the default.
        """
        defaults = cls()
        try:
            theme = Theme(data.get("theme", defaults.theme.value))
        except ValueError:
            theme = defaults.theme
        try:
            wallpaper = Wallpaper(data.get("wallpaper", defaults.wallpaper.value))
        except ValueError:
            wallpaper = defaults.wallpaper
        try:
            goal = clamp_goal_hours(data.get("dailyGoalHours", defaults.daily_goal_hours))
        except (TypeError, ValueError):
            goal = defaults.daily_goal_hours
        return cls(
            theme=theme,
            wallpaper=wallpaper,
            daily_goal_hours=goal,
            sound_enabled=bool(data.get("soundEnabled", defaults.sound_enabled)),
        )


@dataclass
class TimerState:
    """Transient timer state, mirrored to storage so a restart can resume it."""

    is_running: bool = False
    session_start_time: float | None = None  # ms, set only while running
    elapsed_before_pause: float = 0.0  # seconds from earlier run segments
    subject: str | None = None

    def to_dict(self) -> dict:
        return {
            "isRunning": self.is_running,
            "sessionStartTime": self.session_start_time,
            "elapsedBeforePause": self.elapsed_before_pause,
            "subject": self.subject,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TimerState:
        return cls(
            is_running=bool(data.get("isRunning", False)),
            session_start_time=data.get("sessionStartTime"),
            elapsed_before_pause=float(data.get("elapsedBeforePause", 0) or 0),
            subject=data.get("subject") or None,
        )
