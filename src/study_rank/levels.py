"""Level progression from total XP. Pure functions, no side effects."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LevelThreshold:
    level: int
    xp: int
    title: str
    emoji: str


@dataclass
class LevelInfo:
    level: int
    title: str
    emoji: str
    current_xp: int  # XP earned inside the current level
    xp_for_current_level: int
    xp_for_next_level: int
    progress_percent: float
    total_xp: int


LEVEL_THRESHOLDS: list[LevelThreshold] = [
    LevelThreshold(1, 0, "Noob", "\U0001f95a"),
    LevelThreshold(2, 60, "Beginner", "\U0001f331"),
    LevelThreshold(3, 180, "Novice", "\U0001f4d7"),
    LevelThreshold(4, 360, "Apprentice", "\U0001f4d8"),
    LevelThreshold(5, 600, "Student", "\U0001f392"),
    LevelThreshold(6, 1200, "Dedicated", "\U0001f4da"),
    LevelThreshold(7, 1800, "Scholar", "\U0001f393"),
    LevelThreshold(8, 3000, "Expert", "\U0001f9e0"),
    LevelThreshold(9, 6000, "Master", "⚔️"),
    LevelThreshold(10, 12000, "Grandmaster", "\U0001f451"),
    LevelThreshold(11, 18000, "Legend", "\U0001f3db️"),
    LevelThreshold(12, 30000, "Mythic", "\U0001f31f"),
    LevelThreshold(13, 60000, "Immortal", "\U0001f48e"),
]

MAX_LEVEL = LEVEL_THRESHOLDS[-1].level


def level_from_xp(total_xp: int) -> int:
    """Highest level whose threshold is <= total_xp."""
    return _threshold_index(total_xp) + 1


def _threshold_index(total_xp: int) -> int:
    for i in range(len(LEVEL_THRESHOLDS) - 1, -1, -1):
        if total_xp >= LEVEL_THRESHOLDS[i].xp:
            return i
    return 0


def level_info(total_xp: int) -> LevelInfo:
    """Full level breakdown for a given total XP.

    At max level the progress is 100% and the in-level denominator is 1.
    """
    idx = _threshold_index(total_xp)
    current = LEVEL_THRESHOLDS[idx]
    nxt = LEVEL_THRESHOLDS[idx + 1] if idx + 1 < len(LEVEL_THRESHOLDS) else None

    xp_in_level = total_xp - current.xp
    needed = nxt.xp - current.xp if nxt is not None else 1
    progress = min(xp_in_level / needed * 100, 100.0) if nxt is not None else 100.0
    next_xp = nxt.xp if nxt is not None else current.xp

    return LevelInfo(
        level=current.level,
        title=current.title,
        emoji=current.emoji,
        current_xp=xp_in_level,
        xp_for_current_level=current.xp,
        xp_for_next_level=next_xp,
        progress_percent=progress,
        total_xp=total_xp,
    )


def level_emoji(level: int) -> str:
    """Emoji for a level number; unknown levels get the level-1 egg."""
    threshold = next((t for t in LEVEL_THRESHOLDS if t.level == level), None)
    return threshold.emoji if threshold else LEVEL_THRESHOLDS[0].emoji
