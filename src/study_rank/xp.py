"""XP calculation for study-rank.

1 XP per full minute of closed-session study time, lifetime. Since sessions are
only ever appended, total XP never decreases.
"""

from __future__ import annotations

import math

from study_rank.models import StudySession

SECONDS_PER_XP = 60


def calculate_total_xp(sessions: list[StudySession]) -> int:
    """Sum closed-session durations and convert to whole minutes."""
    total_seconds = sum(s.duration for s in sessions if s.is_closed)
    return math.floor(total_seconds / SECONDS_PER_XP)


def xp_for_session(session: StudySession) -> int:
    """XP a single session would be worth on its own."""
    return session.duration // SECONDS_PER_XP
