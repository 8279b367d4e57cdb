"""Application controller: owns the study state and every transition on it.

StudyTracker is the single owner of the session log, unlocked achievements,
settings, subjects and the timer. Every user action is one method call that
updates memory and then mirrors the change to Storage.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field

from study_rank.achievements import (
    ACHIEVEMENTS,
    AchievementStatus,
    build_achievement_stats,
    check_achievements,
    get_newly_unlocked,
)
from study_rank.clock import now_ms, study_date
from study_rank.models import AppSettings, StudySession, UnlockedAchievement
from study_rank.storage import Storage
from study_rank.subjects import Subject, ValidationResult, create_subject, get_subject, validate_subject_name
from study_rank.timer import StudyTimer

logger = logging.getLogger(__name__)


@dataclass
class StopResult:
    session: StudySession | None
    total_seconds: float
    new_achievements: list[str] = field(default_factory=list)

    @property
    def discarded(self) -> bool:
        return self.session is None


class StudyTracker:
    def __init__(self, storage: Storage, clock: Callable[[], float] = now_ms) -> None:
        self.storage = storage
        self._clock = clock
        self.timer = StudyTimer(clock=clock)
        self.sessions: list[StudySession] = []
        self.unlocked: list[UnlockedAchievement] = []
        self.settings = AppSettings()
        self.subjects: list[Subject] = []
        self.new_achievements: list[str] = []
        self.hydrated = False

    def hydrate(self) -> None:
        """Load everything from storage and resume an interrupted timer."""
        self.sessions = self.storage.load_sessions()
        self.unlocked = self.storage.load_achievements()
        self.settings = self.storage.load_settings()
        self.subjects = self.storage.load_subjects()
        self.timer.restore(self.storage.load_timer_state())
        self.hydrated = True
        logger.debug(
            "hydrated %d sessions, %d achievements, timer %s",
            len(self.sessions), len(self.unlocked), self.timer.status,
        )

    def today(self) -> str:
        return study_date(self._clock())

    # Timer

    @property
    def status(self) -> str:
        return self.timer.status

    @property
    def current_subject(self) -> str | None:
        return self.timer.subject

    def elapsed(self) -> float:
        return self.timer.elapsed()

    def _persist_timer(self) -> None:
        self.storage.save_timer_state(self.timer.state)

    def start(self) -> bool:
        started = self.timer.start()
        if started:
            self._persist_timer()
        return started

    def pause(self) -> bool:
        paused = self.timer.pause()
        if paused:
            self._persist_timer()
        return paused

    def stop(self) -> StopResult:
        """Finalize the current session and check achievements.

        Sessions under ten seconds are dropped without touching the log.
        """
        session, total = self.timer.stop()
        result = StopResult(session=session, total_seconds=total)

        if session is not None:
            self.sessions = [*self.sessions, session]
            self.storage.save_sessions(self.sessions)

            unlocked_ids = {a.id for a in self.unlocked}
            new_ids = get_newly_unlocked(
                self.sessions, unlocked_ids, math.floor(total), today=self.today()
            )
            if new_ids:
                stamp = int(self._clock())
                self.unlocked = [
                    *self.unlocked,
                    *(UnlockedAchievement(id=a, unlocked_at=stamp) for a in new_ids),
                ]
                self.storage.save_achievements(self.unlocked)
                self.new_achievements.extend(new_ids)
                logger.info("unlocked %s", ", ".join(new_ids))
            result.new_achievements = new_ids

        self.storage.clear_timer_state()
        return result

    def select_subject(self, subject_id: str | None) -> bool:
        """Tag the current (or next) session. Unknown ids are rejected."""
        if subject_id is not None and get_subject(subject_id, self.subjects) is None:
            return False
        self.timer.select_subject(subject_id)
        self._persist_timer()
        return True

    # Subjects

    def add_subject(self, name: str) -> tuple[ValidationResult, Subject | None]:
        result = validate_subject_name(name, self.subjects)
        if not result.valid:
            return result, None
        subject = create_subject(result.sanitized, self.subjects)
        self.subjects = [*self.subjects, subject]
        self.storage.save_subjects(self.subjects)
        return result, subject

    def remove_subject(self, subject_id: str) -> bool:
        """Delete a subject. Past sessions keep their (now dangling) tag."""
        if get_subject(subject_id, self.subjects) is None:
            return False
        self.subjects = [s for s in self.subjects if s.id != subject_id]
        self.storage.save_subjects(self.subjects)
        if self.timer.subject == subject_id:
            self.timer.select_subject(None)
            self._persist_timer()
        return True

    # Settings

    def update_settings(self, **changes: object) -> AppSettings:
        """Merge camelCase setting changes (e.g. dailyGoalHours=3) and save."""
        self.settings = AppSettings.from_dict({**self.settings.to_dict(), **changes})
        self.storage.save_settings(self.settings)
        return self.settings

    # Achievements

    def unlocked_ids(self) -> set[str]:
        return {a.id for a in self.unlocked}

    def achievement_statuses(self) -> list[AchievementStatus]:
        """Current progress for every achievement; stored unlocks always count."""
        unlocked = self.unlocked_ids()
        stats = build_achievement_stats(self.sessions, today=self.today())
        statuses = check_achievements(stats)
        for status in statuses:
            if status.definition.id in unlocked:
                status.unlocked = True
                status.progress = 1.0
            else:
                status.unlocked = False
        return statuses

    def unlocked_at(self, achievement_id: str) -> int | None:
        return next((a.unlocked_at for a in self.unlocked if a.id == achievement_id), None)

    def dismiss_achievement(self, achievement_id: str) -> None:
        self.new_achievements = [a for a in self.new_achievements if a != achievement_id]

    @property
    def total_achievements(self) -> int:
        return len(ACHIEVEMENTS)

    # Data management

    def export_data(self) -> str:
        return self.storage.export_all()

    def import_data(self, json_string: str) -> bool:
        """Import an export envelope and reload state. False leaves everything untouched."""
        if not self.storage.import_all(json_string):
            return False
        self.hydrate()
        return True

    def clear_all_data(self, include_settings: bool = False) -> None:
        """Wipe sessions, achievements and the timer; optionally settings and subjects too."""
        if include_settings:
            self.storage.clear_all()
        else:
            self.storage.save_sessions([])
            self.storage.save_achievements([])
            self.storage.clear_timer_state()
        self.new_achievements = []
        self.hydrate()
