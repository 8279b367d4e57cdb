"""Typed persistence over the key-value Database.

Storage is best effort: read failures are logged and treated as "no data",
write failures are logged and dropped. Callers always get a usable value back.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone

from study_rank.db import Database
from study_rank.models import AppSettings, StudySession, TimerState, UnlockedAchievement
from study_rank.subjects import DEFAULT_SUBJECTS, Subject

logger = logging.getLogger(__name__)

SESSIONS_KEY = "ypt_sessions"
ACHIEVEMENTS_KEY = "ypt_achievements"
SETTINGS_KEY = "ypt_settings"
SUBJECTS_KEY = "ypt_subjects"
TIMER_STATE_KEY = "ypt_timer_state"

KEY_PREFIX = "ypt_"

EXPORT_VERSION = 1

_READ_ERRORS = (sqlite3.Error, json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError)
_WRITE_ERRORS = (sqlite3.Error, TypeError, ValueError)


class Storage:
    """Load/save the application records under fixed keys."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def _read(self, key: str):
        raw = self.db.get(key)
        return json.loads(raw) if raw is not None else None

    def _write(self, key: str, value: object) -> bool:
        try:
            self.db.set(key, json.dumps(value))
        except _WRITE_ERRORS as e:
            logger.error("Failed to save %s: %s", key, e)
            return False
        return True

    # Sessions

    def load_sessions(self) -> list[StudySession]:
        try:
            data = self._read(SESSIONS_KEY)
            return [StudySession.from_dict(item) for item in data or []]
        except _READ_ERRORS as e:
            logger.warning("Could not load sessions, starting empty: %s", e)
            return []

    def save_sessions(self, sessions: list[StudySession]) -> bool:
        return self._write(SESSIONS_KEY, [s.to_dict() for s in sessions])

    # Achievements

    def load_achievements(self) -> list[UnlockedAchievement]:
        try:
            data = self._read(ACHIEVEMENTS_KEY)
            return [UnlockedAchievement.from_dict(item) for item in data or []]
        except _READ_ERRORS as e:
            logger.warning("Could not load achievements, starting empty: %s", e)
            return []

    def save_achievements(self, achievements: list[UnlockedAchievement]) -> bool:
        return self._write(ACHIEVEMENTS_KEY, [a.to_dict() for a in achievements])

    # Settings

    def load_settings(self) -> AppSettings:
        try:
            data = self._read(SETTINGS_KEY)
            if not isinstance(data, dict):
                return AppSettings()
            return AppSettings.from_dict(data)
        except _READ_ERRORS as e:
            logger.warning("Could not load settings, using defaults: %s", e)
            return AppSettings()

    def save_settings(self, settings: AppSettings) -> bool:
        return self._write(SETTINGS_KEY, settings.to_dict())

    # Subjects

    def load_subjects(self) -> list[Subject]:
        """Stored subjects, or the starter set when nothing was saved yet."""
        try:
            data = self._read(SUBJECTS_KEY)
            if data is None:
                return list(DEFAULT_SUBJECTS)
            return [Subject.from_dict(item) for item in data]
        except _READ_ERRORS as e:
            logger.warning("Could not load subjects, using defaults: %s", e)
            return list(DEFAULT_SUBJECTS)

    def save_subjects(self, subjects: list[Subject]) -> bool:
        return self._write(SUBJECTS_KEY, [s.to_dict() for s in subjects])

    # Timer state (recovery after restart)

    def load_timer_state(self) -> TimerState | None:
        try:
            data = self._read(TIMER_STATE_KEY)
            return TimerState.from_dict(data) if isinstance(data, dict) else None
        except _READ_ERRORS as e:
            logger.warning("Could not load timer state: %s", e)
            return None

    def save_timer_state(self, state: TimerState) -> bool:
        return self._write(TIMER_STATE_KEY, state.to_dict())

    def clear_timer_state(self) -> None:
        try:
            self.db.delete(TIMER_STATE_KEY)
        except sqlite3.Error as e:
            logger.error("Failed to clear timer state: %s", e)

    # Export / import

    def export_all(self) -> str:
        """Serialize every record into the versioned JSON envelope."""
        data = {
            "sessions": [s.to_dict() for s in self.load_sessions()],
            "achievements": [a.to_dict() for a in self.load_achievements()],
            "settings": self.load_settings().to_dict(),
            "subjects": [s.to_dict() for s in self.load_subjects()],
            "exportedAt": datetime.now(tz=timezone.utc).isoformat(),
            "version": EXPORT_VERSION,
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    def import_all(self, json_string: str) -> bool:
        """Replace stored records with an exported envelope.

        All-or-nothing: the document is fully parsed and validated before
        anything is written. `sessions` and `version` are required; the other
        sections are only written when present.
        """
        try:
            data = json.loads(json_string)
            if not isinstance(data, dict) or not data.get("version") or not isinstance(data.get("sessions"), list):
                raise ValueError("Invalid data format")
            sessions = [StudySession.from_dict(item) for item in data["sessions"]]
            achievements = (
                [UnlockedAchievement.from_dict(item) for item in data["achievements"]]
                if data.get("achievements") is not None
                else None
            )
            settings = AppSettings.from_dict(data["settings"]) if data.get("settings") else None
            subjects = (
                [Subject.from_dict(item) for item in data["subjects"]]
                if data.get("subjects") is not None
                else None
            )
        except _READ_ERRORS as e:
            logger.error("Failed to import data: %s", e)
            return False

        self.save_sessions(sessions)
        if achievements is not None:
            self.save_achievements(achievements)
        if settings is not None:
            self.save_settings(settings)
        if subjects is not None:
            self.save_subjects(subjects)
        logger.info("imported %d sessions", len(sessions))
        return True

    def clear_all(self) -> None:
        """Remove every study-rank key, including ones written by other versions."""
        try:
            keys = [k for k in self.db.keys() if k.startswith(KEY_PREFIX)]
        except sqlite3.Error as e:
            logger.error("Failed to list keys: %s", e)
            return
        for key in keys:
            try:
                self.db.delete(key)
            except sqlite3.Error as e:
                logger.error("Failed to clear %s: %s", key, e)
