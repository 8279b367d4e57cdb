"""Timer state machine for the in-progress study session.

States:
    idle     nothing accumulated
    running  current_session_start is set
    paused   time accumulated in elapsed_before_pause, no active start

Elapsed time is always re-derived from the wall clock, so a restarted process
that restores the persisted TimerState keeps counting where it left off.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from study_rank.clock import generate_id, now_ms, study_date
from study_rank.models import StudySession, TimerState

logger = logging.getLogger(__name__)

# Sessions shorter than this are discarded on stop.
MIN_SESSION_SECONDS = 10

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"


class StudyTimer:
    """Start/pause/stop transitions over a TimerState."""

    def __init__(self, clock: Callable[[], float] = now_ms, state: TimerState | None = None) -> None:
        self._clock = clock
        self.state = state or TimerState()

    @property
    def status(self) -> str:
        if self.state.is_running and self.state.session_start_time is not None:
            return RUNNING
        if self.state.elapsed_before_pause > 0:
            return PAUSED
        return IDLE

    @property
    def subject(self) -> str | None:
        return self.state.subject

    def restore(self, persisted: TimerState | None) -> None:
        """Resume from persisted state. A long gap since the start is not capped."""
        if persisted is None:
            self.state = TimerState()
            return
        if persisted.is_running and persisted.session_start_time:
            self.state = TimerState(
                is_running=True,
                session_start_time=persisted.session_start_time,
                elapsed_before_pause=persisted.elapsed_before_pause,
                subject=persisted.subject,
            )
        elif not persisted.is_running and persisted.elapsed_before_pause > 0:
            self.state = TimerState(
                elapsed_before_pause=persisted.elapsed_before_pause,
                subject=persisted.subject,
            )
        else:
            self.state = TimerState(subject=persisted.subject)

    def select_subject(self, subject_id: str | None) -> None:
        self.state.subject = subject_id

    def elapsed(self) -> float:
        """Seconds accumulated so far in the current session (display value)."""
        total = self.state.elapsed_before_pause
        if self.state.is_running and self.state.session_start_time is not None:
            total += (self._clock() - self.state.session_start_time) / 1000
        return total

    def start(self) -> bool:
        """Idle|Paused -> Running. Returns False when already running."""
        if self.status == RUNNING:
            return False
        self.state.is_running = True
        self.state.session_start_time = self._clock()
        logger.debug("timer started at %s", self.state.session_start_time)
        return True

    def pause(self) -> bool:
        """Running -> Paused. Returns False when there is no running segment."""
        if not self.state.session_start_time:
            return False
        running = (self._clock() - self.state.session_start_time) / 1000
        self.state.elapsed_before_pause += running
        self.state.is_running = False
        self.state.session_start_time = None
        logger.debug("timer paused with %.1fs elapsed", self.state.elapsed_before_pause)
        return True

    def stop(self) -> tuple[StudySession | None, float]:
        """Running|Paused -> Idle.

        Returns (session, total_seconds). session is None when the total is
        below MIN_SESSION_SECONDS and the time is discarded. The subject
        selection is cleared either way.
        """
        now = self._clock()
        total = self.state.elapsed_before_pause
        if self.state.is_running and self.state.session_start_time is not None:
            total += (now - self.state.session_start_time) / 1000

        session: StudySession | None = None
        if total >= MIN_SESSION_SECONDS:
            start_time = now - total * 1000
            session = StudySession(
                id=generate_id(int(now)),
                start_time=start_time,
                end_time=now,
                duration=math.floor(total),
                date=study_date(start_time),
                subject=self.state.subject,
            )
            logger.info("session %s finalized: %ss on %s", session.id, session.duration, session.date)
        else:
            logger.info("discarding %.1fs session (minimum is %ss)", total, MIN_SESSION_SECONDS)

        self.state = TimerState()
        return session, total
