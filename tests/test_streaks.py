"""Tests for the streak tracking system."""

from study_rank.models import StudySession
from study_rank.streaks import (
    StreakInfo,
    calculate_streak,
    consecutive_days_with_min_hours,
    daily_totals,
    get_streak_from_dates,
)

HOUR = 3600


def _day(day: str, seconds: int, n: int = 0) -> StudySession:
    return StudySession(id=f"{day}-{n}", start_time=n, end_time=n + seconds * 1000,
                        duration=seconds, date=day)


def _days(*specs: tuple[str, int]) -> list[StudySession]:
    return [_day(d, s, n=i) for i, (d, s) in enumerate(specs)]


class TestGetStreakFromDates:
    """Tests for get_streak_from_dates function."""

    def test_consecutive_five_days(self):
        dates = {"2026-01-01", "2026-01-02", "2026-01-03", "2026-01-04", "2026-01-05"}
        assert get_streak_from_dates(dates, "2026-01-05") == 5

    def test_reference_not_in_dates(self):
        assert get_streak_from_dates({"2026-01-01", "2026-01-02"}, "2026-01-05") == 0

    def test_single_date(self):
        assert get_streak_from_dates({"2026-01-01"}, "2026-01-01") == 1

    def test_gap_breaks_streak(self):
        dates = {"2026-01-01", "2026-01-02", "2026-01-04", "2026-01-05"}
        assert get_streak_from_dates(dates, "2026-01-05") == 2

    def test_empty_dates(self):
        assert get_streak_from_dates(set(), "2026-01-01") == 0

    def test_across_month_boundary(self):
        assert get_streak_from_dates({"2026-01-31", "2026-02-01"}, "2026-02-01") == 2


class TestDailyTotals:
    def test_sums_per_date(self):
        sessions = _days(("2026-01-01", 600), ("2026-01-01", 900), ("2026-01-02", 60))
        assert daily_totals(sessions) == {"2026-01-01": 1500, "2026-01-02": 60}

    def test_ignores_open_sessions(self):
        open_session = StudySession(id="x", start_time=0, end_time=None, duration=500, date="2026-01-01")
        assert daily_totals([open_session]) == {}


class TestCalculateStreak:
    """Tests for calculate_streak function."""

    def test_three_qualifying_days_ending_today(self):
        sessions = _days(("2026-01-03", HOUR), ("2026-01-04", HOUR), ("2026-01-05", HOUR))
        assert calculate_streak(sessions, 1, today="2026-01-05").current_streak == 3

    def test_today_not_yet_qualifying_counts_from_yesterday(self):
        sessions = _days(("2026-01-03", HOUR), ("2026-01-04", HOUR), ("2026-01-05", 1800))
        assert calculate_streak(sessions, 1, today="2026-01-05").current_streak == 2

    def test_today_empty_counts_from_yesterday(self):
        sessions = _days(("2026-01-03", HOUR), ("2026-01-04", HOUR))
        assert calculate_streak(sessions, 1, today="2026-01-05").current_streak == 2

    def test_gap_before_yesterday_resets(self):
        sessions = _days(("2026-01-01", HOUR), ("2026-01-02", HOUR))
        assert calculate_streak(sessions, 1, today="2026-01-05").current_streak == 0

    def test_just_under_threshold_does_not_qualify(self):
        sessions = _days(("2026-01-04", HOUR - 1), ("2026-01-05", HOUR))
        assert calculate_streak(sessions, 1, today="2026-01-05").current_streak == 1

    def test_multiple_sessions_add_up(self):
        sessions = _days(("2026-01-05", 1800), ("2026-01-05", 1800))
        assert calculate_streak(sessions, 1, today="2026-01-05").current_streak == 1

    def test_longest_streak_from_history(self):
        sessions = _days(
            ("2026-01-01", HOUR), ("2026-01-02", HOUR), ("2026-01-03", HOUR), ("2026-01-04", HOUR),
            ("2026-01-08", HOUR), ("2026-01-09", HOUR),
        )
        result = calculate_streak(sessions, 1, today="2026-01-09")
        assert result.current_streak == 2
        assert result.longest_streak == 4

    def test_longest_never_below_current(self):
        sessions = _days(("2026-01-04", HOUR), ("2026-01-05", HOUR))
        result = calculate_streak(sessions, 1, today="2026-01-05")
        assert result.longest_streak >= result.current_streak

    def test_totals(self):
        sessions = _days(("2026-01-01", 1800), ("2026-01-02", 5400))
        result = calculate_streak(sessions, 1, today="2026-01-02")
        assert result.total_days_studied == 2
        assert result.total_hours_all_time == 2.0

    def test_higher_threshold(self):
        sessions = _days(("2026-01-04", 3 * HOUR), ("2026-01-05", 3 * HOUR))
        assert calculate_streak(sessions, 3, today="2026-01-05").current_streak == 2
        assert calculate_streak(sessions, 5, today="2026-01-05").current_streak == 0

    def test_empty(self):
        assert calculate_streak([], 1, today="2026-01-05") == StreakInfo(0, 0, 0, 0.0)


class TestConsecutiveDaysWithMinHours:
    def test_counts_back_from_today(self):
        sessions = _days(("2026-01-03", 3 * HOUR), ("2026-01-04", 3 * HOUR), ("2026-01-05", 3 * HOUR))
        assert consecutive_days_with_min_hours(sessions, 3, up_to="2026-01-05") == 3

    def test_no_grace_for_today(self):
        sessions = _days(("2026-01-03", 3 * HOUR), ("2026-01-04", 3 * HOUR), ("2026-01-05", HOUR))
        assert consecutive_days_with_min_hours(sessions, 3, up_to="2026-01-05") == 0

    def test_break_in_the_middle(self):
        sessions = _days(("2026-01-03", 5 * HOUR), ("2026-01-04", 2 * HOUR), ("2026-01-05", 5 * HOUR))
        assert consecutive_days_with_min_hours(sessions, 5, up_to="2026-01-05") == 1


class TestThreeDayExample:
    SESSIONS = _days(("2024-01-01", HOUR), ("2024-01-02", HOUR), ("2024-01-03", HOUR))

    def test_streak_ending_today(self):
        result = calculate_streak(self.SESSIONS, 1, today="2024-01-03")
        assert result.current_streak == 3
        assert result.longest_streak == 3

    def test_unstarted_today_keeps_streak(self):
        result = calculate_streak(self.SESSIONS, 1, today="2024-01-04")
        assert result.current_streak == 3
