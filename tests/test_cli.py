"""Tests for CLI commands and display helpers."""

from __future__ import annotations

import json
from datetime import datetime
from unittest.mock import patch

import pytest

from study_rank.cli import (
    _parse_setting,
    build_parser,
    do_achievements,
    do_config_db_path,
    do_dashboard,
    do_export,
    do_heatmap,
    do_import,
    do_pause,
    do_reset,
    do_settings_set,
    do_settings_show,
    do_start,
    do_status,
    do_stop,
    do_subject_add,
    do_subject_remove,
    do_subject_select,
    do_subjects,
    do_week,
    do_wrapped,
    main,
    watch_status,
)
from study_rank.db import DEFAULT_DB_PATH, Database
from study_rank.display import _xp_bar, console, format_number, print_subject_breakdown, theme_color
from study_rank.storage import Storage
from study_rank.tracker import StudyTracker


class FakeClock:
    def __init__(self, start: float) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds * 1000


@pytest.fixture
def db(tmp_path):
    """Create a temporary database for testing."""
    database = Database(db_path=tmp_path / "test.db")
    yield database
    database.close()


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 12, 14, 0).timestamp() * 1000)


@pytest.fixture
def tracker(db, clock):
    t = StudyTracker(Storage(db), clock=clock)
    t.hydrate()
    return t


def _study(tracker, clock, seconds):
    do_start(tracker)
    clock.advance(seconds)
    return do_stop(tracker)


# ── Argument Parsing ──────────────────────────────────────────────────────────


class TestArgumentParsing:
    def test_no_args_defaults_to_none_command(self):
        args = build_parser().parse_args([])
        assert args.command is None

    def test_start_with_subject(self):
        args = build_parser().parse_args(["start", "--subject", "math"])
        assert args.command == "start"
        assert args.subject == "math"

    def test_status_watch(self):
        args = build_parser().parse_args(["status", "--watch"])
        assert args.watch is True

    def test_week_days(self):
        assert build_parser().parse_args(["week", "--days", "14"]).days == 14

    def test_wrapped_period(self):
        assert build_parser().parse_args(["wrapped", "--period", "year"]).period == "year"

    def test_wrapped_invalid_period(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["wrapped", "--period", "decade"])

    def test_subjects_add(self):
        args = build_parser().parse_args(["subjects", "add", "Art History"])
        assert args.subjects_command == "add"
        assert args.name == "Art History"

    def test_settings_set(self):
        args = build_parser().parse_args(["settings", "set", "goal", "3"])
        assert (args.key, args.value) == ("goal", "3")

    def test_settings_unknown_key(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["settings", "set", "volume", "3"])

    def test_achievements_category(self):
        assert build_parser().parse_args(["achievements", "-c", "streak"]).category == "streak"

    def test_achievements_invalid_category(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["achievements", "--category", "social"])

    def test_config_db_path(self):
        args = build_parser().parse_args(["config", "db-path", "~/notes/study.db"])
        assert args.config_command == "db-path"
        assert args.path == "~/notes/study.db"

    def test_verbose(self):
        assert build_parser().parse_args(["-v", "dashboard"]).verbose is True

    def test_invalid_command_raises(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["nonexistent"])


# ── Display helpers ───────────────────────────────────────────────────────────


class TestFormatNumber:
    def test_small_number(self):
        assert format_number(42) == "42"

    def test_number_with_commas(self):
        assert format_number(1200) == "1,200"

    def test_ten_thousand(self):
        assert format_number(10_000) == "10.0K"

    def test_large_k(self):
        assert format_number(421_543) == "421.5K"

    def test_million(self):
        assert format_number(1_234_567) == "1.2M"

    def test_large_million(self):
        assert format_number(123_456_789) == "123M"

    def test_zero(self):
        assert format_number(0) == "0"


class TestXpBar:
    def test_half(self):
        assert _xp_bar(5, 10, width=10) == "[█████░░░░░]"

    def test_overfull_is_capped(self):
        assert _xp_bar(50, 10, width=4) == "[████]"

    def test_zero_total_is_full(self):
        assert _xp_bar(0, 0, width=3) == "[███]"


class TestThemeColor:
    def test_known(self):
        assert theme_color("forest") == "green3"

    def test_unknown_falls_back(self):
        assert theme_color("neon") == theme_color("midnight")


# ── Timer commands ────────────────────────────────────────────────────────────


class TestTimerCommands:
    def test_start_and_stop(self, tracker, clock):
        assert do_start(tracker)["ok"] is True
        clock.advance(1800)
        result = do_stop(tracker)
        assert result["ok"] is True
        assert result["discarded"] is False
        assert result["duration"] == 1800
        assert result["xp_earned"] == 30
        assert [a["id"] for a in result["new_achievements"]] == ["focus_first", "focus_15m", "focus_30m", "daily_30m"]
        assert tracker.new_achievements == []

    def test_level_up_reported(self, tracker, clock):
        result = _study(tracker, clock, 3600)
        assert result["leveled_up"] is True
        assert result["level"] == 2

    def test_start_unknown_subject(self, tracker):
        result = do_start(tracker, subject="astrology")
        assert result == {"ok": False, "reason": "unknown_subject"}
        assert tracker.status == "idle"

    def test_start_twice(self, tracker):
        do_start(tracker)
        assert do_start(tracker)["reason"] == "already_running"

    def test_resume_after_pause(self, tracker, clock):
        do_start(tracker)
        clock.advance(60)
        assert do_pause(tracker)["ok"] is True
        assert do_start(tracker)["resumed"] is True

    def test_pause_idle(self, tracker):
        assert do_pause(tracker)["ok"] is False

    def test_stop_idle(self, tracker):
        assert do_stop(tracker) == {"ok": False, "reason": "idle"}

    def test_stop_short_session(self, tracker, clock):
        result = _study(tracker, clock, 4)
        assert result["discarded"] is True
        assert tracker.sessions == []

    def test_status(self, tracker, clock):
        do_start(tracker, subject="coding")
        clock.advance(90)
        data = do_status(tracker)
        assert data["status"] == "running"
        assert data["elapsed"] == 90
        assert data["subject_label"].endswith("Coding")

    def test_watch_stops_on_interrupt(self, tracker):
        with patch("study_rank.cli.time.sleep", side_effect=KeyboardInterrupt):
            watch_status(tracker)


# ── Views ─────────────────────────────────────────────────────────────────────


class TestDoDashboard:
    def test_empty_shows_no_data(self, tracker):
        assert do_dashboard(tracker) == {"ok": False}

    def test_populated(self, tracker, clock):
        _study(tracker, clock, 2 * 3600)
        data = do_dashboard(tracker)
        assert data["ok"] is True
        assert data["total_xp"] == 120
        assert data["level"] == 2
        assert data["today_seconds"] == 7200
        assert data["goal_percent"] == pytest.approx(40.0)
        assert data["current_streak"] == 1
        assert data["unlocked_count"] == len(tracker.unlocked)
        assert len(data["recent_achievements"]) == 3
        assert len(data["closest_achievements"]) == 3

    def test_running_timer_without_history(self, tracker):
        do_start(tracker)
        assert do_dashboard(tracker)["ok"] is True

    def test_recent_sessions_newest_first(self, tracker, clock):
        tracker.select_subject("math")
        _study(tracker, clock, 600)
        clock.advance(3600)
        _study(tracker, clock, 1500)
        recent = do_dashboard(tracker)["recent_sessions"]
        assert len(recent) == 2
        assert recent[0] == {"date": "Mar 12", "time": "15:10 - 15:35", "duration": 1500, "subject": None, "xp": 25}
        assert recent[1]["subject"].endswith("Math")
        assert recent[1]["time"] == "14:00 - 14:10"

    def test_recent_sessions_capped_at_five(self, tracker, clock):
        for _ in range(7):
            _study(tracker, clock, 60)
        assert len(do_dashboard(tracker)["recent_sessions"]) == 5


class TestViews:
    def test_week(self, tracker, clock):
        _study(tracker, clock, 600)
        rows = do_week(tracker, days=7)
        assert len(rows) == 7
        assert rows[-1] == {"date": "2024-03-12", "total_seconds": 600, "session_count": 1}

    def test_heatmap(self, tracker, clock):
        _study(tracker, clock, 4000)
        grid = do_heatmap(tracker, weeks=4)
        cells = {c["date"]: c for week in grid for c in week}
        assert cells["2024-03-12"]["intensity"] == 3

    def test_achievements_listing(self, tracker, clock):
        _study(tracker, clock, 60)
        rows = do_achievements(tracker)
        assert len(rows) == 40
        first = next(r for r in rows if r["id"] == "focus_first")
        assert first["unlocked"] is True
        assert first["unlocked_at"] == "2024-03-12"

    def test_achievements_by_category(self, tracker, clock):
        _study(tracker, clock, 60)
        rows = do_achievements(tracker, category="daily")
        assert len(rows) == 8
        assert {r["category"] for r in rows} == {"daily"}

    def test_subject_breakdown_bars_scale_to_largest(self):
        breakdown = [{"label": "Math", "total_seconds": 300}, {"label": "Art", "total_seconds": 100}]
        with console.capture() as capture:
            print_subject_breakdown(breakdown, total_seconds=800)
        output = capture.get()
        assert "[" + "█" * 15 + "]" in output
        assert " 37%" in output
        assert " 12%" in output

    def test_wrapped_empty(self, tracker):
        assert do_wrapped(tracker) == {"ok": False}

    def test_wrapped_week(self, tracker, clock):
        do_start(tracker, subject="math")
        clock.advance(1200)
        do_stop(tracker)
        result = do_wrapped(tracker, period="week")
        assert result["ok"] is True
        assert result["total_seconds"] == 1200
        assert result["xp_earned"] == 20
        assert result["top_subjects"][0][0].endswith("Math")


# ── Subjects and settings ─────────────────────────────────────────────────────


class TestSubjectCommands:
    def test_list_includes_totals(self, tracker, clock):
        do_start(tracker, subject="reading")
        clock.advance(300)
        do_stop(tracker)
        rows = {r["id"]: r for r in do_subjects(tracker)}
        assert rows["reading"]["total_seconds"] == 300
        assert rows["math"]["total_seconds"] == 0

    def test_add(self, tracker):
        assert do_subject_add(tracker, "Music")["subject"]["id"] == "music"

    def test_add_invalid(self, tracker):
        result = do_subject_add(tracker, "")
        assert result == {"ok": False, "error": "Name cannot be empty"}

    def test_remove(self, tracker):
        assert do_subject_remove(tracker, "math")["ok"] is True
        assert do_subject_remove(tracker, "math")["ok"] is False

    def test_select_and_clear(self, tracker):
        assert do_subject_select(tracker, "science")["subject"] == "science"
        assert do_subject_select(tracker, "none")["subject"] is None

    def test_select_unknown(self, tracker):
        assert do_subject_select(tracker, "astrology")["ok"] is False


class TestSettingsCommands:
    def test_show(self, tracker):
        assert do_settings_show(tracker)["dailyGoalHours"] == 5

    def test_set_goal(self, tracker):
        assert do_settings_set(tracker, "goal", "3")["dailyGoalHours"] == 3

    def test_set_goal_clamped(self, tracker):
        assert do_settings_set(tracker, "goal", "99")["dailyGoalHours"] == 16

    def test_set_theme(self, tracker):
        assert do_settings_set(tracker, "theme", "Forest")["theme"] == "forest"

    def test_set_invalid_theme(self, tracker):
        assert do_settings_set(tracker, "theme", "neon") == {"ok": False}

    def test_set_sound(self, tracker):
        assert do_settings_set(tracker, "sound", "off")["soundEnabled"] is False

    def test_parse_setting_rejects_bad_bool(self):
        with pytest.raises(ValueError):
            _parse_setting("sound", "maybe")


# ── Data management ───────────────────────────────────────────────────────────


class TestDataCommands:
    def test_export_and_import(self, tracker, clock, tmp_path):
        _study(tracker, clock, 600)
        out = tmp_path / "backup.json"
        assert do_export(tracker, output=str(out))["ok"] is True
        assert json.loads(out.read_text())["version"] == 1

        do_reset(tracker, confirmed=True)
        assert tracker.sessions == []
        assert do_import(tracker, str(out)) == {"ok": True, "sessions": 1}

    def test_import_missing_file(self, tracker, tmp_path):
        assert do_import(tracker, str(tmp_path / "nope.json")) == {"ok": False}

    def test_import_invalid_file(self, tracker, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"hello": "world"}', encoding="utf-8")
        assert do_import(tracker, str(path)) == {"ok": False}

    def test_reset_requires_confirmation(self, tracker, clock):
        _study(tracker, clock, 600)
        assert do_reset(tracker) == {"ok": False}
        assert len(tracker.sessions) == 1


class TestMain:
    def test_runs_command_against_configured_db(self, tmp_path):
        db_path = tmp_path / "main.db"
        with patch("study_rank.cli.get_db_path", return_value=db_path), \
                patch("study_rank.cli.setup_logging"), \
                patch("sys.argv", ["study-rank", "subjects", "add", "Music"]):
            main()
        database = Database(db_path=db_path)
        assert "music" in [s.id for s in Storage(database).load_subjects()]
        database.close()

    def test_defaults_to_dashboard(self, tmp_path):
        with patch("study_rank.cli.get_db_path", return_value=tmp_path / "main.db"), \
                patch("study_rank.cli.setup_logging"), \
                patch("study_rank.cli.do_dashboard") as dashboard, \
                patch("sys.argv", ["study-rank"]):
            main()
        dashboard.assert_called_once()

    def test_failed_command_exits_nonzero(self, tmp_path):
        with patch("study_rank.cli.get_db_path", return_value=tmp_path / "main.db"), \
                patch("study_rank.cli.setup_logging"), \
                patch("sys.argv", ["study-rank", "pause"]):
            with pytest.raises(SystemExit) as exc:
                main()
        assert exc.value.code == 1

    def test_empty_view_exits_cleanly(self, tmp_path):
        with patch("study_rank.cli.get_db_path", return_value=tmp_path / "main.db"), \
                patch("study_rank.cli.setup_logging"), \
                patch("sys.argv", ["study-rank", "dashboard"]):
            main()

    def test_config_runs_without_opening_database(self, tmp_path):
        target = tmp_path / "elsewhere.db"
        with patch("study_rank.cli.set_db_path") as set_path, \
                patch("study_rank.cli.setup_logging"), \
                patch("study_rank.cli.Database") as database, \
                patch("sys.argv", ["study-rank", "config", "db-path", str(target)]):
            main()
        set_path.assert_called_once_with(target.resolve())
        database.assert_not_called()


class TestConfigCommand:
    def test_show_default(self):
        with patch("study_rank.cli.get_db_path", return_value=None):
            result = do_config_db_path()
        assert result == {"ok": True, "db_path": str(DEFAULT_DB_PATH)}

    def test_show_configured(self, tmp_path):
        with patch("study_rank.cli.get_db_path", return_value=tmp_path / "x.db"):
            assert do_config_db_path()["db_path"] == str(tmp_path / "x.db")

    def test_set_persists_resolved_path(self, tmp_path):
        with patch("study_rank.cli.set_db_path") as set_path:
            result = do_config_db_path(str(tmp_path / "data" / "study.db"))
        assert result["ok"] is True
        set_path.assert_called_once_with((tmp_path / "data" / "study.db").resolve())

    def test_directory_rejected(self, tmp_path):
        with patch("study_rank.cli.set_db_path") as set_path:
            assert do_config_db_path(str(tmp_path)) == {"ok": False}
        set_path.assert_not_called()
