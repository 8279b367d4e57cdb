"""CLI commands for study-rank."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import date, datetime
from pathlib import Path

from rich.live import Live

from study_rank.achievements import (
    Category,
    get_achievement_def,
    get_achievements_by_category,
    get_closest_achievements,
)
from study_rank.clock import format_duration, formatted_date
from study_rank.config import get_db_path, get_log_level, set_db_path
from study_rank.db import DEFAULT_DB_PATH, Database
from study_rank.display import (
    console,
    print_achievements,
    print_dashboard,
    print_heatmap,
    print_no_data_message,
    print_settings,
    print_stop_result,
    print_subject_breakdown,
    print_subjects,
    print_timer_status,
    print_week,
    print_wrapped,
    render_timer,
)
from study_rank.levels import MAX_LEVEL, level_from_xp, level_info
from study_rank.logging_setup import setup_logging
from study_rank.models import Theme, Wallpaper
from study_rank.quotes import daily_quote
from study_rank.stats import (
    closed_sessions,
    daily_summary,
    get_period_dates,
    goal_progress,
    heatmap,
    period_summary,
    recent_sessions,
    subject_breakdown,
    window_summaries,
)
from study_rank.storage import Storage
from study_rank.streaks import calculate_streak
from study_rank.subjects import get_subject, subject_label
from study_rank.tracker import StudyTracker
from study_rank.xp import calculate_total_xp, xp_for_session

logger = logging.getLogger(__name__)

# `settings set` keys to stored setting names
SETTING_KEYS = {
    "theme": "theme",
    "wallpaper": "wallpaper",
    "goal": "dailyGoalHours",
    "sound": "soundEnabled",
}

# Commands that only read; "no data" is not a failure for them
VIEW_COMMANDS = {"dashboard", "wrapped", "week", "heatmap", "achievements", "status", "quote"}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="study-rank",
        description="Track study sessions and level up",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")
    subparsers = parser.add_subparsers(dest="command")

    start_parser = subparsers.add_parser("start", help="Start or resume the study timer")
    start_parser.add_argument("--subject", "-s", default=None, help="Subject id to tag the session with")
    subparsers.add_parser("pause", help="Pause the running timer")
    subparsers.add_parser("stop", help="Stop the timer and save the session")
    status_parser = subparsers.add_parser("status", help="Show the timer")
    status_parser.add_argument("--watch", "-w", action="store_true", help="Refresh every second until Ctrl+C")

    subparsers.add_parser("dashboard", help="Show main dashboard")
    week_parser = subparsers.add_parser("week", help="Study time for the last days")
    week_parser.add_argument("--days", "-d", type=int, default=7)
    heatmap_parser = subparsers.add_parser("heatmap", help="Activity heatmap")
    heatmap_parser.add_argument("--weeks", "-w", type=int, default=13)
    achievements_parser = subparsers.add_parser("achievements", help="List all achievements")
    achievements_parser.add_argument(
        "--category", "-c", choices=[c.value for c in Category], default=None, help="Only one category"
    )
    wrapped_parser = subparsers.add_parser("wrapped", help="Show study summary for a period")
    wrapped_parser.add_argument("--period", choices=["week", "month", "year", "all-time"], default="month")
    subparsers.add_parser("quote", help="Show today's quote")

    subjects_parser = subparsers.add_parser("subjects", help="Manage subjects")
    subjects_sub = subjects_parser.add_subparsers(dest="subjects_command")
    subjects_sub.add_parser("list", help="List subjects")
    add_p = subjects_sub.add_parser("add", help="Add a subject")
    add_p.add_argument("name")
    remove_p = subjects_sub.add_parser("remove", help="Remove a subject (sessions keep their tag)")
    remove_p.add_argument("subject_id")
    select_p = subjects_sub.add_parser("select", help="Select the subject for the current or next session")
    select_p.add_argument("subject_id", help="Subject id, or 'none' to clear")

    settings_parser = subparsers.add_parser("settings", help="Show or change settings")
    settings_sub = settings_parser.add_subparsers(dest="settings_command")
    settings_sub.add_parser("show", help="Show settings")
    set_p = settings_sub.add_parser("set", help="Change a setting")
    set_p.add_argument("key", choices=sorted(SETTING_KEYS))
    set_p.add_argument("value")

    export_parser = subparsers.add_parser("export", help="Export all data to JSON")
    export_parser.add_argument("--output", "-o", default=None, help="Output file path")
    import_parser = subparsers.add_parser("import", help="Replace data with an exported JSON file")
    import_parser.add_argument("file")
    reset_parser = subparsers.add_parser("reset", help="Delete sessions and achievements")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm deletion")
    reset_parser.add_argument("--all", action="store_true", help="Also reset settings and subjects")

    config_parser = subparsers.add_parser("config", help="Show or change where data is stored")
    config_sub = config_parser.add_subparsers(dest="config_command")
    db_path_p = config_sub.add_parser("db-path", help="Show or set the database file")
    db_path_p.add_argument("path", nargs="?", default=None)
    return parser


def main() -> None:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args()
    command = args.command or "dashboard"

    setup_logging("DEBUG" if args.verbose else get_log_level())

    if command == "config":
        outcome = do_config_db_path(path=getattr(args, "path", None))
        if outcome["ok"] is False:
            sys.exit(1)
        return

    db = Database(get_db_path())
    tracker = StudyTracker(Storage(db))
    tracker.hydrate()

    result: object = None
    try:
        if command == "start":
            result = do_start(tracker, subject=args.subject)
        elif command == "pause":
            result = do_pause(tracker)
        elif command == "stop":
            result = do_stop(tracker)
        elif command == "status":
            if args.watch:
                watch_status(tracker)
            else:
                result = do_status(tracker)
        elif command == "dashboard":
            result = do_dashboard(tracker)
        elif command == "week":
            result = do_week(tracker, days=args.days)
        elif command == "heatmap":
            result = do_heatmap(tracker, weeks=args.weeks)
        elif command == "achievements":
            result = do_achievements(tracker, category=args.category)
        elif command == "wrapped":
            result = do_wrapped(tracker, period=args.period)
        elif command == "quote":
            result = do_quote()
        elif command == "subjects":
            sub_cmd = getattr(args, "subjects_command", None)
            if sub_cmd == "add":
                result = do_subject_add(tracker, args.name)
            elif sub_cmd == "remove":
                result = do_subject_remove(tracker, args.subject_id)
            elif sub_cmd == "select":
                result = do_subject_select(tracker, args.subject_id)
            else:
                result = do_subjects(tracker)
        elif command == "settings":
            if getattr(args, "settings_command", None) == "set":
                result = do_settings_set(tracker, args.key, args.value)
            else:
                result = do_settings_show(tracker)
        elif command == "export":
            result = do_export(tracker, output=args.output)
        elif command == "import":
            result = do_import(tracker, args.file)
        elif command == "reset":
            result = do_reset(tracker, confirmed=args.yes, include_settings=args.all)
    finally:
        db.close()

    if command not in VIEW_COMMANDS and isinstance(result, dict) and result.get("ok") is False:
        sys.exit(1)


def _format_unlocked_at(ms: int | None) -> str | None:
    if ms is None:
        return None
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d")


def _clock_time(ms: float) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%H:%M")


def _achievement_dict(achievement_id: str) -> dict | None:
    achdef = get_achievement_def(achievement_id)
    if achdef is None:
        return None
    return {
        "id": achdef.id,
        "title": achdef.title,
        "description": achdef.description,
        "icon": achdef.icon,
        "rarity": achdef.rarity.value,
    }


def _timer_data(tracker: StudyTracker) -> dict:
    today = daily_summary(tracker.sessions, tracker.today())
    return {
        "status": tracker.status,
        "elapsed": tracker.elapsed(),
        "subject_label": subject_label(tracker.current_subject, tracker.subjects),
        "today_seconds": today.total_seconds,
    }


# ── Timer ─────────────────────────────────────────────────────────────────────


def do_start(tracker: StudyTracker, subject: str | None = None) -> dict:
    """Start or resume the timer, optionally tagging the session first."""
    if subject is not None and not tracker.select_subject(subject):
        console.print(f"[red]Unknown subject: {subject}. Run: study-rank subjects list[/]")
        return {"ok": False, "reason": "unknown_subject"}

    resumed = tracker.status == "paused"
    if not tracker.start():
        console.print("[yellow]Timer is already running.[/]")
        return {"ok": False, "reason": "already_running"}

    verb = "Resumed" if resumed else "Started"
    console.print(
        f"[green]{verb}[/] studying {subject_label(tracker.current_subject, tracker.subjects)}"
    )
    return {"ok": True, "resumed": resumed}


def do_pause(tracker: StudyTracker) -> dict:
    if not tracker.pause():
        console.print("[yellow]Timer is not running.[/]")
        return {"ok": False}
    console.print(f"[yellow]Paused[/] at {format_duration(tracker.elapsed())}")
    return {"ok": True, "elapsed": tracker.elapsed()}


def do_stop(tracker: StudyTracker) -> dict:
    """Stop the timer, save the session and report XP and achievements."""
    if tracker.status == "idle":
        console.print("[yellow]No session in progress.[/]")
        return {"ok": False, "reason": "idle"}

    xp_before = calculate_total_xp(tracker.sessions)
    level_before = level_from_xp(xp_before)
    result = tracker.stop()

    if result.discarded:
        data = {"discarded": True, "total_seconds": result.total_seconds}
        print_stop_result(data)
        return {"ok": True, **data}

    session = result.session
    xp_after = calculate_total_xp(tracker.sessions)
    info = level_info(xp_after)
    new_achievements = [a for a in (_achievement_dict(i) for i in result.new_achievements) if a]

    data = {
        "discarded": False,
        "duration": session.duration,
        "subject_label": subject_label(session.subject, tracker.subjects),
        "xp_earned": xp_after - xp_before,
        "today_seconds": daily_summary(tracker.sessions, tracker.today()).total_seconds,
        "leveled_up": info.level > level_before,
        "level": info.level,
        "level_title": info.title,
        "new_achievements": new_achievements,
    }
    print_stop_result(data)
    for achievement_id in result.new_achievements:
        tracker.dismiss_achievement(achievement_id)
    return {"ok": True, **data}


def do_status(tracker: StudyTracker) -> dict:
    data = _timer_data(tracker)
    print_timer_status(data)
    return data


def watch_status(tracker: StudyTracker, interval: float = 1.0) -> None:
    """Live-updating timer panel until interrupted."""
    with Live(render_timer(_timer_data(tracker)), console=console, refresh_per_second=4) as live:
        try:
            while True:
                time.sleep(interval)
                live.update(render_timer(_timer_data(tracker)))
        except KeyboardInterrupt:
            pass


# ── Views ─────────────────────────────────────────────────────────────────────


def do_dashboard(tracker: StudyTracker) -> dict:
    """Show main dashboard with level, XP, today's goal, streak and achievements."""
    sessions = tracker.sessions
    if not closed_sessions(sessions) and tracker.status == "idle":
        print_no_data_message()
        return {"ok": False}

    today = tracker.today()
    total_xp = calculate_total_xp(sessions)
    info = level_info(total_xp)
    streak = calculate_streak(sessions, 1, today=today)
    today_summary = daily_summary(sessions, today)
    goal_hours = tracker.settings.daily_goal_hours

    recent_rows = []
    for session in recent_sessions(sessions):
        subject = get_subject(session.subject, tracker.subjects) if session.subject else None
        recent_rows.append({
            "date": formatted_date(session.date),
            "time": f"{_clock_time(session.start_time)} - {_clock_time(session.end_time)}",
            "duration": session.duration,
            "subject": subject.label if subject else None,
            "xp": xp_for_session(session),
        })

    recent = sorted(tracker.unlocked, key=lambda a: a.unlocked_at, reverse=True)
    recent_achievements = [a for a in (_achievement_dict(u.id) for u in recent[:3]) if a]

    closest_achievements = []
    for status in get_closest_achievements(tracker.achievement_statuses()):
        closest_achievements.append({
            "title": status.definition.title,
            "description": status.definition.description,
            "progress": status.progress,
        })

    data = {
        "theme": tracker.settings.theme.value,
        "level": info.level,
        "level_title": info.title,
        "level_emoji": info.emoji,
        "max_level": info.level == MAX_LEVEL,
        "total_xp": total_xp,
        "xp_in_level": info.current_xp,
        "xp_for_next": info.xp_for_next_level - info.xp_for_current_level,
        "today_seconds": today_summary.total_seconds,
        "goal_hours": goal_hours,
        "goal_percent": goal_progress(today_summary.total_seconds, goal_hours),
        "current_streak": streak.current_streak,
        "longest_streak": streak.longest_streak,
        "total_sessions": len(closed_sessions(sessions)),
        "total_hours": streak.total_hours_all_time,
        "unlocked_count": len(tracker.unlocked_ids()),
        "achievement_total": tracker.total_achievements,
        "recent_achievements": recent_achievements,
        "closest_achievements": closest_achievements,
        "recent_sessions": recent_rows,
        "quote": daily_quote(date.fromisoformat(today)),
    }
    print_dashboard(data)
    if tracker.status != "idle":
        print_timer_status(_timer_data(tracker))
    return {"ok": True, **data}


def do_week(tracker: StudyTracker, days: int = 7) -> list[dict]:
    """Show daily totals for the last `days` study days."""
    summaries = window_summaries(tracker.sessions, days=max(days, 1), today=tracker.today())
    rows = [
        {"date": s.date, "total_seconds": s.total_seconds, "session_count": s.session_count}
        for s in summaries
    ]
    print_week(rows, tracker.settings.daily_goal_hours, theme=tracker.settings.theme.value)
    breakdown = [
        {"label": subject_label(subject_id, tracker.subjects), "total_seconds": seconds}
        for subject_id, seconds in subject_breakdown(tracker.sessions)
    ]
    all_time = sum(s.duration for s in closed_sessions(tracker.sessions))
    print_subject_breakdown(breakdown, total_seconds=all_time)
    return rows


def do_heatmap(tracker: StudyTracker, weeks: int = 13) -> list[list[dict]]:
    grid = [
        [{"date": c.date, "total_seconds": c.total_seconds, "intensity": c.intensity} for c in week]
        for week in heatmap(tracker.sessions, weeks=max(weeks, 1), today=tracker.today())
    ]
    print_heatmap(grid, theme=tracker.settings.theme.value)
    return grid


def do_achievements(tracker: StudyTracker, category: str | None = None) -> list[dict]:
    """Show all achievements with progress, optionally only one category."""
    statuses = tracker.achievement_statuses()
    if category is not None:
        wanted = {a.id for a in get_achievements_by_category(category)}
        statuses = [s for s in statuses if s.definition.id in wanted]

    achievements_data = []
    for status in statuses:
        achdef = status.definition
        achievements_data.append({
            "id": achdef.id,
            "title": achdef.title,
            "description": achdef.description,
            "icon": achdef.icon,
            "category": achdef.category.value,
            "rarity": achdef.rarity.value,
            "progress": status.progress,
            "unlocked": status.unlocked,
            "unlocked_at": _format_unlocked_at(tracker.unlocked_at(achdef.id)),
        })

    print_achievements(achievements_data, category=category)
    return achievements_data


def do_wrapped(tracker: StudyTracker, period: str = "month") -> dict:
    """Show study summary for a time period."""
    if not closed_sessions(tracker.sessions):
        print_no_data_message()
        return {"ok": False}
    start_date, end_date = get_period_dates(period, today=tracker.today())
    summary = period_summary(tracker.sessions, start_date, end_date)
    in_period = [s for s in tracker.sessions if start_date <= s.date <= end_date]
    summary["xp_earned"] = calculate_total_xp(in_period)
    summary["top_subjects"] = [
        (subject_label(subject_id, tracker.subjects), seconds)
        for subject_id, seconds in summary["top_subjects"]
    ]
    summary["period"] = period
    summary["period_start"] = start_date
    summary["period_end"] = end_date
    print_wrapped(summary)
    return {"ok": True, **summary}


def do_quote() -> None:
    quote = daily_quote()
    console.print(f"[italic]\"{quote.text}\"[/]")
    if quote.author:
        console.print(f"[dim]- {quote.author}[/]")


# ── Subjects ──────────────────────────────────────────────────────────────────


def do_subjects(tracker: StudyTracker) -> list[dict]:
    totals = dict(subject_breakdown(tracker.sessions, limit=None))
    rows = [{**s.to_dict(), "total_seconds": totals.get(s.id, 0)} for s in tracker.subjects]
    print_subjects(rows, current=tracker.current_subject)
    return rows


def do_subject_add(tracker: StudyTracker, name: str) -> dict:
    result, subject = tracker.add_subject(name)
    if not result.valid:
        console.print(f"[red]{result.error}[/]")
        return {"ok": False, "error": result.error}
    console.print(f"[green]Added[/] {subject.label} ({subject.id})")
    return {"ok": True, "subject": subject.to_dict()}


def do_subject_remove(tracker: StudyTracker, subject_id: str) -> dict:
    if not tracker.remove_subject(subject_id):
        console.print(f"[red]Unknown subject: {subject_id}[/]")
        return {"ok": False}
    console.print(f"Removed {subject_id}. Past sessions keep their tag.")
    return {"ok": True}


def do_subject_select(tracker: StudyTracker, subject_id: str) -> dict:
    target = None if subject_id.lower() == "none" else subject_id
    if not tracker.select_subject(target):
        console.print(f"[red]Unknown subject: {subject_id}[/]")
        return {"ok": False}
    console.print(f"Subject: {subject_label(tracker.current_subject, tracker.subjects)}")
    return {"ok": True, "subject": tracker.current_subject}


# ── Settings ──────────────────────────────────────────────────────────────────


def do_settings_show(tracker: StudyTracker) -> dict:
    settings = tracker.settings.to_dict()
    print_settings(settings)
    return settings


def _parse_setting(key: str, raw: str) -> object:
    """Convert a CLI string to the stored setting value. Raises ValueError."""
    if key == "theme":
        return Theme(raw.lower()).value
    if key == "wallpaper":
        return Wallpaper(raw.lower()).value
    if key == "goal":
        return float(raw)
    if key == "sound":
        lowered = raw.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"expected on/off, got {raw!r}")
    raise ValueError(f"unknown setting {key!r}")


def do_settings_set(tracker: StudyTracker, key: str, value: str) -> dict:
    try:
        parsed = _parse_setting(key, value)
    except ValueError as e:
        console.print(f"[red]Invalid value for {key}: {e}[/]")
        return {"ok": False}
    settings = tracker.update_settings(**{SETTING_KEYS[key]: parsed})
    print_settings(settings.to_dict())
    return {"ok": True, **settings.to_dict()}


# ── Data management ───────────────────────────────────────────────────────────


def default_export_path(today: str) -> Path:
    return Path(f"study-rank-backup-{today}.json")


def do_export(tracker: StudyTracker, output: str | None = None) -> dict:
    path = Path(output) if output else default_export_path(tracker.today())
    payload = tracker.export_data()
    try:
        path.write_text(payload + "\n", encoding="utf-8")
    except OSError as e:
        logger.error("export failed: %s", e)
        console.print(f"[red]Could not write {path}: {e}[/]")
        return {"ok": False}
    console.print(f"[green]Exported[/] {len(tracker.sessions)} sessions to [bold]{path}[/]")
    return {"ok": True, "output": str(path)}


def do_import(tracker: StudyTracker, file: str) -> dict:
    path = Path(file)
    try:
        payload = path.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Could not read {path}: {e}[/]")
        return {"ok": False}
    if not tracker.import_data(payload):
        console.print("[red]Import failed: not a study-rank export. Nothing was changed.[/]")
        return {"ok": False}
    console.print(f"[green]Imported[/] {len(tracker.sessions)} sessions")
    return {"ok": True, "sessions": len(tracker.sessions)}


def do_reset(tracker: StudyTracker, confirmed: bool = False, include_settings: bool = False) -> dict:
    if not confirmed:
        console.print("[yellow]This deletes all sessions and achievements. Re-run with --yes to confirm.[/]")
        return {"ok": False}
    tracker.clear_all_data(include_settings=include_settings)
    console.print("[green]All study data cleared.[/]")
    return {"ok": True}


def do_config_db_path(path: str | None = None) -> dict:
    """Show the database location, or point study-rank at a new one."""
    if path is None:
        current = get_db_path() or DEFAULT_DB_PATH
        console.print(f"Database: [bold]{current}[/]")
        return {"ok": True, "db_path": str(current)}
    expanded = Path(path).expanduser().resolve()
    if expanded.is_dir():
        console.print(f"[red]{expanded} is a directory; give a file path.[/]")
        return {"ok": False}
    set_db_path(expanded)
    console.print(f"[green]Database set to[/] [bold]{expanded}[/]")
    return {"ok": True, "db_path": str(expanded)}
