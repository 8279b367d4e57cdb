"""Rich terminal display for study-rank."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from study_rank.clock import day_abbrev, format_clock, format_duration, formatted_date

console = Console()

# Map app themes to valid Rich color names
_THEME_COLORS: dict[str, str] = {
    "midnight": "slate_blue1",
    "forest": "green3",
    "sunset": "dark_orange3",
    "ocean": "deep_sky_blue1",
    "cherry": "hot_pink",
    "lavender": "medium_purple1",
}

# Subject palette names to Rich colors
_SUBJECT_COLORS: dict[str, str] = {
    "blue": "blue",
    "green": "green",
    "purple": "purple",
    "amber": "gold1",
    "cyan": "cyan",
    "pink": "pink1",
    "rose": "light_pink3",
    "indigo": "slate_blue3",
    "emerald": "spring_green3",
    "orange": "dark_orange",
    "slate": "grey62",
}

RARITY_COLORS: dict[str, str] = {
    "common": "white",
    "uncommon": "green",
    "rare": "blue",
    "epic": "magenta",
    "legendary": "yellow",
}

# Heatmap intensity 0-5
_HEAT_COLORS = ("grey23", "dark_green", "green4", "green3", "green1", "bright_green")

_STATUS_STYLES = {
    "idle": ("grey50", "Ready"),
    "running": ("green", "Studying"),
    "paused": ("yellow", "Paused"),
}


def theme_color(theme: str) -> str:
    """Map a theme id to a valid Rich color name."""
    return _THEME_COLORS.get(theme, "slate_blue1")


def subject_color(color: str) -> str:
    return _SUBJECT_COLORS.get(color, "grey62")


def format_number(n: int) -> str:
    """Format large numbers: 421543 -> '421.5K', 1200 -> '1,200', 1234567 -> '1.2M'."""
    if n >= 1_000_000:
        value = n / 1_000_000
        if value >= 100:
            return f"{value:.0f}M"
        return f"{value:.1f}M"
    if n >= 10_000:
        value = n / 1_000
        if value >= 1000:
            return f"{value:.0f}K"
        return f"{value:.1f}K"
    return f"{n:,}"


def _xp_bar(current: float, total: float, width: int = 20) -> str:
    """Render a progress bar as text: [████████░░░░░░░░░░░░]."""
    if total <= 0:
        return "[" + "█" * width + "]"
    ratio = min(current / total, 1.0)
    filled = int(ratio * width)
    empty = width - filled
    return "[" + "█" * filled + "░" * empty + "]"


def print_dashboard(data: dict) -> None:
    """Print the main dashboard: level, XP, today vs goal, streak, achievements."""
    color = theme_color(data.get("theme", "midnight"))
    level = data.get("level", 1)
    title = data.get("level_title", "Noob")
    emoji = data.get("level_emoji", "")
    total_xp = data.get("total_xp", 0)
    xp_in_level = data.get("xp_in_level", 0)
    xp_for_next = data.get("xp_for_next", 0)
    max_level = data.get("max_level", False)
    today_seconds = data.get("today_seconds", 0)
    goal_hours = data.get("goal_hours", 5.0)
    goal_percent = data.get("goal_percent", 0.0)
    recent_achievements = data.get("recent_achievements", [])
    closest_achievements = data.get("closest_achievements", [])
    recent = data.get("recent_sessions", [])
    quote = data.get("quote")

    lines: list[str] = []

    lines.append("")
    lines.append(f"  [bold {color}]{emoji} Level {level} - {title}[/]")

    if max_level:
        lines.append(f"  {_xp_bar(1, 1)} MAX LEVEL")
    else:
        lines.append(f"  {_xp_bar(xp_in_level, xp_for_next)} {format_number(xp_in_level)}/{format_number(xp_for_next)} XP")
    lines.append(f"  Total: [bold]{format_number(total_xp)}[/] XP")

    lines.append("")
    lines.append(f"  Today: [bold]{format_duration(today_seconds)}[/] of {goal_hours:g}h goal")
    lines.append(f"  {_xp_bar(goal_percent, 100)} {int(goal_percent)}%")

    lines.append("")
    lines.append(
        f"  \U0001f525 Streak: {data.get('current_streak', 0)} days  |  "
        f"Best: {data.get('longest_streak', 0)} days"
    )
    lines.append(
        f"  \U0001f4ca Sessions: {format_number(data.get('total_sessions', 0))}  |  "
        f"⏱️  {data.get('total_hours', 0):.1f}h total"
    )
    lines.append(
        f"  \U0001f3c6 Achievements: {data.get('unlocked_count', 0)}/{data.get('achievement_total', 0)}"
    )

    if recent_achievements:
        lines.append("")
        lines.append("  [bold]Recent Achievements:[/]")
        for ach in recent_achievements[:3]:
            lines.append(f"  {ach['icon']} {ach['title']} ({ach.get('description', '')})")

    if closest_achievements:
        lines.append("")
        lines.append("  [bold]Almost There:[/]")
        for ach in closest_achievements[:3]:
            pct = int(ach.get("progress", 0.0) * 100)
            lines.append(f"  ⏳ {ach['title']}: {ach.get('description', '')} ({pct}%)")

    if recent:
        lines.append("")
        lines.append("  [bold]Recent Sessions:[/]")
        for s in recent[:5]:
            subject = f"  {s['subject']}" if s.get("subject") else ""
            lines.append(
                f"  {s['date']:<7s} {s.get('time', '')}  [bold]{format_duration(s['duration'])}[/]"
                f"  [dim]+{s.get('xp', 0)} XP[/]{subject}"
            )

    if quote is not None:
        lines.append("")
        author = f"  [dim]- {quote.author}[/]" if quote.author else ""
        lines.append(f"  [italic]\"{quote.text}\"[/]")
        if author:
            lines.append(author)

    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title="[bold]STUDY RANK[/]",
        box=box.ROUNDED,
        border_style=color,
        width=60,
    )
    console.print(panel)


def render_timer(data: dict) -> Panel:
    """Build the timer panel (used both for one-off status and live refresh)."""
    status = data.get("status", "idle")
    style, label = _STATUS_STYLES.get(status, _STATUS_STYLES["idle"])

    lines: list[str] = []
    lines.append("")
    lines.append(f"  [bold {style}]{format_clock(data.get('elapsed', 0))}[/]  {label}")
    lines.append(f"  Subject: {data.get('subject_label', '')}")
    lines.append(f"  Today:   {format_duration(data.get('today_seconds', 0))}")
    lines.append("")

    return Panel(
        "\n".join(lines),
        title="[bold]Timer[/]",
        box=box.ROUNDED,
        border_style=style,
        width=50,
    )


def print_timer_status(data: dict) -> None:
    console.print(render_timer(data))


def print_stop_result(data: dict) -> None:
    """Print the outcome of stopping the timer, including new achievements."""
    if data.get("discarded"):
        console.print(
            f"[yellow]Session too short ({format_clock(data.get('total_seconds', 0))}), not saved.[/]"
        )
        return

    lines: list[str] = []
    lines.append("")
    lines.append(f"  Duration:  [bold]{format_duration(data.get('duration', 0))}[/]")
    lines.append(f"  Subject:   {data.get('subject_label', '')}")
    lines.append(f"  XP earned: +{format_number(data.get('xp_earned', 0))}")
    lines.append(f"  Today:     {format_duration(data.get('today_seconds', 0))}")

    if data.get("leveled_up"):
        lines.append("")
        lines.append(f"  [bold yellow]Level up! Now Level {data['level']} - {data['level_title']}[/]")

    new_achievements = data.get("new_achievements", [])
    if new_achievements:
        lines.append("")
        lines.append("  [bold]New Achievements:[/]")
        for ach in new_achievements:
            color = RARITY_COLORS.get(ach.get("rarity", "common"), "white")
            lines.append(f"  {ach['icon']} [{color}]{ach['title']}[/{color}] ({ach.get('description', '')})")

    lines.append("")

    panel = Panel(
        "\n".join(lines),
        title="[bold]Session Saved[/]",
        box=box.ROUNDED,
        border_style="green",
        width=60,
    )
    console.print(panel)


def print_week(days: list[dict], goal_hours: float, theme: str = "midnight") -> None:
    """Bar chart of the last N study days, oldest first."""
    color = theme_color(theme)
    table = Table(
        title="Study Time",
        box=box.ROUNDED,
        border_style=color,
        show_header=True,
        header_style="bold",
    )
    table.add_column("Day", style="bold")
    table.add_column("Date")
    table.add_column("", min_width=22)
    table.add_column("Time", justify="right")
    table.add_column("Sessions", justify="right")

    goal_seconds = goal_hours * 3600
    scale = max([goal_seconds] + [d["total_seconds"] for d in days])
    for day in days:
        seconds = day["total_seconds"]
        bar = _xp_bar(seconds, scale)
        if seconds >= goal_seconds:
            bar = f"[green]{bar}[/]"
        table.add_row(
            day_abbrev(day["date"]),
            formatted_date(day["date"]),
            bar,
            format_duration(seconds) if seconds else "-",
            str(day["session_count"]),
        )

    total = sum(d["total_seconds"] for d in days)
    table.add_section()
    table.add_row("", "Total", "", format_duration(total), str(sum(d["session_count"] for d in days)))
    console.print(table)


def print_heatmap(grid: list[list[dict]], theme: str = "midnight") -> None:
    """GitHub-style contribution grid: one column per week, Sunday on top."""
    rows: list[str] = []
    for weekday in range(7):
        label = ("Sun", "", "Tue", "", "Thu", "", "Sat")[weekday]
        cells = []
        for week in grid:
            if weekday < len(week):
                cells.append(f"[{_HEAT_COLORS[week[weekday]['intensity']]}]■[/]")
            else:
                cells.append(" ")
        rows.append(f"  {label:<4}" + " ".join(cells))

    legend = " ".join(f"[{c}]■[/]" for c in _HEAT_COLORS)
    rows.append("")
    rows.append(f"  Less {legend} More")

    panel = Panel(
        "\n".join(rows),
        title="[bold]Activity[/]",
        box=box.ROUNDED,
        border_style=theme_color(theme),
        expand=False,
    )
    console.print(panel)


def print_subjects(subjects: list[dict], current: str | None = None) -> None:
    """List subjects with their all-time totals. The selected one is marked."""
    table = Table(
        title="Subjects",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("", width=2)
    table.add_column("Id", style="dim")
    table.add_column("Subject", min_width=16)
    table.add_column("Time", justify="right")

    for subject in subjects:
        marker = "▶" if subject["id"] == current else ""
        color = subject_color(subject.get("color", "slate"))
        table.add_row(
            marker,
            subject["id"],
            f"{subject['emoji']} [{color}]{subject['name']}[/{color}]",
            format_duration(subject.get("total_seconds", 0)) if subject.get("total_seconds") else "-",
        )

    console.print(table)


def print_subject_breakdown(breakdown: list[dict], total_seconds: int | None = None) -> None:
    """Top subjects. Bars are relative to the largest subject, percentages
    to all study time (or to the shown subjects when no total is given).
    """
    if not breakdown:
        return
    largest = max(item["total_seconds"] for item in breakdown) or 1
    total = total_seconds or sum(item["total_seconds"] for item in breakdown) or 1
    lines: list[str] = [""]
    for item in breakdown:
        bar = _xp_bar(item["total_seconds"], largest, width=15)
        pct = int(item["total_seconds"] / total * 100)
        lines.append(f"  {item['label']:<18s} {bar} {pct:>3d}%  {format_duration(item['total_seconds'])}")
    lines.append("")
    title = "[bold]By Subject[/] [dim](% of all study time)[/]" if total_seconds else "[bold]By Subject[/]"
    console.print(Panel("\n".join(lines), title=title, box=box.ROUNDED, width=70))


def print_achievements(achievements: list[dict], category: str | None = None) -> None:
    """Print all achievements with progress bars.

    Each dict has: id, title, description, icon, category, rarity, progress
    (0.0-1.0), unlocked (bool), unlocked_at (str|None).
    """
    unlocked = [a for a in achievements if a.get("unlocked")]
    locked = [a for a in achievements if not a.get("unlocked")]

    unlocked.sort(key=lambda a: a.get("unlocked_at") or "", reverse=True)
    locked.sort(key=lambda a: a.get("progress", 0), reverse=True)
    heading = f"{category.capitalize()} Achievements" if category else "Achievements"

    table = Table(
        title=f"{heading} ({len(unlocked)}/{len(achievements)})",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold",
    )
    table.add_column("", width=2)
    table.add_column("Achievement", min_width=20)
    table.add_column("Rarity", width=10)
    table.add_column("Progress", min_width=18)
    table.add_column("Date", width=12)

    for ach in unlocked + locked:
        icon = ach.get("icon", "") if ach.get("unlocked") else "\U0001f512"
        rarity = ach.get("rarity", "common")
        color = RARITY_COLORS.get(rarity, "white")

        name_text = f"[bold]{ach['title']}[/]\n{ach.get('description', '')}"
        rarity_text = f"[{color}]{rarity.upper()}[/{color}]"

        progress = ach.get("progress", 0.0)
        progress_text = f"{_xp_bar(progress, 1.0, width=10)} {int(progress * 100)}%"

        table.add_row(icon, name_text, rarity_text, progress_text, ach.get("unlocked_at") or "")

    console.print(table)


def print_settings(settings: dict) -> None:
    table = Table(title="Settings", box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Key", style="bold")
    table.add_column("Value", justify="right")
    for key, value in settings.items():
        table.add_row(key, str(value))
    console.print(table)


def print_no_data_message() -> None:
    """Print message when no sessions have been recorded."""
    panel = Panel(
        "\n  No study sessions yet. Run [bold]study-rank start[/] to begin.\n",
        title="[bold]STUDY RANK[/]",
        box=box.ROUNDED,
        border_style="grey50",
        width=60,
    )
    console.print(panel)


def print_wrapped(data: dict) -> None:
    """Print a period summary with multiple panels."""
    period = data.get("period", "month")
    period_start = data.get("period_start", "")
    period_end = data.get("period_end", "")

    core_lines: list[str] = []
    core_lines.append("")
    core_lines.append(f"  Study Time:   {format_duration(data.get('total_seconds', 0))}")
    core_lines.append(f"  XP Earned:    {format_number(data.get('xp_earned', 0))}")
    core_lines.append(f"  Sessions:     {format_number(data.get('session_count', 0))}")
    core_lines.append(f"  Active Days:  {data.get('active_days', 0)}")
    core_lines.append(f"  Avg/Day:      {format_duration(data.get('avg_seconds_per_active_day', 0))}")
    core_lines.append("")

    console.print(Panel(
        "\n".join(core_lines),
        title=f"[bold]Core Numbers ({period}: {period_start} to {period_end})[/]",
        box=box.ROUNDED,
        border_style="yellow",
        width=60,
    ))

    hl_lines: list[str] = []
    hl_lines.append("")
    busiest_day = data.get("busiest_day")
    if busiest_day:
        hl_lines.append(
            f"  Busiest Day:     {busiest_day} ({format_duration(data.get('busiest_day_seconds', 0))})"
        )
    hl_lines.append(f"  Longest Session: {format_duration(data.get('longest_session_seconds', 0))}")
    hl_lines.append(f"  Best Run:        {data.get('best_run', 0)} days")
    hl_lines.append("")

    console.print(Panel(
        "\n".join(hl_lines),
        title="[bold]Highlights[/]",
        box=box.ROUNDED,
        border_style="cyan",
        width=60,
    ))

    top_subjects = data.get("top_subjects", [])
    if top_subjects:
        subject_lines: list[str] = [""]
        max_seconds = top_subjects[0][1] or 1
        for label, seconds in top_subjects:
            bar = _xp_bar(seconds, max_seconds, width=15)
            subject_lines.append(f"  {label:<18s} {bar} {format_duration(seconds)}")
        subject_lines.append("")

        console.print(Panel(
            "\n".join(subject_lines),
            title="[bold]Top Subjects[/]",
            box=box.ROUNDED,
            border_style="blue",
            width=60,
        ))
