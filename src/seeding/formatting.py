"""Output formatters for relapse history, progress reports and exports."""

import csv
import io
import json
from dataclasses import asdict

from seeding.achievements import unlocked_at
from seeding.models import (
    Achievement, AchievementStatus, GrowthStage, ProgressReport, RelapseEvent, StreakSnapshot,
)
from seeding.timeutil import (
    MS_PER_DAY, format_days, format_elapsed, format_time_remaining, parse_timestamp,
)

BAR_WIDTH = 20


def _short_timestamp(ts: str) -> str:
    """Convert ISO timestamp to compact form: '2026-02-23 14:30'."""
    return ts[:16].replace("T", " ")


def _bar(progress: float, width: int = BAR_WIDTH) -> str:
    filled = int(round(progress * width))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def _threshold_label(ms: int) -> str:
    if ms >= MS_PER_DAY:
        return format_days(ms)
    return format_time_remaining(ms)


def format_event_compact(event: RelapseEvent) -> str:
    """Single-line compact format for one relapse."""
    ts = _short_timestamp(event.timestamp)
    tags = f" [{', '.join(event.tags)}]" if event.tags else ""
    note = f" {event.note}" if event.note else ""
    return f"[{event.id}] [{ts}]{tags}{note}"


def format_history_compact(events: list[RelapseEvent]) -> str:
    if not events:
        return "(no relapses)"
    return "\n".join(format_event_compact(e) for e in events)


def format_history_json(events: list[RelapseEvent]) -> str:
    return json.dumps([asdict(e) for e in events], indent=2)


def format_celebration(achievement: Achievement) -> str:
    return f"{achievement.emoji} Achievement unlocked: {achievement.title} - {achievement.description}"


def format_achievements_compact(statuses: list[AchievementStatus],
                                streak_start: str | None = None) -> str:
    lines = []
    for status in statuses:
        a = status.achievement
        mark = "x" if status.unlocked else " "
        when = ""
        if status.unlocked and streak_start:
            when = f" (since {_short_timestamp(unlocked_at(a, streak_start))})"
        lines.append(f"[{mark}] {a.emoji} {a.title:<20} {_threshold_label(a.threshold_ms):>9}{when}")
    return "\n".join(lines)


def format_achievements_json(statuses: list[AchievementStatus],
                            streak_start: str | None = None) -> str:
    data = []
    for status in statuses:
        d = asdict(status)
        d["unlocked_at"] = (
            unlocked_at(status.achievement, streak_start) if status.unlocked else None
        )
        data.append(d)
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_stages_compact(stages: list[GrowthStage], current: GrowthStage) -> str:
    lines = []
    for stage in stages:
        marker = ">" if stage.id == current.id else " "
        lines.append(f"{marker} {stage.emoji} {stage.label:<24} from {format_time_remaining(stage.threshold_ms)}")
    return "\n".join(lines)


def format_report_compact(report: ProgressReport) -> str:
    """Multi-line status view of one tick."""
    snap = report.snapshot
    stage = report.growth_stage
    cp = report.checkpoint

    if snap.streak_start is None:
        lines = ["# Journey not started", "Run 'seeding init' to begin."]
        lines.extend(f"[WARNING] {warning}" for warning in snap.warnings)
        return "\n".join(lines)

    lines = [
        f"# {stage.emoji} {stage.label} ({_short_timestamp(report.generated_at)} UTC)",
        f"Streak:        {format_elapsed(snap.elapsed_ms)} (since {_short_timestamp(snap.streak_start)})",
        f"Best streak:   {format_elapsed(snap.best_streak_ms)}",
        f"Attempts:      {snap.total_attempts}",
    ]

    if cp.is_completed:
        lines.append(f"Checkpoint:    {cp.current_checkpoint.label} {_bar(1.0)} all milestones achieved")
    else:
        lines.append(
            f"Checkpoint:    {_bar(cp.progress)} {cp.progress * 100:.0f}% "
            f"to {cp.next_checkpoint.label} ({format_time_remaining(report.time_to_next_checkpoint_ms)} left)"
        )

    if report.next_stage is None:
        lines.append(f"Stage:         {_bar(1.0)} fully grown")
    else:
        upcoming = report.next_stage
        lines.append(
            f"Stage:         {_bar(report.stage_progress)} {report.stage_progress * 100:.0f}% "
            f"to {upcoming.emoji} {upcoming.label} ({format_time_remaining(report.time_to_next_stage_ms)} left)"
        )

    unlocked = sum(1 for s in report.achievements if s.unlocked)
    lines.append(f"Achievements:  {unlocked}/{len(report.achievements)}")
    if report.next_achievement:
        a = report.next_achievement
        lines.append(
            f"Next:          {a.emoji} {a.title} in "
            f"{format_time_remaining(a.threshold_ms - snap.elapsed_ms)}"
        )

    for warning in snap.warnings:
        lines.append(f"[WARNING] {warning}")

    if report.celebration:
        lines.append("")
        lines.append(format_celebration(report.celebration))

    return "\n".join(lines)


def format_tick_line(report: ProgressReport) -> str:
    """One-line live view used by the watch loop."""
    snap = report.snapshot
    if snap.streak_start is None:
        return "Journey not started"
    cp = report.checkpoint
    target = "done" if cp.is_completed else f"{cp.progress * 100:.0f}% to {cp.next_checkpoint.label}"
    return (
        f"{report.growth_stage.emoji} {format_elapsed(snap.elapsed_ms)} "
        f"{_bar(cp.progress)} {target}"
    )


def format_report_json(report: ProgressReport) -> str:
    d = asdict(report)
    d["unlocked_count"] = sum(1 for s in report.achievements if s.unlocked)
    return json.dumps(d, indent=2, ensure_ascii=False)


def _export_dict(events: list[RelapseEvent], journey_start: str | None,
                 snapshot: StreakSnapshot, exported_at: str) -> dict:
    return {
        "exported_at": exported_at,
        "journey_start": journey_start,
        "relapses": [asdict(e) for e in events],
        "stats": {
            "total_relapses": snapshot.total_attempts,
            "current_streak_ms": snapshot.elapsed_ms,
            "best_streak_ms": snapshot.best_streak_ms,
            "current_streak_days": snapshot.elapsed_ms // MS_PER_DAY,
            "best_streak_days": snapshot.best_streak_ms // MS_PER_DAY,
        },
    }


def format_export_json(events: list[RelapseEvent], journey_start: str | None,
                       snapshot: StreakSnapshot, exported_at: str) -> str:
    return json.dumps(_export_dict(events, journey_start, snapshot, exported_at),
                      indent=2, ensure_ascii=False)


def format_export_csv(events: list[RelapseEvent], journey_start: str | None,
                      snapshot: StreakSnapshot, exported_at: str) -> str:
    """CSV export: a stats preamble, then one row per relapse."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["exported_at", exported_at])
    writer.writerow(["journey_start", journey_start or ""])
    writer.writerow(["total_relapses", snapshot.total_attempts])
    writer.writerow(["current_streak_days", snapshot.elapsed_ms // MS_PER_DAY])
    writer.writerow(["best_streak_days", snapshot.best_streak_ms // MS_PER_DAY])
    writer.writerow([])
    writer.writerow(["id", "date", "time", "note", "tags"])
    for e in events:
        try:
            dt = parse_timestamp(e.timestamp)
            date, time = dt.strftime("%Y-%m-%d"), dt.strftime("%H:%M:%S")
        except ValueError:
            date, time = e.timestamp, ""
        writer.writerow([e.id, date, time, e.note or "", "; ".join(e.tags or [])])
    return buf.getvalue()
