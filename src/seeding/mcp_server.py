"""Seeding MCP server: exposes the relapse log and progress engine as tools."""

import json

from mcp.server.fastmcp import FastMCP

from seeding.config import load_config
from seeding.context import EngineContext, FixedClock, SystemClock
from seeding.formatting import (
    format_achievements_compact, format_achievements_json, format_event_compact,
    format_history_compact, format_history_json, format_report_compact,
    format_report_json,
)
from seeding.store import EventStore, SettingsStore
from seeding.tracker import ProgressTracker

mcp = FastMCP("seeding", instructions=(
    "Seeding tracks a recovery streak. Record relapses with 'record_relapse', "
    "and call 'progress' to see the current streak, checkpoint, growth stage "
    "and achievements."
))


def _get_store() -> EventStore:
    """Get EventStore for the configured data directory (SEEDING_HOME, .env or default)."""
    config = load_config()
    if not config.db_path.exists():
        raise FileNotFoundError(
            f"Seeding not initialized in {config.home}. Run 'seeding init' first."
        )
    return EventStore(config.db_path)


def _clock(at: str | None):
    return FixedClock(at) if at else SystemClock()


@mcp.tool()
def record_relapse(
    timestamp: str | None = None,
    note: str | None = None,
    tags: list[str] | None = None,
) -> str:
    """Record a relapse. The current streak restarts from its timestamp.

    Args:
        timestamp: ISO-8601 time it happened (default: now)
        note: Optional free-text note (max 2000 chars)
        tags: Optional tags, e.g. Stress, Trigger, Social, Boredom, Craving, Other
    """
    store = _get_store()
    try:
        if note and len(note) > 2000:
            note = note[:2000]
        tracker = ProgressTracker(EngineContext.for_store(store))
        event_id = tracker.record_relapse(timestamp=timestamp, note=note, tags=tags)
        return format_event_compact(store.get_event(event_id))
    finally:
        store.close()


@mcp.tool()
def edit_relapse(
    event_id: str,
    note: str | None = None,
    tags: list[str] | None = None,
) -> str:
    """Change the note and/or tags of a relapse. Timestamps cannot be changed.

    Args:
        event_id: ID of the relapse (rel-...)
        note: New note; omitted means unchanged
        tags: New tags; omitted means unchanged
    """
    patch = {}
    if note is not None:
        patch["note"] = note
    if tags is not None:
        patch["tags"] = tags
    store = _get_store()
    try:
        tracker = ProgressTracker(EngineContext.for_store(store))
        return format_event_compact(tracker.edit_relapse(event_id, **patch))
    finally:
        store.close()


@mcp.tool()
def history(limit: int = 20, format: str = "compact") -> str:
    """List recorded relapses, newest first.

    Args:
        limit: Maximum results (default 20)
        format: Output format: "compact" or "json"
    """
    store = _get_store()
    try:
        events = store.list_events(limit=limit)
        if format == "json":
            return format_history_json(events)
        return format_history_compact(events)
    finally:
        store.close()


@mcp.tool()
def progress(at: str | None = None, format: str = "compact") -> str:
    """Current streak, best streak, checkpoint progress, growth stage and next achievement.

    Args:
        at: Evaluate at this ISO-8601 instant instead of now
        format: Output format: "compact" or "json"
    """
    store = _get_store()
    try:
        tracker = ProgressTracker(EngineContext.for_store(store, clock=_clock(at)))
        report = tracker.tick()
        if format == "json":
            return format_report_json(report)
        return format_report_compact(report)
    finally:
        store.close()


@mcp.tool()
def achievements(at: str | None = None, format: str = "compact") -> str:
    """All achievements with unlock status for the current streak.

    Args:
        at: Evaluate at this ISO-8601 instant instead of now
        format: Output format: "compact" or "json"
    """
    store = _get_store()
    try:
        engine = EngineContext.for_store(store, clock=_clock(at))
        snapshot = engine.resolve_streak()
        statuses = engine.get_achievements(snapshot.elapsed_ms)
        if format == "json":
            return format_achievements_json(statuses, snapshot.streak_start)
        return format_achievements_compact(statuses, snapshot.streak_start)
    finally:
        store.close()


@mcp.tool()
def status() -> str:
    """Data directory statistics as JSON: relapse count, journey start, last relapse."""
    store = _get_store()
    try:
        return json.dumps({
            "total_relapses": store.count(),
            "journey_start": SettingsStore(store).get_journey_start(),
            "last_relapse": store.last_activity(),
            "initialized_at": store.get_meta("initialized_at") or "unknown",
            "db_size_bytes": store.db_path.stat().st_size,
        }, indent=2)
    finally:
        store.close()


def main():
    """Run the MCP server over stdio."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
