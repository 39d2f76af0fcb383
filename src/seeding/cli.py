"""Seeding CLI: relapse log and streak progress from the terminal."""

import json
import sys
import threading
from pathlib import Path

import click

from seeding.config import Config, configure_logging, load_config
from seeding.context import EngineContext, FixedClock, SystemClock
from seeding.formatting import (
    format_achievements_compact, format_achievements_json, format_celebration, format_event_compact,
    format_export_csv, format_export_json, format_history_compact,
    format_history_json, format_report_compact, format_report_json,
    format_stages_compact, format_tick_line,
)
from seeding.models import RelapseEvent
from seeding.store import EventStore
from seeding.tables import RELAPSE_TAGS
from seeding.timeutil import format_timestamp, parse_ago, parse_timestamp, utc_now
from seeding.tracker import ProgressTracker


def _get_store(config: Config) -> EventStore:
    """Get an initialized EventStore for the data directory."""
    db_path = config.db_path
    if not db_path.exists():
        click.echo(f"Error: Seeding not initialized in {config.home}", err=True)
        click.echo("Run 'seeding init' first.", err=True)
        sys.exit(1)
    return EventStore(db_path)


def _clock(at: str | None):
    if at is None:
        return SystemClock()
    try:
        return FixedClock(at)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--home", "-H", default=None, help="Data directory (default: $SEEDING_HOME or ~/.seeding)")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.pass_context
def cli(ctx, home, verbose):
    """Seeding: track your streak, checkpoints and achievements."""
    config = load_config(home=home)
    configure_logging("DEBUG" if verbose else config.log_level)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.option("--start", default=None, help="Journey start as ISO timestamp (default: now)")
@click.pass_context
def init(ctx, start):
    """Initialize the data directory and start the journey."""
    config = ctx.obj["config"]
    home, db_path = config.home, config.db_path

    if db_path.exists():
        click.echo(f"Seeding already initialized in {home}")
        return

    clock = _clock(start)
    home.mkdir(parents=True, exist_ok=True)
    store = EventStore(db_path)
    store.initialize()
    try:
        engine = EngineContext.for_store(store, clock=clock)
        tracker = ProgressTracker(engine)
        started = tracker.ensure_journey_started()
        store.set_meta("initialized_at", format_timestamp(utc_now()))
        click.echo(f"Seeding initialized in {home}. Journey started {started}.")
    finally:
        store.close()


@cli.command()
@click.option("--at", "at", default=None, help="When it happened (ISO timestamp)")
@click.option("--ago", default=None, help="How long ago: 30m, 6h, 2d")
@click.option("--note", "-n", default=None, help="Optional note (max 2000 chars)")
@click.option("--tag", "-t", "tags", multiple=True,
              help=f"Tag(s), e.g. {', '.join(RELAPSE_TAGS)}")
@click.pass_context
def relapse(ctx, at, ago, note, tags):
    """Record a relapse. The streak restarts from its timestamp."""
    if at and ago:
        click.echo("Error: Use either --at or --ago, not both.", err=True)
        sys.exit(1)
    if note and len(note) > 2000:
        click.echo("Error: Note exceeds 2000 character limit.", err=True)
        sys.exit(1)

    store = _get_store(ctx.obj["config"])
    try:
        timestamp = at
        if ago:
            timestamp = format_timestamp(parse_ago(ago))
        tracker = ProgressTracker(EngineContext.for_store(store))
        event_id = tracker.record_relapse(timestamp=timestamp, note=note,
                                          tags=list(tags) or None)
        click.echo(format_event_compact(store.get_event(event_id)))
        click.echo("Streak restarted. Every moment is a fresh start.")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        store.close()


@cli.command()
@click.argument("event_id")
@click.option("--note", "-n", default=None, help="New note")
@click.option("--tag", "-t", "tags", multiple=True, help="Replace tags")
@click.option("--clear-note", is_flag=True, help="Remove the note")
@click.option("--clear-tags", is_flag=True, help="Remove all tags")
@click.pass_context
def edit(ctx, event_id, note, tags, clear_note, clear_tags):
    """Edit the note or tags of a relapse. Timestamps cannot be changed."""
    patch = {}
    if note is not None:
        patch["note"] = note
    if clear_note:
        patch["note"] = None
    if tags:
        patch["tags"] = list(tags)
    if clear_tags:
        patch["tags"] = None
    if not patch:
        click.echo("Error: Nothing to change. Pass --note, --tag, --clear-note or --clear-tags.", err=True)
        sys.exit(1)

    store = _get_store(ctx.obj["config"])
    try:
        tracker = ProgressTracker(EngineContext.for_store(store))
        updated = tracker.edit_relapse(event_id, **patch)
        click.echo(f"Updated: {format_event_compact(updated)}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        store.close()


@cli.command()
@click.option("--limit", "-n", default=None, type=int, help="Max results")
@click.option("--format", "-f", "fmt", default="compact",
              type=click.Choice(["compact", "json"]))
@click.pass_context
def history(ctx, limit, fmt):
    """List recorded relapses, newest first."""
    store = _get_store(ctx.obj["config"])
    try:
        events = store.list_events(limit=limit)
        if fmt == "json":
            click.echo(format_history_json(events))
        else:
            click.echo(format_history_compact(events))
    finally:
        store.close()


@cli.command()
@click.option("--at", "at", default=None, help="Evaluate at this ISO timestamp instead of now")
@click.option("--format", "-f", "fmt", default="compact",
              type=click.Choice(["compact", "json"]))
@click.pass_context
def status(ctx, at, fmt):
    """Show streak, checkpoint, growth stage and achievement progress."""
    store = _get_store(ctx.obj["config"])
    try:
        tracker = ProgressTracker(EngineContext.for_store(store, clock=_clock(at)))
        report = tracker.tick()
        if fmt == "json":
            click.echo(format_report_json(report))
        else:
            click.echo(format_report_compact(report))
    finally:
        store.close()


@cli.command()
@click.option("--at", "at", default=None, help="Evaluate at this ISO timestamp instead of now")
@click.option("--format", "-f", "fmt", default="compact",
              type=click.Choice(["compact", "json"]))
@click.pass_context
def achievements(ctx, at, fmt):
    """List achievements with their unlock status for the current streak."""
    store = _get_store(ctx.obj["config"])
    try:
        engine = EngineContext.for_store(store, clock=_clock(at))
        snapshot = engine.resolve_streak()
        statuses = engine.get_achievements(snapshot.elapsed_ms)
        if fmt == "json":
            click.echo(format_achievements_json(statuses, snapshot.streak_start))
        else:
            click.echo(format_achievements_compact(statuses, snapshot.streak_start))
    finally:
        store.close()


@cli.command()
@click.option("--at", "at", default=None, help="Evaluate at this ISO timestamp instead of now")
@click.pass_context
def stages(ctx, at):
    """Show the growth stage ladder and where the current streak sits on it."""
    store = _get_store(ctx.obj["config"])
    try:
        engine = EngineContext.for_store(store, clock=_clock(at))
        snapshot = engine.resolve_streak()
        current = engine.get_growth_stage(snapshot.elapsed_ms)
        click.echo(format_stages_compact(list(engine.growth_stages), current))
    finally:
        store.close()


@cli.command()
@click.option("--interval", default=None, type=float,
              help="Seconds between ticks (default: $SEEDING_TICK_SECONDS or 1)")
@click.option("--ticks", default=None, type=int, help="Stop after N ticks")
@click.pass_context
def watch(ctx, interval, ticks):
    """Live progress. Prints each new achievement as it is crossed. Ctrl-C stops."""
    config = ctx.obj["config"]
    store = _get_store(config)
    tracker = ProgressTracker(EngineContext.for_store(store))
    stop = threading.Event()

    def on_report(report):
        if report.celebration:
            click.echo(format_celebration(report.celebration))
            # No UI to dismiss it from: acknowledge immediately
            tracker.dismiss_celebration()
        click.echo(format_tick_line(report))

    try:
        tracker.run(on_report, interval=interval or config.tick_seconds,
                    stop=stop, max_ticks=ticks)
    except KeyboardInterrupt:
        stop.set()
        click.echo("Stopped.")
    finally:
        store.close()


@cli.command()
@click.option("--format", "-f", "fmt", default="json",
              type=click.Choice(["json", "csv"]))
@click.option("--output", "-o", default=None, type=click.Path(dir_okay=False),
              help="Write to file instead of stdout")
@click.pass_context
def export(ctx, fmt, output):
    """Export the relapse log with streak statistics."""
    store = _get_store(ctx.obj["config"])
    try:
        engine = EngineContext.for_store(store)
        events = store.list_events()
        journey_start = engine.settings_store.get_journey_start()
        snapshot = engine.resolve_streak()
        exported_at = format_timestamp(engine.clock.now())
        if fmt == "csv":
            content = format_export_csv(events, journey_start, snapshot, exported_at)
        else:
            content = format_export_json(events, journey_start, snapshot, exported_at)

        if output:
            Path(output).write_text(content, encoding="utf-8")
            click.echo(f"Exported {len(events)} relapses to {output}.")
        else:
            click.echo(content)
    finally:
        store.close()


@cli.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_(ctx, file):
    """Import relapses from a JSON export. Relapses already present are skipped.

    An earlier journey start in the export replaces the current one.
    """
    store = _get_store(ctx.obj["config"])
    try:
        data = json.loads(Path(file).read_text(encoding="utf-8"))
        records = data.get("relapses", []) if isinstance(data, dict) else data
        events = [
            RelapseEvent(id=r.get("id") or "", timestamp=r["timestamp"],
                         note=r.get("note"), tags=r.get("tags"))
            for r in records
        ]
        inserted = store.insert_batch(events)

        engine = EngineContext.for_store(store)
        imported_start = data.get("journey_start") if isinstance(data, dict) else None
        current_start = engine.settings_store.get_journey_start()
        if imported_start and (
            current_start is None
            or parse_timestamp(imported_start) < parse_timestamp(current_start)
        ):
            engine.settings_store.set_journey_start(imported_start)
            click.echo(f"Journey start moved to {engine.settings_store.get_journey_start()}.")

        click.echo(f"Imported {inserted} relapses from {file} ({len(events) - inserted} skipped).")
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        click.echo(f"Error: Invalid import file: {e}", err=True)
        sys.exit(1)
    finally:
        store.close()
