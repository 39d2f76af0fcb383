"""ProgressTracker: the periodic tick that turns the event log into a progress report."""

import logging
import threading
from collections.abc import Callable

from seeding.achievements import get_achievements, get_next_achievement
from seeding.checkpoints import get_checkpoint_progress, get_time_to_next_checkpoint
from seeding.context import EngineContext
from seeding.growth import (
    get_growth_stage, get_next_stage, get_stage_progress, get_time_until_next_stage,
)
from seeding.guard import NotificationGuard
from seeding.models import ProgressReport, RelapseEvent
from seeding.streak import resolve_streak
from seeding.timeutil import format_timestamp

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 1.0


class ProgressTracker:
    """Drives the engines for one consumer.

    Each tick samples the clock once and feeds the same elapsed time to the
    checkpoint, growth and achievement engines, so one report never
    disagrees with itself about "now". The tracker owns its notification
    guard; share a tracker, not a guard.
    """

    def __init__(self, ctx: EngineContext, guard: NotificationGuard | None = None):
        self.ctx = ctx
        self.guard = guard or NotificationGuard(ctx.achievements)
        self._events: list[RelapseEvent] | None = None
        self._journey_start: str | None = None
        self._loaded_state: tuple | None = None

    def _log_state(self) -> tuple:
        """Cheap summary of the stored log.

        `data_version` catches commits from other connections (edits included);
        the rest catches writes made through this store behind the tracker's back.
        """
        store = self.ctx.event_store
        return (store.data_version(), store.count(), store.last_activity(),
                self.ctx.settings_store.get_journey_start())

    def _load(self) -> None:
        self._events = self.ctx.event_store.list_events()
        self._journey_start = self.ctx.settings_store.get_journey_start()
        self._loaded_state = self._log_state()

    def refresh(self) -> None:
        """Reload the log after an outside change and restart celebration tracking."""
        self._load()
        self.guard.reset()

    def ensure_journey_started(self) -> str:
        """Set the journey start to now on first use. Returns the journey start."""
        existing = self.ctx.settings_store.get_journey_start()
        if existing:
            return existing
        started = format_timestamp(self.ctx.clock.now())
        self.ctx.settings_store.set_journey_start(started)
        logger.info("Journey started at %s", started)
        self._load()
        return started

    def record_relapse(self, timestamp: str | None = None, note: str | None = None,
                       tags: list[str] | None = None) -> str:
        """Add a relapse to the store, then restart the streak state.

        Store errors propagate before any tracker state changes.
        """
        if timestamp is None:
            timestamp = format_timestamp(self.ctx.clock.now())
        event_id = self.ctx.event_store.add(timestamp=timestamp, note=note, tags=tags)
        logger.info("Recorded relapse %s at %s", event_id, timestamp)
        self.refresh()
        return event_id

    def edit_relapse(self, event_id: str, **patch) -> RelapseEvent:
        """Update note/tags of a relapse. Only `note` and `tags` are accepted."""
        unknown = set(patch) - {"note", "tags"}
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        updated = self.ctx.event_store.update(event_id, **patch)
        self.refresh()
        return updated

    def dismiss_celebration(self) -> None:
        self.guard.on_celebration_dismissed()

    def tick(self) -> ProgressReport:
        """Sample now, resolve the streak and run every engine against it."""
        if self._events is None:
            self._load()
        elif self._log_state() != self._loaded_state:
            # Written by another process (CLI, MCP) since the last load
            logger.info("Relapse log changed outside this tracker, reloading")
            self.refresh()

        now = self.ctx.clock.now()
        snapshot = resolve_streak(self._events, self._journey_start, now)
        elapsed = snapshot.elapsed_ms
        celebration = self.guard.on_tick(elapsed)

        stages = self.ctx.growth_stages
        stage = get_growth_stage(elapsed, stages)

        return ProgressReport(
            generated_at=format_timestamp(now),
            snapshot=snapshot,
            checkpoint=get_checkpoint_progress(elapsed, self.ctx.checkpoints),
            growth_stage=stage,
            achievements=get_achievements(elapsed, self.ctx.achievements),
            next_achievement=get_next_achievement(elapsed, self.ctx.achievements),
            time_to_next_checkpoint_ms=get_time_to_next_checkpoint(elapsed, self.ctx.checkpoints),
            next_stage=get_next_stage(stage.id, stages),
            stage_progress=get_stage_progress(elapsed, stages),
            time_to_next_stage_ms=get_time_until_next_stage(elapsed, stages),
            celebration=celebration,
        )

    def run(self, on_report: Callable[[ProgressReport], None],
            interval: float = DEFAULT_TICK_SECONDS,
            stop: threading.Event | None = None,
            max_ticks: int | None = None) -> int:
        """Tick every `interval` seconds until `stop` is set or `max_ticks` is reached.

        Returns the number of ticks performed.
        """
        stop = stop or threading.Event()
        ticks = 0
        while not stop.is_set():
            on_report(self.tick())
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            stop.wait(interval)
        logger.debug("Tick loop stopped after %d ticks", ticks)
        return ticks
