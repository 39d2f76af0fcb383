"""EngineContext: the milestone tables and collaborators the engines run against."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from seeding.achievements import get_achievements, get_newly_unlocked, get_next_achievement
from seeding.checkpoints import get_checkpoint_progress
from seeding.growth import get_growth_stage
from seeding.models import (
    Achievement, AchievementStatus, Checkpoint, CheckpointProgress,
    GrowthStage, StreakSnapshot,
)
from seeding.store import EventStore, SettingsStore
from seeding.streak import resolve_streak
from seeding.tables import ACHIEVEMENTS, CHECKPOINTS, GROWTH_STAGES, validate_table
from seeding.timeutil import ensure_utc, parse_timestamp, utc_now


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return utc_now()


class FixedClock:
    """Clock pinned to one instant; `advance` moves it forward."""

    def __init__(self, instant: datetime | str):
        if isinstance(instant, str):
            instant = parse_timestamp(instant)
        self.instant = ensure_utc(instant)

    def now(self) -> datetime:
        return self.instant

    def advance(self, **delta) -> None:
        self.instant = self.instant + timedelta(**delta)


@dataclass
class EngineContext:
    """Injected tables and collaborators.

    The engine functions stay pure; this only binds them to one set of
    tables so callers don't thread tables through every call. Injected
    tables are validated on construction.
    """

    event_store: EventStore | None = None
    settings_store: SettingsStore | None = None
    clock: SystemClock | FixedClock = field(default_factory=SystemClock)
    checkpoints: Sequence[Checkpoint] = CHECKPOINTS
    achievements: Sequence[Achievement] = ACHIEVEMENTS
    growth_stages: Sequence[GrowthStage] = GROWTH_STAGES

    def __post_init__(self):
        validate_table(self.checkpoints, "duration_ms", "checkpoints")
        validate_table(self.achievements, "threshold_ms", "achievements")
        validate_table(self.growth_stages, "threshold_ms", "growth_stages")
        if self.settings_store is None and self.event_store is not None:
            self.settings_store = SettingsStore(self.event_store)

    @classmethod
    def for_store(cls, store: EventStore, clock=None) -> "EngineContext":
        return cls(event_store=store, clock=clock or SystemClock())

    def resolve_streak(self, now: datetime | None = None) -> StreakSnapshot:
        """Resolve the streak from the stores, at `now` or the clock's current time."""
        events = self.event_store.list_events() if self.event_store else []
        journey_start = (
            self.settings_store.get_journey_start() if self.settings_store else None
        )
        return resolve_streak(events, journey_start, now or self.clock.now())

    def get_checkpoint_progress(self, elapsed_ms: int) -> CheckpointProgress:
        return get_checkpoint_progress(elapsed_ms, self.checkpoints)

    def get_growth_stage(self, elapsed_ms: int) -> GrowthStage:
        return get_growth_stage(elapsed_ms, self.growth_stages)

    def get_achievements(self, elapsed_ms: int) -> list[AchievementStatus]:
        return get_achievements(elapsed_ms, self.achievements)

    def get_newly_unlocked(self, current_elapsed_ms: int,
                           previous_elapsed_ms: int) -> list[Achievement]:
        return get_newly_unlocked(current_elapsed_ms, previous_elapsed_ms, self.achievements)

    def get_next_achievement(self, elapsed_ms: int) -> Achievement | None:
        return get_next_achievement(elapsed_ms, self.achievements)
