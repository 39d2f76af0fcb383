"""Data models for relapse events, milestone tables and derived progress."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass
class RelapseEvent:
    id: str
    timestamp: str
    note: str | None = None
    tags: list[str] | None = None


@dataclass(frozen=True)
class Checkpoint:
    id: str
    label: str
    short_label: str
    duration_ms: int


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str
    emoji: str
    threshold_ms: int


@dataclass(frozen=True)
class GrowthStage:
    id: str
    label: str
    emoji: str
    description: str
    threshold_ms: int


@dataclass
class StreakSnapshot:
    streak_start: str | None
    elapsed_ms: int
    total_attempts: int
    best_streak_ms: int
    # Data-integrity problems found while resolving (malformed timestamps)
    warnings: list[str] = field(default_factory=list)


@dataclass
class CheckpointProgress:
    current_checkpoint: Checkpoint | None
    next_checkpoint: Checkpoint | None
    progress: float
    is_completed: bool


@dataclass
class AchievementStatus:
    achievement: Achievement
    unlocked: bool


@dataclass
class TimeBreakdown:
    days: int
    hours: int
    minutes: int
    seconds: int


class GuardPhase(str, Enum):
    IDLE = "idle"
    CELEBRATING = "celebrating"


@dataclass
class NotificationGuardState:
    last_notified_achievement_id: str | None = None
    previous_elapsed_ms: int = 0
    celebration_in_flight: bool = False


@dataclass
class ProgressReport:
    generated_at: str
    snapshot: StreakSnapshot
    checkpoint: CheckpointProgress
    growth_stage: GrowthStage
    achievements: list[AchievementStatus] = field(default_factory=list)
    next_achievement: Achievement | None = None
    time_to_next_checkpoint_ms: int | None = None
    next_stage: GrowthStage | None = None
    stage_progress: float = 0.0
    time_to_next_stage_ms: int | None = None
    # Set only on the tick that starts a celebration
    celebration: Achievement | None = None
