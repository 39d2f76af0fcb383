"""Achievement engine: unlock status and threshold-crossing detection.

Unlock status is always derived from elapsed time. Nothing here is stored,
so asking twice with the same elapsed time gives the same answer.
"""

from collections.abc import Sequence
from datetime import timedelta

from seeding.models import Achievement, AchievementStatus
from seeding.tables import ACHIEVEMENTS
from seeding.timeutil import format_timestamp, parse_timestamp


def get_achievements(elapsed_ms: int,
                     table: Sequence[Achievement] = ACHIEVEMENTS) -> list[AchievementStatus]:
    """Every achievement in table order with its unlock status."""
    return [
        AchievementStatus(achievement=a, unlocked=a.threshold_ms <= elapsed_ms)
        for a in table
    ]


def get_newly_unlocked(current_elapsed_ms: int,
                       previous_elapsed_ms: int,
                       table: Sequence[Achievement] = ACHIEVEMENTS) -> list[Achievement]:
    """Achievements crossed in the interval (previous, current], ascending.

    A pure interval query: an empty or backward interval yields nothing.
    Suppressing the backlog on a first sample is the caller's job.
    """
    return [
        a for a in table
        if previous_elapsed_ms < a.threshold_ms <= current_elapsed_ms
    ]


def get_next_achievement(elapsed_ms: int,
                         table: Sequence[Achievement] = ACHIEVEMENTS) -> Achievement | None:
    for a in table:
        if elapsed_ms < a.threshold_ms:
            return a
    return None


def unlocked_at(achievement: Achievement, streak_start: str | None) -> str | None:
    """Instant the achievement was reached within the streak starting at `streak_start`."""
    if streak_start is None:
        return None
    start = parse_timestamp(streak_start)
    return format_timestamp(start + timedelta(milliseconds=achievement.threshold_ms))
