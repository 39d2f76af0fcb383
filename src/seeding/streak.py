"""Streak resolver: current streak start, elapsed time and aggregate stats."""

import logging
from collections.abc import Sequence
from datetime import datetime

from seeding.models import RelapseEvent, StreakSnapshot
from seeding.timeutil import ensure_utc, format_timestamp, parse_timestamp, to_epoch_ms

logger = logging.getLogger(__name__)


def _valid_events(events: Sequence[RelapseEvent],
                  warnings: list[str]) -> list[tuple[int, str, RelapseEvent]]:
    """Parse event timestamps, dropping (and reporting) the malformed ones.

    Returns (epoch_ms, id, event) tuples sorted ascending; ties order by id.
    """
    parsed = []
    for event in events:
        try:
            ms = to_epoch_ms(parse_timestamp(event.timestamp))
        except ValueError:
            message = f"Ignoring relapse {event.id}: malformed timestamp {event.timestamp!r}"
            logger.warning(message)
            warnings.append(message)
            continue
        parsed.append((ms, event.id, event))
    parsed.sort(key=lambda item: (item[0], item[1]))
    return parsed


def resolve_streak(events: Sequence[RelapseEvent],
                   journey_start: str | None,
                   now: datetime) -> StreakSnapshot:
    """Compute the active streak and aggregate stats from the full event log.

    The streak starts at the latest relapse, or at the journey start when
    there are none. Elapsed time is clamped at zero so clock skew never
    produces a negative streak.

    Best streak is the longest of: journey start -> first relapse, every gap
    between consecutive relapses, and the streak in progress.
    """
    warnings: list[str] = []
    now_ms = to_epoch_ms(ensure_utc(now))

    journey_ms = None
    if journey_start is not None:
        try:
            journey_ms = to_epoch_ms(parse_timestamp(journey_start))
        except ValueError:
            message = f"Ignoring journey start: malformed timestamp {journey_start!r}"
            logger.warning(message)
            warnings.append(message)

    ordered = _valid_events(events, warnings)

    if ordered:
        start_ms, _, latest = ordered[-1]
        streak_start = format_timestamp(parse_timestamp(latest.timestamp))
    elif journey_ms is not None:
        start_ms = journey_ms
        streak_start = format_timestamp(parse_timestamp(journey_start))
    else:
        start_ms = None
        streak_start = None

    elapsed_ms = max(0, now_ms - start_ms) if start_ms is not None else 0

    segments: list[int] = []
    if ordered and journey_ms is not None:
        segments.append(ordered[0][0] - journey_ms)
    for (earlier, _, _), (later, _, _) in zip(ordered, ordered[1:]):
        segments.append(later - earlier)
    if start_ms is not None:
        segments.append(elapsed_ms)
    best_streak_ms = max((max(0, s) for s in segments), default=0)

    return StreakSnapshot(
        streak_start=streak_start,
        elapsed_ms=elapsed_ms,
        total_attempts=len(ordered),
        best_streak_ms=best_streak_ms,
        warnings=warnings,
    )
