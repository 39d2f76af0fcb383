"""Achievement notification guard: decides when to surface a celebration.

Two phases:

    IDLE --(new crossing, not the last one shown)--> CELEBRATING
    CELEBRATING --(dismissed)--> IDLE

Ticks that arrive while a celebration is showing are ignored entirely, so a
second celebration is never queued behind the first. Only the earliest
achievement of a crossed batch is surfaced; the rest of the batch is dropped.

The guard is owned by a single consumer. Two consumers sharing one guard
would race to celebrate the same crossing.
"""

import logging
from collections.abc import Sequence

from seeding.achievements import get_newly_unlocked
from seeding.models import Achievement, GuardPhase, NotificationGuardState
from seeding.tables import ACHIEVEMENTS

logger = logging.getLogger(__name__)


class NotificationGuard:
    """Session-scoped state machine preventing duplicate celebrations.

    A previous sample of 0 means "no prior sample": the next tick is only
    recorded. This also holds after a tick whose elapsed time was clamped to
    0 (clock moved behind the streak start), so crossings between that tick
    and the next one are not celebrated.
    """

    def __init__(self, table: Sequence[Achievement] = ACHIEVEMENTS,
                 state: NotificationGuardState | None = None):
        self.table = table
        self.state = state or NotificationGuardState()

    @property
    def phase(self) -> GuardPhase:
        if self.state.celebration_in_flight:
            return GuardPhase.CELEBRATING
        return GuardPhase.IDLE

    def on_tick(self, elapsed_ms: int) -> Achievement | None:
        """Feed one elapsed-time sample. Returns the achievement to celebrate, if any."""
        if self.state.celebration_in_flight:
            return None

        celebrate = None
        previous = self.state.previous_elapsed_ms
        # previous == 0 means no prior sample: record it, don't replay the backlog
        if previous > 0 and elapsed_ms > previous:
            crossed = get_newly_unlocked(elapsed_ms, previous, self.table)
            if crossed and crossed[0].id != self.state.last_notified_achievement_id:
                celebrate = crossed[0]
                self.state.celebration_in_flight = True
                self.state.last_notified_achievement_id = celebrate.id
                if len(crossed) > 1:
                    logger.debug("Dropping %d later crossings in batch: %s",
                                 len(crossed) - 1, [a.id for a in crossed[1:]])
                logger.info("Celebrating achievement %s at %dms", celebrate.id, elapsed_ms)

        self.state.previous_elapsed_ms = elapsed_ms
        return celebrate

    def on_celebration_dismissed(self) -> None:
        self.state.celebration_in_flight = False

    def reset(self) -> None:
        """Forget the previous streak's high-water mark after the event log changed."""
        self.state.last_notified_achievement_id = None
        self.state.previous_elapsed_ms = 0
