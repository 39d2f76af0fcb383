"""Growth stage engine."""

from collections.abc import Sequence

from seeding.models import GrowthStage
from seeding.tables import GROWTH_STAGES


def get_growth_stage(elapsed_ms: int,
                     table: Sequence[GrowthStage] = GROWTH_STAGES) -> GrowthStage:
    """Highest stage whose threshold has been reached; the first stage otherwise."""
    for stage in reversed(table):
        if stage.threshold_ms <= elapsed_ms:
            return stage
    return table[0]


def get_next_stage(stage_id: str,
                   table: Sequence[GrowthStage] = GROWTH_STAGES) -> GrowthStage | None:
    """Stage following `stage_id`, or None at the final stage or for unknown ids."""
    for i, stage in enumerate(table):
        if stage.id == stage_id:
            return table[i + 1] if i + 1 < len(table) else None
    return None


def get_stage_progress(elapsed_ms: int,
                       table: Sequence[GrowthStage] = GROWTH_STAGES) -> float:
    current = get_growth_stage(elapsed_ms, table)
    upcoming = get_next_stage(current.id, table)
    if upcoming is None:
        return 1.0

    span = upcoming.threshold_ms - current.threshold_ms
    return min(max((elapsed_ms - current.threshold_ms) / span, 0.0), 1.0)


def get_time_until_next_stage(elapsed_ms: int,
                              table: Sequence[GrowthStage] = GROWTH_STAGES) -> int | None:
    current = get_growth_stage(elapsed_ms, table)
    upcoming = get_next_stage(current.id, table)
    if upcoming is None:
        return None
    return upcoming.threshold_ms - max(0, elapsed_ms)
