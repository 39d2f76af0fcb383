"""Checkpoint engine: position on the checkpoint ladder for an elapsed time."""

from collections.abc import Sequence

from seeding.models import Checkpoint, CheckpointProgress
from seeding.tables import CHECKPOINTS


def _current_index(elapsed_ms: int, table: Sequence[Checkpoint]) -> int:
    """Greatest index whose duration has been reached, or -1."""
    index = -1
    for i, checkpoint in enumerate(table):
        if checkpoint.duration_ms <= elapsed_ms:
            index = i
        else:
            break
    return index


def get_checkpoint_progress(elapsed_ms: int,
                            table: Sequence[Checkpoint] = CHECKPOINTS) -> CheckpointProgress:
    """Current/next checkpoint and the fraction of the way between them.

    Before the first checkpoint the interval starts at zero. Past the last
    checkpoint the ladder is completed and progress stays at 1.
    """
    if elapsed_ms <= 0:
        return CheckpointProgress(
            current_checkpoint=None,
            next_checkpoint=table[0],
            progress=0.0,
            is_completed=False,
        )

    index = _current_index(elapsed_ms, table)
    if index == len(table) - 1:
        return CheckpointProgress(
            current_checkpoint=table[index],
            next_checkpoint=None,
            progress=1.0,
            is_completed=True,
        )

    current = table[index] if index >= 0 else None
    upcoming = table[index + 1]
    start = current.duration_ms if current else 0
    end = upcoming.duration_ms
    progress = min(max((elapsed_ms - start) / (end - start), 0.0), 1.0)

    return CheckpointProgress(
        current_checkpoint=current,
        next_checkpoint=upcoming,
        progress=progress,
        is_completed=False,
    )


def get_time_to_next_checkpoint(elapsed_ms: int,
                                table: Sequence[Checkpoint] = CHECKPOINTS) -> int | None:
    """Milliseconds until the next checkpoint, None once the ladder is completed."""
    result = get_checkpoint_progress(elapsed_ms, table)
    if result.next_checkpoint is None:
        return None
    return result.next_checkpoint.duration_ms - max(0, elapsed_ms)
