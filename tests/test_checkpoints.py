"""Tests for the checkpoint engine."""

from seeding.checkpoints import get_checkpoint_progress, get_time_to_next_checkpoint
from seeding.models import Checkpoint
from seeding.tables import CHECKPOINTS
from seeding.timeutil import MS_PER_DAY, MS_PER_HOUR

DAY = Checkpoint("1d", "1 day", "1 day", 86_400_000)
WEEK = Checkpoint("7d", "7 days", "1 week", 604_800_000)
TABLE = [DAY, WEEK]


class TestCheckpointProgress:

    def test_before_first_checkpoint(self):
        result = get_checkpoint_progress(43_200_000, TABLE)
        assert result.current_checkpoint is None
        assert result.next_checkpoint == DAY
        assert result.progress == 0.5
        assert result.is_completed is False

    def test_exactly_on_last_checkpoint(self):
        result = get_checkpoint_progress(604_800_000, TABLE)
        assert result.current_checkpoint == WEEK
        assert result.next_checkpoint is None
        assert result.progress == 1
        assert result.is_completed is True

    def test_between_checkpoints(self):
        result = get_checkpoint_progress(4 * MS_PER_DAY, TABLE)
        assert result.current_checkpoint == DAY
        assert result.next_checkpoint == WEEK
        assert result.progress == 0.5

    def test_exactly_on_intermediate_checkpoint(self):
        result = get_checkpoint_progress(MS_PER_DAY, TABLE)
        assert result.current_checkpoint == DAY
        assert result.next_checkpoint == WEEK
        assert result.progress == 0.0

    def test_zero_elapsed(self):
        result = get_checkpoint_progress(0, TABLE)
        assert result.current_checkpoint is None
        assert result.next_checkpoint == DAY
        assert result.progress == 0
        assert result.is_completed is False

    def test_negative_elapsed_is_treated_as_zero(self):
        assert get_checkpoint_progress(-5000, TABLE) == get_checkpoint_progress(0, TABLE)

    def test_far_past_last_checkpoint(self):
        result = get_checkpoint_progress(10 * 365 * MS_PER_DAY)
        assert result.current_checkpoint == CHECKPOINTS[-1]
        assert result.is_completed is True

    def test_completed_iff_last_duration_reached(self):
        last = CHECKPOINTS[-1].duration_ms
        assert get_checkpoint_progress(last - 1).is_completed is False
        assert get_checkpoint_progress(last).is_completed is True

    def test_progress_always_in_unit_interval(self):
        samples = [-1, 0, 1, MS_PER_HOUR, 6 * MS_PER_HOUR, 13 * MS_PER_HOUR,
                   5 * MS_PER_DAY, 100 * MS_PER_DAY, 400 * MS_PER_DAY]
        for elapsed in samples:
            assert 0.0 <= get_checkpoint_progress(elapsed).progress <= 1.0

    def test_progress_monotonic_within_interval(self):
        # Between the 1d and 2d checkpoints of the default table
        samples = [MS_PER_DAY + i * MS_PER_HOUR for i in range(24)]
        values = [get_checkpoint_progress(e).progress for e in samples]
        assert values == sorted(values)

    def test_current_index_never_decreases(self):
        order = {c.id: i for i, c in enumerate(CHECKPOINTS)}
        last = -1
        for hours in range(0, 400 * 24, 7):
            cp = get_checkpoint_progress(hours * MS_PER_HOUR).current_checkpoint
            index = order[cp.id] if cp else -1
            assert index >= last
            last = index

    def test_idempotent(self):
        assert get_checkpoint_progress(12345678) == get_checkpoint_progress(12345678)


class TestTimeToNextCheckpoint:

    def test_remaining(self):
        assert get_time_to_next_checkpoint(43_200_000, TABLE) == 43_200_000

    def test_none_when_completed(self):
        assert get_time_to_next_checkpoint(604_800_000, TABLE) is None

    def test_from_zero(self):
        assert get_time_to_next_checkpoint(-10, TABLE) == MS_PER_DAY
