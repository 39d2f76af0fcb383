"""Static milestone tables: checkpoints, achievements and growth stages.

Every table is sorted strictly ascending by its duration field. This is
checked when the module is imported, so a misordered table fails before any
progress is computed from it.
"""

from collections.abc import Sequence

from seeding.models import Achievement, Checkpoint, GrowthStage
from seeding.timeutil import MS_PER_DAY, MS_PER_HOUR, MS_PER_MINUTE


class TableOrderError(ValueError):
    """A static milestone table is empty, misordered or has duplicate thresholds."""


RELAPSE_TAGS = ("Stress", "Trigger", "Social", "Boredom", "Craving", "Other")


CHECKPOINTS: tuple[Checkpoint, ...] = (
    Checkpoint("6hr", "6 hours", "6 hrs", 6 * MS_PER_HOUR),
    Checkpoint("12hr", "12 hours", "12 hrs", 12 * MS_PER_HOUR),
    Checkpoint("1d", "1 day", "1 day", 1 * MS_PER_DAY),
    Checkpoint("2d", "2 days", "2 days", 2 * MS_PER_DAY),
    Checkpoint("3d", "3 days", "3 days", 3 * MS_PER_DAY),
    Checkpoint("7d", "7 days", "1 week", 7 * MS_PER_DAY),
    Checkpoint("14d", "14 days", "2 weeks", 14 * MS_PER_DAY),
    Checkpoint("21d", "21 days", "3 weeks", 21 * MS_PER_DAY),
    Checkpoint("30d", "30 days", "1 month", 30 * MS_PER_DAY),
    Checkpoint("60d", "60 days", "2 months", 60 * MS_PER_DAY),
    Checkpoint("90d", "90 days", "3 months", 90 * MS_PER_DAY),
    Checkpoint("180d", "180 days", "6 months", 180 * MS_PER_DAY),
    Checkpoint("270d", "270 days", "9 months", 270 * MS_PER_DAY),
    Checkpoint("365d", "1 year", "1 year", 365 * MS_PER_DAY),
)


ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement("first_5min", "First Steps",
                "Started your journey - 5 minutes strong", "🌱", 5 * MS_PER_MINUTE),
    Achievement("first_hour", "One Hour Warrior",
                "Conquered your first hour", "⏰", 1 * MS_PER_HOUR),
    Achievement("first_day", "Daily Champion",
                "Made it through a full day", "🌅", 1 * MS_PER_DAY),
    Achievement("three_days", "Three Day Hero",
                "Three days of unwavering strength", "🔥", 3 * MS_PER_DAY),
    Achievement("one_week", "Weekly Victor",
                "Survived a full week - incredible!", "🏅", 7 * MS_PER_DAY),
    Achievement("two_weeks", "Fortnight Fighter",
                "Two weeks of pure determination", "💪", 14 * MS_PER_DAY),
    Achievement("three_weeks", "Legendary Streak",
                "Three weeks - you are unstoppable", "⭐", 21 * MS_PER_DAY),
    Achievement("one_month", "Monthly Master",
                "A full month of growth and strength", "🎯", 30 * MS_PER_DAY),
    Achievement("two_months", "Two Month Titan",
                "Sixty days of unbreakable will", "🛡️", 60 * MS_PER_DAY),
    Achievement("three_months", "Quarterly King",
                "Three months - transformation complete", "👑", 90 * MS_PER_DAY),
    Achievement("six_months", "Half Year Hero",
                "Six months of incredible resilience", "🦸", 180 * MS_PER_DAY),
    Achievement("one_year", "Annual Legend",
                "One full year - you are extraordinary", "🏆", 365 * MS_PER_DAY),
)


GROWTH_STAGES: tuple[GrowthStage, ...] = (
    GrowthStage("bean", "Germinating Seed", "🫘",
                "The seed awakens, the very first spark of life.", 0),
    GrowthStage("sprout", "Sprout", "🌱",
                "Roots stretch downward while a sprout reaches upward.", 5 * MS_PER_MINUTE),
    GrowthStage("seedling", "Seedling", "🌿",
                "Tiny leaves unfold as sunlight fuels new life.", 1 * MS_PER_HOUR),
    GrowthStage("small-plant", "Small Plant", "☘️",
                "The stem strengthens and leaves start to spread.", 6 * MS_PER_HOUR),
    GrowthStage("healthy-growth", "Healthy Growth", "🍀",
                "Your leaves are vibrant, filled with energy and vitality.", 1 * MS_PER_DAY),
    GrowthStage("potted-sapling", "Nurtured Sapling", "🪴",
                "Roots deepen, and you're adjusting to new surroundings.", 7 * MS_PER_DAY),
    GrowthStage("grass-growth", "Root Expansion", "🌾",
                "Your foundation strengthens and resilience takes hold.", 21 * MS_PER_DAY),
    GrowthStage("leafy-phase", "Leafy Growth", "🍃",
                "You've grown lush and full of life.", 42 * MS_PER_DAY),
    GrowthStage("budding", "Budding Phase", "🌼",
                "The first buds appear; transformation is near.", 72 * MS_PER_DAY),
    GrowthStage("blooming", "Blooming Plant", "🌷",
                "Your flowers begin to open. You're in full bloom.", 118 * MS_PER_DAY),
    GrowthStage("flowering", "Mature Flowering Plant", "🌻",
                "Vibrant and radiant, you are flourishing.", 178 * MS_PER_DAY),
    GrowthStage("young-tree", "Young Tree", "🌴",
                "You stand tall, ready to face the seasons ahead.", 268 * MS_PER_DAY),
    GrowthStage("evergreen", "Evergreen Stage", "🌲",
                "Evergreen and enduring, your presence is constant.", 298 * MS_PER_DAY),
    GrowthStage("full-tree", "Full-grown Tree", "🌳",
                "A magnificent tree, deeply rooted and thriving after a full year.", 343 * MS_PER_DAY),
)


def validate_table(table: Sequence, key: str, name: str = "table") -> None:
    """Check that `table` is non-empty and strictly ascending by attribute `key`.

    Raises TableOrderError on the first offending row.
    """
    if not table:
        raise TableOrderError(f"{name} is empty")

    previous = None
    for index, row in enumerate(table):
        value = getattr(row, key)
        if not isinstance(value, int) or value < 0:
            raise TableOrderError(
                f"{name}[{index}] ({row.id}): {key} must be a non-negative integer, got {value!r}"
            )
        if previous is not None and value <= previous:
            raise TableOrderError(
                f"{name}[{index}] ({row.id}): {key}={value} is not greater than {previous}"
            )
        previous = value


validate_table(CHECKPOINTS, "duration_ms", "CHECKPOINTS")
validate_table(ACHIEVEMENTS, "threshold_ms", "ACHIEVEMENTS")
validate_table(GROWTH_STAGES, "threshold_ms", "GROWTH_STAGES")
