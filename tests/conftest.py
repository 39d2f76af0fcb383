"""Shared fixtures for Seeding tests."""

import pytest

from seeding.models import RelapseEvent
from seeding.store import EventStore, SettingsStore

JOURNEY_START = "2026-01-01T00:00:00.000+00:00"


@pytest.fixture
def store(tmp_path):
    """Empty initialized event store."""
    db_path = tmp_path / "seeding.db"
    s = EventStore(db_path)
    s.initialize()
    yield s
    s.close()


@pytest.fixture
def seeded_store(store):
    """Store with a journey start and three relapses in January 2026.

    Gaps: journey -> first = 4d, first -> second = 10d, second -> third = 2d.
    """
    SettingsStore(store).set_journey_start(JOURNEY_START)
    events = [
        RelapseEvent(id="rel-a", timestamp="2026-01-05T00:00:00.000+00:00",
                     note="Stressful day at work", tags=["Stress"]),
        RelapseEvent(id="rel-b", timestamp="2026-01-15T00:00:00.000+00:00",
                     tags=["Boredom", "Craving"]),
        RelapseEvent(id="rel-c", timestamp="2026-01-17T00:00:00.000+00:00",
                     note="Late night"),
    ]
    store.insert_batch(events)
    return store
