"""Tests for output formatting."""

import json

from seeding.achievements import get_achievements
from seeding.context import EngineContext, FixedClock
from seeding.formatting import (
    format_achievements_compact, format_achievements_json, format_celebration,
    format_event_compact, format_export_csv, format_export_json, format_history_compact,
    format_history_json, format_report_compact, format_report_json, format_stages_compact,
    format_tick_line,
)
from seeding.models import RelapseEvent
from seeding.tables import ACHIEVEMENTS, GROWTH_STAGES
from seeding.timeutil import MS_PER_DAY
from seeding.tracker import ProgressTracker


def _report(store, at):
    return ProgressTracker(EngineContext.for_store(store, clock=FixedClock(at))).tick()


class TestHistory:

    def test_event_compact(self):
        event = RelapseEvent(id="rel-abc", timestamp="2026-02-23T14:30:00.000+00:00",
                             note="Tired", tags=["Stress", "Boredom"])
        assert format_event_compact(event) == "[rel-abc] [2026-02-23 14:30] [Stress, Boredom] Tired"

    def test_event_compact_bare(self):
        event = RelapseEvent(id="rel-abc", timestamp="2026-02-23T14:30:00.000+00:00")
        assert format_event_compact(event) == "[rel-abc] [2026-02-23 14:30]"

    def test_empty_history(self):
        assert format_history_compact([]) == "(no relapses)"

    def test_history_json(self, seeded_store):
        data = json.loads(format_history_json(seeded_store.list_events()))
        assert [d["id"] for d in data] == ["rel-c", "rel-b", "rel-a"]
        assert data[1]["tags"] == ["Boredom", "Craving"]


class TestAchievements:

    def test_celebration(self):
        line = format_celebration(ACHIEVEMENTS[0])
        assert line.startswith("🌱 Achievement unlocked: First Steps")

    def test_compact_marks(self):
        statuses = get_achievements(2 * MS_PER_DAY)
        lines = format_achievements_compact(statuses, "2026-01-01T00:00:00.000+00:00").splitlines()
        assert len(lines) == len(ACHIEVEMENTS)
        assert lines[0].startswith("[x]")
        assert "(since 2026-01-01 00:05)" in lines[0]
        assert lines[3].startswith("[ ]")

    def test_json_unlocked_at(self):
        statuses = get_achievements(2 * MS_PER_DAY)
        data = json.loads(format_achievements_json(statuses, "2026-01-01T00:00:00.000+00:00"))
        assert data[2]["achievement"]["id"] == "first_day"
        assert data[2]["unlocked_at"] == "2026-01-02T00:00:00.000+00:00"
        assert data[3]["unlocked"] is False
        assert data[3]["unlocked_at"] is None


class TestStages:

    def test_current_marked(self):
        out = format_stages_compact(list(GROWTH_STAGES), GROWTH_STAGES[2])
        marked = [line for line in out.splitlines() if line.startswith(">")]
        assert len(marked) == 1
        assert "Seedling" in marked[0]


class TestReport:

    def test_not_started(self, store):
        report = _report(store, "2026-02-01T00:00:00Z")
        assert format_report_compact(report).startswith("# Journey not started")
        assert format_tick_line(report) == "Journey not started"

    def test_compact(self, seeded_store):
        out = format_report_compact(_report(seeded_store, "2026-01-19T00:00:00Z"))
        assert "Streak:        2d 00:00:00 (since 2026-01-17 00:00)" in out
        assert "Best streak:   10d 00:00:00" in out
        assert "Attempts:      3" in out
        assert "to 3 days" in out
        assert "Achievements:  3/12" in out

    def test_completed_ladder(self, seeded_store):
        out = format_report_compact(_report(seeded_store, "2027-06-01T00:00:00Z"))
        assert "all milestones achieved" in out
        assert "Next:" not in out

    def test_warning_shown(self, store):
        # a row written by an older or foreign tool, bypassing validation
        with store.conn:
            store.conn.execute(
                "INSERT INTO relapses (id, timestamp) VALUES (?, ?)", ("rel-bad", "garbage")
            )
        store.add(timestamp="2026-01-01T00:00:00Z")
        out = format_report_compact(_report(store, "2026-01-02T00:00:00Z"))
        assert "[WARNING]" in out
        assert "rel-bad" in out

    def test_not_started_keeps_warnings(self, store):
        store.set_meta("journey_start", "not-a-date")
        out = format_report_compact(_report(store, "2026-02-01T00:00:00Z"))
        assert out.startswith("# Journey not started")
        assert "[WARNING] Ignoring journey start" in out

    def test_stage_line(self, seeded_store):
        out = format_report_compact(_report(seeded_store, "2026-01-21T00:00:00Z"))
        # healthy-growth (1d) -> potted-sapling (7d), 4 days in
        assert "50% to 🪴 Nurtured Sapling (3d left)" in out
        assert "to 7 days (3d left)" in out

    def test_stage_line_fully_grown(self, seeded_store):
        out = format_report_compact(_report(seeded_store, "2027-06-01T00:00:00Z"))
        assert "fully grown" in out

    def test_json(self, seeded_store):
        data = json.loads(format_report_json(_report(seeded_store, "2026-01-19T00:00:00Z")))
        assert data["snapshot"]["elapsed_ms"] == 2 * MS_PER_DAY
        assert data["checkpoint"]["next_checkpoint"]["id"] == "3d"
        assert data["growth_stage"]["id"] == "healthy-growth"
        assert data["unlocked_count"] == 3
        assert data["celebration"] is None

    def test_tick_line(self, seeded_store):
        line = format_tick_line(_report(seeded_store, "2026-01-19T00:00:00Z"))
        assert "2d 00:00:00" in line
        assert "to 3 days" in line


class TestExport:

    def _snapshot(self, store):
        ctx = EngineContext.for_store(store, clock=FixedClock("2026-01-19T00:00:00Z"))
        return ctx.resolve_streak()

    def test_json(self, seeded_store):
        out = format_export_json(seeded_store.list_events(), "2026-01-01T00:00:00.000+00:00",
                                 self._snapshot(seeded_store), "2026-01-19T00:00:00.000+00:00")
        data = json.loads(out)
        assert len(data["relapses"]) == 3
        assert data["stats"]["total_relapses"] == 3
        assert data["stats"]["best_streak_days"] == 10
        assert data["stats"]["current_streak_days"] == 2

    def test_csv(self, seeded_store):
        out = format_export_csv(seeded_store.list_events(), "2026-01-01T00:00:00.000+00:00",
                                self._snapshot(seeded_store), "2026-01-19T00:00:00.000+00:00")
        lines = out.splitlines()
        assert lines[0] == "exported_at,2026-01-19T00:00:00.000+00:00"
        assert "id,date,time,note,tags" in lines
        assert "rel-b,2026-01-15,00:00:00,,Boredom; Craving" in lines
        assert "rel-a,2026-01-05,00:00:00,Stressful day at work,Stress" in lines
