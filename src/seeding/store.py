"""EventStore: SQLite persistence for the relapse log and journey settings."""

import json
import sqlite3
import uuid
from pathlib import Path

from seeding.models import RelapseEvent
from seeding.timeutil import format_timestamp, parse_timestamp, utc_now

SCHEMA_VERSION = 2

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS relapses (
    id          TEXT PRIMARY KEY,
    timestamp   TEXT NOT NULL,
    note        TEXT
                CHECK(note IS NULL OR length(note) <= 2000),
    tags        TEXT
);

CREATE INDEX IF NOT EXISTS idx_relapses_timestamp ON relapses(timestamp);

CREATE TRIGGER IF NOT EXISTS relapses_timestamp_immutable
BEFORE UPDATE OF timestamp ON relapses
WHEN new.timestamp IS NOT old.timestamp
BEGIN
    SELECT RAISE(ABORT, 'relapse timestamp is immutable');
END;

CREATE TABLE IF NOT EXISTS meta (
    key   TEXT PRIMARY KEY,
    value TEXT
);
"""

JOURNEY_START_KEY = "journey_start"

# Distinguishes "leave unchanged" from an explicit None in update()
_UNSET = object()


def normalize_tags(tags: list[str] | tuple[str, ...] | None) -> list[str] | None:
    """Strip, drop empties and de-duplicate tags, keeping first occurrence order."""
    if tags is None:
        return None
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen or None


class EventStore:
    """SQLite-backed relapse log plus a small key/value meta table."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._migrated = False

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.row_factory = sqlite3.Row
        if not self._migrated:
            self._migrate()
        return self._conn

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def initialize(self) -> None:
        """Create tables, indexes and the timestamp trigger."""
        self.conn.executescript(SCHEMA_SQL)
        if self.get_meta("schema_version") is None:
            self.set_meta("schema_version", str(SCHEMA_VERSION))

    def _migrate(self) -> None:
        """Run schema migrations if needed."""
        self._migrated = True
        tables = self._conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='meta'"
        ).fetchone()
        if not tables:
            return  # DB not yet initialized, nothing to migrate

        current = self.get_meta("schema_version")
        version = int(current) if current else 1

        if version < 2:
            # v1 logs had no tags column
            columns = {
                row[1] for row in
                self._conn.execute("PRAGMA table_info(relapses)").fetchall()
            }
            if "tags" not in columns:
                self._conn.execute("ALTER TABLE relapses ADD COLUMN tags TEXT")
            # v1 logs also predate the timestamp trigger
            self._conn.executescript(SCHEMA_SQL)
            self.set_meta("schema_version", str(SCHEMA_VERSION))

    @staticmethod
    def _generate_id() -> str:
        return f"rel-{uuid.uuid4().hex[:12]}"

    def _row_to_event(self, row: sqlite3.Row) -> RelapseEvent:
        tags_raw = row["tags"]
        return RelapseEvent(
            id=row["id"],
            timestamp=row["timestamp"],
            note=row["note"] or None,
            tags=json.loads(tags_raw) if tags_raw else None,
        )

    def add(self, timestamp: str | None = None, note: str | None = None,
            tags: list[str] | None = None) -> str:
        """Record a relapse. Defaults the timestamp to now. Returns the new id.

        The timestamp is validated and normalized to millisecond UTC before
        anything is written.
        """
        ts = format_timestamp(parse_timestamp(timestamp) if timestamp else utc_now())
        tags = normalize_tags(tags)
        event_id = self._generate_id()

        with self.conn:
            self.conn.execute(
                "INSERT INTO relapses (id, timestamp, note, tags) VALUES (?, ?, ?, ?)",
                (event_id, ts, note or None, json.dumps(tags) if tags else None),
            )
        return event_id

    def insert_batch(self, events: list[RelapseEvent]) -> int:
        """Insert existing records (e.g. an import) in one transaction.

        Every timestamp is validated and normalized like `add` before anything
        is written, so one bad record rejects the whole batch. Records whose id
        already exists are skipped. Returns the number of rows inserted.
        """
        existing = {row["id"] for row in self.conn.execute("SELECT id FROM relapses")}
        rows = []
        for e in events:
            ts = format_timestamp(parse_timestamp(e.timestamp))
            if e.id and e.id in existing:
                continue
            event_id = e.id or self._generate_id()
            existing.add(event_id)
            tags = normalize_tags(e.tags)
            rows.append((event_id, ts, e.note or None, json.dumps(tags) if tags else None))

        with self.conn:
            self.conn.executemany(
                "INSERT INTO relapses (id, timestamp, note, tags) VALUES (?, ?, ?, ?)",
                rows,
            )
        return len(rows)

    def get_event(self, event_id: str) -> RelapseEvent | None:
        row = self.conn.execute(
            "SELECT * FROM relapses WHERE id = ?", (event_id,)
        ).fetchone()
        return self._row_to_event(row) if row else None

    def update(self, event_id: str, note=_UNSET, tags=_UNSET) -> RelapseEvent:
        """Change a relapse's note and/or tags. The timestamp never changes.

        Only the fields passed are touched; pass None to clear one.
        Raises ValueError if the event does not exist.
        """
        existing = self.get_event(event_id)
        if existing is None:
            raise ValueError(f"Relapse not found: {event_id}")

        new_note = existing.note if note is _UNSET else (note or None)
        new_tags = existing.tags if tags is _UNSET else normalize_tags(tags)

        with self.conn:
            self.conn.execute(
                "UPDATE relapses SET note = ?, tags = ? WHERE id = ?",
                (new_note, json.dumps(new_tags) if new_tags else None, event_id),
            )
        return RelapseEvent(
            id=existing.id,
            timestamp=existing.timestamp,
            note=new_note,
            tags=new_tags,
        )

    def list_events(self, limit: int | None = None) -> list[RelapseEvent]:
        """All relapses, newest first."""
        sql = "SELECT * FROM relapses ORDER BY timestamp DESC, id DESC"
        params: list = []
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        rows = self.conn.execute(sql, params).fetchall()
        return [self._row_to_event(r) for r in rows]

    def count(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) as cnt FROM relapses").fetchone()
        return row["cnt"]

    def data_version(self) -> int:
        """Changes whenever another connection commits to the database."""
        return self.conn.execute("PRAGMA data_version").fetchone()[0]

    def last_activity(self) -> str | None:
        """Timestamp of the most recent relapse."""
        row = self.conn.execute(
            "SELECT timestamp FROM relapses ORDER BY timestamp DESC LIMIT 1"
        ).fetchone()
        return row["timestamp"] if row else None

    def get_meta(self, key: str) -> str | None:
        row = self.conn.execute(
            "SELECT value FROM meta WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_meta(self, key: str, value: str) -> None:
        """Write to meta table (upsert)."""
        with self.conn:
            self.conn.execute(
                "INSERT INTO meta (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )


class SettingsStore:
    """Journey settings kept in the event store's meta table."""

    def __init__(self, store: EventStore):
        self.store = store

    def get_journey_start(self) -> str | None:
        return self.store.get_meta(JOURNEY_START_KEY)

    def set_journey_start(self, timestamp: str) -> None:
        self.store.set_meta(JOURNEY_START_KEY, format_timestamp(parse_timestamp(timestamp)))
