"""Tests for timestamp parsing and duration formatting."""

from datetime import datetime, timezone

import pytest

from seeding.timeutil import (
    MS_PER_DAY, MS_PER_HOUR, MS_PER_MINUTE, breakdown, format_days, format_elapsed,
    format_time_remaining, format_timestamp, parse_ago, parse_timestamp, to_epoch_ms,
)


class TestParseTimestamp:

    def test_offset(self):
        dt = parse_timestamp("2026-02-23T10:00:00+00:00")
        assert dt == datetime(2026, 2, 23, 10, tzinfo=timezone.utc)

    def test_zulu_suffix(self):
        assert parse_timestamp("2026-02-23T10:00:00.250Z").microsecond == 250000

    def test_naive_is_utc(self):
        assert parse_timestamp("2026-02-23T10:00:00").tzinfo == timezone.utc

    def test_other_offset_converted(self):
        dt = parse_timestamp("2026-02-23T12:00:00+02:00")
        assert dt.hour == 10
        assert dt.tzinfo == timezone.utc

    @pytest.mark.parametrize("value", ["", "   ", "yesterday", "2026-02-30T00:00:00", None, 12345])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)


class TestFormatTimestamp:

    def test_milliseconds(self):
        dt = datetime(2026, 2, 23, 10, 0, 0, 123456, tzinfo=timezone.utc)
        assert format_timestamp(dt) == "2026-02-23T10:00:00.123+00:00"

    def test_epoch_ms(self):
        assert to_epoch_ms(datetime(1970, 1, 2, tzinfo=timezone.utc)) == MS_PER_DAY


class TestParseAgo:

    NOW = datetime(2026, 2, 23, 12, tzinfo=timezone.utc)

    def test_units(self):
        assert parse_ago("30m", self.NOW) == datetime(2026, 2, 23, 11, 30, tzinfo=timezone.utc)
        assert parse_ago("6h", self.NOW) == datetime(2026, 2, 23, 6, tzinfo=timezone.utc)
        assert parse_ago("2d", self.NOW) == datetime(2026, 2, 21, 12, tzinfo=timezone.utc)
        assert parse_ago("1w", self.NOW) == datetime(2026, 2, 16, 12, tzinfo=timezone.utc)

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid relative time"):
            parse_ago("two days", self.NOW)


class TestFormatting:

    def test_breakdown(self):
        t = breakdown(MS_PER_DAY + 2 * MS_PER_HOUR + 3 * MS_PER_MINUTE + 4000)
        assert (t.days, t.hours, t.minutes, t.seconds) == (1, 2, 3, 4)

    def test_breakdown_negative(self):
        assert breakdown(-5).days == 0

    @pytest.mark.parametrize("ms,expected", [
        (0, "0s"),
        (-100, "0s"),
        (12_000, "12s"),
        (45 * MS_PER_MINUTE + 30_000, "45m 30s"),
        (2 * MS_PER_HOUR + 30 * MS_PER_MINUTE, "2h 30m"),
        (MS_PER_DAY + 5 * MS_PER_HOUR, "1d 5h"),
        (7 * MS_PER_DAY, "7d"),
        (3 * MS_PER_HOUR, "3h"),
    ])
    def test_time_remaining(self, ms, expected):
        assert format_time_remaining(ms) == expected

    def test_elapsed(self):
        ms = 3 * MS_PER_DAY + 4 * MS_PER_HOUR + 5 * MS_PER_MINUTE + 6000
        assert format_elapsed(ms) == "3d 04:05:06"

    def test_days(self):
        assert format_days(MS_PER_DAY) == "1 day"
        assert format_days(30 * MS_PER_DAY) == "30 days"
        assert format_days(0) == "0 days"
