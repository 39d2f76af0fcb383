"""Time units, ISO-8601 parsing and duration formatting."""

import re
from datetime import datetime, timedelta, timezone

from seeding.models import TimeBreakdown

MS_PER_SECOND = 1000
MS_PER_MINUTE = MS_PER_SECOND * 60
MS_PER_HOUR = MS_PER_MINUTE * 60
MS_PER_DAY = MS_PER_HOUR * 24
MS_PER_WEEK = MS_PER_DAY * 7

RELATIVE_TIME_PATTERN = re.compile(r"^(\d+)(s|m|h|d|w)$")

TIME_MULTIPLIERS = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts both "+00:00" and "Z" suffixes. Naive values are taken as UTC.
    Raises ValueError for anything unparseable (including non-strings).
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid timestamp: {value!r}")
    ts = value.strip()
    if ts.endswith("Z"):
        ts = ts[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(ts)
    except ValueError:
        raise ValueError(f"Invalid timestamp: {value!r}") from None
    return ensure_utc(dt)


def ensure_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision."""
    return ensure_utc(dt).isoformat(timespec="milliseconds")


def to_epoch_ms(dt: datetime) -> int:
    delta = ensure_utc(dt) - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return delta // timedelta(milliseconds=1)


def parse_ago(ago: str, now: datetime | None = None) -> datetime:
    """Resolve a relative offset like "30m", "6h", "2d" or "1w" into an instant before now."""
    match = RELATIVE_TIME_PATTERN.match(ago.strip())
    if not match:
        raise ValueError(f"Invalid relative time: {ago!r} (expected e.g. 30m, 6h, 2d)")
    amount = int(match.group(1))
    unit = match.group(2)
    base = ensure_utc(now) if now else utc_now()
    return base - TIME_MULTIPLIERS[unit] * amount


def breakdown(milliseconds: int) -> TimeBreakdown:
    ms = max(0, int(milliseconds))
    return TimeBreakdown(
        days=ms // MS_PER_DAY,
        hours=(ms % MS_PER_DAY) // MS_PER_HOUR,
        minutes=(ms % MS_PER_HOUR) // MS_PER_MINUTE,
        seconds=(ms % MS_PER_MINUTE) // MS_PER_SECOND,
    )


def format_time_remaining(milliseconds: int) -> str:
    """Two most significant units: '1d 5h', '2h 30m', '45m 30s', '12s'."""
    if milliseconds <= 0:
        return "0s"

    t = breakdown(milliseconds)
    if t.days > 0:
        return f"{t.days}d {t.hours}h" if t.hours else f"{t.days}d"
    if t.hours > 0:
        return f"{t.hours}h {t.minutes}m" if t.minutes else f"{t.hours}h"
    if t.minutes > 0:
        return f"{t.minutes}m {t.seconds}s" if t.seconds else f"{t.minutes}m"
    return f"{t.seconds}s"


def format_elapsed(milliseconds: int) -> str:
    """Clock-style elapsed time: '3d 04:05:06'."""
    t = breakdown(milliseconds)
    return f"{t.days}d {t.hours:02d}:{t.minutes:02d}:{t.seconds:02d}"


def format_days(milliseconds: int) -> str:
    days = max(0, int(milliseconds)) // MS_PER_DAY
    if days == 1:
        return "1 day"
    return f"{days} days"
