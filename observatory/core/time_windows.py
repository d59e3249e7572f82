"""Named lookback windows and limit clamping for query endpoints."""

from datetime import datetime, timedelta, timezone
from enum import Enum

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


class TimeRange(str, Enum):
    """Recognized lookback windows."""

    ONE_HOUR = "1h"
    SIX_HOURS = "6h"
    ONE_DAY = "24h"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"


WINDOW_DURATIONS: dict[TimeRange, timedelta] = {
    TimeRange.ONE_HOUR: timedelta(hours=1),
    TimeRange.SIX_HOURS: timedelta(hours=6),
    TimeRange.ONE_DAY: timedelta(hours=24),
    TimeRange.SEVEN_DAYS: timedelta(days=7),
    TimeRange.THIRTY_DAYS: timedelta(days=30),
}


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_time_range(value: str | TimeRange | None) -> TimeRange:
    """Resolve a raw range value, falling back to 24h when unrecognized."""
    if isinstance(value, TimeRange):
        return value
    try:
        return TimeRange(value)
    except ValueError:
        return TimeRange.ONE_DAY


def resolve_window_start(
    value: str | TimeRange | None,
    now: datetime | None = None,
) -> datetime:
    """Get the start of the lookback window ending at ``now``."""
    if now is None:
        now = utcnow()
    return now - WINDOW_DURATIONS[parse_time_range(value)]


def clamp_limit(
    raw: int | str | None,
    default: int = DEFAULT_LIMIT,
    maximum: int = MAX_LIMIT,
) -> int:
    """Clamp a requested row limit into [1, maximum]."""
    if raw is None or raw == "":
        return default
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return default
    return max(1, min(limit, maximum))
