"""Timezone helpers for log timestamps."""

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from nutrilog.domain.errors import InvalidInputError

LAST_HOUR = 23

COMMON_TIMEZONES: list[tuple[str, str]] = [
    ("America/New_York", "Eastern Time (ET)"),
    ("America/Chicago", "Central Time (CT)"),
    ("America/Denver", "Mountain Time (MT)"),
    ("America/Phoenix", "Mountain Standard Time (MST)"),
    ("America/Los_Angeles", "Pacific Time (PT)"),
    ("America/Anchorage", "Alaska Time (AT)"),
    ("Pacific/Honolulu", "Hawaii Time (HT)"),
    ("UTC", "UTC"),
]


def is_valid_timezone(value: str) -> bool:
    """Return True when value names an IANA timezone."""
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def resolve_timezone(name: str) -> ZoneInfo:
    """Return the ZoneInfo for a timezone name."""
    if not name or not is_valid_timezone(name):
        raise InvalidInputError(f"Unknown timezone {name!r}")
    return ZoneInfo(name)


def local_date(instant: datetime, timezone_name: str) -> date:
    """Project a timezone-aware instant onto the user's calendar."""
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise InvalidInputError("Timestamp must include a timezone offset")
    return instant.astimezone(resolve_timezone(timezone_name)).date()


def logged_at_for(day: date, hour: int, timezone_name: str) -> datetime:
    """Return the UTC instant for ``hour:00`` local time on ``day``."""
    if not 0 <= hour <= LAST_HOUR:
        raise InvalidInputError("Hour must be between 0 and 23")
    tz = resolve_timezone(timezone_name)
    local = datetime.combine(day, time(hour=hour), tzinfo=tz)
    return local.astimezone(UTC)


def today_in(timezone_name: str, now: datetime | None = None) -> date:
    """Return the current calendar date in the user's timezone."""
    current = now or datetime.now(tz=UTC)
    return local_date(current, timezone_name)
