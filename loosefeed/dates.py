"""Date parsing and relative-age labels for feed items."""

import math
from datetime import UTC, datetime

from dateutil import parser as date_parser
from dateutil import tz

from .config import Config
from .logging_config import create_execution_logger

MINUTE = 60
HOUR = 3600
DAY = 86400
WEEK = 604800

DateLike = datetime | int | float | str | None

# North American zone names found in RFC 822 dates
RFC822_TZINFOS = {
    name: tz.tzoffset(name, hours * HOUR)
    for name, hours in [
        ("EST", -5),
        ("EDT", -4),
        ("CST", -6),
        ("CDT", -5),
        ("MST", -7),
        ("MDT", -6),
        ("PST", -8),
        ("PDT", -7),
    ]
}


def _local_tzinfo():
    return datetime.now().astimezone().tzinfo


def _ensure_aware(value: datetime) -> datetime:
    # Naive datetimes are taken to be in the host's local timezone
    if value.tzinfo is None:
        return value.replace(tzinfo=_local_tzinfo())
    return value


def parse_datetime(date_str: str | None) -> datetime | None:
    """Parse a feed date string into a timezone-aware datetime.

    Uses dateutil's lenient parser, which accepts RFC 822 (RSS) and
    ISO 8601 (Atom) dates alike.

    Args:
        date_str: Raw date string as found in the feed

    Returns:
        Aware datetime, or None when the string is empty or unparsable
    """
    if not date_str or not date_str.strip():
        return None

    try:
        parsed = date_parser.parse(date_str, tzinfos=RFC822_TZINFOS)
    except (ValueError, OverflowError, TypeError) as e:
        logger = create_execution_logger("dates")
        logger.debug("Unparsable date", date_str=date_str, error=str(e))
        return None

    return _ensure_aware(parsed)


def parse_timestamp(date_str: str | None) -> int:
    """Return milliseconds since epoch for ``date_str``, or 0 if unknown."""
    parsed = parse_datetime(date_str)
    if parsed is None:
        return 0
    try:
        return int(parsed.timestamp() * 1000)
    except (OverflowError, OSError, ValueError):
        return 0


def to_datetime(value: DateLike) -> datetime | None:
    """Coerce a datetime, epoch milliseconds or date string to an aware datetime.

    Returns None for anything that is not a valid calendar date.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _ensure_aware(value)
    if isinstance(value, str):
        return parse_datetime(value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, UTC)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def get_relative_time(
    point_in_time: DateLike,
    now: DateLike = None,
    date_format: str | None = None,
) -> str:
    """Format a point in time as a coarse age label.

    Args:
        point_in_time: datetime, epoch milliseconds or date string
        now: Reference time, defaults to the current time
        date_format: strftime format used for items a week old or more,
            read from the environment if omitted

    Returns:
        "just now", "{n}m ago", "{n}h ago", "{n}d ago", a calendar date,
        or "" when ``point_in_time`` is missing or invalid
    """
    date = to_datetime(point_in_time)
    if date is None:
        return ""

    reference = to_datetime(now) if now is not None else None
    if reference is None:
        reference = datetime.now(UTC)

    # Future dates land in the first bucket
    diff = math.floor((reference - date).total_seconds())

    if diff < MINUTE:
        return "just now"
    if diff < HOUR:
        return f"{diff // MINUTE}m ago"
    if diff < DAY:
        return f"{diff // HOUR}h ago"
    if diff < WEEK:
        return f"{diff // DAY}d ago"

    if date_format is None:
        date_format = Config().get_parser_config().date_format

    try:
        return date.astimezone(_local_tzinfo()).strftime(date_format)
    except (OverflowError, OSError, ValueError):
        return date.strftime(date_format)
