"""Common helpers shared across tracker models.

- utc_timestamp(): ISO-8601 UTC timestamp used for created/updated markers
- parse_utc_timestamp(): tolerant ISO-8601 parser returning aware datetimes
- parse_calendar_date(): lenient parser used by sorting and display formatting
"""

from datetime import date, datetime, timezone
from typing import Any, Optional

from dateutil import parser as date_parser


def utc_timestamp() -> str:
    """Generate UTC timestamp in ISO format with 'Z' suffix.

    Returns:
        str: e.g. "2024-01-15T14:30:00.123Z"
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _as_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def parse_utc_timestamp(timestamp_str: str) -> datetime:
    """Parse UTC timestamp string into timezone-aware datetime object.

    Handles multiple ISO 8601 formats:
    - '2025-10-17T04:02:59+00:00' (timezone-aware with +00:00)
    - '2025-10-17T04:02:59.12345Z' (any number of fractional digits)
    - '2025-10-17T04:02:59' (naive, assumed UTC)
    - '2025-10-17' (date only, midnight UTC)

    Raises:
        ValueError: If the string is not ISO 8601
    """
    return _as_utc(date_parser.isoparse(timestamp_str.strip()))


def parse_calendar_date(value: Any) -> Optional[datetime]:
    """Parse a stored date value, returning None when it is not a valid date.

    Accepts datetime/date objects, ISO-8601 strings and the looser forms
    seeded rows carry (e.g. "01/20/2024"). Anything else (free text,
    numbers, empty strings) yields None instead of raising.
    """
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return parse_utc_timestamp(value)
    except ValueError:
        pass

    # Loose forms only when there is something date-like to read
    if not any(ch.isdigit() for ch in value):
        return None
    try:
        return _as_utc(date_parser.parse(value))
    except (ValueError, OverflowError):
        return None
