"""Display helpers for timeline rows.

- format_date(): "YYYY-MM-DD" or "-"
- calculate_days(): whole days between two milestones as "<n>d" or "-"
- format_relative_time(): "3 hours ago" style labels for comments
- compute_display_fields(): per-row flags used for badges and highlighting
"""

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from tracker_core_lib.models import MILESTONE_DATE_FIELDS, TimelineRecord, parse_calendar_date


RECENT_UPDATE_WINDOW = timedelta(days=7)


class DisplayFields(BaseModel):
    """Row-level flags computed on the client, never stored."""

    is_editable: bool = False
    is_claimed: bool = False
    has_ecopr: bool = False
    has_pr_card: bool = False
    eligibility_complete: bool = False
    background_complete: bool = False
    both_checks_complete: bool = False
    is_recently_updated: bool = False
    updated_today: bool = False
    todays_updates: List[str] = Field(default_factory=list)


def format_date(value: Optional[str]) -> str:
    parsed = parse_calendar_date(value)
    if parsed is None:
        return "-"
    return parsed.date().isoformat()


def calculate_days(start: Optional[str], end: Optional[str]) -> str:
    """Days from `start` to `end`, "-" when either is missing or end precedes start."""
    start_date = parse_calendar_date(start)
    end_date = parse_calendar_date(end)
    if start_date is None or end_date is None:
        return "-"
    days = (end_date - start_date).days
    return f"{days}d" if days >= 0 else "-"


def format_relative_time(value: Optional[str], now: Optional[datetime] = None) -> str:
    """Human label for how long ago `value` happened."""
    parsed = parse_calendar_date(value)
    if parsed is None:
        return ""

    now = now or datetime.now(timezone.utc)
    seconds = int((now - parsed).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60} min ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    if seconds < 604800:
        return f"{seconds // 86400} days ago"
    if seconds < 2592000:
        return f"{seconds // 604800} weeks ago"
    if seconds < 31536000:
        return f"{seconds // 2592000} months ago"
    return f"{seconds // 31536000} years ago"


def _same_day(value: Optional[str], today: date) -> bool:
    parsed = parse_calendar_date(value)
    return parsed is not None and parsed.date() == today


def compute_display_fields(
    record: TimelineRecord,
    today: Optional[date] = None,
    is_editable: bool = False,
) -> DisplayFields:
    """Derive the badge/highlight flags for one row.

    Args:
        record: Timeline row
        today: Reference day (UTC today by default)
        is_editable: Result of the ownership check for the current device
    """
    now = datetime.now(timezone.utc)
    today = today or now.date()

    eligibility_complete = bool(record.eligibility_completion_date)
    background_complete = bool(record.bg_completion_date)

    last_update = parse_calendar_date(record.last_updated_by_user)
    todays_updates = [
        name for name in MILESTONE_DATE_FIELDS if _same_day(getattr(record, name), today)
    ]

    return DisplayFields(
        is_editable=is_editable,
        is_claimed=record.is_claimed,
        has_ecopr=record.has_ecopr,
        has_pr_card=record.has_pr_card,
        eligibility_complete=eligibility_complete,
        background_complete=background_complete,
        both_checks_complete=eligibility_complete and background_complete,
        is_recently_updated=last_update is not None and now - last_update <= RECENT_UPDATE_WINDOW,
        updated_today=last_update is not None and last_update.date() == today,
        todays_updates=todays_updates,
    )
