"""
Shared data models for the immigration timeline tracker.

This package provides Pydantic models for timeline records, comments, the
device-local identity and the filter/sort/page view configuration.
"""

from tracker_core_lib.models.common import (
    utc_timestamp,
    parse_utc_timestamp,
    parse_calendar_date,
)
from tracker_core_lib.models.timeline import (
    TimelineRecord,
    ClaimResult,
    CompletionStatus,
    DataSource,
    MILESTONE_DATE_FIELDS,
    CATEGORY_FIELDS,
    EDITABLE_FIELDS,
    SEARCH_FIELDS,
    TIMESTAMP_FIELDS,
)
from tracker_core_lib.models.comment import Comment, MAX_COMMENT_LENGTH
from tracker_core_lib.models.identity import LocalIdentity
from tracker_core_lib.models.view import (
    FilterState,
    SortConfig,
    SortDirection,
    Page,
    DEFAULT_PAGE_SIZE,
)

__all__ = [
    # Helpers
    "utc_timestamp", "parse_utc_timestamp", "parse_calendar_date",
    # Timelines
    "TimelineRecord", "ClaimResult", "CompletionStatus", "DataSource",
    "MILESTONE_DATE_FIELDS", "CATEGORY_FIELDS", "EDITABLE_FIELDS",
    "SEARCH_FIELDS", "TIMESTAMP_FIELDS",
    # Comments
    "Comment", "MAX_COMMENT_LENGTH",
    # Identity
    "LocalIdentity",
    # View
    "FilterState", "SortConfig", "SortDirection", "Page", "DEFAULT_PAGE_SIZE",
]
