"""Timeline View Package

Filtering, sorting, pagination and display helpers over the in-memory
timeline list.
"""

from .filtering import (
    filter_timelines,
    filter_options,
    matches_filters,
    matches_search,
    matches_completion_status,
)
from .sorting import (
    SortKey,
    SortKeyKind,
    resolve_sort_key,
    compare_records,
    sort_timelines,
    paginate,
    total_pages,
)
from .display import (
    DisplayFields,
    compute_display_fields,
    format_date,
    calculate_days,
    format_relative_time,
)
from .view_state import TimelineViewState

__all__ = [
    "filter_timelines",
    "filter_options",
    "matches_filters",
    "matches_search",
    "matches_completion_status",
    "SortKey",
    "SortKeyKind",
    "resolve_sort_key",
    "compare_records",
    "sort_timelines",
    "paginate",
    "total_pages",
    "DisplayFields",
    "compute_display_fields",
    "format_date",
    "calculate_days",
    "format_relative_time",
    "TimelineViewState",
]
