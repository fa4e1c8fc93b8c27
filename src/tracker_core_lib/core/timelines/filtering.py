"""Timeline Filter Engine

Reduces the full timeline list to the rows matching every active selector and
the free-text search term. Pure and synchronous: it is recomputed in full on
every selector change and every keystroke, over at most a few hundred rows.

Matching rules:
- stream, visa office, application type: exact equality
- complexity: substring containment
- completion status: derived from the passport/PR card received dates;
  unrecognized values do not filter
- search: case-insensitive substring over SEARCH_FIELDS, any field may match
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

from tracker_core_lib.models import (
    CompletionStatus,
    FilterState,
    SEARCH_FIELDS,
)

logger = logging.getLogger(__name__)


def get_field(record: Any, name: str) -> Any:
    """Read a column from a TimelineRecord or a plain mapping; None if missing."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def matches_completion_status(record: Any, status: Optional[str]) -> bool:
    """Completion-status predicate. Unrecognized statuses pass everything."""
    parsed = CompletionStatus.parse(status)
    if parsed is None:
        return True

    has_ecopr = bool(get_field(record, "ecopr_passport_received_date"))
    has_pr_card = bool(get_field(record, "pr_card_received_date"))

    if parsed == CompletionStatus.ACTIVE:
        return not has_ecopr and not has_pr_card
    if parsed == CompletionStatus.ECOPR:
        return has_ecopr
    return has_pr_card


def matches_search(record: Any, search_term: Optional[str]) -> bool:
    """True if any search field contains the trimmed term (case-insensitive)."""
    term = (search_term or "").strip().lower()
    if not term:
        return True

    for field_name in SEARCH_FIELDS:
        value = get_field(record, field_name)
        if isinstance(value, str) and term in value.lower():
            return True
    return False


def matches_filters(record: Any, filters: FilterState) -> bool:
    """True if the record satisfies every active selector in `filters`."""
    if filters.stream and get_field(record, "stream") != filters.stream:
        return False

    if filters.visa_office and get_field(record, "primary_visa_office") != filters.visa_office:
        return False

    if filters.type and get_field(record, "application_type") != filters.type:
        return False

    if filters.complexity:
        complexity = get_field(record, "complexity")
        if not isinstance(complexity, str) or filters.complexity not in complexity:
            return False

    return matches_completion_status(record, filters.completion_status)


def filter_timelines(
    records: Sequence[Any],
    filters: Optional[FilterState] = None,
    search_term: Optional[str] = None,
) -> List[Any]:
    """Return the subset of `records` matching all filters AND the search term.

    Args:
        records: Full timeline list (TimelineRecord objects or plain mappings)
        filters: Selector values; None means no selector is active
        search_term: Free text from the search box

    Returns:
        Matching records in input order. A non-list input yields [].
    """
    if not isinstance(records, (list, tuple)):
        logger.warning(f"filter_timelines expected a list, got {type(records).__name__}")
        return []

    filters = filters or FilterState()
    return [
        record
        for record in records
        if matches_filters(record, filters) and matches_search(record, search_term)
    ]


def filter_options(records: Sequence[Any]) -> Dict[str, List[str]]:
    """Unique, sorted selector values present in the data.

    Returns:
        {"streams": [...], "visa_offices": [...]}
    """
    if not isinstance(records, (list, tuple)):
        return {"streams": [], "visa_offices": []}

    streams = {get_field(r, "stream") for r in records}
    offices = {get_field(r, "primary_visa_office") for r in records}
    return {
        "streams": sorted(s for s in streams if s),
        "visa_offices": sorted(o for o in offices if o),
    }

