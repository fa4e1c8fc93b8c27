"""Timeline Sort/Paginate Engine

Orders the filtered list by a single column and slices it into fixed-size
pages.

Sort keys are resolved once into a SortKey(field, kind) instead of guessing
the value type on every comparison:
- date: milestone and timestamp columns, compared chronologically when both
  values parse as dates, else lexically when both are text
- number: the numeric id
- text: everything else, compared with case-insensitive lexical ordering

Missing values (None or empty string) always sort last, in both directions.
Pairs that cannot be compared are ties, so the stable sort keeps input order.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Any, List, Sequence

from tracker_core_lib.core.timelines.filtering import get_field
from tracker_core_lib.models import (
    DEFAULT_PAGE_SIZE,
    MILESTONE_DATE_FIELDS,
    TIMESTAMP_FIELDS,
    Page,
    SortConfig,
    SortDirection,
    parse_calendar_date,
)

logger = logging.getLogger(__name__)


class SortKeyKind(str, Enum):
    DATE = "date"
    TEXT = "text"
    NUMBER = "number"


@dataclass(frozen=True)
class SortKey:
    field: str
    kind: SortKeyKind


def resolve_sort_key(key: str) -> SortKey:
    """Map a column name to its comparison kind."""
    if key in MILESTONE_DATE_FIELDS or key in TIMESTAMP_FIELDS:
        return SortKey(key, SortKeyKind.DATE)
    if key == "id":
        return SortKey(key, SortKeyKind.NUMBER)
    return SortKey(key, SortKeyKind.TEXT)


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _compare_text(a: str, b: str) -> int:
    # Case-insensitive first, exact text breaks ties so the order is total
    return _cmp(a.casefold(), b.casefold()) or _cmp(a, b)


def _compare_present(a: Any, b: Any, kind: SortKeyKind) -> int:
    """Ascending comparison of two non-missing values."""
    if kind == SortKeyKind.DATE:
        a_date = parse_calendar_date(a)
        b_date = parse_calendar_date(b)
        if a_date is not None and b_date is not None:
            return _cmp(a_date, b_date)

    if kind == SortKeyKind.NUMBER:
        if isinstance(a, (int, float)) and isinstance(b, (int, float)):
            return _cmp(a, b)
        return 0

    if isinstance(a, str) and isinstance(b, str):
        return _compare_text(a, b)

    return 0


def compare_records(a: Any, b: Any, sort_key: SortKey, direction: SortDirection) -> int:
    """Comparator for one sort key. Direction never moves missing values."""
    a_value = get_field(a, sort_key.field)
    b_value = get_field(b, sort_key.field)

    a_missing = _is_missing(a_value)
    b_missing = _is_missing(b_value)
    if a_missing and b_missing:
        return 0
    if a_missing:
        return 1
    if b_missing:
        return -1

    result = _compare_present(a_value, b_value, sort_key.kind)
    return -result if direction == SortDirection.DESC else result


def sort_timelines(records: Sequence[Any], sort_config: SortConfig) -> List[Any]:
    """Return a new list ordered by `sort_config` (stable)."""
    if not sort_config.key:
        return list(records)

    sort_key = resolve_sort_key(sort_config.key)
    direction = SortDirection(sort_config.direction)
    return sorted(
        records,
        key=cmp_to_key(lambda a, b: compare_records(a, b, sort_key, direction)),
    )


def total_pages(total_items: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    """ceil(total / page_size); 0 for an empty list."""
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return math.ceil(total_items / page_size)


def paginate(records: Sequence[Any], page: int, page_size: int = DEFAULT_PAGE_SIZE) -> Page:
    """Slice one 1-based page out of the sorted list.

    Out-of-range pages are not clamped here; they simply come back empty.
    The caller enforces [1, total_pages] at the UI edge.
    """
    count = len(records)
    pages = total_pages(count, page_size)
    start = (page - 1) * page_size
    items = list(records[start:start + page_size]) if page >= 1 else []

    return Page(
        items=items,
        page=page,
        page_size=page_size,
        total_items=count,
        total_pages=pages,
    )
