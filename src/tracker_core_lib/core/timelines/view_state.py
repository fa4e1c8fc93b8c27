"""Tracker view state - loaded rows plus the user's filter/sort/page choices.

Every change recomputes the visible page from scratch. Changing a selector,
the search term or the sort key resets pagination to page 1. Page requests
are clamped here, at the UI edge, not in the paginate engine.

Loads are not cancelled or versioned: whichever `refresh()` resolves last
overwrites the rows, even if it was started first.
"""

import logging
from typing import List, Optional

from tracker_core_lib.config import get_settings
from tracker_core_lib.core.timelines.filtering import filter_options, filter_timelines
from tracker_core_lib.core.timelines.sorting import paginate, sort_timelines, total_pages
from tracker_core_lib.exceptions import RecordStoreError
from tracker_core_lib.models import (
    DEFAULT_PAGE_SIZE,
    FilterState,
    Page,
    SortConfig,
    TimelineRecord,
)

logger = logging.getLogger(__name__)


class TimelineViewState:
    """State behind the tracker table.

    Usage:
        state = TimelineViewState()
        await state.refresh(client)
        if state.error:
            ...  # show error panel; call refresh() again on "Try Again"
        state.set_search("cec")
        state.toggle_sort("aor_date")
        page = state.current_page_view()
    """

    def __init__(self, page_size: Optional[int] = None):
        """
        Args:
            page_size: Rows per page (default: TRACKER_PAGE_SIZE from settings)
        """
        self.page_size = page_size or get_settings().page_size or DEFAULT_PAGE_SIZE
        self.records: List[TimelineRecord] = []
        self.filters = FilterState()
        self.search_term = ""
        self.sort_config = SortConfig()
        self.current_page = 1
        self.loading = False
        self.error: Optional[str] = None

    async def refresh(self, client) -> None:
        """Load all timelines. Failures are kept in `error` for a manual retry."""
        self.loading = True
        self.error = None
        try:
            self.records = await client.get_timelines()
        except RecordStoreError as e:
            logger.error(f"Failed to load timelines: {e}")
            self.error = str(e) or "Failed to load timelines"
        finally:
            self.loading = False

    def load(self, records: List[TimelineRecord]) -> None:
        self.records = list(records)
        self.current_page = 1

    def set_filters(self, filters: FilterState) -> None:
        self.filters = filters
        self.current_page = 1

    def update_filters(self, **changes) -> None:
        """Change some selectors, keeping the others."""
        self.set_filters(self.filters.model_copy(update=changes))

    def reset_filters(self) -> None:
        self.set_filters(FilterState())

    def set_search(self, term: str) -> None:
        self.search_term = term
        self.current_page = 1

    def toggle_sort(self, key: str) -> None:
        self.sort_config = self.sort_config.toggled(key)
        self.current_page = 1

    def filtered_records(self) -> List[TimelineRecord]:
        return filter_timelines(self.records, self.filters, self.search_term)

    def sorted_records(self) -> List[TimelineRecord]:
        return sort_timelines(self.filtered_records(), self.sort_config)

    @property
    def total_pages(self) -> int:
        return total_pages(len(self.filtered_records()), self.page_size)

    def go_to_page(self, page: int) -> int:
        """Move to `page`, clamped into [1, total_pages]. Returns the page used."""
        last = max(1, self.total_pages)
        self.current_page = min(max(1, page), last)
        return self.current_page

    def next_page(self) -> int:
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self.current_page - 1)

    def current_page_view(self) -> Page:
        return paginate(self.sorted_records(), self.current_page, self.page_size)

    def options(self):
        """Selector choices derived from all loaded rows."""
        return filter_options(self.records)
