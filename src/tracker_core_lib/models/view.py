"""View configuration models - filter selectors, sort config and result pages."""

from enum import Enum
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_PAGE_SIZE = 50

T = TypeVar("T")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class FilterState(BaseModel):
    """The five discrete selectors. Empty string means "All"."""

    model_config = ConfigDict(frozen=True)

    stream: str = ""
    visa_office: str = ""
    type: str = ""
    complexity: str = ""
    completion_status: str = ""

    @property
    def active_count(self) -> int:
        return sum(
            1
            for value in (
                self.stream,
                self.visa_office,
                self.type,
                self.complexity,
                self.completion_status,
            )
            if value
        )

    @property
    def has_active_filters(self) -> bool:
        return self.active_count > 0


class SortConfig(BaseModel):
    """Single-key sort. Defaults to ITA date ascending."""

    model_config = ConfigDict(frozen=True)

    key: str = "ita_date"
    direction: SortDirection = SortDirection.ASC

    def toggled(self, key: str) -> "SortConfig":
        """Config after clicking the `key` column header.

        Same key while ascending flips to descending; anything else resets
        to ascending on the chosen key.
        """
        if key == self.key and self.direction == SortDirection.ASC:
            return SortConfig(key=key, direction=SortDirection.DESC)
        return SortConfig(key=key, direction=SortDirection.ASC)


class Page(BaseModel, Generic[T]):
    """One fixed-size slice of the sorted list (1-based page index)."""

    items: List[T] = Field(default_factory=list)
    page: int
    page_size: int = DEFAULT_PAGE_SIZE
    total_items: int
    total_pages: int

    @property
    def first_index(self) -> int:
        """1-based index of the first item shown, 0 when the page is empty."""
        if not self.items:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def last_index(self) -> int:
        return min(self.page * self.page_size, self.total_items) if self.items else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages
