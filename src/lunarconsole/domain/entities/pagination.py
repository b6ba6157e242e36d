"""Pagination metadata for list pages."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Pagination:
    """Position of a page within a list.

    Attributes:
        current_page: 1-based page number.
        page_size: Maximum number of items per page.
        total_count: Total number of items across all pages.
    """

    current_page: int = 1
    page_size: int = 20
    total_count: int = 0

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return -(-self.total_count // self.page_size)

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.page_size

    @classmethod
    def from_offset(cls, offset: int, limit: int, total_count: int) -> "Pagination":
        limit = limit or 20
        return cls(current_page=offset // limit + 1, page_size=limit, total_count=total_count)
