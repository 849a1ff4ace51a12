"""
ludoteca/app/utils/pagination.py

Page slicing for the week lists of the admin console.
"""

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: list[T]
    page: int
    total_pages: int
    total: int

    @property
    def has_prev(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages - 1

    @property
    def label(self) -> str:
        """"2/5" counter; empty when there is a single page."""
        if self.total_pages <= 1:
            return ""
        return f"{self.page + 1}/{self.total_pages}"


def total_pages(total: int, per_page: int) -> int:
    return max(1, math.ceil(total / per_page))


def paginate(items: Sequence[T], page: int, per_page: int) -> Page[T]:
    """
    Slice one page out of items.

    page is 0-based and clamped to the valid range.
    """
    pages = total_pages(len(items), per_page)
    page = max(0, min(page, pages - 1))

    start = page * per_page
    end = start + per_page
    return Page(items=list(items[start:end]), page=page, total_pages=pages, total=len(items))
