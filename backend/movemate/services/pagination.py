"""
Page / page-size normalization shared by every paginated driver listing.

Out-of-range values are replaced rather than rejected: a page below 1 or a
missing page becomes the first page, and an oversized page size is clamped.
"""

import math
from typing import NamedTuple, Optional

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100


class Page(NamedTuple):
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def normalize(page: Optional[int] = None, page_size: Optional[int] = None) -> Page:
    """
    Clamp page parameters to their configured bounds.

        normalize()            → Page(1, 10)
        normalize(0, 0)        → Page(1, 10)
        normalize(3, 500)      → Page(3, 100)
    """
    if page is None or page < DEFAULT_PAGE:
        page = DEFAULT_PAGE
    if page_size is None or page_size < MIN_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE
    else:
        page_size = min(page_size, MAX_PAGE_SIZE)
    return Page(page=page, page_size=page_size)


def total_pages(total_items: int, page_size: int) -> int:
    """ceil(total_items / page_size), or 0 when page_size is 0."""
    if page_size == 0:
        return 0
    return math.ceil(total_items / page_size)
