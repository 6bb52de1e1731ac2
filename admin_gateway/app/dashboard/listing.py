"""
List view helpers: search filtering and client-side pagination.

Both work purely on the list already fetched through the gateway; nothing
here talks to the network.
"""

import math
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")

PAGE_SIZE_OPTIONS = (10, 20, 30, 40, 50)
DEFAULT_PAGE_SIZE = PAGE_SIZE_OPTIONS[0]


def field_value(item: Any, path: str) -> Any:
    """
    Read a possibly dotted field from a mapping or an object.

    ``field_value(order, "customer.name")`` works on both raw dicts and
    pydantic models; missing links yield None.
    """
    value = item
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def matches(item: Any, needle: str, fields: Sequence[str]) -> bool:
    for name in fields:
        value = field_value(item, name)
        if value is None or isinstance(value, (dict, list)):
            continue
        if needle in str(value).lower():
            return True
    return False


def filter_items(items: Sequence[T], search: Optional[str], fields: Sequence[str]) -> List[T]:
    """
    Case-insensitive substring filter across the given fields.

    A blank search keeps every item.
    """
    if not search or not search.strip():
        return list(items)

    needle = search.strip().lower()
    return [item for item in items if matches(item, needle, fields)]


def page_count_for(total: int, per_page: int) -> int:
    return max(1, math.ceil(total / per_page))


def clamp_page(page: int, page_count: int) -> int:
    return min(max(1, page), page_count)


@dataclass
class PageSlice(Generic[T]):
    items: List[T]
    page: int
    page_count: int
    total: int
    per_page: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count


def paginate(items: Sequence[T], page: int, per_page: int = DEFAULT_PAGE_SIZE) -> PageSlice[T]:
    """
    Slice one page out of an in-memory list.

    Args:
        items: Already filtered items
        page: Requested 1-based page, clamped to [1, page_count]
        per_page: One of PAGE_SIZE_OPTIONS

    Raises:
        ValueError: If per_page is not an allowed page size
    """
    if per_page not in PAGE_SIZE_OPTIONS:
        raise ValueError(f"per_page must be one of {PAGE_SIZE_OPTIONS}, got: {per_page}")

    total = len(items)
    count = page_count_for(total, per_page)
    page = clamp_page(page, count)
    start = (page - 1) * per_page

    return PageSlice(
        items=list(items[start:start + per_page]),
        page=page,
        page_count=count,
        total=total,
        per_page=per_page,
    )


class ListView(Generic[T]):
    """
    State of one table: loaded rows, search term and current page.

    Changing the search term or the page size goes back to page 1; the
    navigation methods never leave [1, page_count].
    """

    def __init__(self, fields: Sequence[str], per_page: int = DEFAULT_PAGE_SIZE):
        if per_page not in PAGE_SIZE_OPTIONS:
            raise ValueError(f"per_page must be one of {PAGE_SIZE_OPTIONS}, got: {per_page}")
        self.fields = tuple(fields)
        self.items: List[T] = []
        self.search = ""
        self.page = 1
        self.per_page = per_page

    def set_items(self, items: Sequence[T]) -> None:
        self.items = list(items)
        self.page = clamp_page(self.page, self.page_count)

    def set_search(self, search: str) -> None:
        self.search = search
        self.page = 1

    def set_per_page(self, per_page: int) -> None:
        if per_page not in PAGE_SIZE_OPTIONS:
            raise ValueError(f"per_page must be one of {PAGE_SIZE_OPTIONS}, got: {per_page}")
        self.per_page = per_page
        self.page = 1

    @property
    def filtered(self) -> List[T]:
        return filter_items(self.items, self.search, self.fields)

    @property
    def total(self) -> int:
        return len(self.filtered)

    @property
    def page_count(self) -> int:
        return page_count_for(self.total, self.per_page)

    def current(self) -> PageSlice[T]:
        return paginate(self.filtered, self.page, self.per_page)

    def go_to(self, page: int) -> None:
        self.page = clamp_page(page, self.page_count)

    def first(self) -> None:
        self.go_to(1)

    def previous(self) -> None:
        self.go_to(self.page - 1)

    def next(self) -> None:
        self.go_to(self.page + 1)

    def last(self) -> None:
        self.go_to(self.page_count)
