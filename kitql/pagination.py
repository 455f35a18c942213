"""Pagination engine: page-number windows and keyset cursors.

Page-number pagination turns ``(page_number, page_size)`` into
``LIMIT page_size OFFSET (page_number - 1) * page_size``.

Keyset pagination orders by a single column and continues strictly after
(or before, for descending order) the last seen value.  To tell a full last
page from a page with more data behind it, the façade asks for one extra row
(:meth:`CursorState.fetch_limit`) and :func:`split_cursor_page` drops it
again, so a dataset of exactly ``page_size`` rows yields no next cursor.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from kitql.errors import InvalidPageError

T = TypeVar("T")

#: Upper bound of LIMIT/OFFSET values (signed 64-bit, as used by all three databases).
MAX_ROW_COUNT = 2**63 - 1


class Order(str, Enum):
    """Sort direction."""

    ASC = "ASC"
    DESC = "DESC"

    @property
    def comparison(self) -> str:
        """Operator selecting rows after the cursor in this direction."""
        return ">" if self is Order.ASC else "<"


def page_window(page_number: int, page_size: int) -> tuple[int, int]:
    """Return ``(limit, offset)`` for a 1-based page.

    Raises:
        InvalidPageError: If either argument is below 1 or the offset
            would not fit a signed 64-bit integer.
    """
    if page_number < 1 or page_size < 1:
        raise InvalidPageError(
            "Page number and page size must be greater than 0.", page_number, page_size
        )
    if page_size > MAX_ROW_COUNT or (page_number - 1) * page_size > MAX_ROW_COUNT:
        raise InvalidPageError(
            "Page offset exceeds the supported numeric range.", page_number, page_size
        )
    return page_size, (page_number - 1) * page_size


@dataclass
class CursorState:
    """Keyset pagination request for one page.

    Attributes:
        order_column: The sole ordering key; must be totally ordered
            (a primary key or a unique timestamp).
        direction: Sort direction.
        page_size: Rows per page.
        last_seen: Value of ``order_column`` on the last row of the
            previous page, or ``None`` for the first page.
    """

    order_column: str
    direction: Order = Order.ASC
    page_size: int = 20
    last_seen: Any = None

    def __post_init__(self) -> None:
        self.direction = Order(self.direction)
        if self.page_size < 1 or self.page_size >= MAX_ROW_COUNT:
            raise InvalidPageError("Page size must be greater than 0.", None, self.page_size)

    def fetch_limit(self) -> int:
        """Rows to request: one more than the page to detect further data."""
        return self.page_size + 1

    def next(self, cursor: Any) -> CursorState:
        """Return the request for the page after ``cursor``."""
        return CursorState(self.order_column, self.direction, self.page_size, cursor)


def split_cursor_page(
    rows: Sequence[T],
    state: CursorState,
    key_of: Callable[[T], Any] | None = None,
) -> tuple[list[T], Any]:
    """Trim a look-ahead result to one page and derive the next cursor.

    Args:
        rows: Up to ``state.fetch_limit()`` rows in cursor order.
        state: The request that produced ``rows``.
        key_of: Optional callable extracting the cursor value from a row.
            Defaults to mapping or attribute lookup of ``order_column``.

    Returns:
        ``(page, next_cursor)``; ``next_cursor`` is ``None`` at the end of data.
    """
    page = list(rows[: state.page_size])
    if len(rows) <= state.page_size or not page:
        return page, None
    last = page[-1]
    if key_of is not None:
        return page, key_of(last)
    if isinstance(last, Mapping):
        return page, last[state.order_column]
    return page, getattr(last, state.order_column)


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass
class PaginatedResult(Generic[T]):
    """One page of a page-number query.

    Attributes:
        data: Rows on this page.
        total: Rows matching the query across all pages.
        page_number: 1-based page number.
        page_size: Requested page size.
    """

    data: list[T] = field(default_factory=list)
    total: int = 0
    page_number: int = 1
    page_size: int = 20

    @property
    def total_pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages


@dataclass
class CursorPaginatedResult(Generic[T]):
    """One page of a keyset query.

    Attributes:
        data: Rows on this page.
        next_cursor: Pass as ``last_seen`` to fetch the next page; ``None``
            when there is no more data.
        page_size: Requested page size.
    """

    data: list[T] = field(default_factory=list)
    next_cursor: Any = None
    page_size: int = 20

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None
