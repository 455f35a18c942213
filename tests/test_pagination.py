"""Unit tests for page windows and keyset cursors."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from kitql import (
    CursorPaginatedResult,
    CursorState,
    InvalidPageError,
    Order,
    PaginatedResult,
    page_window,
    split_cursor_page,
)
from kitql.pagination import MAX_ROW_COUNT


def _rows(n: int) -> list[dict]:
    return [{"id": i} for i in range(1, n + 1)]


@pytest.mark.parametrize(
    "page_number,page_size,expected",
    [(1, 20, (20, 0)), (3, 10, (10, 20)), (2, 1, (1, 1))],
)
def test_page_window(page_number, page_size, expected):
    assert page_window(page_number, page_size) == expected


@pytest.mark.parametrize("page_number,page_size", [(0, 1), (1, 0), (-3, 10)])
def test_page_window_rejects_non_positive(page_number, page_size):
    with pytest.raises(InvalidPageError) as exc:
        page_window(page_number, page_size)
    assert exc.value.details == {"page_number": page_number, "page_size": page_size}


def test_page_window_rejects_overflow():
    with pytest.raises(InvalidPageError):
        page_window(3, MAX_ROW_COUNT // 2 + 1)


class TestCursor:
    def test_exactly_page_size_rows_has_no_next_cursor(self):
        page, cursor = split_cursor_page(_rows(3), CursorState("id", page_size=3))
        assert len(page) == 3
        assert cursor is None

    def test_lookahead_row_is_dropped(self):
        page, cursor = split_cursor_page(_rows(4), CursorState("id", page_size=3))
        assert page == _rows(3)
        assert cursor == 3

    def test_empty(self):
        assert split_cursor_page([], CursorState("id")) == ([], None)

    def test_attribute_rows(self):
        rows = [SimpleNamespace(seq=s) for s in (5, 7, 9)]
        _, cursor = split_cursor_page(rows, CursorState("seq", Order.DESC, page_size=2))
        assert cursor == 7

    def test_key_function(self):
        _, cursor = split_cursor_page(_rows(3), CursorState("id", page_size=1), key_of=lambda r: -r["id"])
        assert cursor == -1

    def test_state(self):
        state = CursorState("id", "DESC", page_size=10)
        assert state.direction is Order.DESC
        assert state.fetch_limit() == 11
        nxt = state.next(42)
        assert (nxt.order_column, nxt.direction, nxt.page_size, nxt.last_seen) == ("id", Order.DESC, 10, 42)

    def test_state_rejects_bad_page_size(self):
        with pytest.raises(InvalidPageError):
            CursorState("id", page_size=0)

    def test_comparison_operator(self):
        assert Order.ASC.comparison == ">"
        assert Order.DESC.comparison == "<"


class TestResults:
    def test_total_pages(self):
        result = PaginatedResult(data=[], total=41, page_number=3, page_size=20)
        assert result.total_pages == 3
        assert not result.has_next

    def test_has_next(self):
        assert PaginatedResult(total=41, page_number=2, page_size=20).has_next

    def test_empty_result(self):
        assert PaginatedResult(total=0, page_size=20).total_pages == 0

    def test_cursor_result(self):
        assert CursorPaginatedResult(data=[1], next_cursor=1).has_more
        assert not CursorPaginatedResult(data=[1]).has_more
