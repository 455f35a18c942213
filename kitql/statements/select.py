"""SELECT builder.

Clauses are kept as separate parts and assembled in SQL order when the
statement is rendered, so they may be configured in any order::

    stmt = (
        Select("users")
        .columns(["id", "name"])
        .order_by("created_at", Order.DESC)
        .filter(lambda f: f.append_text("age = ").append_value(23))
    )
    stmt.render("postgres").sql
    # 'SELECT id, name FROM users WHERE age = $1 ORDER BY created_at DESC'

Assembly order: ``WITH`` → ``SELECT ... FROM`` → joins → ``WHERE`` →
``GROUP BY`` → ``HAVING`` → set operations → ``ORDER BY`` → ``LIMIT`` /
``OFFSET``.
"""
from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Union

from kitql.compile.base import SQLDialect
from kitql.compile.fragment import Fragment
from kitql.compile.registry import DialectLike
from kitql.pagination import CursorState, Order, page_window
from kitql.schema.entity import PrimaryKey, field_names_of
from kitql.statements.base import (
    Interception,
    JoinType,
    Predicate,
    Statement,
    append_where,
    build_predicate,
    entity_table,
    key_predicate,
    snapshot_of,
)

ColumnSpec = Union[Sequence[str], str, Fragment, Callable[[Fragment], Any]]


class Select(Statement):
    """Builds a ``SELECT`` over one table.

    Args:
        table: Table in the ``FROM`` clause.
        dialect: Optional dialect known up front.
        interception: Interception rules for ``table``; joined tables are
            not filtered.
    """

    def __init__(
        self,
        table: str,
        dialect: DialectLike | None = None,
        interception: Interception = None,
    ) -> None:
        super().__init__(table, dialect)
        self.interception = interception
        self._source: Fragment = Fragment().append_text(table)
        self._columns: Fragment = Fragment().append_text("*")
        self._distinct = False
        self._ctes: list[tuple[str, Fragment]] = []
        self._joins: list[Fragment] = []
        self._conditions: list[tuple[Fragment, bool]] = []
        self._group_by: list[str] = []
        self._having: list[Fragment] = []
        self._set_ops: list[tuple[str, Fragment]] = []
        self._order: list[tuple[str, Order]] = []
        self._limit: int | None = None
        self._offset: int | None = None

    @classmethod
    def of(
        cls,
        record_type: type,
        *,
        expected_table: str | None = None,
        dialect: DialectLike | None = None,
        interception: Interception = None,
    ) -> Select:
        """Select every field of ``record_type`` from its table.

        Raises:
            TableNameMismatchError: If the type's table is not ``expected_table``.
        """
        stmt = cls(entity_table(record_type, expected_table), dialect, interception)
        return stmt.columns(field_names_of(record_type))

    # ------------------------------------------------------------------
    # Fluent API
    # ------------------------------------------------------------------

    def columns(self, columns: ColumnSpec) -> Select:
        """Replace the select list (names, raw text, a fragment, or a fragment closure)."""
        if isinstance(columns, str):
            self._columns = Fragment().append_text(columns)
        elif isinstance(columns, Fragment) or callable(columns):
            self._columns = build_predicate(columns)
        else:
            self._columns = Fragment().append_text(", ".join(columns))
        return self

    def distinct(self, enabled: bool = True) -> Select:
        self._distinct = enabled
        return self

    def join(
        self,
        join_type: JoinType,
        table: str,
        on: Predicate | None = None,
        values: Iterable[Any] = (),
    ) -> Select:
        """Add a join; ``on`` is ignored for ``CROSS JOIN``."""
        frag = Fragment().append_text(f" {JoinType(join_type).value} {table}")
        if on is not None and JoinType(join_type) is not JoinType.CROSS:
            frag.append_text(" ON ").append_fragment(build_predicate(on, values))
        self._joins.append(frag)
        return self

    def filter(self, predicate: Predicate, values: Iterable[Any] = ()) -> Select:
        """AND a caller predicate into the WHERE clause.

        A single predicate is rendered as written; when other predicates
        are ANDed with it, it is parenthesised.  In raw SQL each ``?`` binds
        the next value and ``??`` is a literal question mark.
        """
        self._conditions.append((build_predicate(predicate, values), True))
        return self

    def by_key(self, key: PrimaryKey, ids: Sequence[Any]) -> Select:
        """Match rows whose key is in ``ids`` (scalars or key tuples)."""
        self._conditions.append(key_predicate(key, ids))
        return self

    def group_by(self, *columns: str) -> Select:
        self._group_by.extend(columns)
        return self

    def having(self, predicate: Predicate, values: Iterable[Any] = ()) -> Select:
        self._having.append(build_predicate(predicate, values))
        return self

    def order_by(self, column: str, order: Order | str = Order.ASC) -> Select:
        """Order by ``column``; ordering an already ordered column changes its direction."""
        order = Order(order)
        for i, (existing, _) in enumerate(self._order):
            if existing == column:
                self._order[i] = (column, order)
                return self
        self._order.append((column, order))
        return self

    def limit(self, limit: int, offset: int | None = None) -> Select:
        self._limit = limit
        self._offset = offset
        return self

    def paginate(self, page_number: int, page_size: int) -> Select:
        """Limit to one 1-based page.

        Raises:
            InvalidPageError: For non-positive arguments or an overflowing offset.
        """
        self._limit, self._offset = page_window(page_number, page_size)
        return self

    def cursor(self, state: CursorState, lookahead: bool = False) -> Select:
        """Apply keyset pagination.

        The cursor column becomes the only ordering key.  With ``lookahead``
        one extra row is requested so the caller can tell whether another
        page exists (see :func:`~kitql.pagination.split_cursor_page`).
        """
        if state.last_seen is not None:
            predicate = Fragment().append_text(
                f"{state.order_column} {state.direction.comparison} "
            )
            predicate.append_value(state.last_seen)
            self._conditions.append((predicate, False))
        self._order = [(state.order_column, state.direction)]
        self._limit = state.fetch_limit() if lookahead else state.page_size
        self._offset = None
        return self

    def with_cte(self, name: str, query: Select | Fragment) -> Select:
        """Prepend ``WITH name AS (query)``."""
        body = query.to_fragment() if isinstance(query, Select) else query.copy()
        self._ctes.append((name, body))
        return self

    def union(self, other: Select, all: bool = False) -> Select:
        """Append ``UNION [ALL]`` with another select (without its own ORDER BY/LIMIT)."""
        self._set_ops.append(("UNION ALL" if all else "UNION", other.to_fragment()))
        return self

    def to_count(self) -> Select:
        """Return a copy counting the matching rows, without order or paging."""
        inner = copy.copy(self)
        inner._conditions = list(self._conditions)
        inner._order = []
        inner._limit = None
        inner._offset = None
        if self._group_by or self._having or self._set_ops or self._distinct:
            counted = Select(self.table, self.dialect).columns("COUNT(*)")
            counted._source = Fragment().append_text("(").append_fragment(inner.to_fragment())
            counted._source.append_text(") AS counted")
            return counted
        inner._columns = Fragment().append_text("COUNT(*)")
        return inner

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def to_fragment(self, dialect: SQLDialect | None = None) -> Fragment:
        frag = Fragment()
        if self._ctes:
            frag.append_text("WITH ")
            for i, (name, body) in enumerate(self._ctes):
                if i:
                    frag.append_text(", ")
                frag.append_text(f"{name} AS (").append_fragment(body).append_text(")")
            frag.append_text(" ")

        frag.append_text("SELECT DISTINCT " if self._distinct else "SELECT ")
        frag.append_fragment(self._columns)
        frag.append_text(" FROM ").append_fragment(self._source)
        for join in self._joins:
            frag.append_fragment(join)

        injected = snapshot_of(self.interception).conditions_for(self.table)
        append_where(frag, self._conditions, injected)

        if self._group_by:
            frag.append_text(" GROUP BY " + ", ".join(self._group_by))
        # HAVING without GROUP BY treats the whole result as one group.
        for i, having in enumerate(self._having):
            frag.append_text(" HAVING " if i == 0 else " AND ")
            if len(self._having) > 1:
                frag.append_text("(").append_fragment(having).append_text(")")
            else:
                frag.append_fragment(having)

        for op, other in self._set_ops:
            frag.append_text(f" {op} ").append_fragment(other)

        if self._order:
            frag.append_text(
                " ORDER BY " + ", ".join(f"{col} {order.value}" for col, order in self._order)
            )
        if self._limit is not None:
            frag.append_text(" LIMIT ").append_value(self._limit)
            if self._offset is not None:
                frag.append_text(" OFFSET ").append_value(self._offset)
        return frag
