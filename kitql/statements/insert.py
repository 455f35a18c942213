"""INSERT builder.

Manual use::

    stmt = Insert("article").columns(["title", "views"])
    stmt.values_row(["hello", 0]).values_row(["world", 3])
    stmt.render("sqlite").sql
    # 'INSERT INTO article (title, views) VALUES (?, ?), (?, ?)'

Entity-driven use::

    Insert.one(Article(title="hello"), PrimaryKey.single("id")).render("postgres")
"""
from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from kitql.compile.base import SQLDialect
from kitql.compile.fragment import Fragment
from kitql.compile.registry import DialectLike
from kitql.errors import EmptyColumnsError, NoEntitiesProvidedError
from kitql.schema.entity import PrimaryKey, check_key, fields_of
from kitql.statements.base import ReturningMixin, Statement, entity_table
from kitql.values import Value


def entity_rows(
    records: Sequence[object],
    key: PrimaryKey,
) -> tuple[list[str], list[list[Value]]]:
    """Collect insert columns and per-record values.

    A column is written when it is present on at least one record.  A
    database-generated single key is left out unless a record carries a
    non-null value for it.  Records missing a column bind ``NULL`` for it.

    Raises:
        SchemaMismatchError: If a key column is not a reflected field.
    """
    reflected = [fields_of(r) for r in records]
    names = [f.name for f in reflected[0]]
    check_key(names, key, entity_table(records[0], None))

    auto_column = key.columns[0] if key.auto_generated and not key.is_composite else None
    columns: list[str] = []
    for name in names:
        fields = [next((f for f in row if f.name == name), None) for row in reflected]
        if name == auto_column:
            if any(f is not None and f.present and not f.value.is_null for f in fields):
                columns.append(name)
        elif any(f is not None and f.present for f in fields):
            columns.append(name)

    rows: list[list[Value]] = []
    for row in reflected:
        by_name = {f.name: f for f in row}
        values = []
        for name in columns:
            f = by_name.get(name)
            values.append(f.value if f is not None and f.present else Value.null())
        rows.append(values)
    return columns, rows


class Insert(ReturningMixin, Statement):
    """Builds ``INSERT INTO table (cols) VALUES (...), ...``.

    Args:
        table: Target table.
        dialect: Optional dialect known up front.
    """

    statement_name = "INSERT"

    def __init__(self, table: str, dialect: DialectLike | None = None) -> None:
        super().__init__(table, dialect)
        self._columns: list[str] = []
        self._rows: list[Fragment] = []
        self._returning: list[str] = []

    # ------------------------------------------------------------------
    # Entity-driven constructors
    # ------------------------------------------------------------------

    @classmethod
    def one(
        cls,
        record: object,
        key: PrimaryKey,
        *,
        expected_table: str | None = None,
        dialect: DialectLike | None = None,
    ) -> Insert:
        return cls.many([record], key, expected_table=expected_table, dialect=dialect)

    @classmethod
    def many(
        cls,
        records: Iterable[object],
        key: PrimaryKey,
        *,
        expected_table: str | None = None,
        dialect: DialectLike | None = None,
    ) -> Insert:
        """Build a multi-row statement from records of one type.

        Raises:
            NoEntitiesProvidedError: If ``records`` is empty.
            TableNameMismatchError: If the records' table is not ``expected_table``.
            SchemaMismatchError: If a key column is not a reflected field.
        """
        records = list(records)
        if not records:
            raise NoEntitiesProvidedError(cls.statement_name)
        table = entity_table(records[0], expected_table)
        stmt = cls(table, dialect)
        columns, rows = entity_rows(records, key)
        stmt.columns(columns)
        for row in rows:
            stmt.values_row(row)
        return stmt

    # ------------------------------------------------------------------
    # Fluent API
    # ------------------------------------------------------------------

    def columns(self, columns: Sequence[str]) -> Insert:
        self._columns = list(columns)
        return self

    def values_row(self, row: Sequence[Any]) -> Insert:
        """Append one VALUES row of bound values."""
        frag = Fragment().append_values(row, separator=", ")
        self._rows.append(frag)
        return self

    def values(self, build: Callable[[Fragment], Any]) -> Insert:
        """Append one VALUES row written by ``build`` (without parentheses)."""
        frag = Fragment()
        build(frag)
        self._rows.append(frag)
        return self

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def to_fragment(self, dialect: SQLDialect | None = None) -> Fragment:
        dialect = self._dialect_for(dialect)
        frag = Fragment().append_text(f"INSERT INTO {self.table}")
        if not self._columns:
            if len(self._rows) > 1 or (self._rows and not self._rows[0].is_empty):
                raise EmptyColumnsError(self.statement_name, self.table)
            frag.append_text(dialect.default_values_clause() if dialect else " DEFAULT VALUES")
        else:
            if not self._rows:
                raise EmptyColumnsError(self.statement_name, self.table)
            frag.append_text(f" ({', '.join(self._columns)}) VALUES ")
            for i, row in enumerate(self._rows):
                if i:
                    frag.append_text(", ")
                frag.append_text("(").append_fragment(row).append_text(")")
        self._append_conflict(frag, dialect)
        self._append_returning(frag, dialect)
        return frag

    def _append_conflict(self, frag: Fragment, dialect: SQLDialect | None) -> None:
        """Hook for :class:`~kitql.statements.upsert.Upsert`."""
