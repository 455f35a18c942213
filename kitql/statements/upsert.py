"""INSERT-or-UPDATE builder.

The builder is dialect-agnostic; the conflict clause is chosen when the
statement is rendered, from the same state and with the same bound values:

* SQLite / PostgreSQL: ``ON CONFLICT(col) DO UPDATE SET x = EXCLUDED.x``
* MySQL: ``ON DUPLICATE KEY UPDATE x = VALUES(x)``
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from kitql.compile.base import SQLDialect
from kitql.compile.fragment import Fragment
from kitql.compile.registry import DialectLike
from kitql.errors import NoEntitiesProvidedError, UnsupportedByDialectError
from kitql.schema.entity import PrimaryKey
from kitql.statements.base import entity_table
from kitql.statements.insert import Insert, entity_rows


class Upsert(Insert):
    """Builds an INSERT with a dialect-selected conflict clause.

    Args:
        table: Target table.
        dialect: Optional dialect known up front.
    """

    statement_name = "UPSERT"

    def __init__(self, table: str, dialect: DialectLike | None = None) -> None:
        super().__init__(table, dialect)
        self._conflict_columns: list[str] = []
        self._update_columns: list[str] | None = None

    @classmethod
    def many(
        cls,
        records: Iterable[object],
        key: PrimaryKey,
        *,
        expected_table: str | None = None,
        dialect: DialectLike | None = None,
        conflict_columns: Sequence[str] | None = None,
        update_columns: Sequence[str] | None = None,
    ) -> Upsert:
        """Build an upsert from records of one type.

        Args:
            records: Records to insert or update.
            key: Primary key of the table.
            expected_table: Table the records must map to.
            dialect: Optional dialect known up front.
            conflict_columns: Unique columns defining a conflict; defaults to
                the primary key.
            update_columns: Columns overwritten on conflict; defaults to every
                inserted column outside ``conflict_columns``.

        Raises:
            NoEntitiesProvidedError: If ``records`` is empty.
            TableNameMismatchError: If the records' table is not ``expected_table``.
        """
        records = list(records)
        if not records:
            raise NoEntitiesProvidedError(cls.statement_name)
        stmt = cls(entity_table(records[0], expected_table), dialect)
        columns, rows = entity_rows(records, key)
        stmt.columns(columns)
        for row in rows:
            stmt.values_row(row)
        stmt.on_conflict(conflict_columns if conflict_columns is not None else key.columns)
        if update_columns is not None:
            stmt.update_columns(update_columns)
        return stmt

    @classmethod
    def one(
        cls,
        record: object,
        key: PrimaryKey,
        *,
        expected_table: str | None = None,
        dialect: DialectLike | None = None,
        conflict_columns: Sequence[str] | None = None,
        update_columns: Sequence[str] | None = None,
    ) -> Upsert:
        return cls.many(
            [record],
            key,
            expected_table=expected_table,
            dialect=dialect,
            conflict_columns=conflict_columns,
            update_columns=update_columns,
        )

    def on_conflict(self, columns: Sequence[str]) -> Upsert:
        self._conflict_columns = list(columns)
        return self

    def update_columns(self, columns: Sequence[str]) -> Upsert:
        """Overwrite only ``columns`` on conflict; an empty list keeps the existing row."""
        self._update_columns = list(columns)
        return self

    def _append_conflict(self, frag: Fragment, dialect: SQLDialect | None) -> None:
        if dialect is None:
            raise UnsupportedByDialectError("Upsert without a target dialect", "unset")
        if self._update_columns is not None:
            updates = self._update_columns
        else:
            updates = [c for c in self._columns if c not in self._conflict_columns]
        frag.append_text(dialect.upsert_clause(self._conflict_columns, updates))
