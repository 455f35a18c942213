"""UPDATE builder."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from kitql.compile.base import SQLDialect
from kitql.compile.fragment import Fragment
from kitql.compile.registry import DialectLike
from kitql.errors import EmptyColumnsError
from kitql.schema.entity import PrimaryKey, check_key, fields_of
from kitql.statements.base import (
    Interception,
    Predicate,
    ReturningMixin,
    Statement,
    append_where,
    build_predicate,
    entity_table,
    key_predicate,
    snapshot_of,
)


class Update(ReturningMixin, Statement):
    """Builds ``UPDATE table SET ... WHERE ...``.

    Interception predicates (global filter, then the soft delete active-row
    predicate) are ANDed after the caller's conditions.

    Args:
        table: Target table.
        dialect: Optional dialect known up front.
        interception: Interception rules applied at assembly.
    """

    statement_name = "UPDATE"

    def __init__(
        self,
        table: str,
        dialect: DialectLike | None = None,
        interception: Interception = None,
    ) -> None:
        super().__init__(table, dialect)
        self.interception = interception
        self._assignments: list[tuple[str, Fragment]] = []
        self._conditions: list[tuple[Fragment, bool]] = []
        self._returning: list[str] = []

    @classmethod
    def one(
        cls,
        record: object,
        key: PrimaryKey,
        *,
        override_empty: bool = False,
        expected_table: str | None = None,
        dialect: DialectLike | None = None,
        interception: Interception = None,
    ) -> Update:
        """Update the row identified by the record's key.

        Only present fields outside the key are written.  ``None`` values are
        skipped unless ``override_empty`` is set, so a partially filled
        record never blanks out columns by accident.

        Raises:
            TableNameMismatchError: If the record's table is not ``expected_table``.
            SchemaMismatchError: If a key column is not a reflected field.
        """
        table = entity_table(record, expected_table)
        fields = fields_of(record)
        by_name = {f.name: f for f in fields}
        check_key(list(by_name), key, table)

        stmt = cls(table, dialect, interception)
        for f in fields:
            if f.name in key.columns or not f.present:
                continue
            if f.value.is_null and not override_empty:
                continue
            stmt.set(f.name, f.value)
        stmt.by_key(key, [tuple(by_name[col].value for col in key.columns)])
        return stmt

    # ------------------------------------------------------------------
    # Fluent API
    # ------------------------------------------------------------------

    def set(self, column: str, value: Any) -> Update:
        """Assign a bound value; assigning the same column again replaces it."""
        return self._assign(column, Fragment().append_value(value))

    def set_expr(self, column: str, expr: Fragment | str, values: Iterable[Any] = ()) -> Update:
        """Assign an SQL expression, e.g. ``set_expr("views", "views + ?", [1])``."""
        return self._assign(column, build_predicate(expr, values))

    def filter(self, predicate: Predicate, values: Iterable[Any] = ()) -> Update:
        """AND a caller predicate into the WHERE clause."""
        self._conditions.append((build_predicate(predicate, values), True))
        return self

    def by_key(self, key: PrimaryKey, ids: Sequence[Any]) -> Update:
        self._conditions.append(key_predicate(key, ids))
        return self

    def _assign(self, column: str, expr: Fragment) -> Update:
        for i, (existing, _) in enumerate(self._assignments):
            if existing == column:
                self._assignments[i] = (column, expr)
                return self
        self._assignments.append((column, expr))
        return self

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def to_fragment(self, dialect: SQLDialect | None = None) -> Fragment:
        if not self._assignments:
            raise EmptyColumnsError(self.statement_name, self.table)
        dialect = self._dialect_for(dialect)
        frag = Fragment().append_text(f"UPDATE {self.table} SET ")
        for i, (column, expr) in enumerate(self._assignments):
            if i:
                frag.append_text(", ")
            frag.append_text(f"{column} = ").append_fragment(expr)
        injected = snapshot_of(self.interception).conditions_for(self.table)
        append_where(frag, self._conditions, injected)
        self._append_returning(frag, dialect)
        return frag
