"""DELETE and RESTORE builders.

With soft delete enabled for the table, :class:`Delete` renders an
``UPDATE`` that marks rows instead of removing them; tables excluded from
soft delete (or ``physical=True``) get a real ``DELETE``.  :class:`Restore`
reverses a soft delete.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from kitql.compile.base import SQLDialect
from kitql.compile.fragment import Fragment
from kitql.compile.registry import DialectLike
from kitql.errors import NoEntitiesProvidedError, SoftDeleteNotConfiguredError
from kitql.schema.entity import PrimaryKey, primary_key_values
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


class _KeyedStatement(ReturningMixin, Statement):
    """Common state of statements targeting rows by key or condition."""

    def __init__(
        self,
        table: str,
        dialect: DialectLike | None = None,
        interception: Interception = None,
    ) -> None:
        super().__init__(table, dialect)
        self.interception = interception
        self._conditions: list[tuple[Fragment, bool]] = []
        self._returning: list[str] = []

    def filter(self, predicate: Predicate, values: Iterable[Any] = ()) -> Any:
        """AND a caller predicate into the WHERE clause."""
        self._conditions.append((build_predicate(predicate, values), True))
        return self

    def by_keys(self, key: PrimaryKey, ids: Sequence[Any]) -> Any:
        """Match every key in ``ids`` with a single predicate."""
        self._conditions.append(key_predicate(key, ids))
        return self

    @classmethod
    def many(
        cls,
        records: Iterable[object],
        key: PrimaryKey,
        *,
        expected_table: str | None = None,
        dialect: DialectLike | None = None,
        interception: Interception = None,
    ) -> Any:
        """Target the rows identified by the records' keys.

        Raises:
            NoEntitiesProvidedError: If ``records`` is empty.
            TableNameMismatchError: If the records' table is not ``expected_table``.
            SchemaMismatchError: If a key column is not a reflected field.
        """
        records = list(records)
        if not records:
            raise NoEntitiesProvidedError(cls.statement_name)
        stmt = cls(entity_table(records[0], expected_table), dialect, interception)
        ids = [tuple(primary_key_values(r, key)) for r in records]
        return stmt.by_keys(key, ids)

    @classmethod
    def one(
        cls,
        record: object,
        key: PrimaryKey,
        *,
        expected_table: str | None = None,
        dialect: DialectLike | None = None,
        interception: Interception = None,
    ) -> Any:
        return cls.many(
            [record],
            key,
            expected_table=expected_table,
            dialect=dialect,
            interception=interception,
        )


class Delete(_KeyedStatement):
    """Builds a physical or soft ``DELETE``.

    Args:
        table: Target table.
        dialect: Optional dialect known up front.
        interception: Interception rules applied at assembly.
        physical: Always remove rows, even on a soft delete table.
    """

    statement_name = "DELETE"

    def __init__(
        self,
        table: str,
        dialect: DialectLike | None = None,
        interception: Interception = None,
        physical: bool = False,
    ) -> None:
        super().__init__(table, dialect, interception)
        self.physical = physical

    def to_fragment(self, dialect: SQLDialect | None = None) -> Fragment:
        dialect = self._dialect_for(dialect)
        snapshot = snapshot_of(self.interception)
        rule = None if self.physical else snapshot.soft_delete_for(self.table)
        frag = Fragment()
        if rule is not None:
            frag.append_text(f"UPDATE {self.table} SET {rule.column} = ")
            frag.append_value(rule.deleted_marker())
            injected = snapshot.conditions_for(self.table)
        else:
            frag.append_text(f"DELETE FROM {self.table}")
            injected = snapshot.conditions_for(self.table, include_soft_delete=False)
        append_where(frag, self._conditions, injected)
        self._append_returning(frag, dialect)
        return frag


class Restore(_KeyedStatement):
    """Builds the ``UPDATE`` that brings soft-deleted rows back.

    Raises:
        SoftDeleteNotConfiguredError: At assembly, if soft delete does not
            cover the table.
    """

    statement_name = "RESTORE"

    def to_fragment(self, dialect: SQLDialect | None = None) -> Fragment:
        dialect = self._dialect_for(dialect)
        snapshot = snapshot_of(self.interception)
        rule = snapshot.soft_delete_for(self.table)
        if rule is None:
            raise SoftDeleteNotConfiguredError(self.table)
        frag = Fragment().append_text(f"UPDATE {self.table} SET {rule.column} = ")
        if rule.active_value is None:
            frag.append_text("NULL")
        else:
            frag.append_value(rule.active_value)
        injected = snapshot.conditions_for(self.table, include_soft_delete=False)
        append_where(frag, self._conditions, injected)
        self._append_returning(frag, dialect)
        return frag
