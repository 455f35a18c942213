"""Dialect abstractions: RenderedSQL and the SQLDialect ABC.

The Template Method pattern (GoF) is used:
- ``SQLDialect`` declares the few steps that differ between databases.
- ``SQLiteDialect``, ``MySQLDialect`` and ``PostgresDialect`` override them
  (placeholder style, RETURNING support, conflict clause, quoting).

Dialects are consumed only when a fragment is rendered; statement builders,
entity reflection and pagination never branch on them.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from kitql.values import Value


@dataclass
class RenderedSQL:
    """The output of rendering a fragment for one dialect.

    Attributes:
        sql: SQL text with positional placeholders (``?`` or ``$n``).
        values: Bound values, one per placeholder, in placeholder order.
        dialect: The target dialect name.
    """

    sql: str
    values: list[Value]
    dialect: str

    @property
    def params(self) -> list[Any]:
        """Return the raw Python objects behind :attr:`values`."""
        return [v.to_python() for v in self.values]


class SQLDialect(ABC):
    """Abstract base for dialect-specific rendering rules."""

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the canonical dialect name (``'sqlite'``, ``'mysql'``, ``'postgres'``)."""

    @abstractmethod
    def placeholder(self, index: int) -> str:
        """Return the placeholder for the ``index``-th bound value (1-based)."""

    @property
    @abstractmethod
    def supports_returning(self) -> bool:
        """Whether ``RETURNING`` may follow INSERT/UPDATE/DELETE."""

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Return a properly-quoted SQL identifier."""

    @abstractmethod
    def upsert_clause(
        self,
        conflict_columns: Sequence[str],
        update_columns: Sequence[str],
    ) -> str:
        """Return the conflict-resolution clause appended to an INSERT.

        Args:
            conflict_columns: Unique/primary-key columns that define a conflict.
                Ignored by dialects that infer the conflict from any unique key.
            update_columns: Columns overwritten with the incoming row's values.

        Returns:
            SQL text starting with a leading space, containing no placeholders.
        """

    def default_values_clause(self) -> str:
        """Return the clause inserting one row of column defaults."""
        return " DEFAULT VALUES"

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
