"""MySQL dialect."""
from __future__ import annotations

from collections.abc import Sequence

from kitql.compile.base import SQLDialect
from kitql.errors import EmptyColumnsError


class MySQLDialect(SQLDialect):
    """Renders fragments for MySQL.

    Parameter style: ``?`` – the server-side prepared statement syntax.

    MySQL has no ``RETURNING``; conflicts are resolved with
    ``ON DUPLICATE KEY UPDATE``, which fires on any unique key, so the
    conflict columns are not rendered.

    Identifiers are quoted with backticks (`` ` ``) rather than double-quotes.
    """

    @property
    def dialect_name(self) -> str:
        return "mysql"

    def placeholder(self, index: int) -> str:
        return "?"

    @property
    def supports_returning(self) -> bool:
        return False

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace("`", "``")
        return f"`{escaped}`"

    def default_values_clause(self) -> str:
        return " () VALUES ()"

    def upsert_clause(
        self,
        conflict_columns: Sequence[str],
        update_columns: Sequence[str],
    ) -> str:
        if not update_columns:
            # No-op assignment keeps the existing row, like DO NOTHING.
            if not conflict_columns:
                raise EmptyColumnsError("ON DUPLICATE KEY UPDATE")
            noop = conflict_columns[0]
            return f" ON DUPLICATE KEY UPDATE {noop} = {noop}"
        assignments = ", ".join(f"{col} = VALUES({col})" for col in update_columns)
        return f" ON DUPLICATE KEY UPDATE {assignments}"
