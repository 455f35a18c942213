"""SQLite dialect."""
from __future__ import annotations

from collections.abc import Sequence

from kitql.compile.base import SQLDialect


def excluded_assignments(update_columns: Sequence[str]) -> str:
    """Render ``col = EXCLUDED.col`` pairs shared by SQLite and PostgreSQL."""
    return ", ".join(f"{col} = EXCLUDED.{col}" for col in update_columns)


class SQLiteDialect(SQLDialect):
    """Renders fragments for SQLite.

    Parameter style: ``?`` – compatible with Python's built-in ``sqlite3``
    positional execution (``cursor.execute(sql, sequence)``).

    ``RETURNING`` requires SQLite 3.35 or newer.
    """

    @property
    def dialect_name(self) -> str:
        return "sqlite"

    def placeholder(self, index: int) -> str:
        return "?"

    @property
    def supports_returning(self) -> bool:
        return True

    def quote_identifier(self, name: str) -> str:
        escaped = name.replace('"', '""')
        return f'"{escaped}"'

    def upsert_clause(
        self,
        conflict_columns: Sequence[str],
        update_columns: Sequence[str],
    ) -> str:
        target = f"({', '.join(conflict_columns)})" if conflict_columns else ""
        if not update_columns:
            return f" ON CONFLICT{target} DO NOTHING"
        return f" ON CONFLICT{target} DO UPDATE SET {excluded_assignments(update_columns)}"
