"""PostgreSQL dialect."""
from __future__ import annotations

from collections.abc import Sequence

from kitql.compile.base import SQLDialect
from kitql.compile.sqlite import excluded_assignments


class PostgresDialect(SQLDialect):
    """Renders fragments for PostgreSQL.

    Parameter style: ``$1..$n`` – the server's native positional syntax, as
    accepted by ``psycopg.RawCursor`` and ``asyncpg``.
    """

    @property
    def dialect_name(self) -> str:
        return "postgres"

    def placeholder(self, index: int) -> str:
        return f"${index}"

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
