"""Driver boundary: the connection contract and a DB-API 2 adapter.

KitQL hands a driver exactly two things: SQL text with positional
placeholders and the ordered bound values.  :class:`Connection` is the
contract; :class:`DBAPIConnection` implements it over any DB-API 2
connection whose paramstyle matches the rendered placeholders:

* stdlib ``sqlite3`` (``?``) – see :func:`connect_sqlite`;
* ``psycopg`` with ``RawCursor`` (``$n``) – see :func:`connect_postgres`.

Driver exceptions are wrapped into :class:`~kitql.errors.DriverError`,
keeping the driver's code and message and chaining the original.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from kitql.compile.base import SQLDialect
from kitql.compile.registry import DialectLike, resolve_dialect
from kitql.errors import DriverError
from kitql.values import Value, ValueKind

logger = logging.getLogger(__name__)


@dataclass
class ExecResult:
    """Outcome of a write statement.

    Attributes:
        rows_affected: Row count reported by the driver (``-1`` if unknown).
        last_insert_id: Driver's last inserted row id, when available.
        rows: Rows produced by ``RETURNING``.
    """

    rows_affected: int
    last_insert_id: Any = None
    rows: list[dict[str, Any]] = field(default_factory=list)


class Connection(Protocol):
    """What the operation layer needs from a database connection."""

    dialect: SQLDialect

    def execute(self, sql: str, values: Sequence[Value]) -> ExecResult: ...

    def fetch(self, sql: str, values: Sequence[Value]) -> list[dict[str, Any]]: ...

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def close(self) -> None: ...


# ---------------------------------------------------------------------------
# Value adaptation
# ---------------------------------------------------------------------------


def _text_like(value: Value) -> Any:
    """Representation for drivers without native UUID/JSON/network types."""
    kind = value.kind
    if kind is ValueKind.JSON:
        return json.dumps(value.data)
    if kind in (ValueKind.UUID, ValueKind.DECIMAL, ValueKind.NETWORK, ValueKind.MAC):
        return str(value.data)
    return value.data


def adapt_for_sqlite(value: Value) -> Any:
    if value.kind is ValueKind.BOOL:
        return int(value.data)
    if value.kind is ValueKind.DATETIME:
        if isinstance(value.data, datetime):
            return value.data.isoformat(sep=" ")
        return value.data.isoformat()
    return _text_like(value)


def adapt_for_mysql(value: Value) -> Any:
    if value.kind is ValueKind.BOOL:
        return int(value.data)
    if value.kind in (ValueKind.DATETIME, ValueKind.DECIMAL):
        return value.data
    return _text_like(value)


def adapt_for_postgres(value: Value) -> Any:
    if value.kind is ValueKind.JSON:
        from psycopg.types.json import Jsonb

        return Jsonb(value.data)
    if value.kind is ValueKind.MAC:
        return str(value.data)
    return value.data


_ADAPTERS = {
    "sqlite": adapt_for_sqlite,
    "mysql": adapt_for_mysql,
    "postgres": adapt_for_postgres,
}


def adapt_values(values: Sequence[Value], dialect: SQLDialect) -> tuple[Any, ...]:
    """Convert bound values to the objects the dialect's driver accepts."""
    adapter = _ADAPTERS.get(dialect.dialect_name, Value.to_python)
    return tuple(adapter(v) for v in values)


# ---------------------------------------------------------------------------
# DB-API adapter
# ---------------------------------------------------------------------------


class DBAPIConnection:
    """:class:`Connection` over a DB-API 2 connection.

    Args:
        raw: The driver connection.
        dialect: Dialect whose placeholders the driver understands.
        errors: Driver exception classes to wrap into ``DriverError``.
    """

    def __init__(
        self,
        raw: Any,
        dialect: DialectLike,
        errors: tuple[type[BaseException], ...] = (Exception,),
    ) -> None:
        self.raw = raw
        self.dialect = resolve_dialect(dialect)
        self._errors = errors

    def execute(self, sql: str, values: Sequence[Value]) -> ExecResult:
        cursor = self._run(sql, values)
        try:
            rows = self._rows(cursor) if cursor.description else []
            return ExecResult(
                rows_affected=cursor.rowcount,
                last_insert_id=getattr(cursor, "lastrowid", None),
                rows=rows,
            )
        finally:
            cursor.close()

    def fetch(self, sql: str, values: Sequence[Value]) -> list[dict[str, Any]]:
        cursor = self._run(sql, values)
        try:
            return self._rows(cursor)
        finally:
            cursor.close()

    def begin(self) -> None:
        if hasattr(self.raw, "begin"):
            self._call(self.raw.begin)
        elif self.dialect.dialect_name == "sqlite":
            self._run("BEGIN", []).close()
        # psycopg opens a transaction implicitly on the first statement.

    def commit(self) -> None:
        self._call(self.raw.commit)

    def rollback(self) -> None:
        self._call(self.raw.rollback)

    def close(self) -> None:
        self._call(self.raw.close)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run(self, sql: str, values: Sequence[Value]) -> Any:
        params = adapt_values(values, self.dialect)
        cursor = self.raw.cursor()
        try:
            cursor.execute(sql, params)
        except self._errors as exc:
            cursor.close()
            logger.warning("Statement failed on %s: %s", self.dialect.dialect_name, exc)
            raise DriverError.from_exception(exc) from exc
        return cursor

    def _rows(self, cursor: Any) -> list[dict[str, Any]]:
        try:
            names = [d[0] for d in cursor.description]
            return [dict(zip(names, row)) for row in cursor.fetchall()]
        except self._errors as exc:
            raise DriverError.from_exception(exc) from exc

    def _call(self, method: Any) -> None:
        try:
            method()
        except self._errors as exc:
            raise DriverError.from_exception(exc) from exc


def connect_sqlite(path: str) -> DBAPIConnection:
    """Open a stdlib ``sqlite3`` connection in autocommit mode.

    Transactions are started explicitly by :meth:`DBAPIConnection.begin`.
    """
    import sqlite3

    try:
        raw = sqlite3.connect(path, isolation_level=None)
    except sqlite3.Error as exc:
        raise DriverError.from_exception(exc) from exc
    return DBAPIConnection(raw, "sqlite", errors=(sqlite3.Error,))


def connect_postgres(dsn: str) -> DBAPIConnection:
    """Open a ``psycopg`` connection using server-side ``$n`` parameters.

    Requires the ``postgres`` extra (``pip install "kitql[postgres]"``).
    """
    import psycopg

    try:
        raw = psycopg.connect(dsn, cursor_factory=psycopg.RawCursor)
    except psycopg.Error as exc:
        raise DriverError.from_exception(exc) from exc
    return DBAPIConnection(raw, "postgres", errors=(psycopg.Error,))
