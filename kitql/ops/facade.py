"""Operation façade: named CRUD verbs over one table.

:class:`TableOperations` composes entity reflection, the statement
builders, pagination and interception.  Each verb builds a statement,
renders it for the database dialect, and runs it either on a fresh
connection or, once bound, on a shared :class:`~kitql.ops.transaction.Transaction`.

Example::

    articles = TableOperations(Article, PrimaryKey.single("id"), database)
    articles.insert_one(Article(tenant_id=1, title="hello"))
    page = articles.get_list_paginated(1, 20, lambda q: q.order_by("id"))

Query callbacks receive the :class:`~kitql.statements.select.Select` the verb
is about to run, already targeting the table with interception applied, so
they only add filters, ordering or joins.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Generic, TypeVar

from kitql.compile.base import SQLDialect
from kitql.driver import Connection, ExecResult
from kitql.errors import KitQLError
from kitql.ops.database import Database
from kitql.ops.transaction import Transaction
from kitql.pagination import CursorPaginatedResult, CursorState, PaginatedResult, split_cursor_page
from kitql.policy.interception import InterceptionConfig, default_interception
from kitql.schema.entity import PrimaryKey, build_entity, check_key, field_names_of, table_name_of
from kitql.statements.base import Predicate, Statement
from kitql.statements.delete import Delete, Restore
from kitql.statements.insert import Insert
from kitql.statements.select import Select
from kitql.statements.update import Update
from kitql.statements.upsert import Upsert

logger = logging.getLogger(__name__)

T = TypeVar("T")

#: Callback customising the SELECT of a read verb.
QueryFn = Callable[[Select], Any]


class TableOperations(Generic[T]):
    """CRUD verbs for one entity type and its table.

    Args:
        entity_type: Record type; its class name gives the table name.
        primary_key: Key shape of the table.
        database: Connection source for unbound operations.  May be omitted
            when ``transaction`` is given.
        interception: Soft delete / global filter rules; defaults to the
            process-wide configuration.
        transaction: Shared transaction to bind to.
        table: Configured table; entity-driven statements for another table
            fail with :class:`~kitql.errors.TableNameMismatchError`.

    Raises:
        SchemaMismatchError: If a key column is not a field of ``entity_type``.
    """

    def __init__(
        self,
        entity_type: type[T],
        primary_key: PrimaryKey,
        database: Database | None = None,
        *,
        interception: InterceptionConfig | None = None,
        transaction: Transaction | None = None,
        table: str | None = None,
    ) -> None:
        if database is None and transaction is None:
            raise KitQLError("TableOperations needs a database or a transaction.")
        self.entity_type = entity_type
        self.primary_key = primary_key
        self.database = database if database is not None else transaction.database
        self.interception = interception if interception is not None else default_interception()
        self.transaction = transaction
        self.table = table or table_name_of(entity_type)
        check_key(field_names_of(entity_type), primary_key, self.table)

    @property
    def dialect(self) -> SQLDialect:
        return self.database.dialect

    def bind(self, transaction: Transaction) -> TableOperations[T]:
        """Return a façade running on ``transaction``."""
        return TableOperations(
            self.entity_type,
            self.primary_key,
            self.database,
            interception=self.interception,
            transaction=transaction,
            table=self.table,
        )

    # ------------------------------------------------------------------
    # Insert / update / upsert
    # ------------------------------------------------------------------

    def insert_one(self, record: T) -> ExecResult:
        return self._execute(lambda: Insert.one(record, self.primary_key, expected_table=self.table))

    def insert_many(self, records: Iterable[T]) -> ExecResult:
        records = list(records)
        return self._execute(
            lambda: Insert.many(records, self.primary_key, expected_table=self.table)
        )

    def update_one(self, record: T, override_empty: bool = False) -> ExecResult:
        """Update the row with the record's key from its present fields."""
        return self._execute(
            lambda: Update.one(
                record,
                self.primary_key,
                override_empty=override_empty,
                expected_table=self.table,
                interception=self.interception,
            )
        )

    update_by_key = update_one

    def update_by_cond(
        self,
        assign: Callable[[Update], Any],
        where: Predicate,
        values: Iterable[Any] = (),
    ) -> ExecResult:
        """Update rows matching ``where``; ``assign`` adds the SET columns."""

        def build() -> Update:
            stmt = Update(self.table, interception=self.interception)
            assign(stmt)
            return stmt.filter(where, values)

        return self._execute(build)

    def upsert_one(self, record: T, conflict_columns: Sequence[str] | None = None) -> ExecResult:
        return self.upsert_many([record], conflict_columns)

    def upsert_many(
        self,
        records: Iterable[T],
        conflict_columns: Sequence[str] | None = None,
    ) -> ExecResult:
        records = list(records)
        return self._execute(
            lambda: Upsert.many(
                records,
                self.primary_key,
                expected_table=self.table,
                conflict_columns=conflict_columns,
            )
        )

    # ------------------------------------------------------------------
    # Delete / restore
    # ------------------------------------------------------------------

    def delete_by_key(self, key: Any) -> ExecResult:
        return self.delete_many([key])

    def delete_many(self, keys: Sequence[Any]) -> ExecResult:
        """Delete (or soft delete) every row in ``keys`` with one statement."""
        return self._execute(
            lambda: Delete(self.table, interception=self.interception).by_keys(
                self.primary_key, list(keys)
            )
        )

    def delete_by_cond(self, where: Predicate, values: Iterable[Any] = ()) -> ExecResult:
        return self._execute(
            lambda: Delete(self.table, interception=self.interception).filter(where, values)
        )

    def restore_one(self, key: Any) -> ExecResult:
        return self.restore_many([key])

    def restore_many(self, keys: Sequence[Any]) -> ExecResult:
        """Undo soft deletes.

        Raises:
            SoftDeleteNotConfiguredError: If soft delete does not cover the table.
        """
        return self._execute(
            lambda: Restore(self.table, interception=self.interception).by_keys(
                self.primary_key, list(keys)
            )
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_key(self, key: Any) -> T | None:
        return self.get_one(lambda q: q.by_key(self.primary_key, [key]))

    fetch_one = get_by_key

    def get_one(self, query: QueryFn | None = None) -> T | None:
        rows = self._fetch(lambda: self._select(query).limit(1))
        return self._entity(rows[0]) if rows else None

    def get_list(self, query: QueryFn | None = None) -> list[T]:
        return [self._entity(row) for row in self._fetch(lambda: self._select(query))]

    def get_list_paginated(
        self,
        page_number: int,
        page_size: int,
        query: QueryFn | None = None,
    ) -> PaginatedResult[T]:
        """Return one page plus the total row count.

        Raises:
            InvalidPageError: For non-positive arguments or an overflowing offset.
        """

        def run(conn: Connection) -> PaginatedResult[T]:
            select = self._select(query)
            counting = select.to_count()
            select.paginate(page_number, page_size)
            total = self._first_value(self._fetch_on(conn, counting))
            rows = self._fetch_on(conn, select)
            return PaginatedResult(
                data=[self._entity(row) for row in rows],
                total=int(total or 0),
                page_number=page_number,
                page_size=page_size,
            )

        return self._run(run)

    def get_list_by_cursor(
        self,
        state: CursorState,
        query: QueryFn | None = None,
    ) -> CursorPaginatedResult[T]:
        """Return one keyset page; ``next_cursor`` is ``None`` at the end of data."""
        rows = self._fetch(lambda: self._select(query).cursor(state, lookahead=True))
        page, next_cursor = split_cursor_page(rows, state)
        return CursorPaginatedResult(
            data=[self._entity(row) for row in page],
            next_cursor=next_cursor,
            page_size=state.page_size,
        )

    def exists(self, query: QueryFn | None = None) -> bool:
        return bool(self._fetch(lambda: self._select(query).columns("1").limit(1)))

    def count(self, query: QueryFn | None = None) -> int:
        rows = self._fetch(lambda: self._select(query).to_count())
        return int(self._first_value(rows) or 0)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _select(self, query: QueryFn | None) -> Select:
        select = Select.of(
            self.entity_type, expected_table=self.table, interception=self.interception
        )
        if query is not None:
            query(select)
        return select

    def _entity(self, row: dict[str, Any]) -> T:
        return build_entity(self.entity_type, row)

    @staticmethod
    def _first_value(rows: list[dict[str, Any]]) -> Any:
        return next(iter(rows[0].values())) if rows else None

    def _run(self, operation: Callable[[Connection], Any]) -> Any:
        if self.transaction is not None:
            return self.transaction.run(operation)
        with self.database.connection() as conn:
            return operation(conn)

    def _execute(self, build: Callable[[], Statement]) -> ExecResult:
        def run(conn: Connection) -> ExecResult:
            rendered = build().render(conn.dialect)
            logger.debug("%s (%d values)", rendered.sql, len(rendered.values))
            return conn.execute(rendered.sql, rendered.values)

        return self._run(run)

    def _fetch(self, build: Callable[[], Statement]) -> list[dict[str, Any]]:
        return self._run(lambda conn: self._fetch_on(conn, build()))

    @staticmethod
    def _fetch_on(conn: Connection, stmt: Statement) -> list[dict[str, Any]]:
        rendered = stmt.render(conn.dialect)
        logger.debug("%s (%d values)", rendered.sql, len(rendered.values))
        return conn.fetch(rendered.sql, rendered.values)
