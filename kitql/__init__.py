"""KitQL – entity-aware SQL statement compiler.

CRUD convenience without an ORM: records in, parameterized SQL out.

Public API
----------
Statement builders
    ``Insert``, ``Update``, ``Upsert``, ``Delete``, ``Restore``, ``Select``,
    ``Subquery`` – each renders to ``RenderedSQL(sql, values, dialect)``.

Operation façade
    ``TableOperations`` runs named verbs (``insert_one``, ``get_list_paginated``,
    ``delete_many``, ...) against a ``Database`` or a shared ``Transaction``.

Interception
    ``InterceptionConfig`` plus the process-wide ``set_soft_delete`` and
    ``set_global_filter`` calls.

Extensibility
-------------
New dialects can be registered via::

    from kitql.compile.registry import DialectFactory

    @DialectFactory.register("mariadb")
    class MariaDBDialect(MySQLDialect):
        ...
"""

from __future__ import annotations

from kitql.compile.base import RenderedSQL, SQLDialect
from kitql.compile.fragment import Fragment
from kitql.compile.mysql import MySQLDialect
from kitql.compile.postgres import PostgresDialect
from kitql.compile.registry import DialectFactory
from kitql.compile.sqlite import SQLiteDialect
from kitql.config import DatabaseConfig, SoftDeleteSettings
from kitql.driver import Connection, DBAPIConnection, ExecResult, connect_postgres, connect_sqlite
from kitql.errors import (
    BuildError,
    DriverError,
    EmptyColumnsError,
    InvalidPageError,
    InvalidValueError,
    KitQLError,
    NoEntitiesProvidedError,
    PlaceholderValueCountMismatchError,
    SchemaMismatchError,
    SoftDeleteNotConfiguredError,
    TableNameMismatchError,
    TransactionError,
    UnsupportedByDialectError,
)
from kitql.ops.database import Database
from kitql.ops.facade import TableOperations
from kitql.ops.transaction import Transaction, TransactionState
from kitql.pagination import (
    CursorPaginatedResult,
    CursorState,
    Order,
    PaginatedResult,
    page_window,
    split_cursor_page,
)
from kitql.policy.interception import (
    InterceptionConfig,
    default_interception,
    set_global_filter,
    set_soft_delete,
)
from kitql.schema.entity import (
    Composite,
    Entity,
    Field,
    FieldAccess,
    PrimaryKey,
    Single,
    fields_of,
    primary_key_values,
    table_name_of,
)
from kitql.statements import expr
from kitql.statements.base import JoinType
from kitql.statements.delete import Delete, Restore
from kitql.statements.insert import Insert
from kitql.statements.select import Select
from kitql.statements.subquery import Subquery
from kitql.statements.update import Update
from kitql.statements.upsert import Upsert
from kitql.values import MacAddress, Value, ValueKind

# ---------------------------------------------------------------------------
# Register built-in dialects with DialectFactory
# ---------------------------------------------------------------------------

DialectFactory.register_class("sqlite", SQLiteDialect)
DialectFactory.register_class("mysql", MySQLDialect)
DialectFactory.register_class("postgres", PostgresDialect)

__all__ = [
    # Values and fragments
    "Value",
    "ValueKind",
    "MacAddress",
    "Fragment",
    "RenderedSQL",
    # Dialects
    "SQLDialect",
    "SQLiteDialect",
    "MySQLDialect",
    "PostgresDialect",
    "DialectFactory",
    # Entities
    "Entity",
    "Field",
    "FieldAccess",
    "PrimaryKey",
    "Single",
    "Composite",
    "fields_of",
    "primary_key_values",
    "table_name_of",
    # Statements
    "Insert",
    "Update",
    "Upsert",
    "Delete",
    "Restore",
    "Select",
    "Subquery",
    "JoinType",
    "expr",
    # Pagination
    "Order",
    "CursorState",
    "PaginatedResult",
    "CursorPaginatedResult",
    "page_window",
    "split_cursor_page",
    # Interception
    "InterceptionConfig",
    "default_interception",
    "set_soft_delete",
    "set_global_filter",
    # Operations
    "Database",
    "DatabaseConfig",
    "SoftDeleteSettings",
    "Transaction",
    "TransactionState",
    "TableOperations",
    "Connection",
    "DBAPIConnection",
    "ExecResult",
    "connect_sqlite",
    "connect_postgres",
    # Errors
    "KitQLError",
    "BuildError",
    "SchemaMismatchError",
    "TableNameMismatchError",
    "UnsupportedByDialectError",
    "InvalidPageError",
    "NoEntitiesProvidedError",
    "EmptyColumnsError",
    "InvalidValueError",
    "SoftDeleteNotConfiguredError",
    "PlaceholderValueCountMismatchError",
    "DriverError",
    "TransactionError",
]
