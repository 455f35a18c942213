"""KitQL compilation layer: fragments and dialect rendering."""
from kitql.compile.base import RenderedSQL, SQLDialect
from kitql.compile.fragment import Fragment
from kitql.compile.mysql import MySQLDialect
from kitql.compile.postgres import PostgresDialect
from kitql.compile.registry import DialectFactory, resolve_dialect
from kitql.compile.sqlite import SQLiteDialect

__all__ = [
    "RenderedSQL",
    "SQLDialect",
    "Fragment",
    "DialectFactory",
    "resolve_dialect",
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
]
