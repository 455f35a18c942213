"""Connection acquisition for operations outside a shared transaction."""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from kitql.compile.base import SQLDialect
from kitql.compile.registry import DialectLike, resolve_dialect
from kitql.config import DatabaseConfig
from kitql.driver import Connection, connect_postgres, connect_sqlite
from kitql.errors import DriverError, UnsupportedByDialectError

logger = logging.getLogger(__name__)


class Database:
    """Hands out one connection per unbound operation.

    Each :meth:`connection` block opens a fresh connection, commits when the
    block succeeds, rolls back when it raises, and always closes.  Pooling,
    if any, belongs to the ``connect`` callable.

    Args:
        connect: Factory returning a new :class:`~kitql.driver.Connection`.
        dialect: Dialect statements are rendered for.
    """

    def __init__(self, connect: Callable[[], Connection], dialect: DialectLike) -> None:
        self._connect = connect
        self.dialect: SQLDialect = resolve_dialect(dialect)

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> Database:
        """Build a database for SQLite or PostgreSQL settings.

        Raises:
            UnsupportedByDialectError: For MySQL, which needs a caller-supplied
                ``connect`` factory (server-side prepared statements).
        """
        if config.dialect == "sqlite":
            return cls(lambda: connect_sqlite(config.dsn), "sqlite")
        if config.dialect == "postgres":
            return cls(lambda: connect_postgres(config.dsn), "postgres")
        raise UnsupportedByDialectError("Connecting from settings", config.dialect)

    def open(self) -> Connection:
        """Open a new connection; the caller owns it."""
        return self._connect()

    @contextmanager
    def connection(self) -> Iterator[Connection]:
        conn = self.open()
        try:
            yield conn
            conn.commit()
        except BaseException:
            try:
                conn.rollback()
            except DriverError as exc:
                logger.warning("Rollback after failed operation also failed: %s", exc)
            raise
        finally:
            conn.close()
