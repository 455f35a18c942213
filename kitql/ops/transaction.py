"""Shared transactional context.

A :class:`Transaction` owns one connection.  Façades bound to it run every
statement on that connection and never commit on their own; only
:meth:`Transaction.commit` and :meth:`Transaction.rollback` end it.

Any exception raised while a bound operation runs (including cancellation
through ``KeyboardInterrupt`` or similar ``BaseException`` subclasses)
moves the transaction to ``FAILED``.  A failed transaction accepts nothing
but :meth:`Transaction.rollback`; it is never rolled back automatically.

Example::

    tx = Transaction(database)
    tx.begin()
    articles.bind(tx).insert_one(article)
    tags.bind(tx).insert_many(tags_for_article)
    tx.commit()
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import TypeVar

from kitql.compile.base import SQLDialect
from kitql.driver import Connection
from kitql.errors import TransactionError
from kitql.ops.database import Database

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FAILED = "failed"
    CLOSED = "closed"


class Transaction:
    """One connection shared by the façades bound to it.

    Operations must be issued sequentially; overlapping use from several
    threads raises :class:`~kitql.errors.TransactionError` instead of
    interleaving statements.

    Args:
        database: Source of the shared connection.
    """

    def __init__(self, database: Database) -> None:
        self.database = database
        self._conn: Connection | None = None
        self._state = TransactionState.IDLE
        self._busy = threading.Lock()

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def dialect(self) -> SQLDialect:
        return self.database.dialect

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def begin(self) -> None:
        """Open the connection and start the transaction.

        Raises:
            TransactionError: If the transaction is already active or failed.
        """
        if self._state in (TransactionState.ACTIVE, TransactionState.FAILED):
            raise TransactionError("Transaction already started.", self._state.value)
        conn = self.database.open()
        try:
            conn.begin()
        except BaseException:
            conn.close()
            raise
        self._conn = conn
        self._state = TransactionState.ACTIVE
        logger.debug("Transaction started")

    def commit(self) -> None:
        """Commit and release the connection.

        Raises:
            TransactionError: If the transaction is not active (a failed
                transaction must be rolled back).
            DriverError: If the commit itself fails; the transaction is then
                failed and must be rolled back.
        """
        conn = self._require(TransactionState.ACTIVE)
        try:
            conn.commit()
        except BaseException:
            self._state = TransactionState.FAILED
            raise
        self._finish()
        logger.debug("Transaction committed")

    def rollback(self) -> None:
        """Roll back and release the connection.

        Raises:
            TransactionError: If the transaction was never started or is closed.
        """
        conn = self._require(TransactionState.ACTIVE, TransactionState.FAILED)
        try:
            conn.rollback()
        finally:
            self._finish()
        logger.debug("Transaction rolled back")

    def run(self, operation: Callable[[Connection], T]) -> T:
        """Run ``operation`` on the shared connection.

        Raises:
            TransactionError: If the transaction is not active or is in use.
        """
        conn = self._require(TransactionState.ACTIVE)
        if not self._busy.acquire(blocking=False):
            raise TransactionError(
                "Transaction is already running an operation.", self._state.value
            )
        try:
            return operation(conn)
        except BaseException as exc:
            self._state = TransactionState.FAILED
            logger.debug("Transaction failed: %s", exc)
            raise
        finally:
            self._busy.release()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require(self, *states: TransactionState) -> Connection:
        if self._state not in states or self._conn is None:
            if self._state is TransactionState.FAILED:
                message = "Transaction failed; call rollback()."
            else:
                message = f"Transaction is {self._state.value}."
            raise TransactionError(message, self._state.value)
        return self._conn

    def _finish(self) -> None:
        conn, self._conn = self._conn, None
        self._state = TransactionState.CLOSED
        if conn is not None:
            conn.close()
