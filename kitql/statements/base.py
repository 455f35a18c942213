"""Shared statement machinery.

``Statement`` is the Template Method base of every builder: subclasses
assemble a dialect-agnostic :class:`~kitql.compile.fragment.Fragment` in
:meth:`Statement.to_fragment`; :meth:`Statement.render` resolves the dialect
and turns markers into placeholders.

The helpers below are shared by several builders: predicate coercion, WHERE
assembly with interception, and primary-key predicates.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from typing import Any, Union

from kitql.compile.base import RenderedSQL, SQLDialect
from kitql.compile.fragment import Fragment
from kitql.compile.registry import DialectLike, resolve_dialect
from kitql.errors import SchemaMismatchError, TableNameMismatchError, UnsupportedByDialectError
from kitql.policy.interception import (
    NO_INTERCEPTION,
    InterceptionConfig,
    InterceptionSnapshot,
)
from kitql.schema.entity import PrimaryKey, table_name_of

#: A predicate given to ``filter``: a fragment, raw SQL with ``?`` markers,
#: or a closure that writes into the fragment it receives.
Predicate = Union[Fragment, str, Callable[[Fragment], Any]]

Interception = Union[InterceptionConfig, InterceptionSnapshot, None]


class JoinType(str, Enum):
    INNER = "INNER JOIN"
    LEFT = "LEFT JOIN"
    RIGHT = "RIGHT JOIN"
    FULL = "FULL OUTER JOIN"
    CROSS = "CROSS JOIN"


# ---------------------------------------------------------------------------
# Statement base
# ---------------------------------------------------------------------------


class Statement(ABC):
    """Abstract base for statement builders.

    Args:
        table: Target table name.
        dialect: Optional dialect known up front.  When set, dialect-specific
            failures are raised on the fluent call instead of at render.
    """

    def __init__(self, table: str, dialect: DialectLike | None = None) -> None:
        self.table = table
        self.dialect: SQLDialect | None = resolve_dialect(dialect) if dialect is not None else None

    @abstractmethod
    def to_fragment(self, dialect: SQLDialect | None = None) -> Fragment:
        """Assemble the statement into a fragment.

        Args:
            dialect: Resolved target dialect, or ``None`` for dialect-agnostic
                assembly (subqueries).
        """

    def render(self, dialect: DialectLike | None = None) -> RenderedSQL:
        """Render the statement for ``dialect`` (defaults to the builder's own).

        Raises:
            UnsupportedByDialectError: If no dialect is known or the statement
                uses a feature the dialect lacks.
        """
        target = dialect if dialect is not None else self.dialect
        if target is None:
            raise UnsupportedByDialectError("Rendering", "unset")
        resolved = resolve_dialect(target)
        return self.to_fragment(resolved).render(resolved)

    def _dialect_for(self, dialect: SQLDialect | None) -> SQLDialect | None:
        return dialect if dialect is not None else self.dialect

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.table!r})"


class ReturningMixin:
    """Adds ``RETURNING`` support to INSERT/UPDATE/DELETE builders."""

    dialect: SQLDialect | None
    _returning: list[str]

    def returning(self, columns: Sequence[str] | str) -> Any:
        """Return ``columns`` from the affected rows.

        Raises:
            UnsupportedByDialectError: If the builder's dialect is MySQL.
        """
        if self.dialect is not None and not self.dialect.supports_returning:
            raise UnsupportedByDialectError("RETURNING", self.dialect.dialect_name)
        self._returning = [columns] if isinstance(columns, str) else list(columns)
        return self

    def _append_returning(self, frag: Fragment, dialect: SQLDialect | None) -> None:
        if not self._returning:
            return
        if dialect is not None and not dialect.supports_returning:
            raise UnsupportedByDialectError("RETURNING", dialect.dialect_name)
        frag.append_text(" RETURNING " + ", ".join(self._returning))


# ---------------------------------------------------------------------------
# Predicates and WHERE assembly
# ---------------------------------------------------------------------------


def build_predicate(predicate: Predicate, values: Iterable[Any] = ()) -> Fragment:
    """Coerce a :data:`Predicate` into a fresh fragment."""
    if isinstance(predicate, Fragment):
        return predicate.copy()
    if isinstance(predicate, str):
        return Fragment(predicate, values)
    frag = Fragment()
    predicate(frag)
    return frag


def snapshot_of(interception: Interception) -> InterceptionSnapshot:
    if interception is None:
        return NO_INTERCEPTION
    if isinstance(interception, InterceptionConfig):
        return interception.snapshot()
    return interception


def append_where(
    frag: Fragment,
    conditions: Sequence[tuple[Fragment, bool]],
    injected: Sequence[tuple[Fragment, bool]] = (),
) -> None:
    """Append ``WHERE`` joining caller conditions and injected predicates.

    Args:
        frag: Statement fragment to append to.
        conditions: ``(predicate, compound)`` pairs from the caller.
            Compound predicates are parenthesised when anything else is
            ANDed with them.
        injected: Interception ``(predicate, compound)`` pairs, ANDed
            after the caller's and grouped the same way.
    """
    total = len(conditions) + len(injected)
    if total == 0:
        return
    frag.append_text(" WHERE ")
    first = True
    for predicate, compound in [*conditions, *injected]:
        if not first:
            frag.append_text(" AND ")
        first = False
        if compound and total > 1:
            frag.append_text("(").append_fragment(predicate).append_text(")")
        else:
            frag.append_fragment(predicate)


def key_predicate(key: PrimaryKey, ids: Sequence[Any]) -> tuple[Fragment, bool]:
    """Build a predicate matching every key in ``ids`` in one statement.

    Single keys render ``col = ?`` or ``col IN (?,?)``.  Composite keys
    render ``a = ? AND b = ?`` for one id and OR-ed parenthesised groups
    for several.  Composite ids are tuples in key-column order.

    Returns:
        ``(predicate, compound)`` for :func:`append_where`.

    Raises:
        SchemaMismatchError: If ``ids`` is empty or a composite id has the
            wrong arity.
    """
    if not ids:
        raise SchemaMismatchError("At least one primary key value is required.")
    columns = key.columns
    frag = Fragment()
    if len(columns) == 1:
        column = columns[0]
        flat = [_unwrap_single(i) for i in ids]
        if len(flat) == 1:
            frag.append_text(f"{column} = ").append_value(flat[0])
        else:
            frag.append_text(f"{column} IN (").append_values(flat).append_text(")")
        return frag, False

    for n, id_ in enumerate(ids):
        if not isinstance(id_, (tuple, list)) or len(id_) != len(columns):
            raise SchemaMismatchError(
                f"Composite key value must be a tuple of {len(columns)} values.",
                details={"columns": list(columns), "value": repr(id_)},
            )
        if n:
            frag.append_text(" OR ")
        if len(ids) > 1:
            frag.append_text("(")
        for i, (column, value) in enumerate(zip(columns, id_)):
            if i:
                frag.append_text(" AND ")
            frag.append_text(f"{column} = ").append_value(value)
        if len(ids) > 1:
            frag.append_text(")")
    return frag, len(ids) > 1


def _unwrap_single(id_: Any) -> Any:
    if isinstance(id_, (tuple, list)) and len(id_) == 1:
        return id_[0]
    return id_


def entity_table(record_or_type: object, expected_table: str | None) -> str:
    """Return the record's table, enforcing ``expected_table`` when given.

    Raises:
        TableNameMismatchError: If the derived table differs.
    """
    table = table_name_of(record_or_type)
    if expected_table is not None and expected_table != table:
        raise TableNameMismatchError(expected_table, table)
    return table
