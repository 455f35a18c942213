"""Interception layer: predicates injected into Select, Update and Delete.

Two rules are supported:

* **Global filter** – a predicate (typically a tenant condition) ANDed into
  every statement on tables not listed in ``excluded_tables``.  Excluded
  tables simply skip the filter.
* **Soft delete** – a flag or timestamp column.  Reads and updates only see
  active rows; deletes become ``UPDATE ... SET <column> = <deleted value>``
  and :class:`~kitql.statements.delete.Restore` reverses them.  Excluded
  tables fall back to a physical ``DELETE``.

When both apply to one table the global filter comes first, then the soft
delete predicate, so rendered SQL is stable across builds.

Configuration lives in an :class:`InterceptionConfig` owned by a façade.
A process-wide default instance backs the module-level
:func:`set_soft_delete` / :func:`set_global_filter` calls.

Example::

    config = InterceptionConfig()
    config.set_global_filter("tenant_id = ?", excluded_tables=["audit_log"], values=[42])
    config.set_soft_delete("deleted", excluded_tables=["article_tag"])
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Union

from kitql.compile.fragment import Fragment, to_fragment

#: A global filter predicate: SQL with ``?`` markers, a fragment, or a
#: callable building one for a given table.
FilterPredicate = Union[str, Fragment, Callable[[str], Union[Fragment, str]]]


@dataclass(frozen=True)
class SoftDeleteRule:
    """Soft delete configuration.

    Attributes:
        column: Flag or timestamp column marking deleted rows.
        excluded_tables: Tables that keep physical deletes.
        deleted_value: Value written on delete; a callable is invoked per
            statement (e.g. ``datetime.now`` for timestamps).
        active_value: Value of live rows; ``None`` renders ``IS NULL``.
    """

    column: str
    excluded_tables: frozenset[str] = field(default_factory=frozenset)
    deleted_value: Any = True
    active_value: Any = False

    def applies_to(self, table: str) -> bool:
        return table not in self.excluded_tables

    def active_predicate(self) -> Fragment:
        if self.active_value is None:
            return Fragment().append_text(f"{self.column} IS NULL")
        return Fragment().append_text(f"{self.column} = ").append_value(self.active_value)

    def deleted_marker(self) -> Any:
        if callable(self.deleted_value):
            return self.deleted_value()
        return self.deleted_value


@dataclass(frozen=True)
class GlobalFilterRule:
    """Global filter configuration.

    Attributes:
        predicate: The filter predicate.
        excluded_tables: Tables the filter is not applied to.
        values: Bound values for ``?`` markers when ``predicate`` is text.
    """

    predicate: FilterPredicate
    excluded_tables: frozenset[str] = field(default_factory=frozenset)
    values: tuple[Any, ...] = ()

    def applies_to(self, table: str) -> bool:
        return table not in self.excluded_tables

    def fragment_for(self, table: str) -> Fragment:
        predicate = self.predicate
        if callable(predicate):
            return to_fragment(predicate(table)).copy()
        if isinstance(predicate, Fragment):
            return predicate.copy()
        return Fragment(predicate, self.values)


@dataclass(frozen=True)
class InterceptionSnapshot:
    """The rules in effect for one statement build."""

    global_filter: GlobalFilterRule | None = None
    soft_delete: SoftDeleteRule | None = None

    def soft_delete_for(self, table: str) -> SoftDeleteRule | None:
        """Return the soft delete rule if it covers ``table``."""
        if self.soft_delete is not None and self.soft_delete.applies_to(table):
            return self.soft_delete
        return None

    def conditions_for(
        self, table: str, include_soft_delete: bool = True
    ) -> list[tuple[Fragment, bool]]:
        """Return ``(predicate, compound)`` pairs to AND into a statement.

        Args:
            table: Target table.
            include_soft_delete: ``False`` skips the active-row predicate
                (used when restoring rows).

        Returns:
            Global filter first, then the soft delete predicate.  The global
            filter is user SQL and always counts as compound, so an ``OR``
            inside it stays grouped.
        """
        conditions: list[tuple[Fragment, bool]] = []
        if self.global_filter is not None and self.global_filter.applies_to(table):
            conditions.append((self.global_filter.fragment_for(table), True))
        rule = self.soft_delete_for(table)
        if include_soft_delete and rule is not None:
            conditions.append((rule.active_predicate(), False))
        return conditions

    def predicates_for(self, table: str, include_soft_delete: bool = True) -> list[Fragment]:
        """Return the injected predicates for ``table`` without grouping flags."""
        return [predicate for predicate, _ in self.conditions_for(table, include_soft_delete)]


#: Snapshot used by builders constructed without interception.
NO_INTERCEPTION = InterceptionSnapshot()


class InterceptionConfig:
    """Thread-safe holder of the soft delete and global filter rules.

    Rules are immutable; writers swap them under a lock and every build
    takes one :meth:`snapshot`, so a reconfiguration only affects
    statements built after it returns.
    """

    def __init__(
        self,
        soft_delete: SoftDeleteRule | None = None,
        global_filter: GlobalFilterRule | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._snapshot = InterceptionSnapshot(global_filter, soft_delete)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set_soft_delete(
        self,
        column_name: str,
        excluded_tables: Iterable[str] = (),
        *,
        deleted_value: Any = True,
        active_value: Any = False,
    ) -> None:
        """Enable soft delete on every table except ``excluded_tables``."""
        rule = SoftDeleteRule(column_name, frozenset(excluded_tables), deleted_value, active_value)
        with self._lock:
            self._snapshot = InterceptionSnapshot(self._snapshot.global_filter, rule)

    def set_global_filter(
        self,
        predicate: FilterPredicate,
        excluded_tables: Iterable[str] = (),
        values: Iterable[Any] = (),
    ) -> None:
        """AND ``predicate`` into statements on every table except ``excluded_tables``."""
        rule = GlobalFilterRule(predicate, frozenset(excluded_tables), tuple(values))
        with self._lock:
            self._snapshot = InterceptionSnapshot(rule, self._snapshot.soft_delete)

    def clear_soft_delete(self) -> None:
        with self._lock:
            self._snapshot = InterceptionSnapshot(self._snapshot.global_filter, None)

    def clear_global_filter(self) -> None:
        with self._lock:
            self._snapshot = InterceptionSnapshot(None, self._snapshot.soft_delete)

    def snapshot(self) -> InterceptionSnapshot:
        with self._lock:
            return self._snapshot

    @classmethod
    def from_settings(cls, settings: Any) -> InterceptionConfig:
        """Build a configuration from :class:`~kitql.config.DatabaseConfig`."""
        config = cls()
        soft = settings.soft_delete
        if soft is not None:
            config.set_soft_delete(
                soft.column,
                soft.excluded_tables,
                deleted_value=soft.deleted_value,
                active_value=soft.active_value,
            )
        return config


# ---------------------------------------------------------------------------
# Process-wide configuration
# ---------------------------------------------------------------------------

_DEFAULT = InterceptionConfig()


def default_interception() -> InterceptionConfig:
    """Return the process-wide configuration used when a façade gets none."""
    return _DEFAULT


def set_soft_delete(column_name: str, excluded_tables: Iterable[str] = (), **kwargs: Any) -> None:
    """Configure soft delete process-wide."""
    _DEFAULT.set_soft_delete(column_name, excluded_tables, **kwargs)


def set_global_filter(
    predicate: FilterPredicate,
    excluded_tables: Iterable[str] = (),
    values: Iterable[Any] = (),
) -> None:
    """Configure the global filter process-wide."""
    _DEFAULT.set_global_filter(predicate, excluded_tables, values)
