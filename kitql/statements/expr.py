"""Predicate and expression helpers.

Each helper returns a new :class:`~kitql.compile.fragment.Fragment`, so the
results can be passed to ``filter``/``having``/``join`` or combined::

    Select("article").filter(and_(eq("tenant_id", 1), or_(gt("views", 10), is_null("content"))))
    # ... WHERE tenant_id = ? AND (views > ? OR content IS NULL)

Aggregate helpers return plain select-list text.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from kitql.compile.fragment import Fragment
from kitql.statements.subquery import Subquery


def _compare(column: str, op: str, value: Any) -> Fragment:
    return Fragment().append_text(f"{column} {op} ").append_value(value)


def eq(column: str, value: Any) -> Fragment:
    return _compare(column, "=", value)


def ne(column: str, value: Any) -> Fragment:
    return _compare(column, "<>", value)


def gt(column: str, value: Any) -> Fragment:
    return _compare(column, ">", value)


def gte(column: str, value: Any) -> Fragment:
    return _compare(column, ">=", value)


def lt(column: str, value: Any) -> Fragment:
    return _compare(column, "<", value)


def lte(column: str, value: Any) -> Fragment:
    return _compare(column, "<=", value)


def like(column: str, pattern: str) -> Fragment:
    return _compare(column, "LIKE", pattern)


def in_(column: str, values: Iterable[Any]) -> Fragment:
    """``column IN (?,?)``; an empty list matches nothing."""
    values = list(values)
    if not values:
        return Fragment().append_text("1 = 0")
    return Fragment().append_text(f"{column} IN (").append_values(values).append_text(")")


def not_in(column: str, values: Iterable[Any]) -> Fragment:
    """``column NOT IN (?,?)``; an empty list matches everything."""
    values = list(values)
    if not values:
        return Fragment().append_text("1 = 1")
    return Fragment().append_text(f"{column} NOT IN (").append_values(values).append_text(")")


def between(column: str, low: Any, high: Any) -> Fragment:
    frag = Fragment().append_text(f"{column} BETWEEN ").append_value(low)
    return frag.append_text(" AND ").append_value(high)


def is_null(column: str) -> Fragment:
    return Fragment().append_text(f"{column} IS NULL")


def is_not_null(column: str) -> Fragment:
    return Fragment().append_text(f"{column} IS NOT NULL")


def in_subquery(column: str, subquery: Subquery) -> Fragment:
    return subquery.append_to(Fragment().append_text(f"{column} IN "))


def exists(subquery: Subquery) -> Fragment:
    return subquery.append_to(Fragment().append_text("EXISTS "))


def not_exists(subquery: Subquery) -> Fragment:
    return subquery.append_to(Fragment().append_text("NOT EXISTS "))


def raw(sql: str, *values: Any) -> Fragment:
    """Raw SQL where each ``?`` binds the next of ``values``."""
    return Fragment(sql, values)


def _join(parts: Sequence[Fragment], sep: str) -> Fragment:
    frag = Fragment()
    for i, part in enumerate(parts):
        if i:
            frag.append_text(sep)
        frag.append_fragment(part)
    return frag


def and_(*parts: Fragment) -> Fragment:
    return _join(parts, " AND ")


def or_(*parts: Fragment) -> Fragment:
    """Join with ``OR``, parenthesised when there is more than one part."""
    if len(parts) == 1:
        return parts[0].copy()
    return Fragment().append_text("(").append_fragment(_join(parts, " OR ")).append_text(")")


def case_when(
    cases: Sequence[tuple[Fragment, Any]],
    else_: Any = None,
    alias: str | None = None,
) -> Fragment:
    """``CASE WHEN cond THEN ? ... [ELSE ?] END [AS alias]``.

    Args:
        cases: ``(condition, result)`` pairs; results are bound values.
        else_: Optional bound value for ``ELSE``.
        alias: Optional column alias.
    """
    frag = Fragment().append_text("CASE")
    for condition, result in cases:
        frag.append_text(" WHEN ").append_fragment(condition)
        frag.append_text(" THEN ").append_value(result)
    if else_ is not None:
        frag.append_text(" ELSE ").append_value(else_)
    frag.append_text(" END")
    if alias:
        frag.append_text(f" AS {alias}")
    return frag


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


def _aggregate(func: str, column: str, alias: str | None, distinct: bool = False) -> str:
    inner = f"DISTINCT {column}" if distinct else column
    text = f"{func}({inner})"
    return f"{text} AS {alias}" if alias else text


def count(column: str = "*", alias: str | None = None, distinct: bool = False) -> str:
    return _aggregate("COUNT", column, alias, distinct)


def sum_(column: str, alias: str | None = None) -> str:
    return _aggregate("SUM", column, alias)


def avg(column: str, alias: str | None = None) -> str:
    return _aggregate("AVG", column, alias)


def min_(column: str, alias: str | None = None) -> str:
    return _aggregate("MIN", column, alias)


def max_(column: str, alias: str | None = None) -> str:
    return _aggregate("MAX", column, alias)
