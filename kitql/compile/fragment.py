"""Fragment builder: SQL text interleaved with placeholder markers.

A :class:`Fragment` is an append-only buffer holding SQL text, placeholder
markers and a parallel ordered list of bound values.  It is dialect-agnostic
until :meth:`Fragment.render` turns markers into ``?`` or ``$n``.

Example::

    frag = Fragment()
    frag.append_text("age = ").append_value(23)
    frag.append_text(" AND status IN (").append_values(["a", "b"]).append_text(")")
    frag.render("postgres").sql
    # 'age = $1 AND status IN ($2,$3)'
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from kitql.compile.base import RenderedSQL
from kitql.compile.registry import DialectLike, resolve_dialect
from kitql.errors import PlaceholderValueCountMismatchError, UnsupportedByDialectError
from kitql.values import Value


class _Placeholder:
    """Marker standing in for one bound value inside a fragment."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "?"


PLACEHOLDER = _Placeholder()

_MARKER_RE = re.compile(r"\?\??")


class Fragment:
    """Mutable SQL text plus ordered bound values.

    Args:
        sql: Optional initial SQL where each ``?`` is a placeholder marker
            and ``??`` is a literal question mark.
        values: Values for the markers in ``sql``.
        dialect: Default dialect used by :meth:`render` when none is given.
    """

    def __init__(
        self,
        sql: str = "",
        values: Iterable[Any] = (),
        dialect: DialectLike | None = None,
    ) -> None:
        self._parts: list[str | _Placeholder] = []
        self._values: list[Value] = []
        self.dialect = dialect
        self.append_sql(sql, values)

    # ------------------------------------------------------------------
    # Appending
    # ------------------------------------------------------------------

    def append_text(self, text: str) -> Fragment:
        """Append literal SQL text; ``?`` characters in it are not markers."""
        if text:
            self._parts.append(text)
        return self

    def append_value(self, value: Any) -> Fragment:
        """Append a placeholder marker and bind ``value`` to it."""
        self._parts.append(PLACEHOLDER)
        self._values.append(Value.of(value))
        return self

    def append_values(self, values: Iterable[Any], separator: str = ",") -> Fragment:
        """Append one marker per value, joined by ``separator``."""
        for i, value in enumerate(values):
            if i:
                self._parts.append(separator)
            self.append_value(value)
        return self

    def append_sql(self, sql: str, values: Iterable[Any] = ()) -> Fragment:
        """Append raw SQL where every ``?`` is a placeholder marker.

        A literal question mark, inside a quoted string or as the
        PostgreSQL jsonb ``?`` operator, is written ``??``.  Quoting is not
        parsed, so an unescaped ``?`` inside a literal still counts as a
        marker.  The marker count is not checked here; a mismatch with
        ``values`` surfaces when the fragment is rendered.
        """
        pos = 0
        for match in _MARKER_RE.finditer(sql):
            if match.start() > pos:
                self._parts.append(sql[pos : match.start()])
            if match.group() == "??":
                self._parts.append("?")
            else:
                self._parts.append(PLACEHOLDER)
            pos = match.end()
        if pos < len(sql):
            self._parts.append(sql[pos:])
        for value in values:
            self._values.append(Value.of(value))
        return self

    def append_fragment(self, other: Fragment) -> Fragment:
        """Splice another fragment's text and values, values kept in order."""
        self._parts.extend(other._parts)
        self._values.extend(other._values)
        return self

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def values(self) -> list[Value]:
        return list(self._values)

    @property
    def placeholder_count(self) -> int:
        return sum(1 for part in self._parts if part is PLACEHOLDER)

    @property
    def is_empty(self) -> bool:
        return not self._parts

    @property
    def text(self) -> str:
        """The fragment text with every marker shown as ``?``."""
        return "".join("?" if part is PLACEHOLDER else part for part in self._parts)

    def copy(self) -> Fragment:
        clone = Fragment(dialect=self.dialect)
        clone._parts = list(self._parts)
        clone._values = list(self._values)
        return clone

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"Fragment({self.text!r}, values={len(self._values)})"

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, dialect: DialectLike | None = None) -> RenderedSQL:
        """Render markers for ``dialect`` and return the SQL with its values.

        Args:
            dialect: Target dialect; defaults to the fragment's own dialect.

        Raises:
            PlaceholderValueCountMismatchError: If the number of markers
                differs from the number of bound values.
            UnsupportedByDialectError: If no dialect is given or known.
        """
        target = dialect if dialect is not None else self.dialect
        if target is None:
            raise UnsupportedByDialectError("Rendering", "unset")
        resolved = resolve_dialect(target)

        markers = self.placeholder_count
        if markers != len(self._values):
            raise PlaceholderValueCountMismatchError(markers, len(self._values))

        out: list[str] = []
        index = 0
        for part in self._parts:
            if part is PLACEHOLDER:
                index += 1
                out.append(resolved.placeholder(index))
            else:
                out.append(part)
        return RenderedSQL("".join(out), list(self._values), resolved.dialect_name)


def to_fragment(predicate: Fragment | str, values: Iterable[Any] = ()) -> Fragment:
    """Coerce raw SQL (``?`` markers, ``??`` for a literal ``?``) or a fragment into a fragment."""
    if isinstance(predicate, Fragment):
        return predicate
    return Fragment(predicate, values)
