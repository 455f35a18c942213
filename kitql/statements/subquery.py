"""Subqueries embedded into a parent fragment.

A :class:`Subquery` never renders on its own.  Its only output is
:meth:`Subquery.append_to`, which splices ``(text)`` into the parent and
appends the bound values after the parent's, so placeholder numbering stays
correct however deeply statements are nested.

Example::

    recent = Subquery(Select("article").columns("id").filter("views > ?", [100]))
    outer = Select("article_tag").filter(lambda f: recent.append_to(f.append_text("article_id IN ")))
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Any, Union

from kitql.compile.fragment import Fragment
from kitql.statements.select import Select

SubquerySource = Union[Select, Fragment, Callable[[Fragment], Any]]


class Subquery:
    """A nested query: a :class:`Select`, a fragment, or a fragment closure.

    Selects are assembled when the subquery is created, so interception
    rules in effect at that moment apply to them.
    """

    def __init__(self, source: SubquerySource) -> None:
        if isinstance(source, Select):
            self._fragment = source.to_fragment()
        elif isinstance(source, Fragment):
            self._fragment = source.copy()
        else:
            self._fragment = Fragment()
            source(self._fragment)

    def append_to(self, parent: Fragment) -> Fragment:
        """Append ``(subquery)`` and its values to ``parent``; returns ``parent``."""
        return parent.append_text("(").append_fragment(self._fragment).append_text(")")
