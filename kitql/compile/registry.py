"""Dialect registry (Open/Closed Principle).

``DialectFactory``
    Central registry for :class:`~kitql.compile.base.SQLDialect`
    implementations.  Register a dialect once; fragments, statements and
    connections look it up by name.

Usage::

    from kitql.compile.registry import DialectFactory

    @DialectFactory.register("mariadb")
    class MariaDBDialect(MySQLDialect):
        ...
"""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar, Union

from kitql.compile.base import SQLDialect
from kitql.errors import UnsupportedByDialectError

#: Anything accepted where a dialect is expected: a registered name or an instance.
DialectLike = Union[str, SQLDialect]


class DialectFactory:
    """Registry mapping dialect names to :class:`SQLDialect` classes.

    Example::

        @DialectFactory.register("mariadb")
        class MariaDBDialect(MySQLDialect):
            ...

        dialect = DialectFactory.create("mariadb")
    """

    _dialects: ClassVar[dict[str, type[SQLDialect]]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[type[SQLDialect]], type[SQLDialect]]:
        """Decorator that registers a dialect class under ``name``.

        Args:
            name: The dialect name (e.g. ``"postgres"``).

        Returns:
            A decorator that registers and returns the dialect class.
        """

        def decorator(dialect_cls: type[SQLDialect]) -> type[SQLDialect]:
            cls._dialects[name] = dialect_cls
            return dialect_cls

        return decorator

    @classmethod
    def register_class(cls, name: str, dialect_cls: type[SQLDialect]) -> None:
        """Register a dialect class without using the decorator form."""
        cls._dialects[name] = dialect_cls

    @classmethod
    def create(cls, name: str) -> SQLDialect:
        """Instantiate the dialect registered for ``name``.

        Raises:
            UnsupportedByDialectError: If no dialect is registered for ``name``.
        """
        dialect_cls = cls._dialects.get(name)
        if dialect_cls is None:
            raise UnsupportedByDialectError("Rendering", name)
        return dialect_cls()

    @classmethod
    def registered_targets(cls) -> list[str]:
        """Return the sorted list of registered dialect names."""
        return sorted(cls._dialects)


def resolve_dialect(dialect: DialectLike) -> SQLDialect:
    """Return a :class:`SQLDialect` for a name or pass an instance through."""
    if isinstance(dialect, SQLDialect):
        return dialect
    return DialectFactory.create(dialect)
