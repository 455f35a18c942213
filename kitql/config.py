"""Pydantic models for database and interception settings.

Settings can be built in code or read from the environment::

    from kitql import Database, DatabaseConfig

    config = DatabaseConfig.from_env()          # KITQL_DIALECT, KITQL_DSN, ...
    database = Database.from_config(config)

Recognised variables (with the default ``KITQL_`` prefix):

``KITQL_DIALECT``
    ``sqlite`` (default), ``postgres`` or ``mysql``.
``KITQL_DSN``
    Database path (SQLite) or connection string (PostgreSQL).
``KITQL_SOFT_DELETE_COLUMN``
    Enables soft delete on this flag column.
``KITQL_SOFT_DELETE_EXCLUDED``
    Comma-separated tables that keep physical deletes.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

#: Supported dialect names.
DialectName = Literal["sqlite", "mysql", "postgres"]


class SoftDeleteSettings(BaseModel):
    """Soft delete settings.

    Attributes:
        column: Flag or timestamp column marking deleted rows.
        excluded_tables: Tables that keep physical deletes.
        deleted_value: Value written on delete.
        active_value: Value of live rows; ``None`` means ``IS NULL``.
    """

    model_config = ConfigDict(extra="forbid")

    column: str = "deleted"
    excluded_tables: list[str] = Field(default_factory=list)
    deleted_value: Any = True
    active_value: Any = False


class DatabaseConfig(BaseModel):
    """Connection and interception settings for one database.

    Attributes:
        dialect: Target dialect.
        dsn: SQLite path or PostgreSQL connection string.
        soft_delete: Soft delete settings; ``None`` disables soft delete.
    """

    model_config = ConfigDict(extra="forbid")

    dialect: DialectName = "sqlite"
    dsn: str = ":memory:"
    soft_delete: SoftDeleteSettings | None = None

    @classmethod
    def from_env(
        cls,
        prefix: str = "KITQL_",
        environ: Mapping[str, str] | None = None,
    ) -> DatabaseConfig:
        """Read settings from environment variables.

        Args:
            prefix: Variable name prefix.
            environ: Mapping to read instead of ``os.environ``.

        Raises:
            pydantic.ValidationError: If a value is invalid (e.g. an unknown dialect).
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        if f"{prefix}DIALECT" in env:
            data["dialect"] = env[f"{prefix}DIALECT"]
        if f"{prefix}DSN" in env:
            data["dsn"] = env[f"{prefix}DSN"]
        column = env.get(f"{prefix}SOFT_DELETE_COLUMN")
        if column:
            excluded = env.get(f"{prefix}SOFT_DELETE_EXCLUDED", "")
            data["soft_delete"] = {
                "column": column,
                "excluded_tables": [t.strip() for t in excluded.split(",") if t.strip()],
            }
        return cls.model_validate(data)
