"""Entity reflection: records as ordered (name, value, present) fields.

A record is any object KitQL can enumerate fields on:

* an object implementing the :class:`FieldAccess` capability
  (``field_names`` / ``get`` / ``set``), such as :class:`Entity`;
* a plain pydantic model;
* a dataclass.

The table of a record type is derived from its class name only
(``ArticleTag`` -> ``article_tag``); there is no per-call override for the
entity-driven builders.
"""
from __future__ import annotations

import dataclasses
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict

from kitql.errors import SchemaMismatchError
from kitql.values import Value

T = TypeVar("T")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)([A-Z])")


# ---------------------------------------------------------------------------
# Field and primary key
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Field:
    """One reflected field.

    Attributes:
        name: Column name.
        value: The bound value (``NULL`` when set to ``None``).
        present: ``False`` when the field was never set, meaning "omit from
            the statement" rather than "write NULL".
    """

    name: str
    value: Value
    present: bool = True


class PrimaryKey:
    """Primary-key shape of a table: :class:`Single` or :class:`Composite`."""

    columns: tuple[str, ...]
    auto_generated: bool = False

    @staticmethod
    def single(column: str, auto_generated: bool = True) -> Single:
        return Single(column, auto_generated)

    @staticmethod
    def composite(*columns: str) -> Composite:
        return Composite(tuple(columns))

    @property
    def is_composite(self) -> bool:
        return len(self.columns) > 1


@dataclass(frozen=True)
class Single(PrimaryKey):
    """A one-column key, optionally generated by the database."""

    column: str
    auto_generated: bool = True

    @property
    def columns(self) -> tuple[str, ...]:  # type: ignore[override]
        return (self.column,)


@dataclass(frozen=True)
class Composite(PrimaryKey):
    """A multi-column key; column order defines tuple order in predicates."""

    columns: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        if not self.columns:
            raise SchemaMismatchError("A composite primary key needs at least one column.")


# ---------------------------------------------------------------------------
# Field access capability
# ---------------------------------------------------------------------------


@runtime_checkable
class FieldAccess(Protocol):
    """Explicit field enumeration implemented per record type."""

    def field_names(self) -> list[str]: ...

    def get(self, name: str) -> Any: ...

    def set(self, name: str, value: Any) -> None: ...


class Entity(BaseModel):
    """Base class for records backed by pydantic.

    A field counts as present when it was passed to the constructor, loaded
    from a row, or assigned afterwards (pydantic's ``model_fields_set``), so
    ``Article(title="x")`` leaves ``created_at`` to the column default.

    Example::

        class ArticleTag(Entity):
            article_id: int
            share_seq: int
            tag: str | None = None
    """

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def field_names(cls) -> list[str]:
        return list(cls.model_fields)

    def get(self, name: str) -> Any:
        return getattr(self, name)

    def set(self, name: str, value: Any) -> None:
        setattr(self, name, value)

    def is_set(self, name: str) -> bool:
        return name in self.model_fields_set


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def table_name_of(record_type: type | object) -> str:
    """Return the snake_case table name for a PascalCase record type."""
    cls = record_type if isinstance(record_type, type) else type(record_type)
    return _CAMEL_BOUNDARY.sub(r"_\1", cls.__name__).lower()


def field_names_of(record_type: type) -> list[str]:
    """Return the field names of a record type without an instance.

    Raises:
        SchemaMismatchError: If the type cannot be reflected.
    """
    if isinstance(record_type, type) and issubclass(record_type, BaseModel):
        return list(record_type.model_fields)
    if dataclasses.is_dataclass(record_type):
        return [f.name for f in dataclasses.fields(record_type)]
    if hasattr(record_type, "field_names"):
        return list(record_type().field_names())
    raise SchemaMismatchError(
        f"Cannot reflect fields of '{getattr(record_type, '__name__', record_type)}'.",
        details={"type": getattr(record_type, "__name__", str(record_type))},
    )


def fields_of(record: object) -> list[Field]:
    """Enumerate a record's fields in declaration order.

    Raises:
        SchemaMismatchError: If the record cannot be reflected.
    """
    if isinstance(record, FieldAccess):
        is_set = getattr(record, "is_set", None)
        return [
            Field(name, Value.of(record.get(name)), is_set(name) if is_set else True)
            for name in record.field_names()
        ]
    if isinstance(record, BaseModel):
        fields_set = record.model_fields_set
        return [
            Field(name, Value.of(getattr(record, name)), name in fields_set)
            for name in type(record).model_fields
        ]
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return [
            Field(f.name, Value.of(getattr(record, f.name)))
            for f in dataclasses.fields(record)
        ]
    raise SchemaMismatchError(
        f"Cannot reflect fields of '{type(record).__name__}'.",
        details={"type": type(record).__name__},
    )


def check_key(field_names: Sequence[str], key: PrimaryKey, table: str) -> None:
    """Ensure every key column is among ``field_names``.

    Raises:
        SchemaMismatchError: Listing the missing key columns.
    """
    missing = [col for col in key.columns if col not in field_names]
    if missing:
        raise SchemaMismatchError(
            f"Primary key column(s) {missing} not found on '{table}'.",
            details={"table": table, "missing": missing, "fields": list(field_names)},
        )


def primary_key_values(record: object, key: PrimaryKey) -> list[Value]:
    """Return the record's key values in key-column order.

    Raises:
        SchemaMismatchError: If a key column is not a reflected field.
    """
    by_name = {f.name: f.value for f in fields_of(record)}
    check_key(list(by_name), key, table_name_of(record))
    return [by_name[col] for col in key.columns]


def build_entity(record_type: type[T], row: Mapping[str, Any]) -> T:
    """Construct a record from a driver row, ignoring unknown columns."""
    names = field_names_of(record_type)
    data = {name: row[name] for name in names if name in row}
    if issubclass(record_type, BaseModel):
        return record_type.model_validate(data)
    if dataclasses.is_dataclass(record_type):
        return record_type(**data)
    record = record_type()
    for name, value in data.items():
        record.set(name, value)  # type: ignore[attr-defined]
    return record
