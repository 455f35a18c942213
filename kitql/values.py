"""Uniform runtime representation of bound scalar values.

Every value that crosses the builder/driver boundary is wrapped in a
:class:`Value`: a ``(kind, data)`` pair where ``kind`` is one of the
:class:`ValueKind` tags.  ``NULL`` is a tag of its own, never absence.
"""
from __future__ import annotations

import ipaddress
import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from kitql.errors import InvalidValueError


class ValueKind(str, Enum):
    """Tags of the bound-value union."""

    NULL = "null"
    INT = "int"
    FLOAT = "float"
    TEXT = "text"
    BOOL = "bool"
    DATETIME = "datetime"
    BYTES = "bytes"
    UUID = "uuid"
    JSON = "json"
    DECIMAL = "decimal"
    NETWORK = "network"
    MAC = "mac"


_MAC_RE = re.compile(r"^[0-9a-fA-F]{2}([:-])(?:[0-9a-fA-F]{2}\1){4}[0-9a-fA-F]{2}$")

_NETWORK_TYPES = (
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Interface,
    ipaddress.IPv6Interface,
)


@dataclass(frozen=True)
class MacAddress:
    """A MAC-48 address, normalised to lower-case colon form.

    Raises:
        InvalidValueError: If ``address`` is not six hex octets.
    """

    address: str

    def __post_init__(self) -> None:
        if not isinstance(self.address, str) or not _MAC_RE.match(self.address):
            raise InvalidValueError(self.address)
        object.__setattr__(self, "address", self.address.replace("-", ":").lower())

    def __str__(self) -> str:
        return self.address


@dataclass(frozen=True)
class Value:
    """A tagged bound value.

    Attributes:
        kind: The :class:`ValueKind` tag.
        data: The underlying Python object (``None`` for ``NULL``).
    """

    kind: ValueKind
    data: Any = None

    @classmethod
    def null(cls) -> Value:
        return cls(ValueKind.NULL, None)

    @classmethod
    def of(cls, obj: Any) -> Value:
        """Classify ``obj`` and wrap it.

        ``Value`` instances are returned unchanged.  ``bool`` is checked
        before ``int`` because it is a subclass of it.

        Raises:
            InvalidValueError: If the object has no matching tag.
        """
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls.null()
        if isinstance(obj, Enum):
            return cls.of(obj.value)
        if isinstance(obj, bool):
            return cls(ValueKind.BOOL, obj)
        if isinstance(obj, int):
            return cls(ValueKind.INT, obj)
        if isinstance(obj, float):
            return cls(ValueKind.FLOAT, obj)
        if isinstance(obj, str):
            return cls(ValueKind.TEXT, obj)
        if isinstance(obj, (datetime, date, time)):
            return cls(ValueKind.DATETIME, obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls(ValueKind.BYTES, bytes(obj))
        if isinstance(obj, uuid.UUID):
            return cls(ValueKind.UUID, obj)
        if isinstance(obj, Decimal):
            return cls(ValueKind.DECIMAL, obj)
        if isinstance(obj, (dict, list)):
            return cls(ValueKind.JSON, obj)
        if isinstance(obj, _NETWORK_TYPES):
            return cls(ValueKind.NETWORK, obj)
        if isinstance(obj, MacAddress):
            return cls(ValueKind.MAC, obj)
        raise InvalidValueError(obj)

    @classmethod
    def json(cls, obj: Any) -> Value:
        """Tag ``obj`` as JSON regardless of its Python type (e.g. a bare string)."""
        return cls(ValueKind.JSON, obj)

    @classmethod
    def mac(cls, address: str) -> Value:
        return cls(ValueKind.MAC, MacAddress(address))

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def is_empty(self) -> bool:
        """Return ``True`` for NULL and empty text, bytes, or JSON containers."""
        if self.is_null:
            return True
        if self.kind in (ValueKind.TEXT, ValueKind.BYTES, ValueKind.JSON):
            return len(self.data) == 0
        return False

    def to_python(self) -> Any:
        return self.data
