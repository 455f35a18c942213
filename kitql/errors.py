"""Custom exception hierarchy for KitQL.

All public errors inherit from KitQLError so callers can catch the base
class for any KitQL-specific failure.

Builder errors (subclasses of :class:`BuildError`) are raised while a
statement is being assembled, before anything reaches a driver.
"""
from __future__ import annotations

from typing import Any


class KitQLError(Exception):
    """Base exception for all KitQL errors."""


class BuildError(KitQLError):
    """Raised when a statement cannot be built from the supplied input.

    Args:
        message: Human-readable description.
        code: Machine-readable error code (e.g. SCHEMA_MISMATCH).
        details: Extra context about the failure.
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details: dict[str, Any] = details or {}

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error response suitable for API payloads."""
        return {
            "error": self.code,
            "message": str(self),
            "details": self.details,
        }


class SchemaMismatchError(BuildError):
    """Raised when reflected fields do not cover the primary key."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code="SCHEMA_MISMATCH", details=details or {})


class TableNameMismatchError(BuildError):
    """Raised when an entity-driven builder targets a differently-named table."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            f"Entity table '{actual}' does not match configured table '{expected}'.",
            code="TABLE_NAME_MISMATCH",
            details={"expected": expected, "actual": actual},
        )


class UnsupportedByDialectError(BuildError):
    """Raised when a feature is not available in the target dialect."""

    def __init__(self, feature: str, dialect: str) -> None:
        super().__init__(
            f"{feature} is not supported by the '{dialect}' dialect.",
            code="UNSUPPORTED_BY_DIALECT",
            details={"feature": feature, "dialect": dialect},
        )


class InvalidPageError(BuildError):
    """Raised for a non-positive page number/size or an overflowing offset."""

    def __init__(self, message: str, page_number: int | None, page_size: int) -> None:
        super().__init__(
            message,
            code="INVALID_PAGE",
            details={"page_number": page_number, "page_size": page_size},
        )


class NoEntitiesProvidedError(BuildError):
    """Raised when a batch builder receives an empty record sequence."""

    def __init__(self, statement: str) -> None:
        super().__init__(
            f"No entities provided for {statement}.",
            code="NO_ENTITIES_PROVIDED",
            details={"statement": statement},
        )


class EmptyColumnsError(BuildError):
    """Raised when a statement ends up with no column to write."""

    def __init__(self, statement: str, table: str | None = None) -> None:
        target = f" on '{table}'" if table else ""
        super().__init__(
            f"{statement}{target} has no column to write.",
            code="EMPTY_COLUMNS",
            details={"statement": statement, "table": table},
        )


class InvalidValueError(BuildError):
    """Raised when a Python object cannot be represented as a bound value."""

    def __init__(self, obj: object) -> None:
        super().__init__(
            f"Cannot bind value of type '{type(obj).__name__}'.",
            code="INVALID_VALUE",
            details={"type": type(obj).__name__},
        )


class SoftDeleteNotConfiguredError(BuildError):
    """Raised when restoring rows of a table without soft delete."""

    def __init__(self, table: str) -> None:
        super().__init__(
            f"Soft delete is not enabled for table '{table}'.",
            code="SOFT_DELETE_NOT_CONFIGURED",
            details={"table": table},
        )


class PlaceholderValueCountMismatchError(KitQLError):
    """Raised at render time when marker and value counts disagree.

    This always indicates a defect in the code that assembled the fragment
    (usually raw SQL passed with the wrong number of values).

    Args:
        placeholders: Number of placeholder markers in the text.
        values: Number of bound values.
    """

    def __init__(self, placeholders: int, values: int) -> None:
        super().__init__(
            f"Fragment has {placeholders} placeholder(s) but {values} bound value(s)."
        )
        self.placeholders = placeholders
        self.values = values


class DriverError(KitQLError):
    """Wraps a failure raised by the database driver.

    The original exception is kept as ``__cause__``; its code and message
    are copied so callers can inspect them without importing the driver.

    Args:
        message: The driver's error message.
        code: The driver's error code (SQLSTATE, errno, ...), if any.
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    @classmethod
    def from_exception(cls, exc: BaseException) -> DriverError:
        """Build a DriverError from an arbitrary driver exception."""
        code = (
            getattr(exc, "sqlstate", None)
            or getattr(exc, "sqlite_errorname", None)
            or getattr(exc, "pgcode", None)
        )
        if code is None and getattr(exc, "args", None) and isinstance(exc.args[0], int):
            code = str(exc.args[0])
        return cls(str(exc), code=code)


class TransactionError(KitQLError):
    """Raised when a shared transaction is used in the wrong state.

    Args:
        message: Human-readable description.
        state: The transaction state at the time of the call.
    """

    def __init__(self, message: str, state: str) -> None:
        super().__init__(message)
        self.state = state
