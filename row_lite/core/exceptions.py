"""RowLite exception hierarchy.

Driver exceptions raised while executing a command pass through unchanged;
everything RowLite itself detects is a subclass of RowLiteError.
"""

from __future__ import annotations

from typing import Any


class RowLiteError(Exception):
    """Base exception for all RowLite errors."""


# --- Mapping ---


class MappingError(RowLiteError):
    """Base for mapping errors."""


class ConfigurationError(MappingError):
    """Raised when a mapped type lacks required metadata."""

    def __init__(self, target_class: str, detail: str) -> None:
        self.target_class = target_class
        super().__init__(f"Invalid mapping for {target_class}: {detail}")


class ColumnMismatchError(MappingError):
    """Raised when a row cannot be turned into an instance of the target class."""

    def __init__(self, target_class: str, missing_fields: list[str]) -> None:
        self.target_class = target_class
        self.missing_fields = missing_fields
        super().__init__(f"Cannot map to {target_class}: missing fields {missing_fields}")


class ConversionError(MappingError):
    """Raised when a raw column value cannot be coerced into the requested type."""

    def __init__(self, value: Any, target_type: Any, detail: str | None = None) -> None:
        self.value = value
        self.target_type = target_type
        type_name = getattr(target_type, "__name__", str(target_type))
        message = f"Cannot convert {value!r} to {type_name}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


# --- Execution ---


class ExecutionError(RowLiteError):
    """Base for query execution errors."""


class NotFoundError(ExecutionError):
    """Raised when a single-result query matched no row."""

    def __init__(self, target_class: str, sql_filter: str | None) -> None:
        self.target_class = target_class
        self.sql_filter = sql_filter
        super().__init__(f"{target_class}: '{sql_filter}' does not exist")


class DuplicateKeyError(ExecutionError):
    """Raised when two rows map to the same dictionary key."""

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"Duplicate key in result set: {key!r}")


# --- Adapter ---


class AdapterError(RowLiteError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""
