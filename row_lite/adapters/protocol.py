"""Command and Reader protocols.

These are the two capabilities RowLite consumes from the driver layer.
Any object satisfying them can be passed to the Engine; the bundled
DB-API implementation lives in ``row_lite.adapters.dbapi``.
"""

from __future__ import annotations

import datetime
import uuid
from collections.abc import Iterator
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from row_lite.core.enums import DbType, ParameterDirection


@runtime_checkable
class Parameter(Protocol):
    """A single named parameter bound to a command."""

    name: str
    db_type: DbType
    direction: ParameterDirection
    value: Any


@runtime_checkable
class ParameterCollection(Protocol):
    """Ordered list of parameters owned by a command."""

    def clear(self) -> None: ...

    def add(self, parameter: Parameter) -> None: ...

    def __len__(self) -> int: ...

    def __getitem__(self, index: int) -> Parameter: ...

    def __iter__(self) -> Iterator[Parameter]: ...


@runtime_checkable
class Reader(Protocol):
    """Forward-only, single-pass row cursor with ordinal column access."""

    def advance(self) -> bool:
        """Move to the next row. Returns False once the rows are exhausted."""
        ...

    @property
    def column_count(self) -> int: ...

    @property
    def column_names(self) -> list[str]: ...

    def get_string(self, i: int) -> str | None: ...

    def get_int16(self, i: int) -> int | None: ...

    def get_int32(self, i: int) -> int | None: ...

    def get_int64(self, i: int) -> int | None: ...

    def get_boolean(self, i: int) -> bool | None: ...

    def get_datetime(self, i: int) -> datetime.datetime | None: ...

    def get_guid(self, i: int) -> uuid.UUID | None: ...

    def get_float(self, i: int) -> float | None: ...

    def get_double(self, i: int) -> float | None: ...

    def get_decimal(self, i: int) -> Decimal | None: ...

    def get_bytes(self, i: int) -> bytes | None: ...

    def get_untyped(self, i: int) -> Any: ...

    def release(self) -> None:
        """Close the underlying cursor. Safe to call more than once."""
        ...

    def __enter__(self) -> Reader: ...

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None: ...


@runtime_checkable
class Command(Protocol):
    """Mutable unit of work: SQL text plus named parameter bindings."""

    @property
    def text(self) -> str: ...

    def set_text(self, sql: str) -> None: ...

    @property
    def parameters(self) -> ParameterCollection: ...

    def create_parameter(
        self,
        name: str,
        db_type: DbType,
        value: Any = None,
        direction: ParameterDirection = ParameterDirection.INPUT,
    ) -> Parameter: ...

    def execute(self) -> Reader:
        """Run the current text with the current parameters."""
        ...
