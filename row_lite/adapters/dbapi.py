"""DB-API 2.0 implementation of the Command and Reader protocols.

Wraps any PEP 249 connection. Typed reader accessors coerce the values
drivers commonly hand back (ISO text for timestamps, integers for
booleans, text for UUIDs) and raise ConversionError when they cannot.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from row_lite.core.dialect import Dialect, get_default_dialect
from row_lite.core.enums import DbType, ParameterDirection
from row_lite.core.exceptions import ConversionError

logger = logging.getLogger(__name__)

_INT_RANGES = {
    "int16": (-(2**15), 2**15 - 1),
    "int32": (-(2**31), 2**31 - 1),
    "int64": (-(2**63), 2**63 - 1),
}

_TRUE_TEXT = frozenset({"1", "true", "t", "yes", "y"})
_FALSE_TEXT = frozenset({"0", "false", "f", "no", "n"})


@dataclass
class DbParameter:
    """A named input parameter."""

    name: str
    db_type: DbType
    value: Any = None
    direction: ParameterDirection = ParameterDirection.INPUT


class ParameterList:
    """Ordered parameter collection of a DbApiCommand."""

    def __init__(self) -> None:
        self._items: list[DbParameter] = []

    def clear(self) -> None:
        self._items.clear()

    def add(self, parameter: DbParameter) -> None:
        self._items.append(parameter)

    def as_dict(self) -> dict[str, Any]:
        """Name to value mapping handed to ``cursor.execute``."""
        return {p.name: p.value for p in self._items}

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> DbParameter:
        return self._items[index]

    def __iter__(self) -> Iterator[DbParameter]:
        return iter(self._items)


class DbApiReader:
    """Forward-only reader over a DB-API cursor.

    The cursor is closed when the rows run out, on ``release()`` or when
    leaving a ``with`` block, whichever comes first.
    """

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor
        self._row: Any = None
        self._closed = False
        description = cursor.description or ()
        self._columns = [desc[0] for desc in description]

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def column_count(self) -> int:
        return len(self._columns)

    @property
    def column_names(self) -> list[str]:
        return list(self._columns)

    def advance(self) -> bool:
        if self._closed:
            return False
        self._row = self._cursor.fetchone()
        if self._row is None:
            self.release()
            return False
        return True

    def release(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._row = None
        self._cursor.close()

    def __enter__(self) -> DbApiReader:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.release()

    # --- accessors ---

    def get_untyped(self, i: int) -> Any:
        if self._row is None:
            raise RuntimeError("Reader is not positioned on a row; call advance() first")
        return self._row[i]

    def _coerce(self, i: int, target: Any, convert: Callable[[Any], Any]) -> Any:
        value = self.get_untyped(i)
        if value is None:
            return None
        try:
            return convert(value)
        except ConversionError:
            raise
        except (TypeError, ValueError, OverflowError, InvalidOperation) as e:
            raise ConversionError(value, target, str(e)) from e

    def get_string(self, i: int) -> str | None:
        return self._coerce(i, str, _to_str)

    def get_int16(self, i: int) -> int | None:
        return self._coerce(i, int, lambda v: _to_int(v, "int16"))

    def get_int32(self, i: int) -> int | None:
        return self._coerce(i, int, lambda v: _to_int(v, "int32"))

    def get_int64(self, i: int) -> int | None:
        return self._coerce(i, int, lambda v: _to_int(v, "int64"))

    def get_boolean(self, i: int) -> bool | None:
        return self._coerce(i, bool, _to_bool)

    def get_datetime(self, i: int) -> datetime.datetime | None:
        return self._coerce(i, datetime.datetime, _to_datetime)

    def get_guid(self, i: int) -> uuid.UUID | None:
        return self._coerce(i, uuid.UUID, _to_uuid)

    def get_float(self, i: int) -> float | None:
        return self._coerce(i, float, float)

    def get_double(self, i: int) -> float | None:
        return self._coerce(i, float, float)

    def get_decimal(self, i: int) -> Decimal | None:
        return self._coerce(i, Decimal, _to_decimal)

    def get_bytes(self, i: int) -> bytes | None:
        return self._coerce(i, bytes, _to_bytes)


def _to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return str(value)


def _to_int(value: Any, width: str) -> int:
    if isinstance(value, bool):
        result = int(value)
    elif isinstance(value, int):
        result = value
    elif isinstance(value, (float, Decimal)):
        if value != int(value):
            raise ValueError("value has a fractional part")
        result = int(value)
    elif isinstance(value, str):
        result = int(value.strip())
    else:
        raise TypeError(f"unsupported type {type(value).__name__}")
    low, high = _INT_RANGES[width]
    if not low <= result <= high:
        raise OverflowError(f"value out of {width} range")
    return result


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_TEXT:
            return True
        if text in _FALSE_TEXT:
            return False
    raise ValueError("not a boolean")


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("ascii")
    if isinstance(value, str):
        return datetime.datetime.fromisoformat(value.strip())
    raise TypeError(f"unsupported type {type(value).__name__}")


def _to_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)) and len(bytes(value)) == 16:
        return uuid.UUID(bytes=bytes(value))
    if isinstance(value, str):
        return uuid.UUID(value)
    raise TypeError(f"unsupported type {type(value).__name__}")


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("boolean is not a decimal")
    return Decimal(str(value))


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"unsupported type {type(value).__name__}")


class DbApiCommand:
    """Command over a DB-API connection.

    The command never commits, rolls back or closes the connection; it
    only opens one cursor per ``execute()``.

    Args:
        connection: PEP 249 connection.
        dialect: Dialect whose placeholder style the driver understands.
    """

    def __init__(self, connection: Any, dialect: Dialect | None = None) -> None:
        self._connection = connection
        self._dialect = dialect or get_default_dialect()
        self._text = ""
        self._parameters = ParameterList()

    @property
    def connection(self) -> Any:
        return self._connection

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, sql: str) -> None:
        self._text = sql

    @property
    def parameters(self) -> ParameterList:
        return self._parameters

    def create_parameter(
        self,
        name: str,
        db_type: DbType,
        value: Any = None,
        direction: ParameterDirection = ParameterDirection.INPUT,
    ) -> DbParameter:
        return DbParameter(name=name, db_type=db_type, value=value, direction=direction)

    def execute(self) -> DbApiReader:
        """Execute the current text and return a reader over its rows."""
        params = self._parameters.as_dict()
        logger.debug("Executing SQL: %s params=%r", self._text, params)
        cursor = self._connection.cursor()
        try:
            if params:
                cursor.execute(self._text, params)
            else:
                cursor.execute(self._text)
        except BaseException:
            cursor.close()
            raise
        return DbApiReader(cursor)
