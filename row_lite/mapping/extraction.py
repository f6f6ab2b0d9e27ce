"""Typed value extraction.

Maps python types to database type tags and to the Reader accessor that
produces a value of that type. Extractors are looked up once per
materialization and then called for every row.
"""

from __future__ import annotations

import datetime
import types
import typing
import uuid
from collections.abc import Callable
from decimal import Decimal
from typing import Any, NewType, Union

from row_lite.adapters.protocol import Reader
from row_lite.core.enums import DbType
from row_lite.core.exceptions import ConversionError

Extractor = Callable[[Reader, int], Any]

# Narrower integer and float widths for model annotations
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
Float32 = NewType("Float32", float)

_DB_TYPES: dict[Any, DbType] = {
    str: DbType.STRING,
    Int16: DbType.INT16,
    Int32: DbType.INT32,
    Int64: DbType.INT64,
    int: DbType.INT64,
    bool: DbType.BOOLEAN,
    datetime.datetime: DbType.DATETIME,
    uuid.UUID: DbType.GUID,
    Float32: DbType.FLOAT,
    float: DbType.DOUBLE,
    Decimal: DbType.DECIMAL,
    bytes: DbType.BINARY,
    object: DbType.OBJECT,
}

_EXTRACTORS: dict[Any, Extractor] = {
    str: lambda reader, i: reader.get_string(i),
    Int16: lambda reader, i: reader.get_int16(i),
    Int32: lambda reader, i: reader.get_int32(i),
    Int64: lambda reader, i: reader.get_int64(i),
    int: lambda reader, i: reader.get_int64(i),
    bool: lambda reader, i: reader.get_boolean(i),
    datetime.datetime: lambda reader, i: reader.get_datetime(i),
    uuid.UUID: lambda reader, i: reader.get_guid(i),
    Float32: lambda reader, i: reader.get_float(i),
    float: lambda reader, i: reader.get_double(i),
    Decimal: lambda reader, i: reader.get_decimal(i),
    bytes: lambda reader, i: reader.get_bytes(i),
    object: lambda reader, i: reader.get_untyped(i),
    Any: lambda reader, i: reader.get_untyped(i),
}


def unwrap_optional(python_type: Any) -> Any:
    """Return ``X`` for ``X | None`` / ``Optional[X]``, else *python_type* unchanged."""
    origin = typing.get_origin(python_type)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(python_type) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return python_type


def db_type_of(python_type: Any) -> DbType | None:
    """Return the DbType tag for *python_type*, or None if it has no mapping."""
    python_type = unwrap_optional(python_type)
    db_type = _DB_TYPES.get(python_type)
    if db_type is not None:
        return db_type
    # Enum subclasses, str/int subclasses etc. fall back to their base
    if isinstance(python_type, type):
        for base in python_type.__mro__[1:]:
            if base is not object and base in _DB_TYPES:
                return _DB_TYPES[base]
    return None


def db_type_of_value(value: Any) -> DbType:
    """Return the DbType tag for the runtime type of *value*."""
    if value is None:
        return DbType.OBJECT
    return db_type_of(type(value)) or DbType.OBJECT


def extractor_for(python_type: Any) -> Extractor:
    """Return the extraction function producing values of *python_type*.

    Known scalar types use the Reader's typed accessor. Subclasses of a
    known type (``str`` or ``int`` enums, for instance) read through the
    base type's accessor and are then constructed from that value.
    Everything else reads the untyped value and checks it against
    *python_type*, raising ConversionError on a mismatch. NULL is returned
    as None either way.
    """
    python_type = unwrap_optional(python_type)
    extractor = _EXTRACTORS.get(python_type)
    if extractor is not None:
        return extractor
    if isinstance(python_type, type):
        for base in python_type.__mro__[1:]:
            if base is not object and base in _EXTRACTORS:
                return _construct_extractor(python_type, _EXTRACTORS[base])
    return _cast_extractor(python_type)


def _construct_extractor(python_type: type, read_base: Extractor) -> Extractor:
    def _extract(reader: Reader, i: int) -> Any:
        value = read_base(reader, i)
        if value is None:
            return None
        try:
            return python_type(value)
        except (TypeError, ValueError) as e:
            raise ConversionError(value, python_type, str(e)) from e

    return _extract


def _cast_extractor(python_type: Any) -> Extractor:
    check_type = typing.get_origin(python_type) or python_type
    if not isinstance(check_type, type):
        return _EXTRACTORS[object]

    def _extract(reader: Reader, i: int) -> Any:
        value = reader.get_untyped(i)
        if value is None or isinstance(value, check_type):
            return value
        raise ConversionError(value, python_type, f"column {i} is {type(value).__name__}")

    return _extract
