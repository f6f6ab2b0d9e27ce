"""Backend and column type enumerations."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    ORACLE = "oracle"


class DbType(Enum):
    """Database type tag attached to fields and bound parameters."""

    STRING = "string"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    GUID = "guid"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    BINARY = "binary"
    OBJECT = "object"


class ParameterDirection(Enum):
    """Direction of a bound command parameter."""

    INPUT = "input"
    OUTPUT = "output"
