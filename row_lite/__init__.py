"""RowLite - typed object mapping over SQL commands and readers."""

from __future__ import annotations

from row_lite.core.binder import ParameterBinder
from row_lite.core.connection import ConnectionConfig, ConnectionManager
from row_lite.core.dialect import (
    Dialect,
    dialect_for,
    get_default_dialect,
    set_default_dialect,
)
from row_lite.core.engine import Engine
from row_lite.core.enums import DatabaseBackend, DbType, ParameterDirection
from row_lite.core.exceptions import (
    AdapterError,
    ColumnMismatchError,
    ConfigurationError,
    ConnectionError,  # noqa: A004
    ConversionError,
    DuplicateKeyError,
    ExecutionError,
    MappingError,
    NotFoundError,
    RowLiteError,
)
from row_lite.core.params import sql_format
from row_lite.core.statement import StatementBuilder
from row_lite.mapping.metadata import (
    ModelDefinition,
    ModelRegistry,
    column_names_of,
    definition_of,
    mapped_field,
)
from row_lite.mapping.model import ModelMapper
from row_lite.repository.base import Repository

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    # Dialect
    "Dialect",
    "dialect_for",
    "get_default_dialect",
    "set_default_dialect",
    # Engine
    "Engine",
    "StatementBuilder",
    "ParameterBinder",
    "sql_format",
    # Mapping
    "ModelMapper",
    "ModelDefinition",
    "ModelRegistry",
    "definition_of",
    "column_names_of",
    "mapped_field",
    # Repository
    "Repository",
    # Enums
    "DatabaseBackend",
    "DbType",
    "ParameterDirection",
    # Exceptions
    "RowLiteError",
    "MappingError",
    "ConfigurationError",
    "ColumnMismatchError",
    "ConversionError",
    "ExecutionError",
    "NotFoundError",
    "DuplicateKeyError",
    "AdapterError",
    "ConnectionError",
]
