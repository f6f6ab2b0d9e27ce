"""Model metadata registry.

A ModelDefinition describes how a dataclass or Pydantic model maps to a
table: table name, ordered columns, primary key and per-field accessors.
Definitions are built on first use and cached for the life of the
process; the registry only ever grows.

Declaring a model::

    @dataclass
    class User:
        __tablename__ = "Users"

        Id: int = mapped_field(primary_key=True)
        Name: str = ""
"""

from __future__ import annotations

import dataclasses
import threading
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from row_lite.core.enums import DbType
from row_lite.core.exceptions import ConfigurationError
from row_lite.mapping.extraction import db_type_of

PRIMARY_KEY = "primary_key"
COLUMN = "column"
DB_TYPE = "db_type"


def mapped_field(
    *,
    primary_key: bool = False,
    column: str | None = None,
    db_type: DbType | None = None,
    **kwargs: Any,
) -> Any:
    """Dataclass ``field()`` carrying column metadata."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[PRIMARY_KEY] = primary_key
    if column is not None:
        metadata[COLUMN] = column
    if db_type is not None:
        metadata[DB_TYPE] = db_type
    return dataclasses.field(metadata=metadata, **kwargs)


@dataclass(frozen=True)
class FieldDefinition:
    """One mapped column of a model."""

    name: str
    column: str
    db_type: DbType
    field_type: Any
    is_primary_key: bool = False
    init: bool = True

    def get_value(self, instance: Any) -> Any:
        return getattr(instance, self.name)

    def set_value(self, instance: Any, value: Any) -> None:
        object.__setattr__(instance, self.name, value)


@dataclass(frozen=True)
class ModelDefinition:
    """Table-level description of a mapped type."""

    model_class: type
    name: str
    table_name: str
    fields: tuple[FieldDefinition, ...]
    primary_key: FieldDefinition

    @property
    def column_names(self) -> str:
        """Comma-joined column list in declaration order."""
        return ", ".join(f.column for f in self.fields)

    @property
    def primary_key_name(self) -> str:
        return self.primary_key.column

    def field_for_column(self, column: str) -> FieldDefinition | None:
        """Look up a field by column name, ignoring case."""
        wanted = column.lower()
        for f in self.fields:
            if f.column.lower() == wanted:
                return f
        return None


def is_pydantic_model(cls: type) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    try:
        from pydantic import BaseModel

        return isinstance(cls, type) and issubclass(cls, BaseModel)
    except ImportError:
        return False


def _resolve_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError) as e:
        raise ConfigurationError(cls.__name__, f"cannot resolve annotations ({e})") from e


def _raw_fields(cls: type) -> list[tuple[str, Any, dict[str, Any], bool]]:
    """Return ``(name, type, metadata, init)`` for each declared field, in order."""
    if is_pydantic_model(cls):
        result = []
        for name, info in cls.model_fields.items():  # type: ignore[attr-defined]
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            result.append((name, info.annotation, dict(extra), True))
        return result

    if dataclasses.is_dataclass(cls):
        hints = _resolve_hints(cls)
        return [
            (f.name, hints.get(f.name, f.type), dict(f.metadata), f.init)
            for f in dataclasses.fields(cls)
        ]

    raise ConfigurationError(cls.__name__, "not a dataclass or Pydantic model")


def build_model_definition(cls: type) -> ModelDefinition:
    """Build a ModelDefinition from class annotations and field metadata.

    Raises:
        ConfigurationError: If the class is not a dataclass/Pydantic model,
            has zero or several primary keys, or declares a field type with
            no database type mapping.
    """
    declared_pk = getattr(cls, "__primary_key__", None)
    fields: list[FieldDefinition] = []

    for name, field_type, metadata, init in _raw_fields(cls):
        db_type = metadata.get(DB_TYPE) or db_type_of(field_type)
        if db_type is None:
            raise ConfigurationError(
                cls.__name__, f"field '{name}' has unmapped type {field_type!r}"
            )
        column = metadata.get(COLUMN) or name
        is_pk = bool(metadata.get(PRIMARY_KEY)) or declared_pk in (name, column)
        fields.append(
            FieldDefinition(
                name=name,
                column=column,
                db_type=DbType(db_type),
                field_type=field_type,
                is_primary_key=is_pk,
                init=init,
            )
        )

    primary_keys = [f for f in fields if f.is_primary_key]
    if not primary_keys:
        raise ConfigurationError(cls.__name__, "no primary key declared")
    if len(primary_keys) > 1:
        names = [f.name for f in primary_keys]
        raise ConfigurationError(cls.__name__, f"multiple primary keys declared {names}")

    return ModelDefinition(
        model_class=cls,
        name=cls.__name__,
        table_name=getattr(cls, "__tablename__", None) or cls.__name__,
        fields=tuple(fields),
        primary_key=primary_keys[0],
    )


class ModelRegistry:
    """Process-wide cache of ModelDefinitions, keyed by class.

    Entries are added on first lookup and never replaced or removed, so
    readers need no locking; only the build-and-insert step is serialized.

    Args:
        builder: Function turning a class into its ModelDefinition.
    """

    def __init__(
        self,
        builder: Callable[[type], ModelDefinition] = build_model_definition,
    ) -> None:
        self._builder = builder
        self._definitions: dict[type, ModelDefinition] = {}
        self._lock = threading.Lock()

    def definition_of(self, cls: type) -> ModelDefinition:
        """Return the cached definition for *cls*, building it on first use."""
        try:
            return self._definitions[cls]
        except KeyError:
            pass
        with self._lock:
            definition = self._definitions.get(cls)
            if definition is None:
                definition = self._builder(cls)
                self._definitions[cls] = definition
            return definition

    def column_names_of(self, cls: type) -> str:
        return self.definition_of(cls).column_names

    def has(self, cls: type) -> bool:
        """Check if a definition for *cls* has already been built."""
        return cls in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


default_registry = ModelRegistry()


def definition_of(cls: type) -> ModelDefinition:
    """Return the ModelDefinition of *cls* from the default registry."""
    return default_registry.definition_of(cls)


def column_names_of(cls: type) -> str:
    """Return the comma-joined column list of *cls* from the default registry."""
    return default_registry.column_names_of(cls)
