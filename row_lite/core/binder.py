"""Parameter binding for parameterized filters.

Binds a single named value or every property of an example object onto a
command and regenerates the command's SELECT text to match. Repeated
single-value binds with the same name only swap the value.
"""

from __future__ import annotations

import dataclasses
import typing
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from functools import lru_cache
from typing import Any

from row_lite.adapters.protocol import Command
from row_lite.core.exceptions import ConfigurationError
from row_lite.core.statement import StatementBuilder
from row_lite.mapping.extraction import db_type_of, db_type_of_value
from row_lite.mapping.metadata import is_pydantic_model

# (property name, declared type or None, getter)
PropertyDescriptor = tuple[str, Any, Callable[[Any], Any]]


def _getter(name: str) -> Callable[[Any], Any]:
    return lambda obj: getattr(obj, name)


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {}


@lru_cache(maxsize=None)
def _class_properties(cls: type) -> tuple[PropertyDescriptor, ...] | None:
    """Ordered readable properties of a structured class, or None if unstructured."""
    if is_pydantic_model(cls):
        return tuple(
            (name, info.annotation, _getter(name))
            for name, info in cls.model_fields.items()  # type: ignore[attr-defined]
        )
    if dataclasses.is_dataclass(cls):
        hints = _type_hints(cls)
        return tuple(
            (f.name, hints.get(f.name), _getter(f.name)) for f in dataclasses.fields(cls)
        )
    if issubclass(cls, tuple) and hasattr(cls, "_fields"):
        hints = _type_hints(cls)
        return tuple((name, hints.get(name), _getter(name)) for name in cls._fields)
    return None


def example_properties(example: Any) -> list[tuple[str, Any, Any]]:
    """Return ``(name, declared_type, value)`` for each readable property of *example*.

    Dataclasses, Pydantic models and NamedTuples report their fields in
    declaration order; mappings report their items; other objects report
    their public instance attributes.

    Raises:
        ConfigurationError: If *example* has no instance dictionary to read.
    """
    described = _class_properties(type(example))
    if described is not None:
        return [(name, hint, get(example)) for name, hint, get in described]
    if isinstance(example, Mapping):
        return [(str(name), None, value) for name, value in example.items()]
    try:
        attributes = vars(example)
    except TypeError as e:
        raise ConfigurationError(
            type(example).__name__, "example properties cannot be enumerated"
        ) from e
    return [(name, None, value) for name, value in attributes.items() if not name.startswith("_")]


class ParameterBinder:
    """Binds filter parameters onto commands.

    Args:
        builder: Statement builder used to regenerate the command text.
    """

    def __init__(self, builder: StatementBuilder | None = None) -> None:
        self.builder = builder or StatementBuilder()

    @contextmanager
    def _resetting(self, command: Command) -> Iterator[None]:
        """Clear the command's parameters if the wrapped block fails."""
        try:
            yield
        except BaseException:
            command.parameters.clear()
            raise

    def bind(self, command: Command, model: type, name: str, value: Any) -> None:
        """Filter *model* rows on ``name = value``.

        If *command* already carries exactly one parameter called *name*
        only its value changes; the SQL text is left as it is.
        """
        params = command.parameters
        if len(params) == 1 and params[0].name == name:
            params[0].value = value
            return

        with self._resetting(command):
            definition = self.builder.definition_of(model)
            params.clear()
            params.add(command.create_parameter(name, db_type_of_value(value), value))
            command.set_text(self.builder.build_filter_sql(params, definition))

    def bind_id(self, command: Command, model: type, value: Any) -> None:
        """Filter *model* rows on its primary key."""
        pk = self.builder.definition_of(model).primary_key_name
        self.bind(command, model, pk, value)

    def bind_from_example(
        self,
        command: Command,
        model: type,
        example: Any,
        exclude_nulls: bool = False,
    ) -> None:
        """Filter *model* rows on equality with every property of *example*.

        Raises:
            ConfigurationError: If a property declares a type with no
                database type mapping.
        """
        params = command.parameters
        with self._resetting(command):
            definition = self.builder.definition_of(model)
            params.clear()
            for name, declared_type, value in example_properties(example):
                if exclude_nulls and value is None:
                    continue
                if declared_type is None:
                    db_type = db_type_of_value(value)
                else:
                    db_type = db_type_of(declared_type)
                    if db_type is None:
                        raise ConfigurationError(
                            type(example).__name__,
                            f"property '{name}' has unmapped type {declared_type!r}",
                        )
                params.add(command.create_parameter(name, db_type, value))
            command.set_text(self.builder.build_filter_sql(params, definition))

    def clear(self, command: Command) -> None:
        """Drop every parameter bound to *command*."""
        command.parameters.clear()
