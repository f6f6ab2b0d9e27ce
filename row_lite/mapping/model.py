"""Reader-to-model mapper.

Supports dataclasses and Pydantic models described by a ModelDefinition.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from row_lite.adapters.protocol import Reader
from row_lite.core.exceptions import ColumnMismatchError
from row_lite.mapping.extraction import Extractor, extractor_for
from row_lite.mapping.metadata import (
    FieldDefinition,
    ModelDefinition,
    ModelRegistry,
    default_registry,
    is_pydantic_model,
)

T = TypeVar("T")


@dataclass(frozen=True)
class RowPlan:
    """Field-to-ordinal bindings resolved once for a result shape."""

    bindings: tuple[tuple[FieldDefinition, int, Extractor], ...]


class ModelMapper(Generic[T]):
    """Builds instances of *target_class* from reader rows.

    Result columns are matched to fields by column name, ignoring case.
    Fields without a matching column are left to the class defaults.

    Detection order:
    1. Pydantic BaseModel -> model_validate(values)
    2. dataclass -> target_class(**values), non-init fields set afterwards

    Args:
        target_class: The class to construct from row data.
        registry: Model metadata registry. Defaults to the shared one.
    """

    def __init__(
        self,
        target_class: type[T],
        registry: ModelRegistry | None = None,
    ) -> None:
        self._target_class = target_class
        self._definition = (registry or default_registry).definition_of(target_class)
        self._is_pydantic = is_pydantic_model(target_class)

    @property
    def definition(self) -> ModelDefinition:
        return self._definition

    def plan(self, reader: Reader) -> RowPlan:
        """Resolve ordinals and extractors for the columns *reader* returns."""
        ordinals: dict[str, int] = {}
        for i, name in enumerate(reader.column_names):
            ordinals.setdefault(name.lower(), i)

        bindings = []
        for f in self._definition.fields:
            i = ordinals.get(f.column.lower())
            if i is not None:
                bindings.append((f, i, extractor_for(f.field_type)))
        return RowPlan(bindings=tuple(bindings))

    def map_row(self, reader: Reader, plan: RowPlan) -> T:
        """Map the reader's current row to a target_class instance."""
        values = {f.name: extract(reader, i) for f, i, extract in plan.bindings}
        return self._construct(values)

    def map_all(self, reader: Reader) -> Iterator[T]:
        """Yield one instance per remaining row of *reader*."""
        plan = self.plan(reader)
        while reader.advance():
            yield self.map_row(reader, plan)

    def _missing(self, values: dict[str, Any]) -> list[str]:
        return [f.name for f in self._definition.fields if f.name not in values]

    def _construct(self, values: dict[str, Any]) -> T:
        if self._is_pydantic:
            try:
                return self._target_class.model_validate(values)  # type: ignore[attr-defined, no-any-return]
            except Exception as e:
                raise ColumnMismatchError(
                    self._target_class.__name__,
                    self._missing(values) or [str(e)],
                ) from e

        init_values = {}
        late_values = []
        for f in self._definition.fields:
            if f.name not in values:
                continue
            if f.init:
                init_values[f.name] = values[f.name]
            else:
                late_values.append((f, values[f.name]))

        try:
            instance = self._target_class(**init_values)
        except TypeError as e:
            raise ColumnMismatchError(
                self._target_class.__name__,
                self._missing(values) or [str(e)],
            ) from e

        for f, value in late_values:
            f.set_value(instance, value)
        return instance
