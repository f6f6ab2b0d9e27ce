"""Repository base class.

Thin wrapper over Engine + Command for one mapped type.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Generic, TypeVar

from row_lite.adapters.protocol import Command
from row_lite.core.engine import Engine

T = TypeVar("T")


class Repository(Generic[T]):
    """Typed data access for a single model.

    Subclasses add query methods that delegate to ``self.engine`` with
    ``self.command`` and ``self.model``.

    Args:
        engine: Engine building and materializing queries.
        command: Command the repository runs its queries on.
        model: Mapped dataclass or Pydantic model.
    """

    def __init__(self, engine: Engine, command: Command, model: type[T]) -> None:
        self.engine = engine
        self.command = command
        self.model = model

    def all(self) -> list[T]:
        return self.engine.select(self.command, self.model)

    def where(self, sql_filter: str, *params: Any) -> list[T]:
        return self.engine.select(self.command, self.model, sql_filter, *params)

    def each(self, sql_filter: str | None = None, *params: Any) -> Iterator[T]:
        return self.engine.each(self.command, self.model, sql_filter, *params)

    def get(self, id_value: Any) -> T:
        """Row by primary key; raises NotFoundError if missing."""
        return self.engine.get_by_id(self.command, self.model, id_value)

    def find(self, id_value: Any) -> T | None:
        """Row by primary key through a bound parameter, or None."""
        return self.engine.query_by_id(self.command, self.model, id_value)

    def get_many(self, ids: Iterable[Any]) -> list[T]:
        return self.engine.get_by_ids(self.command, self.model, ids)

    def by_example(self, example: Any) -> list[T]:
        """Rows equal to every non-None property of *example*."""
        return self.engine.query_by_example(self.command, self.model, example)
