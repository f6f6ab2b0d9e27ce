"""Query execution engine.

The Engine builds SELECT text for mapped types, runs it through a
caller-owned command and materializes the rows: lists, lazy sequences,
single objects, scalars, first-column collections, lookups and
dictionaries. Every reader is released on the way out, whether the
operation finished, failed or (for lazy sequences) was abandoned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import AbstractContextManager, contextmanager
from decimal import Decimal
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from row_lite.adapters.protocol import Command, Reader
from row_lite.core.binder import ParameterBinder
from row_lite.core.dialect import Dialect
from row_lite.core.exceptions import (
    ConversionError,
    DuplicateKeyError,
    ExecutionError,
    NotFoundError,
)
from row_lite.core.statement import StatementBuilder
from row_lite.mapping.extraction import extractor_for, unwrap_optional
from row_lite.mapping.metadata import ModelRegistry
from row_lite.mapping.model import ModelMapper

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")
V = TypeVar("V")

_ZERO_VALUES: dict[Any, Any] = {
    int: 0,
    float: 0.0,
    Decimal: Decimal(0),
    bool: False,
}


def zero_value(python_type: Any) -> Any:
    """Value returned when a scalar query finds no row.

    Numbers and booleans have a zero value; everything else, including
    ``Optional`` types, gets None.
    """
    if unwrap_optional(python_type) is not python_type:
        return None
    while hasattr(python_type, "__supertype__"):
        python_type = python_type.__supertype__
    return _ZERO_VALUES.get(python_type)


@lru_cache(maxsize=128)
def _type_adapter(python_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(python_type)


def convert_text(value: Any, python_type: Any) -> Any:
    """Convert *value* to *python_type* through its text form.

    Raises:
        ConversionError: If the text does not parse as *python_type*.
    """
    if value is None:
        return zero_value(python_type)
    text = value if isinstance(value, str) else str(value)
    try:
        return _type_adapter(python_type).validate_python(text)
    except ValidationError as e:
        raise ConversionError(value, python_type, e.errors()[0]["msg"]) from e


class Engine:
    """Synchronous mapping engine.

    The engine keeps no per-call state; the command passed to each
    operation belongs to the caller and must not be shared between
    threads while an operation (or a lazy sequence) is running.

    Args:
        dialect: Dialect for quoting and placeholders. Defaults to the
            process-wide dialect.
        registry: Model metadata registry. Defaults to the shared one.
    """

    def __init__(
        self,
        dialect: Dialect | None = None,
        registry: ModelRegistry | None = None,
    ) -> None:
        self._builder = StatementBuilder(dialect, registry)
        self._binder = ParameterBinder(self._builder)

    @property
    def dialect(self) -> Dialect:
        return self._builder.dialect

    @property
    def builder(self) -> StatementBuilder:
        return self._builder

    @property
    def binder(self) -> ParameterBinder:
        return self._binder

    def _mapper(self, model: type[T]) -> ModelMapper[T]:
        return ModelMapper(model, self._builder.registry)

    def _execute(self, command: Command) -> Reader:
        try:
            return command.execute()
        except BaseException:
            command.parameters.clear()
            raise

    def _exec_reader(self, command: Command, sql: str) -> Reader:
        """Run free-text *sql*, dropping any parameters left from earlier binds."""
        logger.debug("SQL: %s", sql)
        command.parameters.clear()
        command.set_text(sql)
        return self._execute(command)

    @contextmanager
    def _bound_read(self, command: Command) -> Iterator[Reader]:
        """Run the bound statement; its parameters are cleared if reading fails."""
        try:
            with self._execute(command) as reader:
                yield reader
        except BaseException:
            command.parameters.clear()
            raise

    def _read_first(self, reader: Reader, model: type[T]) -> T | None:
        mapper = self._mapper(model)
        plan = mapper.plan(reader)
        if reader.advance():
            return mapper.map_row(reader, plan)
        return None

    def _lazy(
        self, open_reader: Callable[[], AbstractContextManager[Reader]], model: type[T]
    ) -> Iterator[T]:
        mapper = self._mapper(model)
        with open_reader() as reader:
            try:
                yield from mapper.map_all(reader)
            except GeneratorExit:
                logger.debug("Lazy %s sequence closed early, releasing reader", model.__name__)
                raise

    # --- SELECT by text filter ---

    def select(
        self, command: Command, model: type[T], sql_filter: str | None = None, *params: Any
    ) -> list[T]:
        """Return every *model* row matching *sql_filter*, in row order."""
        sql = self._builder.build_select(model, sql_filter, *params)
        with self._exec_reader(command, sql) as reader:
            return list(self._mapper(model).map_all(reader))

    def select_from(
        self,
        command: Command,
        model: type[T],
        from_model: type,
        sql_filter: str | None = None,
        *params: Any,
    ) -> list[T]:
        """Read *model* columns from the table of *from_model*."""
        sql = self._builder.build_select_from(model, from_model, sql_filter, *params)
        with self._exec_reader(command, sql) as reader:
            return list(self._mapper(model).map_all(reader))

    def each(
        self, command: Command, model: type[T], sql_filter: str | None = None, *params: Any
    ) -> Iterator[T]:
        """Lazily yield *model* rows, one per ``next()``.

        The statement runs on first iteration. The reader is released when
        the sequence is exhausted or closed; the sequence cannot be restarted.
        """
        sql = self._builder.build_select(model, sql_filter, *params)
        return self._lazy(lambda: self._exec_reader(command, sql), model)

    def first(
        self, command: Command, model: type[T], sql_filter: str, *params: Any
    ) -> T:
        """Return the first matching row.

        Raises:
            NotFoundError: If no row matches.
        """
        sql_filter = self._builder.format(sql_filter, *params)
        result = self.first_or_default(command, model, sql_filter)
        if result is None:
            raise NotFoundError(model.__name__, sql_filter)
        return result

    def first_or_default(
        self, command: Command, model: type[T], sql_filter: str, *params: Any
    ) -> T | None:
        """Return the first matching row, or None."""
        sql = self._builder.build_select(model, sql_filter, *params)
        with self._exec_reader(command, sql) as reader:
            return self._read_first(reader, model)

    def get_by_id(self, command: Command, model: type[T], id_value: Any) -> T:
        """Return the row whose primary key equals *id_value*.

        Raises:
            NotFoundError: If no such row exists.
        """
        return self.first(command, model, self._builder.primary_key_filter(model, id_value))

    def get_by_id_or_default(self, command: Command, model: type[T], id_value: Any) -> T | None:
        return self.first_or_default(
            command, model, self._builder.primary_key_filter(model, id_value)
        )

    def get_by_ids(self, command: Command, model: type[T], ids: Iterable[Any]) -> list[T]:
        """Return the rows whose primary key is in *ids*; [] for no ids."""
        sql_filter = self._builder.ids_filter(model, ids)
        if sql_filter is None:
            return []
        return self.select(command, model, sql_filter)

    # --- SELECT by bound parameters ---

    def query_by_id(self, command: Command, model: type[T], id_value: Any) -> T | None:
        """Parameterized primary-key lookup; reuses the statement across calls."""
        self._binder.bind_id(command, model, id_value)
        with self._bound_read(command) as reader:
            return self._read_first(reader, model)

    def query_single(
        self, command: Command, model: type[T], name: str, value: Any
    ) -> T | None:
        """First row where column *name* equals *value*, or None."""
        self._binder.bind(command, model, name, value)
        with self._bound_read(command) as reader:
            return self._read_first(reader, model)

    def query_single_by_example(
        self, command: Command, model: type[T], example: Any
    ) -> T | None:
        """First row equal to every property of *example*, or None."""
        self._binder.bind_from_example(command, model, example)
        with self._bound_read(command) as reader:
            return self._read_first(reader, model)

    def query(self, command: Command, model: type[T], name: str, value: Any) -> list[T]:
        """Every row where column *name* equals *value*."""
        self._binder.bind(command, model, name, value)
        with self._bound_read(command) as reader:
            return list(self._mapper(model).map_all(reader))

    def query_example(
        self,
        command: Command,
        model: type[T],
        example: Any,
        exclude_nulls: bool = False,
    ) -> list[T]:
        """Every row equal to each property of *example*."""
        self._binder.bind_from_example(command, model, example, exclude_nulls)
        with self._bound_read(command) as reader:
            return list(self._mapper(model).map_all(reader))

    def query_by_example(self, command: Command, model: type[T], example: Any) -> list[T]:
        """Like query_example, ignoring properties of *example* that are None."""
        return self.query_example(command, model, example, exclude_nulls=True)

    def query_each(self, command: Command, model: type[T], example: Any) -> Iterator[T]:
        """Lazy counterpart of query_example.

        Closing the sequence before it is exhausted clears the bound parameters.
        """
        self._binder.bind_from_example(command, model, example)
        return self._lazy(lambda: self._bound_read(command), model)

    # --- Scalars and columns ---

    def get_scalar(self, command: Command, result_type: type[T], sql: str, *params: Any) -> T:
        """Column 0 of the first row, converted through its text form.

        Returns the zero value of *result_type* when there is no row.

        Raises:
            ConversionError: If the value does not parse as *result_type*.
        """
        with self._exec_reader(command, self._builder.format(sql, *params)) as reader:
            if reader.advance():
                return convert_text(reader.get_untyped(0), result_type)  # type: ignore[no-any-return]
            return zero_value(result_type)  # type: ignore[no-any-return]

    def get_last_insert_id(self, command: Command) -> int:
        """Key generated by the last insert on the command's connection.

        Raises:
            ExecutionError: If the dialect has no last-insert-id statement
                (Oracle).
        """
        sql = self.dialect.last_insert_id_sql
        if sql is None:
            raise ExecutionError(
                f"{self.dialect.backend.value} dialect has no last-insert-id statement"
            )
        return self.get_scalar(command, int, sql)

    def get_first_column(
        self, command: Command, value_type: type[T], sql: str, *params: Any
    ) -> list[T]:
        """Column 0 of every row, in row order, duplicates kept."""
        extract = extractor_for(value_type)
        values: list[T] = []
        with self._exec_reader(command, self._builder.format(sql, *params)) as reader:
            while reader.advance():
                values.append(extract(reader, 0))
        return values

    def get_first_column_distinct(
        self, command: Command, value_type: type[T], sql: str, *params: Any
    ) -> set[T]:
        """Distinct values of column 0."""
        extract = extractor_for(value_type)
        values: set[T] = set()
        with self._exec_reader(command, self._builder.format(sql, *params)) as reader:
            while reader.advance():
                values.add(extract(reader, 0))
        return values

    def get_lookup(
        self,
        command: Command,
        key_type: type[K],
        value_type: type[V],
        sql: str,
        *params: Any,
    ) -> dict[K, list[V]]:
        """Group column 1 values under their column 0 key.

        Keys appear in first-seen order; each bucket keeps row order.
        """
        extract_key = extractor_for(key_type)
        extract_value = extractor_for(value_type)
        lookup: dict[K, list[V]] = {}
        with self._exec_reader(command, self._builder.format(sql, *params)) as reader:
            while reader.advance():
                key = extract_key(reader, 0)
                lookup.setdefault(key, []).append(extract_value(reader, 1))
        return lookup

    def get_dictionary(
        self,
        command: Command,
        key_type: type[K],
        value_type: type[V],
        sql: str,
        *params: Any,
    ) -> dict[K, V]:
        """Map column 0 to column 1.

        Raises:
            DuplicateKeyError: If a key appears on more than one row.
        """
        extract_key = extractor_for(key_type)
        extract_value = extractor_for(value_type)
        mapping: dict[K, V] = {}
        with self._exec_reader(command, self._builder.format(sql, *params)) as reader:
            while reader.advance():
                key = extract_key(reader, 0)
                if key in mapping:
                    raise DuplicateKeyError(key)
                mapping[key] = extract_value(reader, 1)
        return mapping
