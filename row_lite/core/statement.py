"""SELECT statement synthesis.

Builds SELECT text for mapped types from free-text filters (with
positional ``{n}`` substitution) or from a command's bound parameters.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from row_lite.adapters.protocol import Parameter
from row_lite.core.dialect import Dialect, get_default_dialect
from row_lite.core.params import ids_in_sql, sql_format, starts_with_keyword
from row_lite.mapping.metadata import ModelDefinition, ModelRegistry, default_registry

_SELECT = "SELECT"
# Filters starting with these keywords are appended without WHERE
_CLAUSE_KEYWORDS = ("ORDER", "LIMIT")


def is_full_select(sql_filter: str | None) -> bool:
    """Return True if *sql_filter* is a complete SELECT statement."""
    if not sql_filter or len(sql_filter) <= len(_SELECT) + 1:
        return False
    return starts_with_keyword(sql_filter, _SELECT)


class StatementBuilder:
    """Synthesizes SELECT statements for mapped types.

    Args:
        dialect: Dialect used for identifier quoting, literal rendering and
            parameter placeholders. Defaults to the process-wide dialect.
        registry: Model metadata registry. Defaults to the shared one.
    """

    def __init__(
        self,
        dialect: Dialect | None = None,
        registry: ModelRegistry | None = None,
    ) -> None:
        self.dialect = dialect or get_default_dialect()
        self.registry = registry or default_registry

    def definition_of(self, model: type) -> ModelDefinition:
        return self.registry.definition_of(model)

    def format(self, template: str, *params: Any) -> str:
        """Positional ``{n}`` substitution using this builder's dialect."""
        return sql_format(template, *params, dialect=self.dialect)

    def build_select(self, model: type, sql_filter: str | None = None, *filter_params: Any) -> str:
        """Return the SELECT statement for *model*, narrowed by *sql_filter*.

        A filter that is itself a SELECT statement replaces the synthesized
        query. A filter starting with ``ORDER `` or ``LIMIT `` is appended as
        is; any other filter becomes the WHERE clause.
        """
        if sql_filter is not None and is_full_select(sql_filter):
            return self.format(sql_filter, *filter_params)
        definition = self.definition_of(model)
        return self._select(definition, definition, sql_filter, filter_params)

    def build_select_from(
        self,
        model: type,
        from_model: type,
        sql_filter: str | None = None,
        *filter_params: Any,
    ) -> str:
        """SELECT the columns of *model* from the table of *from_model*."""
        return self._select(
            self.definition_of(model),
            self.definition_of(from_model),
            sql_filter,
            filter_params,
            where_only=True,
        )

    def _select(
        self,
        columns_of: ModelDefinition,
        table_of: ModelDefinition,
        sql_filter: str | None,
        filter_params: tuple[Any, ...],
        where_only: bool = False,
    ) -> str:
        sql = f"SELECT {columns_of.column_names} FROM {self.dialect.quote_name(table_of.table_name)}"
        if not sql_filter:
            return sql
        sql_filter = self.format(sql_filter, *filter_params)
        if where_only or not any(starts_with_keyword(sql_filter, kw) for kw in _CLAUSE_KEYWORDS):
            sql += " WHERE "
        else:
            sql += " "
        return sql + sql_filter

    def select_all_from_table(self, definition: ModelDefinition) -> str:
        return f"SELECT * FROM {self.dialect.quote_name(definition.table_name)}"

    def build_filter_sql(
        self,
        parameters: Iterable[Parameter],
        definition: ModelDefinition,
    ) -> str:
        """SELECT * from the table of *definition* with one equality per parameter."""
        parts = [self.select_all_from_table(definition)]
        for i, p in enumerate(parameters):
            parts.append(" WHERE " if i == 0 else " AND ")
            parts.append(f"{p.name} = {self.dialect.placeholder(p.name)}")
        return "".join(parts)

    def primary_key_filter(self, model: type, id_value: Any) -> str:
        """``<pk> = <literal>`` for *model*."""
        pk = self.definition_of(model).primary_key_name
        return f"{pk} = {self.dialect.quote_value(id_value)}"

    def ids_filter(self, model: type, ids: Iterable[Any]) -> str | None:
        """``<pk> IN (...)`` for *model*, or None if *ids* is empty."""
        rendered = ids_in_sql(ids, self.dialect)
        if rendered is None:
            return None
        return f"{self.definition_of(model).primary_key_name} IN ({rendered})"
