"""Unit tests for StatementBuilder."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from row_lite.adapters.dbapi import DbParameter
from row_lite.core.dialect import dialect_for
from row_lite.core.enums import DatabaseBackend, DbType
from row_lite.core.exceptions import ConfigurationError
from row_lite.core.statement import StatementBuilder, is_full_select
from row_lite.mapping.metadata import mapped_field


@dataclass
class User:
    __tablename__ = "Users"

    Id: int = mapped_field(primary_key=True)
    Name: str = ""


@dataclass
class UserSummary:
    UserId: int = mapped_field(primary_key=True, column="Id")


@dataclass
class NoKey:
    a: int = 0


@pytest.fixture
def builder() -> StatementBuilder:
    return StatementBuilder(dialect_for(DatabaseBackend.SQLITE))


class TestBuildSelect:
    def test_no_filter(self, builder: StatementBuilder) -> None:
        assert builder.build_select(User) == 'SELECT Id, Name FROM "Users"'

    def test_where_with_substitution(self, builder: StatementBuilder) -> None:
        sql = builder.build_select(User, "id = {0}", 5)
        assert sql == 'SELECT Id, Name FROM "Users" WHERE id = 5'

    def test_full_select_passthrough(self, builder: StatementBuilder) -> None:
        raw = "SELECT Id FROM Users WHERE Id=1"
        assert builder.build_select(User, raw) == raw

    def test_full_select_case_insensitive_with_params(self, builder: StatementBuilder) -> None:
        sql = builder.build_select(User, "select Id from Users where Name = {0}", "Bob")
        assert sql == "select Id from Users where Name = 'Bob'"

    def test_order_by_appended_without_where(self, builder: StatementBuilder) -> None:
        sql = builder.build_select(User, "ORDER BY Name")
        assert sql == 'SELECT Id, Name FROM "Users" ORDER BY Name'

    def test_limit_appended_without_where(self, builder: StatementBuilder) -> None:
        sql = builder.build_select(User, "limit {0}", 10)
        assert sql == 'SELECT Id, Name FROM "Users" limit 10'

    def test_word_starting_with_order_is_a_predicate(self, builder: StatementBuilder) -> None:
        sql = builder.build_select(User, "OrderCount > 1")
        assert sql == 'SELECT Id, Name FROM "Users" WHERE OrderCount > 1'

    def test_empty_filter_is_ignored(self, builder: StatementBuilder) -> None:
        assert builder.build_select(User, "") == 'SELECT Id, Name FROM "Users"'

    def test_mysql_quoting(self) -> None:
        builder = StatementBuilder(dialect_for(DatabaseBackend.MYSQL))
        assert builder.build_select(User) == "SELECT Id, Name FROM `Users`"

    def test_configuration_error_surfaces_at_first_use(self, builder: StatementBuilder) -> None:
        with pytest.raises(ConfigurationError):
            builder.build_select(NoKey)


class TestBuildSelectFrom:
    def test_columns_of_one_model_table_of_another(self, builder: StatementBuilder) -> None:
        sql = builder.build_select_from(UserSummary, User, "Name = {0}", "Al")
        assert sql == "SELECT Id FROM \"Users\" WHERE Name = 'Al'"


class TestIsFullSelect:
    def test_keyword_alone_is_not_a_statement(self) -> None:
        assert not is_full_select("SELECT ")

    def test_selected_column_predicate(self) -> None:
        assert not is_full_select("Selected = 1")

    def test_none(self) -> None:
        assert not is_full_select(None)


class TestBuildFilterSql:
    def test_no_parameters(self, builder: StatementBuilder) -> None:
        definition = builder.definition_of(User)
        assert builder.build_filter_sql([], definition) == 'SELECT * FROM "Users"'

    def test_parameters_joined_in_order(self, builder: StatementBuilder) -> None:
        definition = builder.definition_of(User)
        params = [
            DbParameter(name="Name", db_type=DbType.STRING, value="Bob"),
            DbParameter(name="Id", db_type=DbType.INT64, value=2),
        ]
        sql = builder.build_filter_sql(params, definition)
        assert sql == 'SELECT * FROM "Users" WHERE Name = @Name AND Id = @Id'

    def test_pyformat_placeholders(self) -> None:
        builder = StatementBuilder(dialect_for(DatabaseBackend.POSTGRESQL))
        params = [DbParameter(name="Id", db_type=DbType.INT64, value=1)]
        sql = builder.build_filter_sql(params, builder.definition_of(User))
        assert sql == 'SELECT * FROM "Users" WHERE Id = %(Id)s'


class TestKeyFilters:
    def test_primary_key_filter(self, builder: StatementBuilder) -> None:
        assert builder.primary_key_filter(User, 7) == "Id = 7"
        assert builder.primary_key_filter(User, "x'y") == "Id = 'x''y'"

    def test_ids_filter(self, builder: StatementBuilder) -> None:
        assert builder.ids_filter(User, [1, 2, 3]) == "Id IN (1,2,3)"

    def test_ids_filter_empty(self, builder: StatementBuilder) -> None:
        assert builder.ids_filter(User, []) is None
