"""Unit tests for ParameterBinder."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import NamedTuple, Optional

import pytest
from pydantic import BaseModel

from row_lite.core.binder import ParameterBinder, example_properties
from row_lite.core.enums import DbType, ParameterDirection
from row_lite.core.exceptions import ConfigurationError
from row_lite.core.statement import StatementBuilder
from row_lite.mapping.metadata import mapped_field


@dataclass
class User:
    __tablename__ = "Users"

    Id: int = mapped_field(primary_key=True)
    Name: str = ""
    Age: Optional[int] = None


@dataclass
class NoKey:
    a: int = 0


@dataclass
class UserExample:
    Name: Optional[str] = None
    Age: Optional[int] = None


class PydanticExample(BaseModel):
    Name: str
    Joined: datetime.datetime


class TupleExample(NamedTuple):
    Age: int
    Name: str


class Blob:
    pass


@dataclass
class BadExample:
    payload: Blob


class SlottedExample:
    __slots__ = ("Name",)

    def __init__(self, name: str) -> None:
        self.Name = name


@pytest.fixture
def binder() -> ParameterBinder:
    return ParameterBinder(StatementBuilder())


class TestBind:
    def test_creates_single_typed_parameter(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind(cmd, User, "Name", "Alice")
        assert len(cmd.parameters) == 1
        p = cmd.parameters[0]
        assert (p.name, p.db_type, p.value) == ("Name", DbType.STRING, "Alice")
        assert p.direction is ParameterDirection.INPUT
        assert cmd.text == 'SELECT * FROM "Users" WHERE Name = @Name'

    def test_same_name_only_replaces_value(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind(cmd, User, "Id", 1)
        text = cmd.text
        parameter = cmd.parameters[0]

        binder.bind(cmd, User, "Id", 2)

        assert cmd.text == text
        assert cmd.parameters[0] is parameter
        assert parameter.value == 2

    def test_new_name_rebuilds(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind(cmd, User, "Id", 1)
        binder.bind(cmd, User, "Name", "Bob")
        assert len(cmd.parameters) == 1
        assert cmd.text == 'SELECT * FROM "Users" WHERE Name = @Name'

    def test_bind_id_uses_primary_key(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind_id(cmd, User, 3)
        assert cmd.parameters[0].name == "Id"
        assert cmd.parameters[0].db_type is DbType.INT64

    def test_failure_clears_parameters(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind(cmd, User, "Id", 1)
        with pytest.raises(ConfigurationError):
            binder.bind(cmd, NoKey, "a", 1)
        assert len(cmd.parameters) == 0


class TestBindFromExample:
    def test_dataclass_in_declaration_order(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind_from_example(cmd, User, UserExample(Name="Bob", Age=25))
        assert [p.name for p in cmd.parameters] == ["Name", "Age"]
        assert [p.db_type for p in cmd.parameters] == [DbType.STRING, DbType.INT64]
        assert cmd.text == 'SELECT * FROM "Users" WHERE Name = @Name AND Age = @Age'

    def test_nulls_kept_by_default(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind_from_example(cmd, User, UserExample(Name="Bob"))
        assert [p.name for p in cmd.parameters] == ["Name", "Age"]
        assert cmd.parameters[1].value is None
        assert cmd.parameters[1].db_type is DbType.INT64

    def test_exclude_nulls(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind_from_example(cmd, User, UserExample(Age=30), exclude_nulls=True)
        assert [p.name for p in cmd.parameters] == ["Age"]
        assert cmd.text == 'SELECT * FROM "Users" WHERE Age = @Age'

    def test_replaces_previous_parameters(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind(cmd, User, "Id", 1)
        binder.bind_from_example(cmd, User, {"Name": "Bob"})
        assert [p.name for p in cmd.parameters] == ["Name"]

    def test_mapping_example_typed_from_values(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind_from_example(cmd, User, {"Age": 30, "Name": "Carol"})
        assert [(p.name, p.db_type) for p in cmd.parameters] == [
            ("Age", DbType.INT64),
            ("Name", DbType.STRING),
        ]

    def test_pydantic_example(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        example = PydanticExample(Name="Al", Joined=datetime.datetime(2024, 1, 1))
        binder.bind_from_example(cmd, User, example)
        assert [p.db_type for p in cmd.parameters] == [DbType.STRING, DbType.DATETIME]

    def test_named_tuple_example(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind_from_example(cmd, User, TupleExample(Age=30, Name="Al"))
        assert [(p.name, p.db_type) for p in cmd.parameters] == [
            ("Age", DbType.INT64),
            ("Name", DbType.STRING),
        ]

    def test_unmapped_property_type(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind(cmd, User, "Id", 1)
        with pytest.raises(ConfigurationError, match="payload"):
            binder.bind_from_example(cmd, User, BadExample(payload=Blob()))
        assert len(cmd.parameters) == 0

    def test_unreadable_example(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind(cmd, User, "Id", 1)
        with pytest.raises(ConfigurationError, match="SlottedExample"):
            binder.bind_from_example(cmd, User, SlottedExample("Al"))
        assert len(cmd.parameters) == 0

    def test_clear(self, binder: ParameterBinder, fake_command) -> None:
        cmd = fake_command([], [])
        binder.bind(cmd, User, "Id", 1)
        binder.clear(cmd)
        assert len(cmd.parameters) == 0


class TestExampleProperties:
    def test_plain_object_public_attributes(self) -> None:
        class Example:
            def __init__(self) -> None:
                self.Name = "Al"
                self._hidden = 1

        assert example_properties(Example()) == [("Name", None, "Al")]

    def test_object_without_instance_dict(self) -> None:
        with pytest.raises(ConfigurationError, match="cannot be enumerated"):
            example_properties(SlottedExample("Al"))
