"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from row_lite.adapters.dbapi import DbParameter, ParameterList
from row_lite.core.connection import ConnectionConfig, ConnectionManager
from row_lite.core.enums import DbType, ParameterDirection


class FakeReader:
    """In-memory Reader recording how far it was read and whether it was released."""

    def __init__(self, columns: list[str], rows: list[tuple[Any, ...]]) -> None:
        self._columns = columns
        self._rows = rows
        self._index = -1
        self.released = False
        self.rows_read = 0

    @property
    def column_count(self) -> int:
        return len(self._columns)

    @property
    def column_names(self) -> list[str]:
        return list(self._columns)

    def advance(self) -> bool:
        if self.released:
            return False
        self._index += 1
        if self._index >= len(self._rows):
            return False
        self.rows_read += 1
        return True

    def get_untyped(self, i: int) -> Any:
        return self._rows[self._index][i]

    get_string = get_int16 = get_int32 = get_int64 = get_untyped
    get_boolean = get_datetime = get_guid = get_untyped
    get_float = get_double = get_decimal = get_bytes = get_untyped

    def release(self) -> None:
        self.released = True

    def __enter__(self) -> FakeReader:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.release()


class FakeCommand:
    """In-memory Command returning a FakeReader over canned rows."""

    def __init__(self, columns: list[str], rows: list[tuple[Any, ...]]) -> None:
        self._columns = columns
        self._rows = rows
        self._text = ""
        self._parameters = ParameterList()
        self.readers: list[FakeReader] = []
        self.executed: list[str] = []
        self.fail_with: BaseException | None = None

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, sql: str) -> None:
        self._text = sql

    @property
    def parameters(self) -> ParameterList:
        return self._parameters

    def create_parameter(
        self,
        name: str,
        db_type: DbType,
        value: Any = None,
        direction: ParameterDirection = ParameterDirection.INPUT,
    ) -> DbParameter:
        return DbParameter(name=name, db_type=db_type, value=value, direction=direction)

    def execute(self) -> FakeReader:
        self.executed.append(self._text)
        if self.fail_with is not None:
            raise self.fail_with
        reader = FakeReader(self._columns, self._rows)
        self.readers.append(reader)
        return reader


@pytest.fixture
def fake_command():
    """Factory for FakeCommand instances.

    Usage:
        cmd = fake_command(["Id", "Name"], [(1, "Alice")])
    """

    def _make(columns: list[str], rows: list[tuple[Any, ...]]) -> FakeCommand:
        return FakeCommand(columns, rows)

    return _make


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:")


@pytest.fixture
def manager(sqlite_config: ConnectionConfig) -> Iterator[ConnectionManager]:
    """Connection manager over an in-memory database seeded with a Users table."""
    mgr = ConnectionManager(sqlite_config)
    with mgr.get_connection() as conn:
        conn.execute(
            'CREATE TABLE "Users" (Id INTEGER PRIMARY KEY, Name TEXT NOT NULL, '
            "Age INTEGER, Active INTEGER NOT NULL DEFAULT 1, Joined TEXT)"
        )
        conn.executemany(
            'INSERT INTO "Users" (Id, Name, Age, Active, Joined) VALUES (?, ?, ?, ?, ?)',
            [
                (1, "Alice", 30, 1, "2024-01-15 09:30:00"),
                (2, "Bob", 25, 1, "2024-02-01 12:00:00"),
                (3, "Carol", 30, 0, None),
                (4, "O'Brien", None, 1, None),
            ],
        )
        conn.commit()
    yield mgr
    mgr.close()
