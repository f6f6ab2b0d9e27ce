"""SQLite adapter (sqlite3 stdlib)."""

from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING, Any

from row_lite.core.dialect import Dialect, dialect_for
from row_lite.core.enums import DatabaseBackend

if TYPE_CHECKING:
    from row_lite.core.connection import ConnectionConfig


class SqliteAdapter:
    """Opens configured sqlite3 connections.

    ``config.extra["pragmas"]`` may hold ``{name: value}`` pairs applied to
    every new connection.
    """

    @property
    def dialect(self) -> Dialect:
        return dialect_for(DatabaseBackend.SQLITE)

    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        """Open a new connection."""
        conn = sqlite3.connect(config.database, timeout=config.timeout)
        if config.database != ":memory:":
            conn.execute("PRAGMA journal_mode=WAL")
        pragmas: dict[str, Any] = config.extra.get("pragmas", {})
        for name, value in pragmas.items():
            conn.execute(f"PRAGMA {name}={value}")
        return conn

    def close(self, connection: sqlite3.Connection) -> None:
        connection.close()
