"""Connection configuration and management.

ConnectionConfig is a Pydantic model for type-safe connection config.
ConnectionManager opens one connection through the driver's adapter and
hands out commands bound to it.
"""

from __future__ import annotations

import importlib
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel

from row_lite.adapters.dbapi import DbApiCommand
from row_lite.core.dialect import Dialect
from row_lite.core.exceptions import AdapterError, ConnectionError  # noqa: A004


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    timeout: float = 5.0
    extra: dict[str, Any] = {}


# Adapter module mapping: driver name -> (module_path, class_name)
_ADAPTER_MAP: dict[str, tuple[str, str]] = {
    "sqlite": ("row_lite.adapters.sqlite", "SqliteAdapter"),
}


def _load_adapter(driver: str) -> Any:
    """Load an adapter by driver name."""
    driver_lower = driver.lower()
    if driver_lower not in _ADAPTER_MAP:
        raise AdapterError(f"Unsupported database driver: {driver}")

    module_path, cls_name = _ADAPTER_MAP[driver_lower]
    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{driver}': {e}") from e


class ConnectionManager:
    """Owns a single lazily opened connection."""

    def __init__(self, config: ConnectionConfig, dialect: Dialect | None = None) -> None:
        self.config = config
        self._adapter = _load_adapter(config.driver)
        self._dialect = dialect or self._adapter.dialect
        self._connection: Any = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def connect(self) -> Any:
        """Open the connection if it is not open yet."""
        if self._connection is None:
            try:
                self._connection = self._adapter.connect(self.config)
            except Exception as e:
                raise ConnectionError(
                    f"Cannot connect to '{self.config.database}': {e}"
                ) from e
        return self._connection

    @contextmanager
    def get_connection(self) -> Iterator[Any]:
        """Yield the open connection."""
        yield self.connect()

    @contextmanager
    def command(self) -> Iterator[DbApiCommand]:
        """Yield a fresh command; its parameters are cleared on exit."""
        cmd = DbApiCommand(self.connect(), self._dialect)
        try:
            yield cmd
        finally:
            cmd.parameters.clear()

    def close(self) -> None:
        """Close the connection."""
        if self._connection is not None:
            self._adapter.close(self._connection)
            self._connection = None

    def __enter__(self) -> ConnectionManager:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
