"""SQL dialect configuration.

A Dialect carries the backend-specific bits the statement builder needs:
identifier quoting, literal rendering, the placeholder shape of bound
parameters and the statement that reads back the last generated key.

Builders and engines take a dialect at construction. The process-wide
default below only serves call sites that do not pass one.
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from row_lite.core.enums import DatabaseBackend


class Dialect(BaseModel):
    """Immutable description of a SQL dialect."""

    model_config = ConfigDict(frozen=True)

    backend: DatabaseBackend
    name_quote: str = '"'
    param_style: Literal["at", "named", "pyformat"] = "at"
    last_insert_id_sql: str | None = None
    true_literal: str = "1"
    false_literal: str = "0"

    def quote_name(self, name: str) -> str:
        """Quote a table or column identifier."""
        q = self.name_quote
        return f"{q}{name.replace(q, q + q)}{q}"

    def placeholder(self, name: str) -> str:
        """Return the in-statement marker for the bound parameter *name*."""
        if self.param_style == "pyformat":
            return f"%({name})s"
        if self.param_style == "named":
            return f":{name}"
        return f"@{name}"

    def quote_value(self, value: Any) -> str:
        """Render *value* as a SQL literal for textual substitution."""
        if value is None:
            return "NULL"
        if isinstance(value, Enum):
            return self.quote_value(value.value)
        if isinstance(value, bool):
            return self.true_literal if value else self.false_literal
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        if isinstance(value, datetime.datetime):
            return _quote_text(value.isoformat(sep=" "))
        if isinstance(value, (datetime.date, datetime.time)):
            return _quote_text(value.isoformat())
        if isinstance(value, (bytes, bytearray, memoryview)):
            return f"X'{bytes(value).hex()}'"
        if isinstance(value, uuid.UUID):
            return _quote_text(str(value))
        return _quote_text(str(value))


def _quote_text(text: str) -> str:
    return "'" + text.replace("'", "''") + "'"


_DIALECTS: dict[DatabaseBackend, Dialect] = {
    DatabaseBackend.SQLITE: Dialect(
        backend=DatabaseBackend.SQLITE,
        param_style="at",
        last_insert_id_sql="SELECT last_insert_rowid()",
    ),
    DatabaseBackend.POSTGRESQL: Dialect(
        backend=DatabaseBackend.POSTGRESQL,
        param_style="pyformat",
        last_insert_id_sql="SELECT LASTVAL()",
        true_literal="TRUE",
        false_literal="FALSE",
    ),
    DatabaseBackend.MYSQL: Dialect(
        backend=DatabaseBackend.MYSQL,
        name_quote="`",
        param_style="pyformat",
        last_insert_id_sql="SELECT LAST_INSERT_ID()",
    ),
    DatabaseBackend.ORACLE: Dialect(
        backend=DatabaseBackend.ORACLE,
        param_style="named",
    ),
}

_default_dialect: Dialect = _DIALECTS[DatabaseBackend.SQLITE]


def dialect_for(backend: DatabaseBackend | str) -> Dialect:
    """Return the preset dialect for *backend* (enum member or its value)."""
    return _DIALECTS[DatabaseBackend(backend)]


def get_default_dialect() -> Dialect:
    """Return the process-wide default dialect (SQLite unless changed)."""
    return _default_dialect


def set_default_dialect(dialect: Dialect) -> None:
    """Replace the process-wide default dialect.

    Only affects builders and engines created afterwards without an
    explicit dialect.
    """
    global _default_dialect
    _default_dialect = dialect
