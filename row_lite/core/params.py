"""Filter text formatting.

Positional ``{0}``, ``{1}``, ... placeholders inside free-text filters are
replaced by SQL literals rendered through the dialect. This is textual
substitution: the values never become bound parameters, so callers must
not route untrusted input through it.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from row_lite.core.dialect import Dialect, get_default_dialect

# {0}, {12}; doubled braces are literal
_PLACEHOLDER_PATTERN = re.compile(r"\{\{|\}\}|\{(\d+)\}")


def sql_format(template: str, *args: Any, dialect: Dialect | None = None) -> str:
    """Substitute positional ``{n}`` tokens in *template* with quoted *args*.

    Without *args* the template is returned untouched, braces included.

    Raises:
        IndexError: If a token refers to a missing argument.
    """
    if not args:
        return template
    dialect = dialect or get_default_dialect()

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == "{{":
            return "{"
        if token == "}}":
            return "}"
        index = int(match.group(1))
        if index >= len(args):
            raise IndexError(
                f"Placeholder {{{index}}} has no argument ({len(args)} supplied)"
            )
        return dialect.quote_value(args[index])

    return _PLACEHOLDER_PATTERN.sub(_replace, template)


def ids_in_sql(ids: Iterable[Any], dialect: Dialect | None = None) -> str | None:
    """Render *ids* as a comma-separated literal list for ``IN (...)``.

    Returns None when *ids* is empty.
    """
    dialect = dialect or get_default_dialect()
    if isinstance(ids, (str, bytes)):
        ids = [ids]
    rendered = [dialect.quote_value(value) for value in ids]
    if not rendered:
        return None
    return ",".join(rendered)


def starts_with_keyword(text: str, keyword: str) -> bool:
    """Case-insensitive check that *text* begins with ``keyword + " "``."""
    prefix = keyword + " "
    return text[: len(prefix)].upper() == prefix.upper()
