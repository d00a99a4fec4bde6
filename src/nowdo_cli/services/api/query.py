"""PostgREST query builder.

Builds the path and the ordered query parameters of a ``/rest/v1/<table>``
request::

    query = Query("user_tasks").select().eq("user_id", uid).order("title")
    response = await client.get(query.path, params=query.params)
"""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Any

import httpx

from nowdo_cli.models.exceptions import RemoteError

REST_PREFIX = "/rest/v1"

# Characters that must be quoted inside a PostgREST logic tree.
_RESERVED = set(',()":')


def format_value(value: Any) -> str:
    """Render a Python value the way PostgREST expects it in a filter."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _quote(value: str) -> str:
    if any(ch in _RESERVED for ch in value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


class Query:
    """Fluent builder for a single-table PostgREST request."""

    def __init__(self, table: str):
        self.table = table
        self._params: list[tuple[str, str]] = []

    @property
    def path(self) -> str:
        return f"{REST_PREFIX}/{self.table}"

    @property
    def params(self) -> list[tuple[str, str]]:
        return list(self._params)

    def _add(self, key: str, value: str) -> Query:
        self._params.append((key, value))
        return self

    def select(self, columns: str = "*") -> Query:
        return self._add("select", columns)

    def eq(self, column: str, value: Any) -> Query:
        if value is None:
            return self._add(column, "is.null")
        return self._add(column, f"eq.{format_value(value)}")

    def gte(self, column: str, value: Any) -> Query:
        return self._add(column, f"gte.{format_value(value)}")

    def lte(self, column: str, value: Any) -> Query:
        return self._add(column, f"lte.{format_value(value)}")

    def between(self, column: str, start: Any, end: Any) -> Query:
        """Inclusive range filter on ``column``."""
        return self.gte(column, start).lte(column, end)

    def search(self, columns: list[str], text: str) -> Query:
        """Case-insensitive substring match on any of ``columns``."""
        pattern = _quote(f"*{text}*")
        clauses = ",".join(f"{column}.ilike.{pattern}" for column in columns)
        return self._add("or", f"({clauses})")

    def order(self, column: str, *, descending: bool = False) -> Query:
        return self._add("order", f"{column}.{'desc' if descending else 'asc'}")

    def limit(self, count: int) -> Query:
        return self._add("limit", str(count))

    def offset(self, count: int) -> Query:
        return self._add("offset", str(count))

    def on_conflict(self, *columns: str) -> Query:
        return self._add("on_conflict", ",".join(columns))


def prefer(
    *, representation: bool = True, resolution: str | None = None
) -> dict[str, str]:
    """Build the PostgREST ``Prefer`` header.

    ``resolution`` is ``"ignore-duplicates"`` or ``"merge-duplicates"`` for
    inserts that carry ``on_conflict``.
    """
    parts = ["return=representation" if representation else "return=minimal"]
    if resolution:
        parts.append(f"resolution={resolution}")
    return {"Prefer": ",".join(parts)}


def rows_of(response: httpx.Response) -> list[dict[str, Any]]:
    """Return the JSON rows of a PostgREST response (empty for no body)."""
    if not response.content:
        return []
    data = response.json()
    if isinstance(data, list):
        return data
    return [data]


def single_row(response: httpx.Response) -> dict[str, Any]:
    """Return the only row of a write that must affect exactly one row."""
    rows = rows_of(response)
    if len(rows) != 1:
        raise RemoteError(
            "JSON object requested, multiple (or no) rows returned",
            status_code=406,
            code="PGRST116",
        )
    return rows[0]
