"""
core/sql.py -- Small helpers for building parameterized SQL text.

Two builders live here, both store-independent so they can be unit tested
without a database:

  sql_for_partial_update() -- SET clause for a sparse update record.
  SearchQuery              -- SELECT with optional, ANDed WHERE predicates.

Both emit positional placeholders ($1, $2, ...) and return the matching
parameter list in the same order. core/db.Database.query() accepts that
shape and rebinds it for SQLAlchemy.

Security: every value goes through a placeholder. Column names are the only
text spliced into SQL, and they come from code (pydantic-validated field
names plus fixed translation tables), never from request values.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from core.errors import BadRequestError, EmptyUpdateError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class SqlFragment:
    """SQL text plus the positional parameters its $N placeholders refer to."""

    text: str
    params: list[Any] = field(default_factory=list)


def placeholder(index: int) -> str:
    """Return the positional placeholder for a 1-based parameter index."""
    return f"${index}"


def sql_for_partial_update(data: Mapping[str, Any], js_to_sql: Mapping[str, str] | None = None) -> SqlFragment:
    """Build the SET clause for a partial update.

    data maps logical field names to new values. js_to_sql translates logical
    names whose column name differs (e.g. {"numEmployees": "num_employees"});
    fields without an entry are used unchanged.

        sql_for_partial_update({"firstName": "Aliya", "age": 32}, {"firstName": "first_name"})
        -> SqlFragment('"first_name"=$1, "age"=$2', ["Aliya", 32])

    Assignments follow the iteration order of data. Placeholders are 1-based
    and contiguous, so a caller can bind its WHERE key at len(params) + 1.

    Raises EmptyUpdateError if data has no fields, BadRequestError if two
    fields translate to the same column.
    """
    keys = list(data)
    if not keys:
        raise EmptyUpdateError("No data.")

    translate = js_to_sql or {}
    cols = []
    seen: dict[str, str] = {}
    for idx, key in enumerate(keys, start=1):
        column = translate.get(key, key)
        if not _IDENTIFIER.match(column):
            raise ValueError(f"Invalid column name: {column!r}")
        if column in seen:
            raise BadRequestError(f"Fields {seen[column]} and {key} both set {column}")
        seen[column] = key
        cols.append(f'"{column}"={placeholder(idx)}')

    return SqlFragment(", ".join(cols), [data[k] for k in keys])


class SearchQuery:
    """Compose a SELECT whose WHERE clause only holds the filters supplied.

    Usage:
        q = SearchQuery("SELECT handle, name FROM companies", order_by="name")
        q.where("LOWER(name) LIKE LOWER({})", "%net%")
        q.where("num_employees >= {}", 10)
        q.build()
        -> SqlFragment(
               "SELECT handle, name FROM companies"
               " WHERE LOWER(name) LIKE LOWER($1) AND num_employees >= $2 ORDER BY name",
               ["%net%", 10],
           )

    Predicates are ANDed in the order they are added; each where() call binds
    exactly one value at the next placeholder index. Without predicates no
    WHERE clause is emitted. ORDER BY is always appended.
    """

    def __init__(self, base_sql: str, order_by: str) -> None:
        self._base_sql = base_sql.strip()
        self._order_by = order_by
        self._predicates: list[str] = []
        self._params: list[Any] = []

    def where(self, template: str, value: Any) -> SearchQuery:
        """Add a predicate; "{}" in template is replaced by the next placeholder."""
        self._params.append(value)
        self._predicates.append(template.format(placeholder(len(self._params))))
        return self

    def where_raw(self, predicate: str) -> SearchQuery:
        """Add a predicate that binds no value (e.g. "equity > 0")."""
        self._predicates.append(predicate)
        return self

    def build(self) -> SqlFragment:
        sql = self._base_sql
        if self._predicates:
            sql += " WHERE " + " AND ".join(self._predicates)
        sql += f" ORDER BY {self._order_by}"
        return SqlFragment(sql, list(self._params))
