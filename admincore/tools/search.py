"""Builds SQL where, order and join clauses from tagged query dataclasses.

A query is a dataclass whose fields carry a ``search`` entry in their
metadata, for example ``field(default="", metadata={"search":
"type:icontains;column:name;table:user"})``. Fields without the entry are
resolved recursively as nested queries; a tag of ``"-"`` skips the field.

Supported types: exact / iexact, contains / icontains, gt / gte, lt / lte,
startswith / istartswith, endswith / iendswith, in, isnull, order, left
(a left join whose nested query fills the join's clauses) and, for
Postgres only, glt (not equal).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

SEARCH_TAG = "search"
MYSQL = "mysql"
POSTGRES = "postgres"

_COMPARISONS = {
    "exact": "=",
    "iexact": "=",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}

_PATTERNS: dict[str, Callable[[str], str]] = {
    "contains": lambda text: f"%{text}%",
    "icontains": lambda text: f"%{text}%",
    "startswith": lambda text: f"{text}%",
    "istartswith": lambda text: f"{text}%",
    "endswith": lambda text: f"%{text}",
    "iendswith": lambda text: f"%{text}",
}


@dataclass
class SearchTag:
    """The parts of one ``search`` tag."""

    type: str = ""
    column: str = ""
    table: str = ""
    on: list[str] = field(default_factory=list)
    join: str = ""


def parse_tag(tag: str) -> SearchTag:
    """Parse a tag such as ``"type:exact;column:id;table:user"``."""
    result = SearchTag()
    for part in tag.split(";"):
        name, *rest = part.split(":")
        if not rest:
            continue
        if name == "type":
            result.type = rest[0]
        elif name == "column":
            result.column = rest[0]
        elif name == "table":
            result.table = rest[0]
        elif name == "on":
            result.on = rest
        elif name == "join":
            result.join = rest[0]
    return result


@dataclass
class Condition:
    """The clauses of a query and the joins it needs."""

    where: dict[str, list[Any]] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    or_where: dict[str, list[Any]] = field(default_factory=dict)
    joins: list[Join] = field(default_factory=list)

    def set_where(self, key: str, values: Sequence[Any]) -> None:
        """Add a where clause with its bound values."""
        self.where[key] = list(values)

    def set_or(self, key: str, values: Sequence[Any]) -> None:
        """Add an or clause with its bound values."""
        self.or_where[key] = list(values)

    def set_order(self, key: str) -> None:
        """Append an order clause."""
        self.order.append(key)

    def set_join_on(self, join_type: str, on: str) -> Optional[Join]:
        """Add a join and return it so its clauses can be filled."""
        join = Join(type=join_type, join_on=on)
        self.joins.append(join)
        return join


@dataclass
class Join(Condition):
    """A joined table with its own clauses."""

    type: str = ""
    join_on: str = ""

    def set_join_on(self, join_type: str, on: str) -> None:
        """Joins cannot be nested; nothing is added."""
        return None


def _is_query(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    if _is_query(value):
        return all(_is_zero(getattr(value, f.name)) for f in dataclasses.fields(value))
    if isinstance(value, (str, bytes, bool, int, float, complex)):
        return not value
    return False


def resolve_search_query(driver: str, query: Any, condition: Optional[Any]) -> None:
    """Fill ``condition`` with the clauses described by the tagged ``query``."""
    if not _is_query(query):
        raise TypeError(f"search query must be a dataclass instance, not {type(query).__name__}")
    for query_field in dataclasses.fields(query):
        value = getattr(query, query_field.name)
        tag = query_field.metadata.get(SEARCH_TAG)
        if tag is None:
            resolve_search_query(driver, value, condition)
            continue
        if tag == "-":
            continue
        parsed = parse_tag(tag)
        if _is_zero(value):
            continue
        _apply(driver, parsed, condition, value)


def _apply(driver: str, tag: SearchTag, condition: Any, value: Any) -> None:
    postgres = driver == POSTGRES

    def quote(name: str) -> str:
        return name if postgres else f"`{name}`"

    column = f"{quote(tag.table)}.{quote(tag.column)}"
    kind = tag.type

    if kind == "left":
        on = (
            f"left join {quote(tag.join)} on {quote(tag.join)}.{quote(tag.on[0])}"
            f" = {quote(tag.table)}.{quote(tag.on[1])}"
        )
        join = condition.set_join_on(kind, on)
        resolve_search_query(driver, value, join)
    elif kind in _COMPARISONS:
        condition.set_where(f"{column} {_COMPARISONS[kind]} ?", [value])
    elif kind == "glt" and postgres:
        condition.set_where(f"{column} <> ?", [value])
    elif kind in _PATTERNS:
        operator = "ilike" if postgres and kind.startswith("i") else "like"
        condition.set_where(f"{column} {operator} ?", [_PATTERNS[kind](str(value))])
    elif kind == "in":
        condition.set_where(f"{column} in (?)", [value])
    elif kind == "isnull":
        condition.set_where(f"{column} isnull", [])
    elif kind == "order":
        text = str(value)
        if text.lower() in ("desc", "asc"):
            condition.set_order(f"{column} {text}")