"""Collection store interface consumed by the aggregation layer.

A collection store is a network service exposing typed collections
("companies", "employees", "folders", "documents", "communication_logs")
that supports filtered, ordered and counted reads. It is not trusted to
be fast, available, or free of duplicate rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

Row = dict[str, Any]

FILTER_OPS = ("eq", "neq", "gt", "gte", "lt", "lte", "in")


class TransportError(Exception):
    """Raised when the remote store cannot answer a query.

    Distinct from an empty result: zero rows is a valid answer, a transport
    error is not.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class Filter:
    """Single column predicate, e.g. ``Filter("status", "in", ("sent", "read"))``."""

    column: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter op: {self.op} (valid: {', '.join(FILTER_OPS)})")
        if self.op == "in":
            # Tuples keep the filter hashable
            object.__setattr__(self, "value", tuple(self.value))

    def normalized(self) -> str:
        """Canonical ``column:op:value`` text used for cache keys."""
        if self.op == "in":
            value = ",".join(sorted(str(v) for v in self.value))
        else:
            value = str(self.value)
        return f"{self.column}:{self.op}:{value}"

    def matches(self, row: Row) -> bool:
        """Evaluate the predicate against an in-memory row."""
        actual = row.get(self.column)
        if self.op == "eq":
            return actual == self.value
        if self.op == "neq":
            return actual != self.value
        if self.op == "in":
            return actual in self.value
        if actual is None:
            return False
        if self.op == "gt":
            return actual > self.value
        if self.op == "gte":
            return actual >= self.value
        if self.op == "lt":
            return actual < self.value
        return actual <= self.value


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def in_(column: str, values: Any) -> Filter:
    return Filter(column, "in", tuple(values))


@dataclass
class QueryResult:
    """Rows returned by a collection query."""

    rows: list[Row] = field(default_factory=list)


@dataclass
class CountResult:
    """Exact row count for a filtered collection."""

    count: int = 0


class CollectionStore(Protocol):
    """Query interface of the remote collection store."""

    async def query(
        self,
        collection: str,
        filters: tuple[Filter, ...] | list[Filter] = (),
        *,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> QueryResult:
        """Read rows from a collection.

        Raises:
            TransportError: If the store cannot answer
        """
        ...

    async def count(
        self,
        collection: str,
        filters: tuple[Filter, ...] | list[Filter] = (),
    ) -> CountResult:
        """Count rows in a collection.

        Raises:
            TransportError: If the store cannot answer
        """
        ...
