"""In-memory collection store for lite mode and tests."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

from hrpulse.store.base import CountResult, QueryResult, Row

if TYPE_CHECKING:
    from hrpulse.store.base import Filter

logger = logging.getLogger(__name__)


class InMemoryStore:
    """Collection store backed by plain lists of rows.

    Behaves like an untrusted upstream: rows are returned exactly as they
    were inserted, duplicates included. Every call is recorded in
    ``calls`` so callers can assert on query traffic.
    """

    def __init__(self, collections: dict[str, list[Row]] | None = None) -> None:
        """Initialize in-memory store.

        Args:
            collections: Initial rows keyed by collection name
        """
        self._collections: dict[str, list[Row]] = {
            name: list(rows) for name, rows in (collections or {}).items()
        }
        self.calls: list[tuple[str, str]] = []

    def insert(self, collection: str, *rows: Row) -> None:
        """Append rows to a collection, creating it if needed."""
        self._collections.setdefault(collection, []).extend(rows)

    def _select(self, collection: str, filters: tuple[Filter, ...] | list[Filter]) -> list[Row]:
        rows = self._collections.get(collection, [])
        return [row for row in rows if all(f.matches(row) for f in filters)]

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
        """Read rows from a collection."""
        self.calls.append(("query", collection))

        rows = self._select(collection, filters)

        if order_by:
            # None sorts last, matching PostgREST's default nullslast for asc
            rows.sort(
                key=lambda r: (r.get(order_by) is None, r.get(order_by)),
                reverse=descending,
            )

        start = offset or 0
        end = start + limit if limit is not None else None
        rows = rows[start:end]

        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            rows = [{c: row.get(c) for c in wanted} for row in rows]

        return QueryResult(rows=copy.deepcopy(rows))

    async def count(
        self,
        collection: str,
        filters: tuple[Filter, ...] | list[Filter] = (),
    ) -> CountResult:
        """Count rows in a collection."""
        self.calls.append(("count", collection))
        return CountResult(count=len(self._select(collection, filters)))
