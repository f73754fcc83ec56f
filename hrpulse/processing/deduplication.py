"""Row deduplication for store results.

The remote store is allowed to return the same row more than once within a
single result set, so every fetched collection passes through ``dedupe``
before it is counted, cached or returned.
"""

from __future__ import annotations

import logging
import operator
import warnings
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from hrpulse.monitoring.metrics import record_duplicates

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable

    from hrpulse.store.base import Row

logger = logging.getLogger(__name__)

by_id: Callable[[Row], Any] = operator.itemgetter("id")


class DataQualityWarning(UserWarning):
    """Upstream data violated an invariant the store should have enforced."""


@dataclass(frozen=True)
class DedupeResult:
    """Unique rows in first-seen order and the number of rows dropped."""

    unique: list[Row] = field(default_factory=list)
    duplicate_count: int = 0

    @property
    def has_duplicates(self) -> bool:
        return self.duplicate_count > 0


def dedupe(
    rows: Iterable[Row],
    identity_fn: Callable[[Row], Hashable] = by_id,
) -> DedupeResult:
    """Drop rows whose identity was already seen.

    Args:
        rows: Rows as returned by the store
        identity_fn: Function computing a row's identity (default: ``row["id"]``)

    Returns:
        DedupeResult with the first row per identity, in input order
    """
    seen: set[Hashable] = set()
    unique: list[Row] = []
    total = 0

    for row in rows:
        total += 1
        identity = identity_fn(row)
        if identity in seen:
            continue
        seen.add(identity)
        unique.append(row)

    return DedupeResult(unique=unique, duplicate_count=total - len(unique))


def report_duplicates(collection: str, result: DedupeResult) -> None:
    """Report duplicate rows found in a collection as a data quality signal.

    Logs a warning, counts the dropped rows and emits a DataQualityWarning.
    The warning never propagates as an exception, even under an "error"
    warnings filter. Does nothing when the result had no duplicates.
    """
    if not result.has_duplicates:
        return

    message = (
        f"Collection '{collection}' returned {result.duplicate_count} duplicate rows; "
        f"kept {len(result.unique)} unique"
    )
    logger.warning(message)
    record_duplicates(collection, result.duplicate_count)
    try:
        warnings.warn(message, DataQualityWarning, stacklevel=2)
    except DataQualityWarning:
        # An "error" warnings filter must not turn duplicates into a failed query
        logger.debug(f"DataQualityWarning for '{collection}' escalated by warnings filter")
