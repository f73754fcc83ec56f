"""Timeout-bounded concurrent fan-out of independent store queries.

Each query runs as its own task and is raced against its own timer. A
query that loses the race is abandoned, not cancelled: the remote call is
assumed to have no cancellation primitive, so its late outcome is simply
discarded. Failures never escape ``fan_out``; they come back as failed
``Result`` slots in input order so the caller can decide what each failed
slot degrades to.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from hrpulse.monitoring.metrics import record_query_failure
from hrpulse.resilience.result import Result

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Strong references to abandoned tasks; the event loop only keeps weak ones
_abandoned: set[asyncio.Future[Any]] = set()


class QueryTimeoutError(TimeoutError):
    """Raised (as a failed Result) when a query outlives its timeout."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"Query timed out after {timeout}s")
        self.timeout = timeout


def _discard_late_outcome(task: asyncio.Future[Any]) -> None:
    _abandoned.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug(f"Discarded late failure of abandoned query: {type(exc).__name__}: {exc}")


async def with_timeout(awaitable: Awaitable[T], timeout: float) -> Result[T]:
    """Await with a timeout, returning a Result instead of raising.

    Args:
        awaitable: Query coroutine or future
        timeout: Seconds to wait before giving up

    Returns:
        Result holding the value, the raised exception, or QueryTimeoutError
    """
    task = asyncio.ensure_future(awaitable)
    done, _ = await asyncio.wait({task}, timeout=timeout)

    if task not in done:
        _abandoned.add(task)
        task.add_done_callback(_discard_late_outcome)
        return Result.failure(QueryTimeoutError(timeout))

    if task.cancelled():
        return Result.failure(asyncio.CancelledError())

    exc = task.exception()
    if exc is None:
        return Result.success(task.result())
    if not isinstance(exc, Exception):
        raise exc
    return Result.failure(exc)


async def fan_out(
    queries: Sequence[Callable[[], Awaitable[T]]],
    per_query_timeout: float,
    labels: Sequence[str] | None = None,
) -> list[Result[T]]:
    """Run independent queries concurrently, each with its own timeout.

    Args:
        queries: Zero-argument callables returning the query awaitable
        per_query_timeout: Timeout applied to every query individually
        labels: Optional names for log messages (defaults to slot index)

    Returns:
        One Result per query, in the same order as ``queries``
    """
    names = list(labels) if labels is not None else [str(i) for i in range(len(queries))]
    if len(names) != len(queries):
        raise ValueError(f"Got {len(names)} labels for {len(queries)} queries")

    async def run_slot(name: str, query: Callable[[], Awaitable[T]]) -> Result[T]:
        try:
            awaitable = query()
        except Exception as e:
            result: Result[T] = Result.failure(e)
        else:
            result = await with_timeout(awaitable, per_query_timeout)

        if not result.ok:
            logger.warning(f"Query '{name}' failed: {result.reason}: {result.error}")
            record_query_failure(result.reason or "unknown")
        return result

    results = await asyncio.gather(*(run_slot(name, q) for name, q in zip(names, queries, strict=True)))

    failed = sum(1 for r in results if not r.ok)
    if failed:
        logger.warning(f"{failed} of {len(results)} queries failed; continuing with partial results")

    return list(results)


def degrade(results: Sequence[Result[T]], default: T) -> list[T]:
    """Map every failed slot to ``default`` and unwrap the rest.

    This is the single place where sub-query failures turn into
    dashboard-safe values.
    """
    return [r.unwrap_or(default) for r in results]
