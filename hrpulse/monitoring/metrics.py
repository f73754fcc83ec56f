"""Prometheus metrics collection for HRPulse.

Provides instrumentation for cache lookups, sub-query failures, data quality
and aggregation latency.
"""

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# =============================================================================
# Cache Metrics
# =============================================================================

cache_lookups_total = Counter(
    "hrpulse_cache_lookups_total",
    "Total cache lookups by outcome",
    ["outcome"],  # hit, miss, expired
)

cache_invalidations_total = Counter(
    "hrpulse_cache_invalidations_total",
    "Total explicit cache invalidations",
    ["scope"],  # key, prefix, all
)

# =============================================================================
# Query Metrics
# =============================================================================

query_failures_total = Counter(
    "hrpulse_query_failures_total",
    "Total sub-query failures degraded to a default value",
    ["reason"],
)

duplicate_rows_total = Counter(
    "hrpulse_duplicate_rows_total",
    "Total duplicate rows dropped from store results",
    ["collection"],
)

aggregation_duration_seconds = Histogram(
    "hrpulse_aggregation_duration_seconds",
    "Duration of uncached aggregation operations in seconds",
    ["operation"],
    buckets=[0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

# =============================================================================
# Decorators for automatic instrumentation
# =============================================================================


def track_aggregation(operation: str):
    """Decorator to track aggregation duration.

    Usage:
        @track_aggregation("dashboard_stats")
        async def _compute_dashboard_stats(self):
            # ... fan-out and composition
            return stats
    """

    def decorator(func):
        async def wrapper(*args, **kwargs):
            with aggregation_duration_seconds.labels(operation=operation).time():
                return await func(*args, **kwargs)

        wrapper.__name__ = func.__name__
        wrapper.__doc__ = func.__doc__
        return wrapper

    return decorator


# =============================================================================
# Convenience functions for manual metric updates
# =============================================================================


def record_cache_lookup(outcome: str) -> None:
    """Record cache lookup outcome."""
    cache_lookups_total.labels(outcome=outcome).inc()


def record_cache_invalidation(scope: str) -> None:
    """Record explicit cache invalidation."""
    cache_invalidations_total.labels(scope=scope).inc()


def record_query_failure(reason: str) -> None:
    """Record a failed sub-query slot."""
    query_failures_total.labels(reason=reason).inc()


def record_duplicates(collection: str, count: int) -> None:
    """Record duplicate rows dropped for a collection."""
    if count > 0:
        duplicate_rows_total.labels(collection=collection).inc(count)
