"""Cached, partial-failure tolerant aggregation of dashboard statistics."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from hrpulse.cache.ttl import make_cache_key
from hrpulse.config import AggregationConfig
from hrpulse.models.schemas import (
    CollectionHealth,
    CommunicationStats,
    DashboardStats,
    EntityStats,
    EntityWithStats,
)
from hrpulse.monitoring.metrics import track_aggregation
from hrpulse.observability.tracing import add_span_attributes, trace_operation
from hrpulse.processing.analytics import (
    SUCCESS_STATUSES,
    count_statuses,
    engagement_rate_pct,
    estimated_storage_bytes,
    growth_pct,
    next_scheduled_date,
    one_month_before,
    sentiment_score,
    success_rate_pct,
)
from hrpulse.processing.deduplication import dedupe, report_duplicates
from hrpulse.resilience.fanout import degrade, fan_out, with_timeout
from hrpulse.store.base import eq, gte, in_

if TYPE_CHECKING:
    from collections.abc import Callable

    from hrpulse.cache.ttl import TTLCache
    from hrpulse.store.base import CollectionStore, Filter, Row

logger = logging.getLogger(__name__)

DASHBOARD_STATS_KEY = "dashboard_stats"
COMMUNICATION_STATS_KEY = "communication_stats"

COUNTED_COLLECTIONS = ("companies", "employees", "folders", "documents", "communication_logs")
HEALTH_CHECKED_COLLECTIONS = (*COUNTED_COLLECTIONS, "users")

LOG_COLUMNS = "id,status,created_at"


@dataclass(frozen=True)
class EntitySource:
    """How entities of one collection relate to employees and communication logs."""

    order_by: str
    foreign_key: str
    counts_employees: bool


ENTITY_SOURCES: dict[str, EntitySource] = {
    "companies": EntitySource(order_by="name", foreign_key="company_id", counts_employees=True),
    "employees": EntitySource(order_by="last_name", foreign_key="employee_id", counts_employees=False),
}

# Cache key prefixes that go stale when a collection is written to
_DEPENDENT_PREFIXES: dict[str, tuple[str, ...]] = {
    "employees": ("employees", "companies_with_stats"),
    "communication_logs": ("communication", "companies_with_stats", "employees_with_stats"),
}


def _with_stats_key(collection: str) -> str:
    return make_cache_key(f"{collection}_with_stats")


class AggregationService:
    """Dashboard statistics over an unreliable collection store.

    Every public read is cache-first. On a miss, sub-queries are fanned out
    concurrently with per-query timeouts, fetched rows are deduplicated by
    primary key, and failed sub-queries are degraded to zero. The public
    reads never raise for store or data problems: the dashboard sees zeros
    or cached values, never an error.
    """

    def __init__(
        self,
        store: CollectionStore,
        cache: TTLCache,
        config: AggregationConfig | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize aggregation service.

        Args:
            store: Remote collection store
            cache: Cache shared by all reads of this service
            config: Timeouts, concurrency and storage estimate settings
            now: Wall clock used for the monthly growth window
        """
        self.store = store
        self.cache = cache
        self.config = config or AggregationConfig()
        self._now = now or (lambda: datetime.now(UTC))

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    async def _count(self, collection: str, filters: tuple[Filter, ...] = ()) -> int:
        result = await self.store.count(collection, filters)
        return result.count

    async def _fetch_unique(
        self,
        collection: str,
        filters: tuple[Filter, ...] = (),
        **options: Any,
    ) -> list[Row]:
        """Query a collection and drop duplicate rows by primary key."""
        result = await self.store.query(collection, filters, **options)
        deduped = dedupe(result.rows)
        report_duplicates(collection, deduped)
        return deduped.unique

    # ------------------------------------------------------------------
    # Dashboard stats
    # ------------------------------------------------------------------

    async def get_dashboard_stats(self) -> DashboardStats:
        """Get cross-collection dashboard statistics.

        Returns:
            Cached stats when fresh, otherwise freshly computed stats (with
            failed sub-queries counted as 0, or all zeros if composition
            itself failed)
        """
        cached = self.cache.get(DASHBOARD_STATS_KEY)
        if cached is not None:
            return cached

        with trace_operation("hrpulse.dashboard_stats"):
            try:
                stats = await self._compute_dashboard_stats()
            except Exception:
                logger.exception("Dashboard stats composition failed, serving zeroed stats")
                stats = DashboardStats.zero()

        self.cache.set(DASHBOARD_STATS_KEY, stats)
        return stats

    @track_aggregation("dashboard_stats")
    async def _compute_dashboard_stats(self) -> DashboardStats:
        count_results = await fan_out(
            [lambda c=c: self._count(c) for c in COUNTED_COLLECTIONS],
            self.config.count_timeout_seconds,
            labels=[f"count:{c}" for c in COUNTED_COLLECTIONS],
        )
        companies, employees, folders, documents, communications = degrade(count_results, 0)

        since = one_month_before(self._now()).isoformat()
        metric_results = await fan_out(
            [
                lambda: self._count("employees", (gte("created_at", since),)),
                lambda: self._fetch_unique(
                    "communication_logs",
                    (in_("status", SUCCESS_STATUSES),),
                    columns="id,status",
                ),
            ],
            self.config.metric_timeout_seconds,
            labels=["recent_employees", "successful_communications"],
        )
        new_employees = metric_results[0].unwrap_or(0)
        successful = len(metric_results[1].unwrap_or([]))

        add_span_attributes({
            "hrpulse.failed_counts": sum(1 for r in count_results if not r.ok),
            "hrpulse.failed_metrics": sum(1 for r in metric_results if not r.ok),
        })

        return DashboardStats(
            companies=companies,
            employees=employees,
            folders=folders,
            documents=documents,
            communications=communications,
            # Communications stand in for LLM tokens and employees for active users
            tokens_used=communications,
            storage_used_bytes=estimated_storage_bytes(documents, self.config.avg_document_size_bytes),
            monthly_growth_pct=growth_pct(new_employees, employees),
            success_rate_pct=success_rate_pct(successful, communications),
            active_users=employees,
        )

    # ------------------------------------------------------------------
    # Entities with stats
    # ------------------------------------------------------------------

    async def get_entities_with_stats(self, collection: str = "companies") -> list[EntityWithStats]:
        """Get every entity of a collection annotated with message metrics.

        Args:
            collection: Entity collection ("companies" or "employees")

        Returns:
            A fresh list of entities unique by ``id``, in collection order.
            Entities whose stats could not be computed carry zeroed stats.
            Empty when the entities themselves could not be fetched or the
            collection has no known relation to communication logs.
        """
        source = ENTITY_SOURCES.get(collection)
        if source is None:
            logger.error(
                f"Unsupported collection: {collection} (valid: {', '.join(ENTITY_SOURCES)})"
            )
            return []

        key = _with_stats_key(collection)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)

        with trace_operation("hrpulse.entities_with_stats", {"collection": collection}):
            try:
                entities = await self._compute_entities_with_stats(collection, source)
            except Exception:
                logger.exception(f"Failed to build {collection} with stats")
                return []

        if entities is None:
            return []

        # Callers each get their own list; the cached tuple is never handed out
        self.cache.set(key, tuple(entities))
        return entities

    @track_aggregation("entities_with_stats")
    async def _compute_entities_with_stats(
        self,
        collection: str,
        source: EntitySource,
    ) -> list[EntityWithStats] | None:
        base = await with_timeout(
            self._fetch_unique(collection, order_by=source.order_by),
            self.config.count_timeout_seconds,
        )
        if not base.ok:
            logger.error(f"Could not fetch {collection}: {base.reason}: {base.error}")
            return None

        entities: list[Row] = base.value or []
        logger.info(f"Computing stats for {len(entities)} {collection}")

        semaphore = asyncio.Semaphore(self.config.max_concurrent_entities)

        async def annotate(entity: Row) -> EntityWithStats:
            async with semaphore:
                stats = await self._entity_stats(collection, source, entity)
            return EntityWithStats.from_entity(entity, stats)

        return list(await asyncio.gather(*(annotate(entity) for entity in entities)))

    async def _entity_stats(self, collection: str, source: EntitySource, entity: Row) -> EntityStats:
        """Compute one entity's stats; any failure yields zeroed stats for it alone."""
        entity_id = entity.get("id")
        try:
            related = (eq(source.foreign_key, entity_id),)
            queries = [lambda: self._fetch_unique("communication_logs", related, columns=LOG_COLUMNS)]
            labels = [f"{collection}:{entity_id}:logs"]
            if source.counts_employees:
                queries.append(lambda: self._count("employees", related))
                labels.append(f"{collection}:{entity_id}:employees")

            results = await fan_out(queries, self.config.entity_timeout_seconds, labels=labels)
            logs: list[Row] = results[0].unwrap_or([])
            employee_count = results[1].unwrap_or(0) if source.counts_employees else 0

            statuses = count_statuses(logs)
            return EntityStats(
                employee_count=employee_count,
                sent_messages=statuses.sent,
                read_messages=statuses.read,
                scheduled_messages=statuses.scheduled,
                draft_messages=statuses.draft,
                next_scheduled_date=next_scheduled_date(logs),
                sentiment_score=sentiment_score(statuses.sent, statuses.read),
                engagement_rate_pct=engagement_rate_pct(statuses.sent, statuses.read),
            )
        except Exception:
            logger.exception(f"Stats for {collection} {entity_id} failed, using zeroed stats")
            return EntityStats.zero()

    # ------------------------------------------------------------------
    # Communication stats and health
    # ------------------------------------------------------------------

    async def get_communication_stats(self, company_id: Any = None) -> CommunicationStats:
        """Get communication log counts by status.

        Args:
            company_id: Restrict to one company's logs (default: all logs)

        Returns:
            Status breakdown, zeroed (and not cached) if the logs could not
            be fetched
        """
        filters = (eq("company_id", company_id),) if company_id is not None else ()
        key = make_cache_key(COMMUNICATION_STATS_KEY, filters)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        result = await with_timeout(
            self._fetch_unique("communication_logs", filters, columns="id,status"),
            self.config.count_timeout_seconds,
        )
        if not result.ok:
            logger.error(f"Could not fetch communication logs: {result.reason}: {result.error}")
            return CommunicationStats()

        stats = count_statuses(result.value or [])
        self.cache.set(key, stats)
        return stats

    async def verify_collections(self) -> dict[str, CollectionHealth]:
        """Check that every known collection answers a count query.

        Never cached: this is a live probe of the store.
        """
        results = await fan_out(
            [lambda c=c: self._count(c) for c in HEALTH_CHECKED_COLLECTIONS],
            self.config.count_timeout_seconds,
            labels=[f"verify:{c}" for c in HEALTH_CHECKED_COLLECTIONS],
        )
        return {
            collection: CollectionHealth(
                exists=result.ok,
                count=result.unwrap_or(0),
                error=None if result.ok else f"{result.reason}: {result.error}",
            )
            for collection, result in zip(HEALTH_CHECKED_COLLECTIONS, results, strict=True)
        }

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def invalidate(self, collection: str | None = None) -> None:
        """Drop cached data after a write to the store.

        Args:
            collection: Collection that was written to; None clears everything.
                Dashboard stats are always dropped since every counted
                collection feeds them.
        """
        if collection is None:
            self.cache.clear()
            logger.info("Invalidated entire cache")
            return

        for prefix in _DEPENDENT_PREFIXES.get(collection, (collection,)):
            self.cache.clear_prefix(prefix)
        self.cache.clear(DASHBOARD_STATS_KEY)
        logger.info(f"Invalidated cache for {collection}")
