"""Pydantic models for aggregated dashboard data.

Attributes are snake_case; ``model_dump(by_alias=True)`` yields the
camelCase shape the dashboard renders (``monthlyGrowthPct``,
``engagementRatePct``, ...). All models are immutable once computed.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Aggregate(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class DashboardStats(_Aggregate):
    """Cross-collection counts and derived metrics for the dashboard."""

    companies: int = 0
    employees: int = 0
    folders: int = 0
    documents: int = 0
    communications: int = 0
    tokens_used: int = 0
    storage_used_bytes: int = 0
    monthly_growth_pct: int = 0
    success_rate_pct: int = 0
    active_users: int = 0

    @classmethod
    def zero(cls) -> DashboardStats:
        return cls()


class EntityStats(_Aggregate):
    """Message and engagement metrics for one entity."""

    employee_count: int = 0
    sent_messages: int = 0
    read_messages: int = 0
    scheduled_messages: int = 0
    draft_messages: int = 0
    next_scheduled_date: str | None = None
    sentiment_score: float = 0.0
    engagement_rate_pct: int = 0

    @classmethod
    def zero(cls) -> EntityStats:
        return cls()


class EntityWithStats(EntityStats):
    """Base entity row with its stats flattened alongside.

    Base entity columns are kept verbatim as extra fields; ``id`` is the
    identity used for uniqueness.
    """

    model_config = ConfigDict(extra="allow")

    id: Any

    @classmethod
    def from_entity(cls, entity: dict[str, Any], stats: EntityStats) -> EntityWithStats:
        return cls(**{**entity, **stats.model_dump()})


class CommunicationStats(_Aggregate):
    """Communication log counts by delivery status."""

    sent: int = 0
    read: int = 0
    scheduled: int = 0
    draft: int = 0
    failed: int = 0
    total: int = 0


class CollectionHealth(_Aggregate):
    """Reachability and size of one store collection."""

    exists: bool
    count: int = 0
    error: str | None = None
