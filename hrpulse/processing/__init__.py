"""HRPulse processing: deduplication and derived metrics."""

from hrpulse.processing.analytics import (
    count_statuses,
    engagement_rate_pct,
    estimated_storage_bytes,
    growth_pct,
    next_scheduled_date,
    sentiment_score,
    success_rate_pct,
)
from hrpulse.processing.deduplication import (
    DataQualityWarning,
    DedupeResult,
    dedupe,
    report_duplicates,
)

__all__ = [
    "count_statuses",
    "DataQualityWarning",
    "dedupe",
    "DedupeResult",
    "engagement_rate_pct",
    "estimated_storage_bytes",
    "growth_pct",
    "next_scheduled_date",
    "report_duplicates",
    "sentiment_score",
    "success_rate_pct",
]
