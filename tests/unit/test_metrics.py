"""Unit tests for Prometheus metrics collection."""

from __future__ import annotations

import pytest
from prometheus_client import REGISTRY

from hrpulse.monitoring import metrics


def sample(name: str, **labels: str) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestCounters:
    """Test suite for counter helpers."""

    def test_record_cache_lookup(self) -> None:
        """Test lookups are counted by outcome."""
        before = sample("hrpulse_cache_lookups_total", outcome="hit")

        metrics.record_cache_lookup("hit")

        assert sample("hrpulse_cache_lookups_total", outcome="hit") == before + 1

    def test_record_duplicates(self) -> None:
        """Test duplicate rows increment by count."""
        before = sample("hrpulse_duplicate_rows_total", collection="metrics_test")

        metrics.record_duplicates("metrics_test", 3)
        metrics.record_duplicates("metrics_test", 0)

        assert sample("hrpulse_duplicate_rows_total", collection="metrics_test") == before + 3

    def test_record_query_failure(self) -> None:
        """Test failures are counted by reason."""
        before = sample("hrpulse_query_failures_total", reason="TransportError")

        metrics.record_query_failure("TransportError")

        assert sample("hrpulse_query_failures_total", reason="TransportError") == before + 1


class TestTrackAggregation:
    """Test suite for the aggregation timing decorator."""

    @pytest.mark.asyncio
    async def test_observes_duration(self) -> None:
        """Test each call adds one histogram observation."""

        @metrics.track_aggregation("metrics_test")
        async def compute() -> int:
            """Compute."""
            return 42

        before = sample("hrpulse_aggregation_duration_seconds_count", operation="metrics_test")

        assert await compute() == 42
        assert compute.__name__ == "compute"
        assert sample("hrpulse_aggregation_duration_seconds_count", operation="metrics_test") == before + 1

    @pytest.mark.asyncio
    async def test_observes_on_failure(self) -> None:
        """Test failures are still timed and re-raised."""

        @metrics.track_aggregation("metrics_test_failure")
        async def compute() -> int:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await compute()

        assert sample("hrpulse_aggregation_duration_seconds_count", operation="metrics_test_failure") == 1
