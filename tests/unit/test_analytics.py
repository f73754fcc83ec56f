"""Tests for derived dashboard metrics."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from hrpulse.processing.analytics import (
    AVG_DOCUMENT_SIZE_BYTES,
    count_statuses,
    engagement_rate_pct,
    estimated_storage_bytes,
    growth_pct,
    next_scheduled_date,
    one_month_before,
    round_half_up,
    sentiment_score,
    success_rate_pct,
)


class TestRates:
    """Test suite for percentage metrics."""

    @pytest.mark.parametrize("new_count", [0, 1, 50, 10_000])
    def test_growth_zero_total(self, new_count: int) -> None:
        """Test growth never divides by zero."""
        assert growth_pct(new_count, 0) == 0

    @pytest.mark.parametrize("success_count", [0, 7, 1_000])
    def test_success_rate_zero_total(self, success_count: int) -> None:
        """Test success rate never divides by zero."""
        assert success_rate_pct(success_count, 0) == 0

    def test_growth(self) -> None:
        """Test growth is a rounded percentage."""
        assert growth_pct(1, 4) == 25
        assert growth_pct(1, 3) == 33
        assert growth_pct(2, 3) == 67

    def test_success_rate(self) -> None:
        """Test success rate is a rounded percentage."""
        assert success_rate_pct(45, 50) == 90
        assert success_rate_pct(50, 50) == 100

    def test_rounds_half_up(self) -> None:
        """Test .5 rounds up rather than to even."""
        assert growth_pct(1, 8) == 13  # 12.5
        assert success_rate_pct(1, 40) == 3  # 2.5
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4999) == 2

    def test_engagement_rate(self) -> None:
        """Test engagement is read over sent."""
        assert engagement_rate_pct(sent=10, read=8) == 80
        assert engagement_rate_pct(sent=0, read=5) == 0
        assert engagement_rate_pct(sent=3, read=0) == 0


class TestStorage:
    """Test suite for storage estimate."""

    def test_default_average_size(self) -> None:
        """Test default average is 50 KiB per document."""
        assert AVG_DOCUMENT_SIZE_BYTES == 51_200
        assert estimated_storage_bytes(10) == 512_000

    def test_custom_average_size(self) -> None:
        """Test average size can be configured."""
        assert estimated_storage_bytes(3, avg_document_size_bytes=1_000) == 3_000
        assert estimated_storage_bytes(0) == 0


class TestSentimentScore:
    """Test suite for the sentiment curve."""

    def test_no_messages_is_neutral(self) -> None:
        """Test sent == 0 scores exactly 0."""
        assert sentiment_score(sent=0, read=0) == 0
        assert sentiment_score(sent=0, read=12) == 0

    def test_high_engagement_boundary(self) -> None:
        """Test engagement 0.8 maps to 0.1."""
        assert sentiment_score(sent=100, read=80) == pytest.approx(0.1)

    def test_medium_engagement_boundary(self) -> None:
        """Test engagement 0.5 maps to -0.1."""
        assert sentiment_score(sent=100, read=50) == pytest.approx(-0.1)

    def test_full_engagement(self) -> None:
        """Test engagement 1.0 maps to 1.0."""
        assert sentiment_score(sent=20, read=20) == pytest.approx(1.0)

    def test_zero_engagement(self) -> None:
        """Test engagement 0 maps to -1.0."""
        assert sentiment_score(sent=10, read=0) == pytest.approx(-1.0)

    def test_medium_segment(self) -> None:
        """Test a point inside [0.5, 0.8)."""
        assert sentiment_score(sent=100, read=65) == pytest.approx(0.15 * 0.6667 - 0.1)

    def test_low_segment_upper_end(self) -> None:
        """Test just below 0.5 follows the low segment formula (approaching -0.6)."""
        assert sentiment_score(sent=1000, read=499) == pytest.approx(-0.6008)

    def test_low_segment_midpoint(self) -> None:
        """Test engagement 0.25 maps to -0.8."""
        assert sentiment_score(sent=100, read=25) == pytest.approx(-0.8)

    def test_not_clamped(self) -> None:
        """Test read > sent is scored as computed."""
        assert sentiment_score(sent=10, read=12) == pytest.approx(0.1 + 0.4 * 4.5)


class TestCommunicationHelpers:
    """Test suite for communication log helpers."""

    def test_count_statuses(self) -> None:
        """Test logs are counted per tracked status."""
        logs = [
            {"status": "sent"},
            {"status": "sent"},
            {"status": "read"},
            {"status": "scheduled"},
            {"status": "draft"},
            {"status": "failed"},
            {"status": "bounced"},
            {},
        ]

        stats = count_statuses(logs)

        assert stats.sent == 2
        assert stats.read == 1
        assert stats.scheduled == 1
        assert stats.draft == 1
        assert stats.failed == 1
        assert stats.total == 8

    def test_count_statuses_empty(self) -> None:
        """Test no logs count as all zeros."""
        assert count_statuses([]).total == 0

    def test_next_scheduled_date(self) -> None:
        """Test earliest scheduled log wins."""
        logs = [
            {"status": "scheduled", "created_at": "2026-11-02T08:00:00+00:00"},
            {"status": "sent", "created_at": "2026-01-01T08:00:00+00:00"},
            {"status": "scheduled", "created_at": "2026-10-30T08:00:00+00:00"},
            {"status": "scheduled", "created_at": None},
        ]

        assert next_scheduled_date(logs) == "2026-10-30T08:00:00+00:00"

    def test_next_scheduled_date_with_datetimes(self) -> None:
        """Test datetime values are returned as ISO text."""
        logs = [{"status": "scheduled", "created_at": datetime(2026, 10, 30, 8, tzinfo=UTC)}]

        assert next_scheduled_date(logs) == "2026-10-30T08:00:00+00:00"

    def test_next_scheduled_date_none(self) -> None:
        """Test nothing scheduled yields None."""
        assert next_scheduled_date([{"status": "sent", "created_at": "2026-10-30"}]) is None


class TestOneMonthBefore:
    """Test suite for the growth window."""

    def test_mid_month(self) -> None:
        """Test a plain month step."""
        assert one_month_before(datetime(2026, 10, 19, 12, tzinfo=UTC)) == datetime(
            2026, 9, 19, 12, tzinfo=UTC
        )

    def test_january_wraps_year(self) -> None:
        """Test January steps back into December."""
        assert one_month_before(datetime(2026, 1, 15, tzinfo=UTC)) == datetime(2025, 12, 15, tzinfo=UTC)

    def test_day_clamped(self) -> None:
        """Test day is clamped to the shorter month."""
        assert one_month_before(datetime(2026, 3, 31, tzinfo=UTC)) == datetime(2026, 2, 28, tzinfo=UTC)
        assert one_month_before(datetime(2024, 3, 30, tzinfo=UTC)) == datetime(2024, 2, 29, tzinfo=UTC)
