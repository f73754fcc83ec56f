"""Tests for row deduplication."""

from __future__ import annotations

import operator
import warnings

import pytest

from hrpulse.processing.deduplication import (
    DataQualityWarning,
    DedupeResult,
    dedupe,
    report_duplicates,
)


class TestDedupe:
    """Test suite for dedupe."""

    def test_empty_input(self) -> None:
        """Test deduplicating nothing."""
        result = dedupe([])

        assert result.unique == []
        assert result.duplicate_count == 0
        assert not result.has_duplicates

    def test_keeps_first_seen_row(self) -> None:
        """Test the first row per identity wins and order is preserved."""
        rows = [
            {"id": 2, "name": "Beta"},
            {"id": 1, "name": "Acme"},
            {"id": 2, "name": "Beta (stale copy)"},
            {"id": 3, "name": "Gamma"},
        ]

        result = dedupe(rows)

        assert [r["id"] for r in result.unique] == [2, 1, 3]
        assert result.unique[0]["name"] == "Beta"
        assert result.duplicate_count == 1

    def test_duplicate_count_matches_removed_rows(self) -> None:
        """Test duplicate_count equals input length minus output length."""
        rows = [{"id": 1}, {"id": 1}, {"id": 1}, {"id": 2}, {"id": 2}]

        result = dedupe(rows)

        assert len(result.unique) == 2
        assert result.duplicate_count == len(rows) - len(result.unique) == 3

    def test_idempotent(self) -> None:
        """Test deduplicating twice is a no-op."""
        rows = [{"id": "a"}, {"id": "b"}, {"id": "a"}, {"id": "c"}, {"id": "b"}]

        once = dedupe(rows)
        twice = dedupe(once.unique)

        assert twice.unique == once.unique
        assert twice.duplicate_count == 0

    def test_custom_identity(self) -> None:
        """Test identity function other than the id column."""
        rows = [
            {"id": 1, "email": "ana@example.com"},
            {"id": 2, "email": "ana@example.com"},
            {"id": 3, "email": "luis@example.com"},
        ]

        result = dedupe(rows, identity_fn=operator.itemgetter("email"))

        assert [r["id"] for r in result.unique] == [1, 3]

    def test_accepts_generators(self) -> None:
        """Test any iterable of rows is accepted."""
        result = dedupe({"id": i % 2} for i in range(5))

        assert len(result.unique) == 2
        assert result.duplicate_count == 3


class TestReportDuplicates:
    """Test suite for duplicate reporting."""

    def test_reports_data_quality_warning(self, caplog) -> None:
        """Test duplicates produce a warning, not an error."""
        result = DedupeResult(unique=[{"id": 1}], duplicate_count=2)

        with pytest.warns(DataQualityWarning, match="2 duplicate rows"):
            report_duplicates("companies", result)

        assert "companies" in caplog.text

    def test_silent_without_duplicates(self) -> None:
        """Test nothing is reported for clean data."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            report_duplicates("companies", DedupeResult(unique=[{"id": 1}]))

    def test_error_filter_does_not_raise(self, caplog) -> None:
        """Test an "error" warnings filter still leaves duplicates non-fatal."""
        result = DedupeResult(unique=[{"id": 1}], duplicate_count=1)

        with warnings.catch_warnings():
            warnings.simplefilter("error", DataQualityWarning)
            report_duplicates("employees", result)

        assert "'employees' returned 1 duplicate rows" in caplog.text
