"""Pytest configuration and fixtures for HRPulse tests."""

import pytest

from hrpulse.store.memory import InMemoryStore


@pytest.fixture(scope="session", autouse=True)
def setup_telemetry():
    """Setup OpenTelemetry for all tests.

    Runs once per session with no exporters, so spans are recorded in
    memory and dropped.
    """
    from hrpulse.observability.tracing import setup_telemetry, shutdown_telemetry

    setup_telemetry(service_name="hrpulse-test", environment="test")

    yield

    shutdown_telemetry()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock for TTL tests."""
    return FakeClock()


@pytest.fixture
def populated_store() -> InMemoryStore:
    """Create an in-memory store with two companies and their logs."""
    return InMemoryStore({
        "companies": [
            {"id": 2, "name": "Beta"},
            {"id": 1, "name": "Acme"},
        ],
        "employees": [
            {"id": 10, "company_id": 1, "last_name": "Zapata", "created_at": "2026-10-10T09:00:00+00:00"},
            {"id": 11, "company_id": 1, "last_name": "Alvarez", "created_at": "2025-01-01T09:00:00+00:00"},
            {"id": 12, "company_id": 2, "last_name": "Mora", "created_at": "2025-02-01T09:00:00+00:00"},
            {"id": 13, "company_id": 2, "last_name": "Ruiz", "created_at": "2025-03-01T09:00:00+00:00"},
        ],
        "folders": [{"id": i} for i in range(1, 5)],
        "documents": [{"id": i} for i in range(1, 4)],
        "communication_logs": [
            {"id": 100, "company_id": 1, "employee_id": 10, "status": "sent", "created_at": "2026-10-01T10:00:00+00:00"},
            {"id": 101, "company_id": 1, "employee_id": 11, "status": "read", "created_at": "2026-10-02T10:00:00+00:00"},
            {"id": 102, "company_id": 1, "employee_id": 10, "status": "scheduled", "created_at": "2026-10-25T10:00:00+00:00"},
            {"id": 103, "company_id": 1, "employee_id": 11, "status": "scheduled", "created_at": "2026-10-21T10:00:00+00:00"},
            {"id": 104, "company_id": 2, "employee_id": 12, "status": "draft", "created_at": "2026-10-03T10:00:00+00:00"},
            {"id": 105, "company_id": 2, "employee_id": 13, "status": "failed", "created_at": "2026-10-04T10:00:00+00:00"},
        ],
        "users": [{"id": "u-1"}],
    })
