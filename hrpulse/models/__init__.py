"""HRPulse data models."""

from hrpulse.models.schemas import (
    CollectionHealth,
    CommunicationStats,
    DashboardStats,
    EntityStats,
    EntityWithStats,
)

__all__ = [
    "CollectionHealth",
    "CommunicationStats",
    "DashboardStats",
    "EntityStats",
    "EntityWithStats",
]
