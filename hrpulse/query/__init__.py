"""HRPulse query layer: cached dashboard aggregation."""

from hrpulse.query.aggregation import ENTITY_SOURCES, AggregationService, EntitySource

__all__ = [
    "AggregationService",
    "ENTITY_SOURCES",
    "EntitySource",
]
