"""HRPulse collection store layer."""

from hrpulse.store.base import (
    CollectionStore,
    CountResult,
    Filter,
    QueryResult,
    Row,
    TransportError,
    eq,
    gte,
    in_,
)
from hrpulse.store.memory import InMemoryStore
from hrpulse.store.postgrest import PostgrestStore

__all__ = [
    "CollectionStore",
    "CountResult",
    "eq",
    "Filter",
    "gte",
    "in_",
    "InMemoryStore",
    "PostgrestStore",
    "QueryResult",
    "Row",
    "TransportError",
]
