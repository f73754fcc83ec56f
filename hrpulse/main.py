"""HRPulse application wiring."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from hrpulse.cache.ttl import TTLCache
from hrpulse.config import HRPulseConfig, get_config
from hrpulse.query.aggregation import AggregationService
from hrpulse.store.memory import InMemoryStore
from hrpulse.store.postgrest import PostgrestStore

if TYPE_CHECKING:
    from hrpulse.store.base import CollectionStore

logger = logging.getLogger(__name__)


class HRPulseApplication:
    """Owns the store, the cache and the aggregation service for one process.

    The cache is created once here and injected into the service; the
    store's HTTP client is opened on ``start`` and closed on ``stop``.

    Attributes:
        config: Loaded configuration
        store: Remote collection store
        cache: Process-wide TTL cache
        service: Aggregation service
    """

    def __init__(
        self,
        config: HRPulseConfig | None = None,
        store: CollectionStore | None = None,
    ) -> None:
        """Initialize application.

        Args:
            config: Configuration (default: loaded from environment)
            store: Store override (default: built from config.store)
        """
        self.config = config or get_config()
        self.store = store if store is not None else self._create_store()
        self.cache = TTLCache(ttl_seconds=self.config.cache.ttl_seconds)
        self.service = AggregationService(
            store=self.store,
            cache=self.cache,
            config=self.config.aggregation,
        )

    def _create_store(self) -> CollectionStore:
        store_config = self.config.store
        if store_config.backend == "memory":
            logger.info("Using in-memory collection store")
            return InMemoryStore()

        return PostgrestStore(
            url=store_config.url,
            api_key=store_config.api_key,
            timeout=store_config.request_timeout_seconds,
        )

    async def start(self) -> None:
        """Open store connections."""
        if isinstance(self.store, PostgrestStore):
            await self.store.start()
        logger.info(f"HRPulse started (cache ttl={self.cache.ttl_seconds:.0f}s)")

    async def stop(self) -> None:
        """Close store connections and drop cached data."""
        if isinstance(self.store, PostgrestStore):
            await self.store.close()
        self.cache.clear()
        logger.info("HRPulse stopped")

    async def __aenter__(self) -> HRPulseApplication:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()
