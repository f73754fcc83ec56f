"""HRPulse configuration management with environment variable overrides.

This module provides centralized configuration management with support for:
- Environment variable overrides (highest priority)
- YAML config file loading
- Pydantic validation

Priority order for configuration values:
1. YAML config file passed to get_config()
2. Environment variables (HRPULSE_*) and .env
3. Pydantic defaults (lowest priority)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

VALID_STORE_BACKENDS = ("postgrest", "memory")


class StoreConfig(BaseModel):
    """Remote collection store configuration.

    Attributes:
        backend: Store backend (postgrest, memory)
        url: Base URL of the Supabase/PostgREST project
        api_key: Anon or service key sent as ``apikey`` and bearer token
        request_timeout_seconds: Transport-level timeout for one HTTP request
    """

    backend: str = Field(default_factory=lambda: os.getenv("HRPULSE_STORE_BACKEND", "postgrest"))
    url: str = Field(default_factory=lambda: os.getenv("HRPULSE_STORE_URL", "http://localhost:54321"))
    api_key: str = Field(default_factory=lambda: os.getenv("HRPULSE_STORE_API_KEY", ""))
    request_timeout_seconds: float = 60.0

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Reject unknown store backends."""
        if v not in VALID_STORE_BACKENDS:
            raise ValueError(f"Invalid store backend: {v} (valid: {', '.join(VALID_STORE_BACKENDS)})")
        return v


class CacheConfig(BaseModel):
    """Cache configuration.

    Attributes:
        ttl_minutes: Time-to-live shared by every cache entry
    """

    ttl_minutes: float = Field(default=5.0, gt=0)

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_minutes * 60


class AggregationConfig(BaseModel):
    """Aggregation configuration.

    Attributes:
        count_timeout_seconds: Per-query timeout for top-level counts
        metric_timeout_seconds: Per-query timeout for best-effort derived metrics
        entity_timeout_seconds: Per-query timeout for per-entity sub-queries
        max_concurrent_entities: Entities whose stats are fetched at once
        avg_document_size_bytes: Average document size for storage estimates
    """

    count_timeout_seconds: float = Field(default=30.0, gt=0)
    metric_timeout_seconds: float = Field(default=10.0, gt=0)
    entity_timeout_seconds: float = Field(default=15.0, gt=0)
    max_concurrent_entities: int = Field(default=10, ge=1)
    avg_document_size_bytes: int = Field(default=50 * 1024, ge=0)


class HRPulseConfig(BaseSettings):
    """Main HRPulse configuration.

    This class loads configuration from multiple sources:
    1. YAML config file (if passed to get_config)
    2. Environment variables (HRPULSE_*)
    3. Pydantic defaults

    Attributes:
        store: Remote collection store configuration
        cache: Cache configuration
        aggregation: Aggregation timeouts and estimates
        otlp_endpoint: Optional OTLP collector endpoint for traces
        environment: Deployment environment name
        debug: Enable debug logging
    """

    store: StoreConfig = Field(default_factory=StoreConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)

    # Monitoring
    otlp_endpoint: str | None = None

    # Environment
    environment: str = Field(default_factory=lambda: os.getenv("HRPULSE_ENVIRONMENT", "development"))
    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        env_prefix="hrpulse_",
        extra="ignore",
    )


def load_config_from_file(config_path: str) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Configuration dictionary
    """
    path = Path(config_path).expanduser()
    if not path.exists():
        logger.warning(f"Config file not found: {config_path}")
        return {}

    try:
        with open(path) as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
        return config
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        return {}


def get_config(config_path: str | None = None) -> HRPulseConfig:
    """Get configuration instance.

    Args:
        config_path: Optional path to YAML config file

    Returns:
        HRPulseConfig instance
    """
    if config_path:
        file_config = load_config_from_file(config_path)
        return HRPulseConfig(**file_config)

    return HRPulseConfig()
