"""
Configuration management for the cache sync service.
"""
import math
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from .freshness import DEFAULT_REFRESH_INTERVAL_SEC, effective_refresh_interval


class CacheSyncConfig(BaseSettings):
    """Configuration for the ClickHouse -> Redis refresh job."""

    # Redis configuration
    redis_url: str = "redis://localhost:6379"
    redis_socket_timeout: float = 2.0
    redis_ttl_sec: int = DEFAULT_REFRESH_INTERVAL_SEC

    # Snapshot naming
    team_name: str = "UnknownTeam"
    metric: str = "monthly_agg"
    default_city: str = "Stockton"

    class Config:
        env_file = ".env"
        env_prefix = ""
        extra = "ignore"

    @field_validator("redis_ttl_sec", mode="before")
    @classmethod
    def validate_ttl(cls, value):
        """Replace a non-positive or non-numeric TTL with the default interval."""
        interval = effective_refresh_interval(value)
        if math.isinf(interval):
            return DEFAULT_REFRESH_INTERVAL_SEC
        # Redis EX takes whole seconds
        return math.ceil(interval)


_config: Optional[CacheSyncConfig] = None


def get_config() -> CacheSyncConfig:
    """Get or create the cache sync configuration."""
    global _config
    if _config is None:
        _config = CacheSyncConfig()
    return _config
