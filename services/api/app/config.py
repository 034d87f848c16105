"""Configuration management for the Weather API."""

from typing import Optional
from pydantic_settings import BaseSettings


class APIConfig(BaseSettings):
    """API configuration. Store settings live in the warehouse and cache_sync configs."""

    # API settings
    api_title: str = "Weather Database System API"
    api_version: str = "1.0.0"
    api_description: str = "Monthly weather aggregates served from a Redis cache with ClickHouse fallback"

    # CORS settings
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Request defaults
    default_city: str = "Stockton"

    # Rate limiting (slowapi storage URI, e.g. redis://redis:6379/1)
    rate_limit_storage_uri: str = "memory://"
    sync_rate_limit: str = "10/minute"

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global config instance
_config: Optional[APIConfig] = None


def get_config() -> APIConfig:
    """Get or create global configuration instance."""
    global _config
    if _config is None:
        _config = APIConfig()
    return _config
