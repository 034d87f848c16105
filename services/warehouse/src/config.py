"""
Configuration management for the warehouse load service.
"""
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from pydantic_settings import BaseSettings


class WarehouseConfig(BaseSettings):
    """Configuration for the MongoDB -> ClickHouse load and warehouse reads."""

    # ClickHouse configuration
    clickhouse_url: str = "http://localhost:8123"
    clickhouse_user: Optional[str] = None
    clickhouse_password: Optional[str] = None
    clickhouse_database: str = "weather_dw"
    clickhouse_connect_timeout: int = 10
    clickhouse_query_timeout: int = 30

    # MongoDB configuration
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "weather"
    mongo_collection_enriched: str = "observations_enriched"
    mongo_timeout_ms: int = 5000

    # Load configuration
    sync_interval_min: int = 60
    load_mode: str = "incremental"

    class Config:
        env_file = ".env"
        env_prefix = ""
        extra = "ignore"

    @property
    def clickhouse_client_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for clickhouse_connect.get_client()."""
        parsed = urlparse(self.clickhouse_url)
        secure = parsed.scheme == "https"

        return {
            "host": parsed.hostname or "localhost",
            "port": parsed.port or (8443 if secure else 8123),
            "username": self.clickhouse_user or parsed.username or "default",
            "password": self.clickhouse_password or parsed.password or "",
            "secure": secure,
            "connect_timeout": self.clickhouse_connect_timeout,
            "send_receive_timeout": self.clickhouse_query_timeout,
        }


_config: Optional[WarehouseConfig] = None


def get_config() -> WarehouseConfig:
    """Get or create the warehouse configuration."""
    global _config
    if _config is None:
        _config = WarehouseConfig()
    return _config
