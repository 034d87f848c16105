"""Configuration management for ingestion service."""
import os
from dataclasses import dataclass, field
from typing import List


@dataclass
class OpenMeteoConfig:
    """Open-Meteo archive API configuration."""
    base_url: str = "https://archive-api.open-meteo.com/v1/archive"
    timeout: int = 30
    max_retries: int = 3
    retry_delay: int = 2
    user_agent: str = "StocktonWeatherData/1.0"
    hourly_variables: List[str] = field(default_factory=lambda: [
        "temperature_2m",
        "relative_humidity_2m",
        "precipitation",
        "wind_speed_10m",
        "wind_gusts_10m",
    ])


@dataclass
class LocationConfig:
    """Location the observations are fetched for."""
    city: str = "Stockton"
    state: str = "CA"
    latitude: float = 37.9575
    longitude: float = -121.2925
    timezone: str = "America/Los_Angeles"

    @classmethod
    def from_env(cls) -> "LocationConfig":
        """Load location config from environment variables."""
        return cls(
            city=os.getenv("FETCH_CITY", "Stockton"),
            state=os.getenv("FETCH_STATE", "CA"),
            latitude=float(os.getenv("FETCH_LATITUDE", "37.9575")),
            longitude=float(os.getenv("FETCH_LONGITUDE", "-121.2925")),
            timezone=os.getenv("FETCH_TIMEZONE", "America/Los_Angeles"),
        )


@dataclass
class MongoConfig:
    """MongoDB configuration."""
    uri: str
    database: str
    raw_collection: str = "observations_raw"
    enriched_collection: str = "observations_enriched"
    timeout_ms: int = 5000

    @classmethod
    def from_env(cls) -> "MongoConfig":
        """Load MongoDB config from environment variables."""
        return cls(
            uri=os.getenv("MONGO_URI", "mongodb://localhost:27017"),
            database=os.getenv("MONGO_DB", "weather"),
            raw_collection=os.getenv("MONGO_COLLECTION_RAW", "observations_raw"),
            enriched_collection=os.getenv("MONGO_COLLECTION_ENRICHED", "observations_enriched"),
            timeout_ms=int(os.getenv("MONGO_TIMEOUT_MS", "5000")),
        )


@dataclass
class IngestionConfig:
    """Main ingestion configuration."""
    openmeteo: OpenMeteoConfig
    location: LocationConfig
    mongo: MongoConfig
    hours_back: int = 24

    @classmethod
    def from_env(cls) -> "IngestionConfig":
        """Load full configuration from environment."""
        return cls(
            openmeteo=OpenMeteoConfig(),
            location=LocationConfig.from_env(),
            mongo=MongoConfig.from_env(),
            hours_back=int(os.getenv("FETCH_HOURS_BACK", "24")),
        )
