"""Test configuration for pytest."""
import pytest

from ingestion.src.config import IngestionConfig, LocationConfig, MongoConfig, OpenMeteoConfig


@pytest.fixture
def ingestion_config():
    """Create ingestion configuration for testing."""
    return IngestionConfig(
        openmeteo=OpenMeteoConfig(max_retries=0),
        location=LocationConfig(),
        mongo=MongoConfig(uri="mongodb://localhost:27017", database="weather_test"),
        hours_back=24,
    )


@pytest.fixture
def archive_payload():
    """Open-Meteo archive response with three hourly observations."""
    return {
        "latitude": 37.96,
        "longitude": -121.29,
        "timezone": "America/Los_Angeles",
        "hourly": {
            "time": ["2024-05-31T13:00", "2024-05-31T14:00", "2024-05-31T15:00"],
            "temperature_2m": [20.0, 21.5, None],
            "relative_humidity_2m": [50, 48, 47],
            "precipitation": [0.0, None, 0.4],
            "wind_speed_10m": [3.1, 3.4, 2.9],
            "wind_gusts_10m": [6.0, "n/a", 5.5],
        },
    }
