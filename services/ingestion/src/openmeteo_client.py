"""Open-Meteo archive client for fetching hourly weather history."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import LocationConfig, OpenMeteoConfig

logger = logging.getLogger(__name__)


def to_number(value: Any, fallback: Optional[float] = None) -> Optional[float]:
    """Return value if it is a real number, otherwise the fallback."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    return value


def combine_hourly(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Combine Open-Meteo's parallel hourly arrays into observation records.

    Args:
        payload: Decoded archive API response

    Returns:
        One dictionary per hourly timestamp
    """
    hourly = payload.get("hourly") or {}
    times = hourly.get("time") or []
    temps = hourly.get("temperature_2m") or []
    humidity = hourly.get("relative_humidity_2m") or []
    precipitation = hourly.get("precipitation") or []
    wind_speed = hourly.get("wind_speed_10m") or []
    wind_gust = hourly.get("wind_gusts_10m") or []

    def at(values: list, index: int) -> Any:
        return values[index] if index < len(values) else None

    observations = []
    for i, timestamp in enumerate(times):
        temperature_c = to_number(at(temps, i))

        observations.append({
            "timestamp": timestamp,
            "temperatureC": temperature_c,
            "temperatureF": None if temperature_c is None else temperature_c * 9 / 5 + 32,
            "humidityPercent": to_number(at(humidity, i)),
            "rainfallMm": to_number(at(precipitation, i), 0),
            "windSpeedMps": to_number(at(wind_speed, i)),
            "windGustMps": to_number(at(wind_gust, i), 0),
        })

    return observations


class OpenMeteoClient:
    """Client for the Open-Meteo historical weather archive."""

    def __init__(self, config: OpenMeteoConfig, location: LocationConfig):
        """Initialize Open-Meteo client.

        Args:
            config: API configuration
            location: Location to fetch observations for
        """
        self.config = config
        self.location = location
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session with retry logic."""
        session = requests.Session()
        retry_strategy = Retry(
            total=self.config.max_retries,
            backoff_factor=self.config.retry_delay,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "HEAD"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({"User-Agent": self.config.user_agent})
        return session

    def build_params(self, start: datetime, end: datetime) -> Dict[str, str]:
        """Build archive query parameters for a date window.

        Args:
            start: Window start (only the date is used)
            end: Window end (only the date is used)

        Returns:
            Query parameter dictionary
        """
        return {
            "latitude": str(self.location.latitude),
            "longitude": str(self.location.longitude),
            "start_date": start.strftime("%Y-%m-%d"),
            "end_date": end.strftime("%Y-%m-%d"),
            "timezone": self.location.timezone,
            "hourly": ",".join(self.config.hourly_variables),
            "temperature_unit": "celsius",
            "windspeed_unit": "ms",
            "precipitation_unit": "mm",
        }

    def fetch_hourly_history(self, start: datetime, end: datetime) -> Dict[str, Any]:
        """Fetch hourly history for the configured location.

        Args:
            start: Window start
            end: Window end

        Returns:
            Decoded JSON response

        Raises:
            requests.HTTPError: If the API responds with a non-2xx status
        """
        params = self.build_params(start, end)

        logger.info(
            f"Fetching hourly history for {self.location.city} "
            f"{params['start_date']}..{params['end_date']}"
        )

        response = self.session.get(
            self.config.base_url,
            params=params,
            timeout=self.config.timeout,
        )

        if not response.ok:
            raise requests.HTTPError(
                f"Request failed: {response.status_code} {response.reason} - "
                f"{response.text[:500]}",
                response=response,
            )

        return response.json()
