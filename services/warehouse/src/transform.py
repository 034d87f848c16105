"""
Transformation of enriched observation documents into daily_weather rows.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .rows import coerce_float
from .schema import DAILY_COLUMNS


logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO timestamp into a naive DateTime for ClickHouse.

    Aware timestamps are converted to UTC before the zone is dropped.
    Fractional seconds are truncated.

    Args:
        value: ISO string ('2024-01-01T13:00', '2024-01-01T13:00:00.123Z') or datetime

    Returns:
        Naive datetime, or None if the value is empty or unparseable
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning(f"Unparseable timestamp: {value!r}")
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)

    return parsed.replace(microsecond=0)


def to_daily_row(
    doc: Dict[str, Any],
    load_time: datetime,
    sync_interval_min: int,
    load_mode: str = "incremental",
) -> Optional[Dict[str, Any]]:
    """
    Map one enriched document to a daily_weather row.

    Returns:
        Row dictionary, or None if the document has no usable timestamp or city
    """
    observed_at = parse_timestamp(doc.get("timestamp"))
    location = doc.get("location") or {}
    city = location.get("city")

    if observed_at is None or not city:
        return None

    metadata = doc.get("metadata") or {}

    return {
        "date": observed_at.date(),
        "observed_at": observed_at,
        "temperature_c": coerce_float(doc.get("temperatureC")),
        "temperature_f": coerce_float(doc.get("temperatureF")),
        "humidity_percent": coerce_float(doc.get("humidityPercent")),
        "rainfall_mm": coerce_float(doc.get("rainfallMm")),
        "wind_speed_mps": coerce_float(doc.get("windSpeedMps")),
        "wind_gust_mps": coerce_float(doc.get("windGustMps")),
        "city": city,
        "state": location.get("state") or "",
        "source_timestamp": parse_timestamp(metadata.get("source_timestamp")),
        "source_database": metadata.get("source_database") or "",
        "data_quality": metadata.get("data_quality") or "",
        "api_request_id": metadata.get("api_request_id") or "",
        "etl_batch_id": metadata.get("etl_batch_id") or "",
        "warehouse_load_time": load_time,
        "rows_loaded": 1,
        "sync_interval_min": sync_interval_min,
        "load_mode": load_mode,
    }


def to_daily_rows(
    docs: Iterable[Dict[str, Any]],
    load_time: datetime,
    sync_interval_min: int,
    load_mode: str = "incremental",
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Map enriched documents to daily_weather rows.

    Args:
        docs: Enriched observation documents
        load_time: Naive warehouse load timestamp shared by the batch
        sync_interval_min: Configured sync interval recorded per row
        load_mode: Load mode recorded per row

    Returns:
        Tuple of (rows, skipped document count)
    """
    rows = []
    skipped = 0

    for doc in docs:
        row = to_daily_row(doc, load_time, sync_interval_min, load_mode)
        if row is None:
            skipped += 1
            continue
        rows.append(row)

    if skipped:
        logger.warning(f"Skipped {skipped} documents without timestamp or city")

    return rows, skipped


def rows_to_columns(rows: List[Dict[str, Any]]) -> List[List[Any]]:
    """Order row values by DAILY_COLUMNS for client.insert()."""
    return [[row[column] for column in DAILY_COLUMNS] for row in rows]
