"""Shaping of monthly aggregate rows for JSON consumers."""
import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional


def coerce_float(value: Any) -> Optional[float]:
    """
    Coerce a numeric-looking value to float.

    Returns None for missing values, NaN, infinities and anything that does
    not parse as a number.
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        number = float(value)
    except (TypeError, ValueError):
        return None

    if math.isnan(number) or math.isinf(number):
        return None

    return number


def format_month(value: Any) -> Optional[str]:
    """Render a month as YYYY-MM-DD."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def format_timestamp(value: Any) -> Optional[str]:
    """Render a warehouse timestamp as 'YYYY-MM-DD HH:MM:SS'."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value)


def serialize_monthly_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a monthly_agg row to a JSON-safe dictionary.

    Args:
        row: Row as returned by the warehouse or read back from a snapshot

    Returns:
        Dictionary with city, month, avg_temp_c, total_rain_mm, warehouse_load_time
    """
    return {
        "city": row.get("city"),
        "month": format_month(row.get("month")),
        "avg_temp_c": coerce_float(row.get("avg_temp_c")),
        "total_rain_mm": coerce_float(row.get("total_rain_mm")),
        "warehouse_load_time": format_timestamp(row.get("warehouse_load_time")),
    }


def serialize_monthly_rows(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_monthly_row(row) for row in rows if isinstance(row, dict)]
