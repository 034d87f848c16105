"""Staged warehouse diagnostics."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from api.app.config import get_config
from api.app.dependencies import get_snapshot_store, get_warehouse_reader
from api.app.service import utc_now_iso
from cache_sync.src.snapshot_store import SnapshotStore
from warehouse.src.config import get_config as get_warehouse_config
from warehouse.src.errors import LOAD_COMMAND, WarehouseError
from warehouse.src.reader import WarehouseReader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/diagnostics", tags=["diagnostics"])
config = get_config()


def _check(status: str, message: str, **extra: Any) -> Dict[str, Any]:
    return {"status": status, "message": message, **extra}


@router.get("")
def diagnostics(
    city: str = Query(
        default=config.default_city,
        min_length=1,
        description="City used for the sample query"
    ),
    reader: WarehouseReader = Depends(get_warehouse_reader),
    store: SnapshotStore = Depends(get_snapshot_store),
) -> dict:
    """
    Run staged health checks against ClickHouse and Redis.

    Stages run in order: connection, database, table, data, sample_query.
    A failing connection, database or table stage stops the warehouse
    checks. The Redis check always runs.

    Returns:
        Report with one entry per check under "checks"
    """
    report: Dict[str, Any] = {
        "timestamp": utc_now_iso(),
        "clickhouse_url": get_warehouse_config().clickhouse_url,
        "checks": {},
    }
    checks = report["checks"]

    checks["cache"] = (
        _check("success", "Redis connection successful")
        if store.ping()
        else _check("error", "Cannot connect to Redis")
    )

    try:
        reader.ping()
        checks["connection"] = _check("success", "ClickHouse connection successful")
    except WarehouseError as e:
        checks["connection"] = _check("error", f"Cannot connect to ClickHouse: {e}")
        return report

    try:
        if not reader.database_exists():
            checks["database"] = _check(
                "warning",
                f"{reader.database} database does not exist. Run: {LOAD_COMMAND}"
            )
            return report
        checks["database"] = _check("success", f"{reader.database} database exists")
    except WarehouseError as e:
        checks["database"] = _check("error", f"Error checking database: {e}")
        return report

    try:
        if not reader.table_exists():
            checks["table"] = _check(
                "warning",
                f"monthly_agg table does not exist. Run: {LOAD_COMMAND}"
            )
            return report
        checks["table"] = _check("success", "monthly_agg table exists")
    except WarehouseError as e:
        checks["table"] = _check("error", f"Error checking table: {e}")
        return report

    try:
        total_rows = reader.count_rows()
        checks["data"] = _check(
            "success" if total_rows > 0 else "warning",
            f"Table has {total_rows} rows" if total_rows > 0
            else f"Table exists but has no data. Run: {LOAD_COMMAND}",
            row_count=total_rows,
        )
    except WarehouseError as e:
        checks["data"] = _check("error", f"Error counting rows: {e}")

    try:
        sample = reader.sample_row(city)
        checks["sample_query"] = _check(
            "success" if sample else "warning",
            "Sample query successful" if sample
            else f"No data found for {city}. Run: {LOAD_COMMAND}",
            sample_data=sample,
        )
    except WarehouseError as e:
        checks["sample_query"] = _check("error", f"Error running sample query: {e}")

    return report
