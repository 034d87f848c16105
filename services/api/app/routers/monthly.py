"""Monthly aggregate endpoint."""

from fastapi import APIRouter, Depends, Query

from api.app.config import get_config
from api.app.dependencies import get_cache_settings, get_snapshot_store, get_warehouse_reader
from api.app.models import MonthlyResponse
from api.app.service import MonthlyService
from cache_sync.src.config import CacheSyncConfig
from cache_sync.src.snapshot_store import SnapshotStore
from warehouse.src.reader import WarehouseReader

router = APIRouter(prefix="/api/monthly", tags=["monthly"])
config = get_config()


@router.get("", response_model=MonthlyResponse)
def get_monthly(
    city: str = Query(
        default=config.default_city,
        min_length=1,
        description="City name"
    ),
    store: SnapshotStore = Depends(get_snapshot_store),
    reader: WarehouseReader = Depends(get_warehouse_reader),
    cache_config: CacheSyncConfig = Depends(get_cache_settings),
) -> MonthlyResponse:
    """
    Get monthly aggregated weather data for a city.

    Served from the Redis snapshot when one is readable, otherwise from
    ClickHouse.

    Query parameters:
    - **city**: City name (default: Stockton)

    Returns:
        Monthly rows ascending by month, tagged with source, sync status and TTL
    """
    service = MonthlyService(store, reader, default_interval=cache_config.redis_ttl_sec)
    return MonthlyResponse(**service.get_monthly(city))
