"""Cache status and on-demand sync endpoints."""

import logging

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from api.app.config import get_config
from api.app.dependencies import (
    get_cache_settings,
    get_refresh_job,
    get_snapshot_store,
    get_warehouse_reader,
)
from api.app.models import CacheStatusResponse, SyncResponse
from api.app.rate_limit import limiter
from api.app.service import MonthlyService, utc_now_iso
from cache_sync.src.config import CacheSyncConfig
from cache_sync.src.refresh import CacheRefreshJob
from cache_sync.src.snapshot_store import SnapshotStore
from warehouse.src.errors import SchemaMissing, WarehouseError
from warehouse.src.reader import WarehouseReader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["cache"])
config = get_config()


@router.get("/cache-status", response_model=CacheStatusResponse)
def cache_status(
    city: str = Query(
        default=config.default_city,
        min_length=1,
        description="City name"
    ),
    store: SnapshotStore = Depends(get_snapshot_store),
    reader: WarehouseReader = Depends(get_warehouse_reader),
    cache_config: CacheSyncConfig = Depends(get_cache_settings),
) -> CacheStatusResponse:
    """
    Get the Redis snapshot status for a city.

    Never fails because of Redis: an unreachable or corrupt cache is
    reported with cache_valid=false and source=error.

    Returns:
        Key, TTL, metadata and row count of the snapshot
    """
    service = MonthlyService(store, reader, default_interval=cache_config.redis_ttl_sec)
    return CacheStatusResponse(**service.get_cache_status(city))


@router.post("/sync-now", response_model=SyncResponse)
@limiter.limit(config.sync_rate_limit)
def sync_now(
    request: Request,
    response: Response,
    city: str = Query(
        default=config.default_city,
        min_length=1,
        description="City name"
    ),
    job: CacheRefreshJob = Depends(get_refresh_job),
):
    """
    Refresh the Redis snapshot for a city from ClickHouse.

    Returns:
        Refresh summary, or success=false with the failure reason
    """
    try:
        result = job.refresh(city)

    except WarehouseError as e:
        logger.error(f"Cache refresh failed reading ClickHouse: {e}")
        status_code = (
            status.HTTP_500_INTERNAL_SERVER_ERROR
            if isinstance(e, SchemaMissing)
            else status.HTTP_503_SERVICE_UNAVAILABLE
        )
        return JSONResponse(
            status_code=status_code,
            content={
                "success": False,
                "error": "Failed to refresh Redis cache from ClickHouse",
                "error_type": e.error_type,
                "message": str(e),
                "helpful_message": e.hint,
                "city": city,
                "timestamp": utc_now_iso(),
            },
        )

    except (RedisError, OSError) as e:
        logger.error(f"Cache refresh failed writing Redis: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "success": False,
                "error": "Failed to write Redis cache",
                "error_type": "cache_unavailable",
                "message": str(e),
                "helpful_message": "Redis is not reachable. Ensure the Redis service is running.",
                "city": city,
                "timestamp": utc_now_iso(),
            },
        )

    return SyncResponse(
        success=True,
        message="Redis cache refreshed successfully from ClickHouse",
        city=city,
        timestamp=utc_now_iso(),
        key=result["key"],
        rows_cached=result["rows_cached"],
        data_version=result["data_version"],
    )
