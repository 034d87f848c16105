"""Serving layer: answers monthly requests from the cache or the warehouse."""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

from cache_sync.src.freshness import (
    CacheOutcome,
    DataSource,
    DEFAULT_REFRESH_INTERVAL_SEC,
    SyncStatus,
    select_source,
)
from cache_sync.src.snapshot_store import SnapshotStore
from warehouse.src.errors import LOAD_COMMAND
from warehouse.src.reader import WarehouseReader
from warehouse.src.rows import serialize_monthly_rows

from api.app.metrics import CACHE_READS, RESPONSES_BY_SOURCE, WAREHOUSE_QUERY_DURATION

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class MonthlyService:
    """Reads monthly aggregates following the cache freshness policy."""

    def __init__(
        self,
        store: SnapshotStore,
        reader: WarehouseReader,
        default_interval: int = DEFAULT_REFRESH_INTERVAL_SEC,
    ):
        self.store = store
        self.reader = reader
        self.default_interval = default_interval

    def get_monthly(self, city: str) -> Dict[str, Any]:
        """
        Get monthly aggregates for a city.

        Cache read failures of any kind fall back to the warehouse.
        Warehouse failures propagate as WarehouseError.

        Args:
            city: City name

        Returns:
            Response dictionary shaped like MonthlyResponse
        """
        cache_read = self.store.read(city)
        CACHE_READS.labels(outcome=cache_read.outcome.value).inc()

        decision = select_source(cache_read, self.default_interval)

        if decision.source is DataSource.CACHE:
            snapshot = cache_read.snapshot
            metadata = cache_read.metadata
            data = serialize_monthly_rows(snapshot.get("data") or [])

            RESPONSES_BY_SOURCE.labels(
                source=decision.source.value,
                sync_status=decision.sync_status.value
            ).inc()

            return {
                "data": data,
                "source": DataSource.CACHE.value,
                "last_updated": metadata.get("cache_timestamp") or utc_now_iso(),
                "cache_status": "active",
                "sync_status": decision.sync_status.value,
                "ttl_seconds": decision.ttl_seconds,
                "count": len(data),
                "data_version": metadata.get("data_version"),
            }

        if cache_read.outcome is not CacheOutcome.MISSING:
            logger.warning(
                f"Cache {cache_read.outcome.value} for {cache_read.key}, "
                f"falling back to ClickHouse: {cache_read.error}"
            )

        start = time.time()
        data = self.reader.fetch_monthly(city)
        WAREHOUSE_QUERY_DURATION.labels(operation="fetch_monthly").observe(time.time() - start)

        RESPONSES_BY_SOURCE.labels(
            source=DataSource.WAREHOUSE.value,
            sync_status=SyncStatus.OUT_OF_SYNC.value
        ).inc()

        response = {
            "data": data,
            "source": DataSource.WAREHOUSE.value,
            "last_updated": utc_now_iso(),
            "cache_status": "none",
            "sync_status": decision.sync_status.value,
            "ttl_seconds": 0,
            "count": len(data),
            "cache_outcome": cache_read.outcome.value,
        }

        if not data:
            response["message"] = (
                f"No monthly data found for {city}. "
                f"Please run the warehouse load first: {LOAD_COMMAND}"
            )

        return response

    def get_cache_status(self, city: str) -> Dict[str, Any]:
        """
        Describe the snapshot for a city without touching the warehouse.

        Args:
            city: City name

        Returns:
            Response dictionary shaped like CacheStatusResponse
        """
        cache_read = self.store.read(city)
        CACHE_READS.labels(outcome=cache_read.outcome.value).inc()

        if cache_read.outcome is CacheOutcome.HIT:
            ttl = cache_read.ttl_seconds
            metadata = cache_read.metadata
            return {
                "cache_valid": True,
                "ttl_seconds": ttl,
                "ttl_minutes": max(ttl, 0) // 60,
                "key": cache_read.key,
                "source": DataSource.CACHE.value,
                "metadata": metadata or None,
                "data_count": len(cache_read.snapshot.get("data") or []),
                "sync_status": select_source(cache_read, self.default_interval).sync_status.value,
            }

        if cache_read.outcome is CacheOutcome.MISSING:
            source = "none"
            message = (
                "Redis key not found. Run: python -m cache_sync.src.refresh "
                "or POST /api/sync-now to cache data."
            )
        elif cache_read.outcome is CacheOutcome.UNAVAILABLE:
            source = "error"
            message = f"Redis connection failed: {cache_read.error}"
        else:
            source = "error"
            message = f"Cached snapshot is unreadable: {cache_read.error}"

        return {
            "cache_valid": False,
            "ttl_seconds": 0,
            "ttl_minutes": 0,
            "key": cache_read.key,
            "source": source,
            "sync_status": SyncStatus.OUT_OF_SYNC.value,
            "message": message,
        }
