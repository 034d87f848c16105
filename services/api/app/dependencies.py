"""Store client dependencies for FastAPI endpoints."""

from functools import lru_cache
from typing import Generator

import redis
from fastapi import Depends

from cache_sync.src.config import CacheSyncConfig, get_config as get_cache_config
from cache_sync.src.refresh import CacheRefreshJob
from cache_sync.src.snapshot_store import SnapshotStore, create_redis_client
from warehouse.src.config import get_config as get_warehouse_config
from warehouse.src.reader import WarehouseReader


@lru_cache(maxsize=1)
def get_redis_client() -> redis.Redis:
    """
    Shared Redis client.

    The client holds a connection pool and connects lazily, so creating it
    never fails; connection errors surface on the first command.
    """
    return create_redis_client(get_cache_config())


def get_cache_settings() -> CacheSyncConfig:
    return get_cache_config()


def get_snapshot_store(
    client: redis.Redis = Depends(get_redis_client),
    cache_config: CacheSyncConfig = Depends(get_cache_settings),
) -> SnapshotStore:
    """Dependency providing the Redis snapshot store."""
    return SnapshotStore(client, team=cache_config.team_name)


def get_warehouse_reader() -> Generator[WarehouseReader, None, None]:
    """
    Dependency for FastAPI endpoints to get a warehouse reader.

    Yields:
        Reader whose ClickHouse client is opened on first query and closed after use.
    """
    reader = WarehouseReader.from_config(get_warehouse_config())
    try:
        yield reader
    finally:
        reader.close()


def get_refresh_job(
    reader: WarehouseReader = Depends(get_warehouse_reader),
    store: SnapshotStore = Depends(get_snapshot_store),
    cache_config: CacheSyncConfig = Depends(get_cache_settings),
) -> CacheRefreshJob:
    """Dependency providing the cache refresh job for on-demand syncs."""
    return CacheRefreshJob(reader, store, cache_config)
