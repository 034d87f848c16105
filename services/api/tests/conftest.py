"""Test configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from api.app.dependencies import (
    get_cache_settings,
    get_refresh_job,
    get_snapshot_store,
    get_warehouse_reader,
)
from api.app.main import app
from api.app.rate_limit import limiter
from cache_sync.src.config import CacheSyncConfig
from cache_sync.src.refresh import CacheRefreshJob
from cache_sync.src.snapshot_store import SnapshotStore
from warehouse.src.reader import WarehouseReader


@pytest.fixture
def cache_settings():
    """Cache configuration with a one hour TTL."""
    return CacheSyncConfig(team_name="TestTeam", redis_ttl_sec=3600)


@pytest.fixture
def snapshot_store(fake_redis):
    """Snapshot store over the in-memory Redis."""
    return SnapshotStore(fake_redis, team="TestTeam")


@pytest.fixture
def warehouse(fake_clickhouse):
    """Warehouse reader over the fake ClickHouse client."""
    return WarehouseReader(lambda: fake_clickhouse)


@pytest.fixture
def refresh_job(warehouse, snapshot_store, cache_settings, clock):
    """Refresh job sharing the test clock with the fake Redis."""
    return CacheRefreshJob(warehouse, snapshot_store, cache_settings, clock=clock)


@pytest.fixture(scope="function")
def client(snapshot_store, warehouse, cache_settings, refresh_job):
    """Create a test client with the store dependencies overridden."""
    def override_get_warehouse_reader():
        try:
            yield warehouse
        finally:
            pass

    app.dependency_overrides[get_snapshot_store] = lambda: snapshot_store
    app.dependency_overrides[get_warehouse_reader] = override_get_warehouse_reader
    app.dependency_overrides[get_cache_settings] = lambda: cache_settings
    app.dependency_overrides[get_refresh_job] = lambda: refresh_job
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
