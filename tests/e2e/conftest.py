"""
Pytest fixtures for end-to-end tests.

Provides fixtures for:
- An in-process API wired to the Redis and ClickHouse fakes
- The base URL of a running stack for integration tests
"""

import os

import pytest
import requests
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
def pipeline(fake_redis, fake_clickhouse, clock):
    """Stores and refresh job for one in-process pipeline."""
    cache_config = CacheSyncConfig(team_name="TestTeam", redis_ttl_sec=3600)
    store = SnapshotStore(fake_redis, team=cache_config.team_name)
    reader = WarehouseReader(lambda: fake_clickhouse)
    job = CacheRefreshJob(reader, store, cache_config, clock=clock)

    return {
        "config": cache_config,
        "store": store,
        "reader": reader,
        "job": job,
        "redis": fake_redis,
        "clickhouse": fake_clickhouse,
        "clock": clock,
    }


@pytest.fixture
def api(pipeline):
    """In-process API client over the pipeline stores."""
    app.dependency_overrides[get_snapshot_store] = lambda: pipeline["store"]
    app.dependency_overrides[get_warehouse_reader] = lambda: pipeline["reader"]
    app.dependency_overrides[get_cache_settings] = lambda: pipeline["config"]
    app.dependency_overrides[get_refresh_job] = lambda: pipeline["job"]
    limiter.reset()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def api_base_url() -> str:
    """
    Base URL of a running stack (WEATHER_API_URL).

    Skips when the variable is unset or the API does not answer /health.
    """
    base_url = os.getenv("WEATHER_API_URL")
    if not base_url:
        pytest.skip("WEATHER_API_URL not set")

    try:
        requests.get(f"{base_url}/health", timeout=5).raise_for_status()
    except requests.RequestException as e:
        pytest.skip(f"API not reachable at {base_url}: {e}")

    return base_url.rstrip("/")
