"""Unit tests for the Redis snapshot store."""
import json

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from cache_sync.src.freshness import CacheOutcome
from cache_sync.src.snapshot_store import SnapshotStore, build_cache_key


@pytest.fixture
def store(fake_redis):
    """Create snapshot store backed by the in-memory Redis."""
    return SnapshotStore(fake_redis, team="TestTeam")


def test_build_cache_key_lowercases_city():
    """Test key format and city normalization."""
    assert build_cache_key("TestTeam", "Stockton") == "weather:TestTeam:stockton:monthly"
    assert build_cache_key("TestTeam", "  San Jose ") == "weather:TestTeam:san jose:monthly"


class TestSnapshotStore:
    """Test snapshot reads and writes."""

    def test_read_missing(self, store):
        """Test an absent key is reported as missing."""
        result = store.read("Stockton")

        assert result.outcome is CacheOutcome.MISSING
        assert result.key == "weather:TestTeam:stockton:monthly"
        assert result.snapshot is None

    def test_write_then_read(self, store, fake_redis):
        """Test a written snapshot is read back with its live TTL."""
        snapshot = {"data": [{"city": "Stockton"}], "metadata": {"refresh_interval_sec": 3600}}

        key = store.write("Stockton", snapshot, ttl_seconds=3600)
        fake_redis.clock.advance(100)
        result = store.read("Stockton")

        assert key == "weather:TestTeam:stockton:monthly"
        assert result.outcome is CacheOutcome.HIT
        assert result.snapshot["data"][0]["city"] == "Stockton"
        assert result.snapshot["metadata"]["refresh_interval_sec"] == 3600
        assert result.ttl_seconds == 3500

    def test_write_sets_expiry(self, store, fake_redis):
        """Test the snapshot is written with EX."""
        store.write("Stockton", {"data": []}, ttl_seconds=60)

        assert fake_redis.ttl("weather:TestTeam:stockton:monthly") == 60

    def test_expired_snapshot_is_missing(self, store, fake_redis):
        """Test a snapshot past its TTL is no longer returned."""
        store.write("Stockton", {"data": []}, ttl_seconds=60)
        fake_redis.clock.advance(61)

        assert store.read("Stockton").outcome is CacheOutcome.MISSING

    def test_read_unreachable(self, store, fake_redis):
        """Test connection errors are reported as unavailable, not raised."""
        fake_redis.fail_with = RedisConnectionError("Connection refused")

        result = store.read("Stockton")

        assert result.outcome is CacheOutcome.UNAVAILABLE
        assert "Connection refused" in result.error

    @pytest.mark.parametrize("raw", [
        "{not json",
        json.dumps([1, 2, 3]),
        json.dumps({"data": "oops"}),
        json.dumps({"data": [], "metadata": {"cache_timestamp": 1717243200}}),
        json.dumps({"data": [], "metadata": {"data_version": 1717243200000}}),
        json.dumps({"data": [{"city": 42, "month": "2024-01-01"}]}),
        json.dumps({"data": ["Stockton"]}),
        json.dumps({"data": [], "metadata": "stale"}),
    ])
    def test_read_corrupt(self, store, fake_redis, raw):
        """Test unparseable or malformed snapshots are reported as corrupt."""
        fake_redis.set("weather:TestTeam:stockton:monthly", raw, ex=3600)

        result = store.read("Stockton")

        assert result.outcome is CacheOutcome.CORRUPT
        assert result.error

    def test_write_propagates_redis_errors(self, store, fake_redis):
        """Test write failures are raised to the caller."""
        fake_redis.fail_with = RedisConnectionError("down")

        with pytest.raises(RedisConnectionError):
            store.write("Stockton", {"data": []}, ttl_seconds=60)

    def test_ping(self, store, fake_redis):
        """Test ping reports connectivity as a boolean."""
        assert store.ping() is True

        fake_redis.fail_with = RedisConnectionError("down")
        assert store.ping() is False
