"""Unit tests for the cache freshness policy."""
import pytest

from cache_sync.src.freshness import (
    CacheOutcome,
    CacheRead,
    DataSource,
    SyncStatus,
    classify,
    effective_refresh_interval,
    select_source,
)


KEY = "weather:TestTeam:stockton:monthly"


def hit(ttl_seconds, refresh_interval_sec=3600):
    metadata = {"cache_timestamp": "2024-06-01T12:00:00.000Z", "data_version": "v1"}
    if refresh_interval_sec is not None:
        metadata["refresh_interval_sec"] = refresh_interval_sec
    return CacheRead(
        outcome=CacheOutcome.HIT,
        key=KEY,
        snapshot={"data": [], "metadata": metadata},
        ttl_seconds=ttl_seconds,
    )


class TestClassify:
    """Test classification of remaining TTL against the refresh interval."""

    @pytest.mark.parametrize("remaining,expected", [
        (3600, SyncStatus.FULL),
        (2160, SyncStatus.FULL),
        (2159, SyncStatus.PARTIAL),
        (720, SyncStatus.PARTIAL),
        (719, SyncStatus.OUT_OF_SYNC),
        (1, SyncStatus.OUT_OF_SYNC),
    ])
    def test_band_boundaries(self, remaining, expected):
        """Test lower bounds are inclusive at 20% and 60%."""
        assert classify(remaining, 3600) is expected

    @pytest.mark.parametrize("remaining", [0, -1, -2, -5, None])
    def test_expired_or_absent_ttl_is_out_of_sync(self, remaining):
        """Test non-positive TTLs never count as fresh."""
        assert classify(remaining, 3600) is SyncStatus.OUT_OF_SYNC

    def test_ttl_beyond_interval_is_full(self):
        """Test a TTL longer than the interval is still full."""
        assert classify(7200, 3600) is SyncStatus.FULL

    @pytest.mark.parametrize("interval", [0, -10, None, "abc", float("nan"), True])
    def test_invalid_interval_uses_default(self, interval):
        """Test unusable intervals fall back to 3600 seconds."""
        assert classify(2160, interval) is SyncStatus.FULL
        assert classify(2159, interval) is SyncStatus.PARTIAL
        assert classify(719, interval) is SyncStatus.OUT_OF_SYNC

    def test_depends_only_on_ratio(self):
        """Test scaling TTL and interval together gives the same status."""
        for remaining, interval in [(720, 3600), (72, 360), (7200, 36000)]:
            assert classify(remaining, interval) is SyncStatus.PARTIAL
        for remaining, interval in [(2160, 3600), (216, 360), (21600, 36000)]:
            assert classify(remaining, interval) is SyncStatus.FULL

    def test_numeric_string_interval(self):
        """Test a numeric string interval is accepted."""
        assert classify(30, "60") is SyncStatus.PARTIAL


class TestEffectiveRefreshInterval:
    """Test refresh interval validation."""

    def test_valid_values(self):
        """Test positive values pass through."""
        assert effective_refresh_interval(3600) == 3600
        assert effective_refresh_interval(90.5) == 90.5
        assert effective_refresh_interval("120") == 120

    def test_missing_value_uses_default(self):
        """Test None returns the supplied default."""
        assert effective_refresh_interval(None) == 3600
        assert effective_refresh_interval(None, default=600) == 600

    def test_invalid_value_logs_warning(self, caplog):
        """Test invalid values are reported before falling back."""
        assert effective_refresh_interval(0) == 3600
        assert "Invalid refresh interval" in caplog.text


class TestSelectSource:
    """Test source selection for read requests."""

    @pytest.mark.parametrize("outcome", [
        CacheOutcome.MISSING,
        CacheOutcome.UNAVAILABLE,
        CacheOutcome.CORRUPT,
    ])
    def test_unreadable_cache_falls_back_to_warehouse(self, outcome):
        """Test every non-hit outcome is served from the warehouse."""
        decision = select_source(CacheRead(outcome=outcome, key=KEY, error="boom"))

        assert decision.source is DataSource.WAREHOUSE
        assert decision.sync_status is SyncStatus.OUT_OF_SYNC
        assert decision.ttl_seconds == 0
        assert decision.cache_outcome is outcome

    def test_fresh_hit_is_full(self):
        """Test a fresh snapshot is served from cache as full."""
        decision = select_source(hit(3600))

        assert decision.source is DataSource.CACHE
        assert decision.sync_status is SyncStatus.FULL
        assert decision.ttl_seconds == 3600
        assert decision.cache_outcome is CacheOutcome.HIT

    def test_hit_with_low_ttl_is_still_served_from_cache(self):
        """Test staleness changes the status but not the source."""
        decision = select_source(hit(500))

        assert decision.source is DataSource.CACHE
        assert decision.sync_status is SyncStatus.OUT_OF_SYNC

    def test_hit_uses_declared_interval(self):
        """Test the snapshot's own refresh interval drives classification."""
        decision = select_source(hit(300, refresh_interval_sec=600))

        assert decision.refresh_interval_sec == 600
        assert decision.sync_status is SyncStatus.PARTIAL

    def test_hit_without_declared_interval_uses_default(self):
        """Test metadata without refresh_interval_sec uses the default."""
        decision = select_source(hit(300, refresh_interval_sec=None), default_interval=400)

        assert decision.refresh_interval_sec == 400
        assert decision.sync_status is SyncStatus.FULL

    def test_hit_with_invalid_declared_interval(self):
        """Test an invalid declared interval falls back to the default."""
        decision = select_source(hit(2160, refresh_interval_sec=0))

        assert decision.refresh_interval_sec == 3600
        assert decision.sync_status is SyncStatus.FULL


def test_cache_read_properties():
    """Test exists/readable flags for each outcome."""
    assert hit(10).exists and hit(10).readable
    corrupt = CacheRead(outcome=CacheOutcome.CORRUPT, key=KEY)
    assert corrupt.exists and not corrupt.readable
    missing = CacheRead(outcome=CacheOutcome.MISSING, key=KEY)
    assert not missing.exists and not missing.readable
    assert missing.metadata == {}
