"""
Cache freshness policy.

Decides whether a read should be answered from the Redis snapshot or from
the ClickHouse warehouse, and classifies how fresh a cached snapshot is:

- full:        remaining TTL >= 60% of the refresh interval
- partial:     remaining TTL between 20% and 60% of the refresh interval
- out-of-sync: remaining TTL below 20%, expired, or not served from cache

Everything in this module is side-effect free. Reading the cache and
querying the warehouse belong to the callers.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


DEFAULT_REFRESH_INTERVAL_SEC = 3600

# Lower bounds (inclusive) of the partial and full bands
PARTIAL_RATIO = 0.2
FULL_RATIO = 0.6


class SyncStatus(str, Enum):
    """Freshness of the data returned to a caller."""
    FULL = "full"
    PARTIAL = "partial"
    OUT_OF_SYNC = "out-of-sync"


class DataSource(str, Enum):
    """Store a read request is answered from."""
    CACHE = "cache"
    WAREHOUSE = "warehouse"


class CacheOutcome(str, Enum):
    """Result of attempting to read a snapshot from the cache."""
    HIT = "hit"
    MISSING = "missing"
    UNAVAILABLE = "unavailable"
    CORRUPT = "corrupt"


@dataclass(frozen=True)
class CacheRead:
    """
    Tagged result of a single cache read.

    Attributes:
        outcome: What happened when the snapshot was read
        key: Cache key that was read
        snapshot: Parsed snapshot (only for HIT)
        ttl_seconds: Live remaining TTL reported by the cache at read time
        error: Error detail for UNAVAILABLE / CORRUPT outcomes
    """
    outcome: CacheOutcome
    key: str
    snapshot: Optional[Dict[str, Any]] = None
    ttl_seconds: int = 0
    error: Optional[str] = None

    @property
    def exists(self) -> bool:
        return self.outcome in (CacheOutcome.HIT, CacheOutcome.CORRUPT)

    @property
    def readable(self) -> bool:
        return self.outcome is CacheOutcome.HIT

    @property
    def metadata(self) -> Dict[str, Any]:
        if not self.snapshot:
            return {}
        metadata = self.snapshot.get("metadata")
        return metadata if isinstance(metadata, dict) else {}


@dataclass(frozen=True)
class SourceDecision:
    """Where to read from and how fresh the answer will be."""
    source: DataSource
    sync_status: SyncStatus
    ttl_seconds: int
    refresh_interval_sec: float
    cache_outcome: CacheOutcome


def effective_refresh_interval(
    refresh_interval_sec: Any,
    default: int = DEFAULT_REFRESH_INTERVAL_SEC,
) -> float:
    """
    Validate a refresh interval, substituting the default when unusable.

    Args:
        refresh_interval_sec: Declared refresh interval (may be missing or malformed)
        default: Interval to use instead of a non-positive or non-numeric value

    Returns:
        A strictly positive interval in seconds
    """
    if refresh_interval_sec is None:
        return default

    if isinstance(refresh_interval_sec, bool):
        interval = None
    else:
        try:
            interval = float(refresh_interval_sec)
        except (TypeError, ValueError):
            interval = None

    if interval is None or interval != interval or interval <= 0:
        logger.warning(
            f"Invalid refresh interval {refresh_interval_sec!r}, "
            f"using default of {default}s"
        )
        return default

    return int(interval) if interval.is_integer() else interval


def classify(remaining_ttl_sec: float, refresh_interval_sec: Any) -> SyncStatus:
    """
    Classify snapshot freshness from its remaining TTL.

    Args:
        remaining_ttl_sec: Seconds until the snapshot expires
        refresh_interval_sec: TTL the snapshot was written with

    Returns:
        SyncStatus for the ratio remaining / interval
    """
    interval = effective_refresh_interval(refresh_interval_sec)

    # Expired or absent keys are never fresh, whatever the interval
    if remaining_ttl_sec is None or remaining_ttl_sec <= 0:
        return SyncStatus.OUT_OF_SYNC

    ratio = remaining_ttl_sec / interval

    if ratio < PARTIAL_RATIO:
        return SyncStatus.OUT_OF_SYNC
    if ratio < FULL_RATIO:
        return SyncStatus.PARTIAL
    return SyncStatus.FULL


def select_source(
    cache_read: CacheRead,
    default_interval: int = DEFAULT_REFRESH_INTERVAL_SEC,
) -> SourceDecision:
    """
    Choose the data source for a read request.

    Any outcome other than HIT falls back to the warehouse and is reported
    as out-of-sync. A HIT is classified against the live TTL and the
    interval declared in the snapshot metadata.

    Args:
        cache_read: Result of reading the snapshot
        default_interval: Interval used when the snapshot declares none

    Returns:
        SourceDecision for the request
    """
    if not cache_read.readable:
        return SourceDecision(
            source=DataSource.WAREHOUSE,
            sync_status=SyncStatus.OUT_OF_SYNC,
            ttl_seconds=0,
            refresh_interval_sec=effective_refresh_interval(default_interval),
            cache_outcome=cache_read.outcome,
        )

    declared = cache_read.metadata.get("refresh_interval_sec")
    interval = effective_refresh_interval(
        declared if declared is not None else default_interval,
        default=effective_refresh_interval(default_interval),
    )

    return SourceDecision(
        source=DataSource.CACHE,
        sync_status=classify(cache_read.ttl_seconds, interval),
        ttl_seconds=cache_read.ttl_seconds,
        refresh_interval_sec=interval,
        cache_outcome=cache_read.outcome,
    )
