"""
Cache refresh job: ClickHouse monthly_agg -> Redis snapshot.

Reads every monthly aggregate row from the warehouse, keeps the requested
city, and writes the result as one snapshot with a fixed TTL. A city with no
rows still gets a snapshot with empty data, so readers can tell "no data"
apart from "not cached".
"""
import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from warehouse.src.config import WarehouseConfig
from warehouse.src.reader import WarehouseReader

from .config import CacheSyncConfig
from .freshness import CacheOutcome
from .snapshot_store import SnapshotStore, create_redis_client


logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheRefreshJob:
    """Materializes a city's monthly aggregates into the Redis cache."""

    def __init__(
        self,
        reader: WarehouseReader,
        store: SnapshotStore,
        config: CacheSyncConfig,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize job.

        Args:
            reader: Warehouse reader for monthly_agg
            store: Snapshot store to write to
            config: Cache sync configuration (TTL, team, metric)
            clock: Source of the current UTC time
        """
        self.reader = reader
        self.store = store
        self.config = config
        self.clock = clock
        self._last_stamp: Optional[datetime] = None

    def _cached_stamp(self, city: str) -> Optional[datetime]:
        """
        Timestamp of the snapshot currently cached for a city.

        Returns:
            The cached cache_timestamp, or None when there is no readable snapshot
        """
        cached = self.store.read(city)
        if cached.outcome is not CacheOutcome.HIT:
            return None

        metadata = cached.snapshot.get("metadata") or {}
        stamps = []

        raw = metadata.get("cache_timestamp")
        if raw:
            try:
                stamp = datetime.fromisoformat(raw.replace("Z", "+00:00"))
                if stamp.tzinfo is None:
                    stamp = stamp.replace(tzinfo=timezone.utc)
                stamps.append(stamp)
            except ValueError:
                logger.warning(f"Ignoring unparseable cache_timestamp {raw!r} at {cached.key}")

        version = metadata.get("data_version") or ""
        if version.startswith("v") and version[1:].isdigit():
            stamps.append(EPOCH + timedelta(milliseconds=int(version[1:])))

        return max(stamps) if stamps else None

    def _next_stamp(self, floor: Optional[datetime] = None) -> datetime:
        """Current time in whole milliseconds, forced strictly past the previous refresh and the floor."""
        now = self.clock()
        stamp = now.replace(microsecond=now.microsecond // 1000 * 1000)
        for previous in (self._last_stamp, floor):
            if previous is not None and stamp <= previous:
                stamp = previous + timedelta(milliseconds=1)
        self._last_stamp = stamp
        return stamp

    def build_snapshot(
        self,
        city: str,
        rows: list,
        previous: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        stamp = self._next_stamp(previous)
        return {
            "team": self.config.team_name,
            "city": city,
            "metric": self.config.metric,
            "data": rows,
            "metadata": {
                "cache_timestamp": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
                "data_version": f"v{(stamp - EPOCH) // timedelta(milliseconds=1)}",
                "refresh_interval_sec": self.config.redis_ttl_sec,
            },
        }

    def refresh(self, city: str) -> Dict[str, Any]:
        """
        Refresh the snapshot for a city.

        Args:
            city: City to cache

        Returns:
            Summary with key, row count, data version and TTL

        Raises:
            WarehouseError: If monthly_agg cannot be read
            RedisError: If the snapshot cannot be written
        """
        logger.info("Fetching monthly aggregates from ClickHouse...")
        all_rows = self.reader.fetch_all_monthly()

        wanted = city.strip().lower()
        city_rows = [
            row for row in all_rows
            if (row.get("city") or "").strip().lower() == wanted
        ]

        if not city_rows:
            logger.warning(f"No monthly rows for {city}; caching an empty snapshot")

        # Another job instance may have written the current snapshot
        snapshot = self.build_snapshot(city, city_rows, previous=self._cached_stamp(city))
        key = self.store.write(city, snapshot, self.config.redis_ttl_sec)

        return {
            "city": city,
            "key": key,
            "rows_cached": len(city_rows),
            "data_version": snapshot["metadata"]["data_version"],
            "cache_timestamp": snapshot["metadata"]["cache_timestamp"],
            "ttl_seconds": self.config.redis_ttl_sec,
        }


def main():
    """CLI entry point for the cache refresh job."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    config = CacheSyncConfig()

    parser = argparse.ArgumentParser(
        description="Refresh the Redis monthly aggregate snapshot from ClickHouse"
    )
    parser.add_argument(
        "--city",
        default=config.default_city,
        help=f"City to cache (default: {config.default_city})"
    )
    args = parser.parse_args()

    reader = WarehouseReader.from_config(WarehouseConfig())
    store = SnapshotStore(create_redis_client(config), team=config.team_name)
    job = CacheRefreshJob(reader, store, config)

    try:
        result = job.refresh(args.city)
        logger.info(
            f"Cached {result['rows_cached']} rows into \"{result['key']}\" "
            f"with TTL={result['ttl_seconds']}s ({result['data_version']})"
        )
        sys.exit(0)
    except Exception as e:
        logger.error(f"ClickHouse -> Redis refresh failed: {e}", exc_info=True)
        sys.exit(1)
    finally:
        reader.close()


if __name__ == "__main__":
    main()
