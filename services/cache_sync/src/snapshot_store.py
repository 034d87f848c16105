"""
Redis snapshot storage for monthly aggregates.

Reads never raise: every failure is reported as a tagged CacheRead so the
serving layer can fall back to the warehouse while still knowing why.
Writes are a single SET with EX, so readers see either the old or the new
snapshot in full.
"""
import json
import logging
from typing import Any, Dict

import redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from .config import CacheSyncConfig
from .freshness import CacheOutcome, CacheRead
from .snapshot import CacheSnapshot


logger = logging.getLogger(__name__)


def build_cache_key(team: str, city: str) -> str:
    """
    Build the snapshot key for a city.

    Returns:
        ``"weather:{team}:{city-lowercased}:monthly"``
    """
    return f"weather:{team}:{city.strip().lower()}:monthly"


def create_redis_client(config: CacheSyncConfig) -> redis.Redis:
    """Create a Redis client; no connection is opened until the first command."""
    return redis.Redis.from_url(
        config.redis_url,
        decode_responses=True,
        socket_connect_timeout=config.redis_socket_timeout,
        socket_timeout=config.redis_socket_timeout,
    )


class SnapshotStore:
    """Reads and writes CacheSnapshot values in Redis."""

    def __init__(self, client: redis.Redis, team: str):
        """
        Initialize store.

        Args:
            client: Redis client (decode_responses=True)
            team: Team tag used in every key
        """
        self.client = client
        self.team = team

    def key_for(self, city: str) -> str:
        return build_cache_key(self.team, city)

    def read(self, city: str) -> CacheRead:
        """
        Read the snapshot for a city.

        The value is fetched with a single GET; the remaining TTL is queried
        afterwards so it reflects the live expiry at read time.

        Args:
            city: City name

        Returns:
            CacheRead tagged HIT, MISSING, UNAVAILABLE or CORRUPT
        """
        key = self.key_for(city)

        try:
            raw = self.client.get(key)
            if raw is None:
                return CacheRead(outcome=CacheOutcome.MISSING, key=key)
            ttl = self.client.ttl(key)
        except (RedisError, OSError) as e:
            logger.warning(f"Redis unavailable while reading {key}: {e}")
            return CacheRead(outcome=CacheOutcome.UNAVAILABLE, key=key, error=str(e))

        try:
            snapshot = CacheSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Corrupt snapshot at {key}: {e.error_count()} validation errors")
            return CacheRead(outcome=CacheOutcome.CORRUPT, key=key, error=str(e))

        return CacheRead(
            outcome=CacheOutcome.HIT,
            key=key,
            snapshot=snapshot.model_dump(),
            ttl_seconds=int(ttl) if ttl is not None else 0,
        )

    def write(self, city: str, snapshot: Dict[str, Any], ttl_seconds: int) -> str:
        """
        Overwrite the snapshot for a city with a fresh TTL.

        Args:
            city: City name
            snapshot: Snapshot payload (JSON-serializable)
            ttl_seconds: Expiry in seconds

        Returns:
            Key the snapshot was written to

        Raises:
            RedisError: If the write fails
        """
        key = self.key_for(city)
        self.client.set(key, json.dumps(snapshot), ex=ttl_seconds)
        logger.info(f"Cached {len(snapshot.get('data', []))} rows into {key} with TTL={ttl_seconds}s")
        return key

    def ping(self) -> bool:
        """Check Redis connectivity."""
        try:
            return bool(self.client.ping())
        except (RedisError, OSError) as e:
            logger.warning(f"Redis ping failed: {e}")
            return False
