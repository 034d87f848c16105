"""
Weather API Service

Serves monthly weather aggregates from the Redis cache with ClickHouse
fallback.
"""

__version__ = "1.0.0"
