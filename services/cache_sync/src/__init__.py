"""
Weather Cache Sync Service

Copies monthly aggregates from ClickHouse into Redis snapshots and decides
how fresh a cached snapshot is.
"""

__version__ = "1.0.0"
