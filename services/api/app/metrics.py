"""Prometheus metrics for the Weather API."""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "weather_api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"]
)
REQUEST_DURATION = Histogram(
    "weather_api_request_duration_seconds",
    "API request duration in seconds",
    ["method", "endpoint"]
)
WAREHOUSE_QUERY_DURATION = Histogram(
    "weather_api_warehouse_query_duration_seconds",
    "Warehouse query duration in seconds",
    ["operation"]
)
CACHE_READS = Counter(
    "weather_api_cache_reads_total",
    "Snapshot reads by outcome (hit, missing, unavailable, corrupt)",
    ["outcome"]
)
RESPONSES_BY_SOURCE = Counter(
    "weather_api_monthly_responses_total",
    "Monthly responses by data source and sync status",
    ["source", "sync_status"]
)
