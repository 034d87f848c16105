"""Pydantic response schemas."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from cache_sync.src.freshness import DataSource, SyncStatus
from warehouse.src.rows import coerce_float, format_month, format_timestamp


class MonthlyAggregate(BaseModel):
    """One monthly aggregate row."""
    city: Optional[str] = None
    month: Optional[str] = Field(None, description="First day of the month (YYYY-MM-DD)")
    avg_temp_c: Optional[float] = Field(None, description="Average temperature in Celsius")
    total_rain_mm: Optional[float] = Field(None, description="Total precipitation in millimeters")
    warehouse_load_time: Optional[str] = None

    @field_validator("avg_temp_c", "total_rain_mm", mode="before")
    @classmethod
    def coerce_numeric(cls, value: Any) -> Optional[float]:
        return coerce_float(value)

    @field_validator("month", mode="before")
    @classmethod
    def coerce_month(cls, value: Any) -> Optional[str]:
        return format_month(value)

    @field_validator("warehouse_load_time", mode="before")
    @classmethod
    def coerce_load_time(cls, value: Any) -> Optional[str]:
        return format_timestamp(value)


class MonthlyResponse(BaseModel):
    """Monthly aggregates with the source and freshness they were served with."""
    data: List[MonthlyAggregate]
    source: DataSource
    last_updated: str
    cache_status: str
    sync_status: SyncStatus
    ttl_seconds: int
    count: int
    data_version: Optional[str] = None
    cache_outcome: Optional[str] = None
    message: Optional[str] = None


class CacheStatusResponse(BaseModel):
    """State of the Redis snapshot for a city."""
    cache_valid: bool
    ttl_seconds: int
    ttl_minutes: int
    key: str
    source: str
    metadata: Optional[Dict[str, Any]] = None
    data_count: Optional[int] = None
    sync_status: Optional[SyncStatus] = None
    message: Optional[str] = None


class SyncResponse(BaseModel):
    """Result of an on-demand cache refresh."""
    success: bool
    message: str
    city: str
    timestamp: str
    key: Optional[str] = None
    rows_cached: Optional[int] = None
    data_version: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: str
    warehouse_url: str


class ErrorResponse(BaseModel):
    """Structured error body for warehouse failures."""
    error: str
    error_type: str
    message: str
    helpful_message: str
    source: str = "error"
    retryable: bool = False
