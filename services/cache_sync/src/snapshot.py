"""
Schema of the snapshot document stored in Redis.

A stored value that parses as JSON but does not match this shape is treated
as corrupt by the store, so readers never see wrong-typed fields.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from warehouse.src.rows import coerce_float


class SnapshotRow(BaseModel):
    """One cached monthly aggregate row."""
    model_config = ConfigDict(extra="ignore")

    city: Optional[str] = None
    month: Optional[str] = None
    avg_temp_c: Optional[float] = None
    total_rain_mm: Optional[float] = None
    warehouse_load_time: Optional[str] = None

    @field_validator("avg_temp_c", "total_rain_mm", mode="before")
    @classmethod
    def coerce_numeric(cls, value: Any) -> Optional[float]:
        return coerce_float(value)


class SnapshotMetadata(BaseModel):
    """Freshness metadata written with every snapshot."""
    model_config = ConfigDict(extra="allow")

    cache_timestamp: Optional[str] = None
    data_version: Optional[str] = None
    # Validated by the freshness policy, which substitutes the default
    refresh_interval_sec: Optional[Any] = None


class CacheSnapshot(BaseModel):
    """Snapshot of one city's monthly aggregates."""
    model_config = ConfigDict(extra="ignore")

    team: Optional[str] = None
    city: Optional[str] = None
    metric: Optional[str] = None
    data: List[SnapshotRow] = Field(default_factory=list)
    metadata: SnapshotMetadata = Field(default_factory=SnapshotMetadata)
