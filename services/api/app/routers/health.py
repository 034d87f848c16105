"""Health check and API index endpoints."""

from fastapi import APIRouter
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from api.app.config import get_config
from api.app.models import HealthResponse
from api.app.service import utc_now_iso
from warehouse.src.config import get_config as get_warehouse_config

router = APIRouter(tags=["health"])
config = get_config()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Liveness check.

    Does not touch the stores; use /api/diagnostics for warehouse checks.

    Returns:
        Health status information
    """
    return HealthResponse(
        status="ok",
        timestamp=utc_now_iso(),
        warehouse_url=get_warehouse_config().clickhouse_url,
    )


@router.get("/api")
async def api_index() -> dict:
    """
    API information and available endpoints.

    Returns:
        Basic API information
    """
    return {
        "name": config.api_title,
        "version": config.api_version,
        "endpoints": {
            "GET /api/monthly": "Get monthly aggregated weather data",
            "GET /api/cache-status": "Get Redis cache status",
            "POST /api/sync-now": "Trigger cache refresh",
            "GET /api/diagnostics": "Run staged ClickHouse diagnostics",
            "GET /health": "Health check endpoint",
            "GET /metrics": "Prometheus metrics",
        },
    }


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics in text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
