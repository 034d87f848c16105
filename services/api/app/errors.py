"""
Exception handlers for the Weather API.

Warehouse failures that escape a router become structured ErrorResponse
bodies; anything else is logged and answered with a sanitized 500.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from api.app.models import ErrorResponse
from warehouse.src.errors import WarehouseError, WarehouseUnreachable

logger = logging.getLogger(__name__)


async def warehouse_exception_handler(request: Request, exc: WarehouseError):
    """
    Structured response for warehouse failures.

    Returns:
        503 when ClickHouse is unreachable, 500 for a missing schema or a failed query
    """
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if isinstance(exc, WarehouseUnreachable)
        else status.HTTP_500_INTERNAL_SERVER_ERROR
    )

    logger.error(f"Warehouse error ({exc.error_type}) on {request.method} {request.url.path}: {exc}")

    body = ErrorResponse(
        error="Failed to fetch monthly weather data",
        error_type=exc.error_type,
        message=str(exc),
        helpful_message=exc.hint,
        retryable=exc.retryable,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {request.method} {request.url.path} - {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "type": "internal_error",
            "path": str(request.url.path),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(WarehouseError, warehouse_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
