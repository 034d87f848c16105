"""
Request tracking for the Weather API.

Every API request is logged with the city it asks about and counted in the
request metrics under its route template, so /api/monthly?city=Lodi and
/api/monthly?city=Stockton share one series.
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.app.config import APIConfig
from api.app.metrics import REQUEST_COUNT, REQUEST_DURATION
from api.app.rate_limit import is_health_check

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
UNMATCHED_ROUTE = "unmatched"


def route_template(request: Request) -> str:
    """Path template of the matched route, or a fixed label for unknown paths."""
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


async def track_request(request: Request, call_next):
    """Log the request, time it and tag the response with its request ID."""
    if is_health_check(request):
        return await call_next(request)

    start_time = time.perf_counter()
    # Reuse the caller's ID so sync-now calls can be traced from the DAG logs
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:16]
    city = request.query_params.get("city")

    logger.info(
        f"{request.method} {request.url.path}"
        f"{f' city={city}' if city else ''} [{request_id}]"
    )

    response = await call_next(request)

    duration = time.perf_counter() - start_time
    endpoint = route_template(request)

    REQUEST_COUNT.labels(method=request.method, endpoint=endpoint, status=response.status_code).inc()
    REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(duration)

    log = logger.warning if response.status_code >= 500 else logger.info
    log(f"{request.method} {endpoint} [{request_id}] - {response.status_code} - {duration:.3f}s")

    response.headers[REQUEST_ID_HEADER] = request_id
    response.headers["X-Response-Time"] = f"{duration:.3f}s"
    return response


def register_middleware(app: FastAPI, config: APIConfig) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
    )
    app.middleware("http")(track_request)
