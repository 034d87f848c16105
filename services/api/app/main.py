"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from api.app.config import get_config
from api.app.errors import register_exception_handlers
from api.app.middleware import register_middleware
from api.app.rate_limit import limiter
from api.app.routers import cache, diagnostics, health, monthly
from cache_sync.src.config import get_config as get_cache_config
from warehouse.src.config import get_config as get_warehouse_config

# Get configuration
config = get_config()

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Log the store configuration on startup."""
    cache_config = get_cache_config()

    logger.info("Starting Weather API")
    logger.info(f"ClickHouse URL: {get_warehouse_config().clickhouse_url}")
    logger.info(f"Redis URL: {cache_config.redis_url} (team {cache_config.team_name}, TTL {cache_config.redis_ttl_sec}s)")

    yield

    logger.info("Shutting down Weather API")


app = FastAPI(
    title=config.api_title,
    version=config.api_version,
    description=config.api_description,
    lifespan=lifespan,
)

app.state.limiter = limiter
register_middleware(app, config)
register_exception_handlers(app)

app.include_router(health.router)
app.include_router(monthly.router)
app.include_router(cache.router)
app.include_router(diagnostics.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=config.log_level.lower()
    )
