"""
Rate limiting for endpoints that trigger work on the stores.

The limiter storage defaults to in-process memory; point
RATE_LIMIT_STORAGE_URI at Redis to share limits across workers.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.app.config import get_config

config = get_config()

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=config.rate_limit_storage_uri,
    headers_enabled=True,  # Add X-RateLimit-* headers to responses
)


def is_health_check(request: Request) -> bool:
    """Check if request is a health check endpoint."""
    return request.url.path in ["/health", "/metrics"]
