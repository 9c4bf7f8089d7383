"""Per-IP request limits for the dropshipping API.

Search and import each fan out to a supplier API that throttles per
account, so they get tighter budgets than the global default. Counters
live in Redis when cache_backend is "redis" and the server answers;
otherwise every worker counts on its own.
"""

from fastapi import FastAPI
from loguru import logger
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import settings

SEARCH_LIMIT = settings.rate_limit_search
IMPORT_LIMIT = settings.rate_limit_import


def _resolve_storage() -> str | None:
    """Redis URL for shared counters, or None for in-process counting."""
    if settings.cache_backend != "redis" or not settings.redis_url:
        return None
    try:
        import redis as redis_lib

        r = redis_lib.from_url(settings.redis_url, socket_connect_timeout=2)
        r.ping()
        logger.info("Supplier request limits shared through Redis")
        return settings.redis_url
    except Exception as e:
        logger.warning(f"Redis unreachable ({e!r}); supplier request limits are per worker")
        return None


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
    storage_uri=_resolve_storage(),
)


def install_rate_limiting(app: FastAPI) -> None:
    """Attach the limiter and the 429 handler to the application."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
