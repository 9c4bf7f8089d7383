"""
tests/test_rate_limiting.py — Tests for rate limiting behavior

Covers: slowapi rate limiter configuration, per-IP limiting on the
supplier search endpoint, and Redis storage fallback.

Called by: pytest
Depends on: app.rate_limit, routers/dropshipping.py (search endpoint)
"""

from unittest.mock import patch


def test_limiter_is_configured():
    """Rate limiter module exports a Limiter with key_func."""
    from app.rate_limit import limiter
    assert limiter is not None
    assert limiter._key_func is not None


def test_limiter_uses_remote_address():
    """Key function is get_remote_address (IP-based limiting)."""
    from slowapi.util import get_remote_address
    from app.rate_limit import limiter
    assert limiter._key_func is get_remote_address


def test_search_endpoint_rate_limited(client, fake_client, cj_supplier):
    """Search endpoint returns 429 once the per-minute budget is spent."""
    from app.config import settings
    from app.rate_limit import limiter

    budget = int(settings.rate_limit_search.split("/")[0])
    limiter.reset()
    limiter.enabled = True
    try:
        for _ in range(budget):
            resp = client.get("/api/dropshipping/search", params={"source": "cj"})
            assert resp.status_code == 200
        resp = client.get("/api/dropshipping/search", params={"source": "cj"})
        assert resp.status_code == 429
    finally:
        limiter.enabled = False
        limiter.reset()


def test_disabled_limiter_lets_requests_through(client, cj_supplier):
    for _ in range(3):
        resp = client.get("/api/dropshipping/search", params={"source": "cj"})
        assert resp.status_code == 200


def test_resolve_storage_no_redis():
    """_resolve_storage returns None when Redis is not configured."""
    with patch("app.rate_limit.settings") as mock_settings:
        mock_settings.cache_backend = "memory"
        mock_settings.redis_url = ""
        from app.rate_limit import _resolve_storage
        result = _resolve_storage()
        assert result is None


def test_resolve_storage_redis_unavailable():
    """_resolve_storage returns None when Redis ping fails."""
    import pytest
    redis_lib = pytest.importorskip("redis")

    with patch("app.rate_limit.settings") as mock_settings:
        mock_settings.cache_backend = "redis"
        mock_settings.redis_url = "redis://localhost:6379/15"
        with patch.object(redis_lib, "from_url") as mock_from_url:
            mock_from_url.return_value.ping.side_effect = ConnectionError
            from app.rate_limit import _resolve_storage
            result = _resolve_storage()
            assert result is None


def test_route_limits_follow_settings():
    from app.config import settings
    from app.rate_limit import IMPORT_LIMIT, SEARCH_LIMIT

    assert SEARCH_LIMIT == settings.rate_limit_search
    assert IMPORT_LIMIT == settings.rate_limit_import


def test_install_rate_limiting_wires_app():
    from fastapi import FastAPI
    from slowapi.errors import RateLimitExceeded

    from app.rate_limit import install_rate_limiting, limiter

    app = FastAPI()
    install_rate_limiting(app)
    assert app.state.limiter is limiter
    assert RateLimitExceeded in app.exception_handlers


def test_import_endpoint_rate_limited(client, fake_client, cj_supplier):
    """Import has its own budget; repeats of one id stay idempotent until it runs out."""
    from app.rate_limit import IMPORT_LIMIT, limiter

    fake_client.products = {"P1": {"pid": "P1", "sellPrice": 5, "stock": 2}}
    budget = int(IMPORT_LIMIT.split("/")[0])
    limiter.reset()
    limiter.enabled = True
    try:
        for _ in range(budget):
            resp = client.post("/api/dropshipping/import", json={"source": "cj", "external_id": "P1"})
            assert resp.status_code == 200
        resp = client.post("/api/dropshipping/import", json={"source": "cj", "external_id": "P1"})
        assert resp.status_code == 429
    finally:
        limiter.enabled = False
        limiter.reset()
