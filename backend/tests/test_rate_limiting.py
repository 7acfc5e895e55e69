"""Tests for rate limiting and API security configuration.

Covers:
- Rate limiting with and without Redis
- API endpoint HTTP method correctness
- Pagination limits on list endpoints
"""

import inspect
import time
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import HTTPException

from bayplanner.core.config import settings
from bayplanner.core.rate_limit import LocalLimiter, RateLimit, client_key


def _request(host: str = "10.0.0.5", forwarded: str | None = None) -> MagicMock:
    request = MagicMock()
    request.headers = {"X-Forwarded-For": forwarded} if forwarded else {}
    request.client.host = host
    return request


# ---------------------------------------------------------------------------
# Configuration Security Tests
# ---------------------------------------------------------------------------


class TestSecurityConfig:
    """Test that security-related configuration is correct."""

    def test_cors_origins_configured(self):
        """CORS origins should be properly configured."""
        origins = settings.CORS_ORIGINS.split(",")
        assert len(origins) >= 1
        assert any(o.startswith("http") for o in origins)

    def test_debug_disabled_in_production(self):
        """Debug mode should be disabled in production."""
        if settings.ENVIRONMENT == "production":
            assert settings.DEBUG is False

    def test_production_not_use_wildcard_cors(self):
        """Production should not use wildcard CORS origins."""
        if settings.is_production:
            origins = settings.CORS_ORIGINS.split(",")
            assert "*" not in origins

    def test_excluded_teams_parsed(self):
        assert "LIBBY" in settings.excluded_teams


# ---------------------------------------------------------------------------
# Limiter Tests
# ---------------------------------------------------------------------------


class TestLocalLimiter:
    def test_allows_up_to_limit(self):
        limiter = LocalLimiter(limit=3, window=60)
        assert [limiter.acquire("a", now=0.0) for _ in range(3)] == [0, 0, 0]
        assert limiter.acquire("a", now=0.0) > 0

    def test_tokens_refill_over_time(self):
        limiter = LocalLimiter(limit=2, window=60)
        limiter.acquire("a", now=0.0)
        limiter.acquire("a", now=0.0)
        assert limiter.acquire("a", now=0.0) > 0
        assert limiter.acquire("a", now=30.0) == 0

    def test_clients_are_independent(self):
        limiter = LocalLimiter(limit=1, window=60)
        assert limiter.acquire("a", now=0.0) == 0
        assert limiter.acquire("b", now=0.0) == 0


class TestRateLimitDependency:
    def test_client_key_prefers_forwarded_for(self):
        assert client_key(_request(forwarded="1.2.3.4, 10.0.0.1")) == "1.2.3.4"
        assert client_key(_request(host="10.0.0.9")) == "10.0.0.9"

    @pytest.mark.asyncio
    async def test_falls_back_to_local_buckets_without_redis(self):
        limiter = RateLimit("test-local", limit=2, window=60)
        request = _request(host="10.1.1.1")
        with patch("bayplanner.core.rate_limit.get_redis", side_effect=RuntimeError("no redis")):
            await limiter(request)
            await limiter(request)
            with pytest.raises(HTTPException) as exc_info:
                await limiter(request)
        assert exc_info.value.status_code == 429
        assert "Retry-After" in exc_info.value.headers

    @pytest.mark.asyncio
    async def test_redis_window_rejects_over_limit(self):
        now = time.time()
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[0, 1, 5, [("old", now - 10)], True])
        redis = MagicMock()
        redis.pipeline.return_value = pipe

        limiter = RateLimit("test-redis", limit=2, window=60)
        with patch("bayplanner.core.rate_limit.get_redis", return_value=redis):
            with pytest.raises(HTTPException) as exc_info:
                await limiter(_request())
        assert exc_info.value.status_code == 429
        assert 1 <= int(exc_info.value.headers["Retry-After"]) <= 60

    @pytest.mark.asyncio
    async def test_redis_window_allows_under_limit(self):
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[0, 1, 1, [], True])
        redis = MagicMock()
        redis.pipeline.return_value = pipe

        limiter = RateLimit("test-redis-ok", limit=2, window=60)
        with patch("bayplanner.core.rate_limit.get_redis", return_value=redis):
            await limiter(_request())
        pipe.zadd.assert_called_once()


# ---------------------------------------------------------------------------
# API Endpoint Method Tests
# ---------------------------------------------------------------------------


def _has_route(router, method: str, path_fragment: str) -> bool:
    for route in router.routes:
        if hasattr(route, "methods") and hasattr(route, "path"):
            if path_fragment in route.path and method in route.methods:
                return True
    return False


class TestAPIEndpointMethods:
    """Test that API endpoints use correct HTTP methods."""

    def test_schedule_move_is_put(self):
        from bayplanner.api.v1.schedules import router

        assert _has_route(router, "PUT", "{schedule_id}")

    def test_status_change_is_patch(self):
        from bayplanner.api.v1.schedules import router

        assert _has_route(router, "PATCH", "/status")

    def test_drop_and_dry_run_are_post(self):
        from bayplanner.api.v1.schedules import router

        assert _has_route(router, "POST", "/drop")
        assert _has_route(router, "POST", "/check-conflict")
        assert _has_route(router, "POST", "/clear-all")

    def test_timeline_endpoints_are_get(self):
        from bayplanner.api.v1.timeline import router

        assert _has_route(router, "GET", "/slots")
        assert _has_route(router, "GET", "/bars")
        assert _has_route(router, "GET", "/utilization")

    def test_projects_list_has_limit_param(self):
        """Projects list endpoint has a limit parameter."""
        from bayplanner.api.v1.projects import list_projects

        sig = inspect.signature(list_projects)
        assert "limit" in sig.parameters
