"""Middleware tests: request id, rate limiting, CORS and error rendering."""

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from conquest.config import get_settings
from conquest.middleware import rate_limit


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    """Request ID is auto-generated when not provided."""
    response = await client.get("/health")
    assert len(response.headers["x-request-id"]) == 36  # UUID format


@pytest.mark.asyncio
async def test_request_id_preserved(client: AsyncClient) -> None:
    """Custom request ID is echoed back in response."""
    response = await client.get("/health", headers={"X-Request-Id": "test-abc-123"})
    assert response.headers["x-request-id"] == "test-abc-123"


@pytest.mark.asyncio
async def test_cors_preflight_allows_game_headers(client: AsyncClient) -> None:
    response = await client.options(
        "/user/1/home",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "x-session, x-master-version, x-isu-date",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_cors_preflight_rejects_unknown_header(client: AsyncClient) -> None:
    response = await client.options(
        "/user/1/home",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "x-unknown",
        },
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_404_uses_error_shape(client: AsyncClient) -> None:
    response = await client.get("/nonexistent-path")
    assert response.status_code == 404
    assert response.json() == {"status_code": 404, "message": "Not Found"}


@pytest.mark.asyncio
async def test_malformed_body_is_400(client: AsyncClient, make_headers) -> None:
    """Schema violations render as 400 rather than FastAPI's default 422."""
    response = await client.post("/user", json={"viewerId": "v"}, headers=make_headers())
    assert response.status_code == 400
    assert response.json() == {"status_code": 400, "message": "invalid request body"}


class _Pipeline:
    def __init__(self, counts: dict[str, int]) -> None:
        self.counts = counts
        self.key = ""

    def incr(self, key: str) -> None:
        self.key = key
        self.counts[key] = self.counts.get(key, 0) + 1

    def expire(self, key: str, seconds: int) -> None:
        pass

    async def execute(self) -> list[Any]:
        return [self.counts[self.key], True]


class _CountingRedis:
    def __init__(self) -> None:
        self.counts: dict[str, int] = {}

    def pipeline(self) -> _Pipeline:
        return _Pipeline(self.counts)


@pytest.mark.asyncio
async def test_rate_limit_blocks_excess(database: str, monkeypatch) -> None:
    """Requests beyond the window quota get 429 with Retry-After."""
    monkeypatch.setenv("CONQUEST_RATE_LIMIT_REQUESTS", "3")
    get_settings.cache_clear()
    fake = _CountingRedis()
    monkeypatch.setattr(rate_limit, "get_redis", lambda: fake)

    from conquest.main import create_app

    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        remaining = [(await ac.get("/version")).headers["x-ratelimit-remaining"] for _ in range(3)]
        blocked = await ac.get("/version")
        health = await ac.get("/health")

    assert remaining == ["2", "1", "0"]
    assert blocked.status_code == 429
    assert blocked.headers["retry-after"] == "60"
    assert blocked.json() == {"status_code": 429, "message": "too many requests"}
    assert health.status_code == 200
