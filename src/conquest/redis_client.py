"""Shared Redis client.

Redis only backs the rate limiter and the readiness check. No game state lives
there, so every caller has to cope with the client being absent.
"""

import redis.asyncio as redis
from redis.exceptions import RedisError

_client: redis.Redis | None = None


async def init_redis(url: str, max_connections: int = 50) -> None:
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        decode_responses=True,
        max_connections=max_connections,
        socket_connect_timeout=1,
        socket_timeout=1,
    )


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client:
        await _client.aclose()
        _client = None


def get_redis() -> redis.Redis:
    """Raises RuntimeError until ``init_redis`` has run."""
    if _client is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _client


async def redis_status() -> str:
    """Readiness status of the shared client: ``ok``, ``not initialized`` or ``error: ...``."""
    try:
        await get_redis().ping()
    except RuntimeError:
        return "not initialized"
    except RedisError as exc:
        return f"error: {exc}"
    return "ok"
