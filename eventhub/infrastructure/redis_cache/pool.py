from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis

from eventhub.settings import Settings, get_settings

_client: Optional[Redis] = None


def build_redis(settings: Settings) -> Redis:
    # str in, str out; every adapter here stores text
    return Redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_timeout=settings.redis_socket_timeout,
        health_check_interval=30,
    )


def get_redis() -> Redis:
    """Shared client, created on first use. Connects lazily on the first command."""
    global _client
    if _client is None:
        _client = build_redis(get_settings())
    return _client


async def close_redis() -> None:
    global _client
    client, _client = _client, None
    if client is not None:
        await client.aclose()
