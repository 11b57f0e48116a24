from __future__ import annotations

import secrets
from typing import Optional

from redis.asyncio import Redis


class RedisOAuthStates:
    """One-shot OAuth `state` values that remember the remember-me choice."""

    def __init__(
        self, redis: Redis, *, key_prefix: str = "oauth:", ttl_seconds: int = 900
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, state: str) -> str:
        return f"{self._prefix}{state}"

    async def create(self, remember: bool) -> str:
        state = secrets.token_urlsafe(24)
        await self._redis.set(self._key(state), "1" if remember else "0", ex=self._ttl)
        return state

    async def consume(self, state: str) -> Optional[bool]:
        value = await self._redis.getdel(self._key(state))
        if value is None:
            return None
        return value == "1"
