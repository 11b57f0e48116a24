from __future__ import annotations

import secrets
from typing import Optional

from redis.asyncio import Redis

from eventhub.domain.ports.token_issuer import TokenIssuerPort

_TOKEN_BYTES = 32
_MAX_MINT_TRIES = 3


class RedisSessions(TokenIssuerPort):
    """
    Opaque bearer tokens. Each token is one key holding the user id and
    expiring after ttl_seconds; revoking deletes the key.
    """

    def __init__(
        self, redis: Redis, *, key_prefix: str = "sess:", ttl_seconds: int = 86400
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"

    async def create(self, user_id: str) -> str:
        for _ in range(_MAX_MINT_TRIES):
            token = secrets.token_urlsafe(_TOKEN_BYTES)
            # NX: never hand out a token that already maps to someone
            if await self._redis.set(self._key(token), user_id, ex=self._ttl, nx=True):
                return token
        raise RuntimeError("could not mint a unique session token")

    async def get(self, token: str) -> Optional[str]:
        if not token:
            return None
        return await self._redis.get(self._key(token))

    async def revoke(self, token: str) -> None:
        await self._redis.delete(self._key(token))
