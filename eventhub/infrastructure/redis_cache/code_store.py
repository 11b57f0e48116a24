from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from redis.asyncio import Redis

from eventhub.domain.entities import CodePurpose, CodeRecord
from eventhub.domain.ports.code_store import CodeStorePort


def _encode(record: CodeRecord) -> dict[str, str]:
    return {
        "code": record.code,
        "issued_at": record.issued_at.isoformat(),
        "expires_at": record.expires_at.isoformat(),
        "attempts": str(record.attempts),
        "last_attempt_at": (
            record.last_attempt_at.isoformat() if record.last_attempt_at else ""
        ),
    }


def _decode(email: str, purpose: CodePurpose, raw: dict[str, str]) -> CodeRecord:
    last_attempt_at = raw.get("last_attempt_at") or None
    return CodeRecord(
        email=email,
        purpose=purpose,
        code=raw["code"],
        issued_at=datetime.fromisoformat(raw["issued_at"]),
        expires_at=datetime.fromisoformat(raw["expires_at"]),
        attempts=int(raw.get("attempts") or 0),
        last_attempt_at=(
            datetime.fromisoformat(last_attempt_at) if last_attempt_at else None
        ),
    )


class RedisCodeStore(CodeStorePort):
    """
    Shared code store for multi-instance deployments.

    One hash per (purpose, email). Redis expires the key at the record's
    expires_at, on top of the expiry check done by OtpService. Key locks
    use redis-py's Lock (SET NX PX + token-checked release).
    """

    def __init__(
        self,
        redis: Redis,
        *,
        key_prefix: str = "otp:",
        lock_timeout: float = 5.0,
        lock_wait: float = 5.0,
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._lock_timeout = lock_timeout
        self._lock_wait = lock_wait

    def _key(self, email: str, purpose: CodePurpose) -> str:
        return f"{self._prefix}{purpose.value}:{email}"

    @asynccontextmanager
    async def locked(self, email: str, purpose: CodePurpose) -> AsyncIterator[None]:
        lock = self._redis.lock(
            f"{self._key(email, purpose)}:lock",
            timeout=self._lock_timeout,
            blocking_timeout=self._lock_wait,
        )
        async with lock:
            yield

    async def get(self, email: str, purpose: CodePurpose) -> CodeRecord | None:
        raw = await self._redis.hgetall(self._key(email, purpose))
        if not raw or "code" not in raw:
            return None
        return _decode(email, purpose, raw)

    async def put(self, record: CodeRecord) -> None:
        key = self._key(record.email, record.purpose)
        pipe = self._redis.pipeline(transaction=True)
        pipe.hset(key, mapping=_encode(record))
        pipe.pexpireat(key, record.expires_at)
        await pipe.execute()

    async def delete(self, email: str, purpose: CodePurpose) -> None:
        await self._redis.delete(self._key(email, purpose))
