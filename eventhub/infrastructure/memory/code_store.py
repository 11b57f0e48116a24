from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from typing import AsyncIterator

from eventhub.domain.entities import CodePurpose, CodeRecord
from eventhub.domain.ports.code_store import CodeStorePort

_Key = tuple[str, CodePurpose]


@dataclass
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class InMemoryCodeStore(CodeStorePort):
    """
    Process-local code store.

    NOTE:
    - Records live as long as the process; expired ones are only dropped
      when someone looks them up. Multi-instance deployments need
      RedisCodeStore instead.
    - Per-key locks are reference counted and removed once nobody holds
      or waits on them, so the lock table does not grow with traffic.
    - Must be used from a single event loop.
    """

    def __init__(self) -> None:
        self._records: dict[_Key, CodeRecord] = {}
        self._locks: dict[_Key, _KeyLock] = {}

    @asynccontextmanager
    async def locked(self, email: str, purpose: CodePurpose) -> AsyncIterator[None]:
        key = (email, purpose)
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _KeyLock()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._locks.pop(key, None)

    async def get(self, email: str, purpose: CodePurpose) -> CodeRecord | None:
        record = self._records.get((email, purpose))
        # hand out a copy so callers only mutate state through put()
        return replace(record) if record is not None else None

    async def put(self, record: CodeRecord) -> None:
        self._records[(record.email, record.purpose)] = replace(record)

    async def delete(self, email: str, purpose: CodePurpose) -> None:
        self._records.pop((email, purpose), None)

    def __len__(self) -> int:
        return len(self._records)
