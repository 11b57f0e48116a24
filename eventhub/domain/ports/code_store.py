from __future__ import annotations

from typing import AsyncContextManager, Protocol

from eventhub.domain.entities import CodePurpose, CodeRecord


class CodeStorePort(Protocol):
    """
    Keyed storage for one-time codes, one record per (email, purpose).

    Usage:
        async with store.locked(email, purpose):
            record = await store.get(email, purpose)
            ...
            await store.put(record)
    """

    def locked(self, email: str, purpose: CodePurpose) -> AsyncContextManager[None]:
        """Exclusive access to a single key for a read-modify-write."""

    async def get(self, email: str, purpose: CodePurpose) -> CodeRecord | None:
        """Return the stored record as-is (expired or not), or None."""

    async def put(self, record: CodeRecord) -> None:
        """Store/replace the record for (record.email, record.purpose)."""

    async def delete(self, email: str, purpose: CodePurpose) -> None:
        """Remove the record if present."""
