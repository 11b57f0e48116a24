from __future__ import annotations

from typing import Protocol


class EmailPort(Protocol):
    """Outgoing mail. Transport failures surface as RuntimeError."""

    async def send(
        self,
        *,
        to: str,
        subject: str,
        body: str,
        idempotency_key: str | None = None,
    ) -> None:
        """Deliver one HTML message to a single recipient."""

    async def aclose(self) -> None:
        """Release transport resources held by the adapter."""
