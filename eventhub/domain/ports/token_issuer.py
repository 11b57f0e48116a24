from __future__ import annotations

from typing import Optional, Protocol


class TokenIssuerPort(Protocol):
    async def create(self, user_id: str) -> str:
        """Mint an opaque bearer token for the user."""

    async def get(self, token: str) -> Optional[str]:
        """Return the user id behind a live token, or None."""

    async def revoke(self, token: str) -> None:
        """Invalidate the token (no-op when unknown)."""
