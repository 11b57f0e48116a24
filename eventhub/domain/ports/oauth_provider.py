from __future__ import annotations

from typing import Optional, Protocol

from eventhub.domain.entities import SocialProfile


class OAuthProviderPort(Protocol):
    name: str

    def authorization_url(self, state: str) -> str:
        """Where to send the browser to start the provider handshake."""

    async def fetch_profile(self, code: str) -> SocialProfile:
        """Exchange the callback code and return the provider's identity."""


class OAuthStatePort(Protocol):
    async def create(self, remember: bool) -> str:
        """Issue a one-shot state value carrying the remember-me choice."""

    async def consume(self, state: str) -> Optional[bool]:
        """Return the remember-me choice and drop the state, or None if unknown."""
