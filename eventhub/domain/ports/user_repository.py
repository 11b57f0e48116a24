from __future__ import annotations

from typing import Literal, Optional, Protocol

from eventhub.domain.entities import User


class UserRepositoryPort(Protocol):
    async def create(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        is_verified: bool = False,
        avatar: str | None = None,
        github_id: str | None = None,
        google_id: str | None = None,
    ) -> User:
        """
        Insert a new user.
        Raise UserAlreadyExists if the (normalized) email is taken.
        """

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Return None if not found."""

    async def get_by_email(self, email: str) -> Optional[User]:
        """Return None if not found."""

    async def get_by_email_with_hash(self, email: str) -> tuple[User, str] | None:
        """
        Fetch user by email together with its password hash.
        Return None if not found.
        """

    async def set_verified(self, user_id: str) -> None:
        """Mark the user's email as verified."""

    async def set_password_hash(self, user_id: str, password_hash: str) -> None:
        """Replace the stored password hash."""

    async def link_social(
        self,
        user_id: str,
        *,
        provider: Literal["github", "google"],
        provider_id: str,
        avatar: str | None = None,
    ) -> User:
        """
        Attach a provider id to the user and mark it verified.
        `avatar` is only applied when the user has none yet.
        """
