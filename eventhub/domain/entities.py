from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal

from eventhub.domain.errors import AlreadyVerified


class CodePurpose(str, Enum):
    VERIFICATION = "verification"
    PASSWORD_RESET = "password_reset"


@dataclass
class User:
    id: str | None = None
    name: str = ""
    email: str | None = None
    role: Literal["USER", "ADMIN"] = "USER"
    is_verified: bool = False
    avatar: str | None = None
    github_id: str | None = None
    google_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        if self.email:
            self.email = self.email.strip().lower()
            if not self.email:
                raise ValueError("email cannot be empty")
        else:
            raise ValueError("email is required")

    @property
    def is_social(self) -> bool:
        return bool(self.github_id or self.google_id)

    def mark_verified(self):
        if self.is_verified:
            raise AlreadyVerified()
        self.is_verified = True


@dataclass
class CodeRecord:
    """A live one-time code for one (email, purpose) pair."""

    email: str
    purpose: CodePurpose
    code: str
    issued_at: datetime
    expires_at: datetime
    attempts: int = 0
    last_attempt_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass
class SocialProfile:
    """Identity returned by an OAuth provider after the handshake."""

    provider: Literal["github", "google"]
    provider_id: str
    email: str
    name: str
    avatar: str | None = None

    def __post_init__(self):
        self.email = self.email.strip().lower()
