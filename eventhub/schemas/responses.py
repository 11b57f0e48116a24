from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from eventhub.domain.entities import User
from eventhub.infrastructure.email.dev_mailbox import DevEmail


class UserOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="The id of the user")
    name: str
    email: str = Field(..., description="The email of the user")
    role: Literal["USER", "ADMIN"] = "USER"
    is_verified: bool = False
    avatar: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            is_verified=user.is_verified,
            avatar=user.avatar,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class MessageOut(BaseModel):
    message: str


class RegisteredOut(BaseModel):
    user: UserOut
    message: str


class AuthOut(BaseModel):
    user: UserOut
    token: str
    message: str | None = None


class DevOtpOut(BaseModel):
    otp: str | None


class DevEmailOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    to: str
    subject: str
    body: str
    sent_at: datetime

    @classmethod
    def from_email(cls, message: DevEmail) -> "DevEmailOut":
        return cls(
            to=message.to,
            subject=message.subject,
            body=message.body,
            sent_at=message.sent_at,
        )
