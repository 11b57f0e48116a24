from __future__ import annotations

from typing import Callable

import eventhub.domain.services as domain_services
from eventhub.application.emails import deliver, verification_email
from eventhub.domain.entities import CodePurpose, User
from eventhub.domain.errors import AlreadyVerified, InvalidOrExpiredCode, UserNotFound
from eventhub.domain.otp import OtpService
from eventhub.domain.ports.email_port import EmailPort
from eventhub.domain.ports.token_issuer import TokenIssuerPort
from eventhub.domain.ports.unit_of_work import UnitOfWorkPort


async def _send_verification_code(
    otp: OtpService, email_port: EmailPort, user: User
) -> None:
    code = otp.generate()
    await otp.issue(user.email, code, CodePurpose.VERIFICATION)
    minutes = int(otp.policy.ttl.total_seconds() // 60)
    await deliver(email_port, verification_email(user.email, user.name, code, minutes))


async def register_user(
    uow: UnitOfWorkPort,
    otp: OtpService,
    email_port: EmailPort,
    *,
    name: str,
    email: str,
    password: str,
    hash_password: Callable[..., str],
) -> User:
    """Create an unverified account and mail it a verification code."""
    normalized_email = domain_services.normalize_email(email)
    password_hash = hash_password(password)

    async with uow as transaction:
        user = await transaction.db_users.create(
            name=name.strip(), email=normalized_email, password_hash=password_hash
        )
        await transaction.commit()

    await _send_verification_code(otp, email_port, user)
    return user


async def verify_email(
    uow: UnitOfWorkPort,
    otp: OtpService,
    tokens: TokenIssuerPort,
    *,
    email: str,
    code: str,
) -> tuple[User, str]:
    normalized_email = domain_services.normalize_email(email)
    if not await otp.verify(normalized_email, code, CodePurpose.VERIFICATION):
        raise InvalidOrExpiredCode()

    async with uow as transaction:
        user = await transaction.db_users.get_by_email(normalized_email)
        if user is None:
            raise UserNotFound()
        if not user.is_verified:
            user.mark_verified()
            await transaction.db_users.set_verified(user.id)
        await transaction.commit()

    token = await tokens.create(user.id)
    return user, token


async def resend_verification_code(
    uow: UnitOfWorkPort,
    otp: OtpService,
    email_port: EmailPort,
    *,
    email: str,
) -> None:
    """Replace any pending verification code with a fresh one."""
    normalized_email = domain_services.normalize_email(email)

    async with uow as transaction:
        user = await transaction.db_users.get_by_email(normalized_email)
    if user is None:
        raise UserNotFound()
    if user.is_verified:
        raise AlreadyVerified()

    await _send_verification_code(otp, email_port, user)
