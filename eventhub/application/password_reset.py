from __future__ import annotations

from typing import Callable

import eventhub.domain.services as domain_services
from eventhub.application.emails import deliver, password_reset_email
from eventhub.domain.entities import CodePurpose
from eventhub.domain.errors import InvalidOrExpiredCode, UserNotFound
from eventhub.domain.otp import OtpService
from eventhub.domain.ports.email_port import EmailPort
from eventhub.domain.ports.unit_of_work import UnitOfWorkPort


async def request_password_reset(
    uow: UnitOfWorkPort,
    otp: OtpService,
    email_port: EmailPort,
    *,
    email: str,
) -> None:
    normalized_email = domain_services.normalize_email(email)

    async with uow as transaction:
        user = await transaction.db_users.get_by_email(normalized_email)
    # TODO: answer identically for unknown emails once product signs off on
    # hiding account existence here.
    if user is None:
        raise UserNotFound()

    code = otp.generate()
    await otp.issue(user.email, code, CodePurpose.PASSWORD_RESET)
    minutes = int(otp.policy.ttl.total_seconds() // 60)
    await deliver(email_port, password_reset_email(user.email, user.name, code, minutes))


async def confirm_password_reset(
    uow: UnitOfWorkPort,
    otp: OtpService,
    *,
    email: str,
    code: str,
    new_password: str,
    hash_password: Callable[..., str],
) -> None:
    """
    Swap the password once the reset code checks out.
    No session is issued; the user has to log in with the new password.
    """
    normalized_email = domain_services.normalize_email(email)
    if not await otp.verify(normalized_email, code, CodePurpose.PASSWORD_RESET):
        raise InvalidOrExpiredCode()

    password_hash = hash_password(new_password)
    async with uow as transaction:
        user = await transaction.db_users.get_by_email(normalized_email)
        if user is None:
            raise UserNotFound()
        await transaction.db_users.set_password_hash(user.id, password_hash)
        await transaction.commit()
