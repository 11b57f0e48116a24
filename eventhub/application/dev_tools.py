from __future__ import annotations

import logging

from eventhub.domain.entities import CodePurpose
from eventhub.domain.errors import DevModeDisabled
from eventhub.domain.otp import OtpService
from eventhub.infrastructure.email.dev_mailbox import DevEmail, DevMailbox

logger = logging.getLogger(__name__)

# order in which live codes are looked up before falling back to the mailbox
_PEEK_ORDER = (CodePurpose.VERIFICATION, CodePurpose.PASSWORD_RESET)


async def latest_dev_otp(
    otp: OtpService, mailbox: DevMailbox, *, email: str, dev_mode: bool
) -> str | None:
    """
    Latest code for an address: live verification code, then live
    password-reset code, then whatever 6-digit code the last captured email
    to that address carried.
    """
    if not dev_mode:
        logger.warning("dev otp lookup refused outside development mode")
        raise DevModeDisabled()

    for purpose in _PEEK_ORDER:
        code = await otp.peek(email, purpose)
        if code:
            return code

    latest = mailbox.latest_for(email)
    return latest.extract_code() if latest else None


def recent_dev_emails(mailbox: DevMailbox, *, dev_mode: bool) -> list[DevEmail]:
    if not dev_mode:
        raise DevModeDisabled()
    return mailbox.recent()
