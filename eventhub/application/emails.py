from __future__ import annotations

import logging
from dataclasses import dataclass
from html import escape

from eventhub.domain.ports.email_port import EmailPort

logger = logging.getLogger(__name__)

_LAYOUT = """\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #333;">{heading}</h2>
  {intro}
  <div style="background-color: #f0f0f0; padding: 15px; border-radius: 5px; text-align: center; font-size: 24px; letter-spacing: 5px; margin: 20px 0;">
    <strong>{code}</strong>
  </div>
  <p>This code will expire in {minutes} minutes. {ignore}</p>
  <p>Best regards,<br>The EventHub Team</p>
</div>
"""


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    body: str


def verification_email(to: str, name: str, code: str, minutes: int) -> OutgoingEmail:
    body = _LAYOUT.format(
        heading=f"Welcome to EventHub, {escape(name)}!",
        intro=(
            "<p>Thank you for registering. To verify your email address, "
            "please use the following verification code:</p>"
        ),
        code=code,
        minutes=minutes,
        ignore="If you didn't request this, please ignore this email.",
    )
    return OutgoingEmail(to=to, subject="EventHub - Verify Your Email", body=body)


def password_reset_email(to: str, name: str, code: str, minutes: int) -> OutgoingEmail:
    body = _LAYOUT.format(
        heading="Password Reset Request",
        intro=(
            f"<p>Hello {escape(name)},</p>"
            "<p>We received a request to reset your password. To complete the "
            "process, please use the following verification code:</p>"
        ),
        code=code,
        minutes=minutes,
        ignore=(
            "If you didn't request a password reset, you can safely ignore this email."
        ),
    )
    return OutgoingEmail(to=to, subject="EventHub - Reset Your Password", body=body)


async def deliver(email_port: EmailPort, message: OutgoingEmail) -> bool:
    """
    Send and report success. A failed delivery does not undo the code that
    was issued; the user can ask for a resend.
    """
    try:
        await email_port.send(to=message.to, subject=message.subject, body=message.body)
    except RuntimeError:
        logger.exception(
            "email delivery failed",
            extra={"to": message.to, "subject": message.subject},
        )
        return False
    return True
