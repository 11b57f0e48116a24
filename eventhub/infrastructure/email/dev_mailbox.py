from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from eventhub.domain import services as domain_services
from eventhub.domain.ports.email_port import EmailPort

logger = logging.getLogger(__name__)

_CODE_IN_BODY = re.compile(r"<strong>(\d{6})</strong>")


@dataclass(frozen=True)
class DevEmail:
    to: str
    subject: str
    body: str
    sent_at: datetime

    def extract_code(self) -> str | None:
        match = _CODE_IN_BODY.search(self.body)
        return match.group(1) if match else None


class DevMailbox:
    """The most recent outgoing emails, newest first. Development only."""

    def __init__(
        self,
        *,
        max_messages: int = 50,
        clock: Callable[[], datetime] = domain_services.utcnow,
    ) -> None:
        self._messages: deque[DevEmail] = deque(maxlen=max_messages)
        self._clock = clock

    def record(self, *, to: str, subject: str, body: str) -> DevEmail:
        message = DevEmail(to=to, subject=subject, body=body, sent_at=self._clock())
        self._messages.appendleft(message)
        return message

    def latest_for(self, address: str) -> DevEmail | None:
        wanted = domain_services.normalize_email(address)
        for message in self._messages:
            if domain_services.normalize_email(message.to) == wanted:
                return message
        return None

    def recent(self) -> list[DevEmail]:
        return list(self._messages)


class DevMailboxEmailAdapter(EmailPort):
    """Records mail in a DevMailbox instead of relaying it."""

    def __init__(self, mailbox: DevMailbox) -> None:
        self._mailbox = mailbox

    async def send(
        self,
        *,
        to: str,
        subject: str,
        body: str,
        idempotency_key: str | None = None,
    ) -> None:
        self._mailbox.record(to=to, subject=subject, body=body)
        logger.info("email captured (dev mode)", extra={"to": to, "subject": subject})

    async def aclose(self) -> None:
        return None
