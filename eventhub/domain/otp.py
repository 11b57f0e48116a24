from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

import eventhub.domain.services as domain_services
from eventhub.domain.entities import CodePurpose, CodeRecord
from eventhub.domain.errors import DevModeDisabled
from eventhub.domain.ports.code_store import CodeStorePort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OtpPolicy:
    ttl: timedelta = timedelta(minutes=10)
    max_attempts: int = 5
    lockout: timedelta = timedelta(minutes=15)

    @classmethod
    def from_seconds(
        cls, ttl_seconds: int, max_attempts: int, lockout_seconds: int
    ) -> "OtpPolicy":
        return cls(
            ttl=timedelta(seconds=ttl_seconds),
            max_attempts=max_attempts,
            lockout=timedelta(seconds=lockout_seconds),
        )


class OtpService:
    """
    Issues and checks one-time codes, one live code per (email, purpose).

    Expected failures never raise: `verify` answers with a bool and callers
    decide what to tell the user. Every read-modify-write happens under the
    store's per-key lock, so concurrent verifications of the same key are
    serialized and the attempts counter cannot be lost.
    """

    def __init__(
        self,
        store: CodeStorePort,
        *,
        policy: OtpPolicy | None = None,
        clock: Callable[[], datetime] = domain_services.utcnow,
        dev_mode: bool = False,
    ) -> None:
        self._store = store
        self._policy = policy or OtpPolicy()
        self._clock = clock
        self._dev_mode = dev_mode

    @property
    def policy(self) -> OtpPolicy:
        return self._policy

    def generate(self) -> str:
        return domain_services.generate_otp_code()

    async def issue(
        self, email: str, code: str, purpose: CodePurpose = CodePurpose.VERIFICATION
    ) -> CodeRecord:
        """Store `code` for the pair, silently replacing any previous one."""
        normalized_email = domain_services.normalize_email(email)
        now = self._clock()
        record = CodeRecord(
            email=normalized_email,
            purpose=purpose,
            code=code,
            issued_at=now,
            expires_at=now + self._policy.ttl,
        )
        async with self._store.locked(normalized_email, purpose):
            await self._store.put(record)

        logger.info(
            "otp issued",
            extra={
                "email": normalized_email,
                "purpose": purpose.value,
                "expires_at": record.expires_at.isoformat(),
            },
        )
        return record

    async def peek(
        self, email: str, purpose: CodePurpose = CodePurpose.VERIFICATION
    ) -> str | None:
        """Current code without consuming it. Development only."""
        if not self._dev_mode:
            logger.warning("otp peek refused outside development mode")
            raise DevModeDisabled()

        normalized_email = domain_services.normalize_email(email)
        async with self._store.locked(normalized_email, purpose):
            record = await self._store.get(normalized_email, purpose)
            if record is None:
                return None
            if record.is_expired(self._clock()):
                await self._store.delete(normalized_email, purpose)
                return None
            return record.code

    async def verify(
        self, email: str, code: str, purpose: CodePurpose = CodePurpose.VERIFICATION
    ) -> bool:
        normalized_email = domain_services.normalize_email(email)
        log_ctx = {"email": normalized_email, "purpose": purpose.value}

        async with self._store.locked(normalized_email, purpose):
            record = await self._store.get(normalized_email, purpose)
            if record is None:
                return False

            now = self._clock()
            if record.is_expired(now):
                await self._store.delete(normalized_email, purpose)
                logger.info("otp expired", extra=log_ctx)
                return False

            if (
                record.attempts >= self._policy.max_attempts
                and record.last_attempt_at is not None
            ):
                if now < record.last_attempt_at + self._policy.lockout:
                    logger.warning("otp locked out", extra=log_ctx)
                    return False
                # lockout lapsed: fresh attempts, same code and expiry
                record.attempts = 0

            record.last_attempt_at = now
            record.attempts += 1

            if domain_services.secure_compare(record.code, code):
                await self._store.delete(normalized_email, purpose)
                logger.info("otp verified", extra=log_ctx)
                return True

            await self._store.put(record)
            logger.warning(
                "otp mismatch",
                extra={
                    **log_ctx,
                    "attempts": record.attempts,
                    "max_attempts": self._policy.max_attempts,
                },
            )
            return False
