# eventhub/domain/services.py
from __future__ import annotations

import hmac
import secrets
from datetime import datetime, timezone

OTP_MIN = 100_000
OTP_SPAN = 900_000


def generate_otp_code() -> str:
    """Uniform 6-digit numeric code in [100000, 999999] from the OS CSPRNG."""
    return str(OTP_MIN + secrets.randbelow(OTP_SPAN))


def secure_compare(a: str, b: str) -> bool:
    """
    Constant-time comparison for secrets.
    Accepts strings; falls back to bytes if needed.
    """
    try:
        return hmac.compare_digest(a, b)
    except TypeError:
        return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def normalize_email(email: str) -> str:
    return email.strip().lower()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_unusable_password() -> str:
    """Random secret for accounts created through a social provider."""
    return secrets.token_urlsafe(32)
