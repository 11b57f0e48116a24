"""
Where a client keeps its session credential.

Two tiers share one contract:

- EphemeralTier lives in process memory and is gone when the client
  process (the "browsing session") ends.
- DurableTier is a JSON file that survives restarts ("remember me").

SessionCustody writes to exactly one tier per login, reads the ephemeral
tier first, and clears both on logout. If both tiers hold a session (a
durable login followed by an ephemeral one without a logout in between),
the ephemeral one wins.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

DEFAULT_SESSION_FILE = Path.home() / ".eventhub" / "session.json"


@dataclass(frozen=True)
class StoredSession:
    token: str
    user: dict[str, Any] = field(default_factory=dict)


class TokenTier(Protocol):
    name: str

    def save(self, session: StoredSession) -> None: ...

    def load(self) -> StoredSession | None: ...

    def clear(self) -> None: ...


class EphemeralTier:
    name = "ephemeral"

    def __init__(self) -> None:
        self._session: StoredSession | None = None

    def save(self, session: StoredSession) -> None:
        self._session = session

    def load(self) -> StoredSession | None:
        return self._session

    def clear(self) -> None:
        self._session = None


class DurableTier:
    name = "durable"

    def __init__(self, path: Path = DEFAULT_SESSION_FILE) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save(self, session: StoredSession) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        # a stale tmp file keeps its old mode through O_CREAT
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(asdict(session), fh)
        os.replace(tmp, self._path)

    def load(self) -> StoredSession | None:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            logger.warning("unreadable session file", extra={"path": str(self._path)})
            return None
        token = raw.get("token") if isinstance(raw, dict) else None
        if not token:
            return None
        return StoredSession(token=token, user=raw.get("user") or {})

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)


class SessionCustody:
    def __init__(
        self,
        ephemeral: TokenTier | None = None,
        durable: TokenTier | None = None,
    ) -> None:
        self.ephemeral = ephemeral or EphemeralTier()
        self.durable = durable or DurableTier()

    def persist(self, token: str, user: dict[str, Any], *, durable: bool) -> None:
        tier = self.durable if durable else self.ephemeral
        tier.save(StoredSession(token=token, user=dict(user)))
        logger.debug("session stored", extra={"tier": tier.name})

    def current(self) -> StoredSession | None:
        return self.ephemeral.load() or self.durable.load()

    def current_token(self) -> str | None:
        session = self.current()
        return session.token if session else None

    def current_user(self) -> dict[str, Any] | None:
        session = self.current()
        return session.user if session else None

    def is_authenticated(self) -> bool:
        return self.current_token() is not None

    def clear(self) -> None:
        self.ephemeral.clear()
        self.durable.clear()
