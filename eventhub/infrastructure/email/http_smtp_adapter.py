from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx

from eventhub.domain.ports.email_port import EmailPort

logger = logging.getLogger(__name__)


class HttpSmtpEmailAdapter(EmailPort):
    """Relays mail through an HTTP-fronted SMTP service (POST {base_url}/send)."""

    def __init__(
        self,
        base_url: str,
        *,
        sender: str = "EventHub <no-reply@eventhub.local>",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        send_path: str = "/send",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._send_path = send_path if send_path.startswith("/") else f"/{send_path}"
        self._sender = sender
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def send(
        self,
        *,
        to: str,
        subject: str,
        body: str,
        idempotency_key: str | None = None,
    ) -> None:
        headers: Dict[str, str] = {}
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key

        url = f"{self._base_url}{self._send_path}"
        payload = {"from": self._sender, "to": to, "subject": subject, "body": body}

        try:
            resp = await self._client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise RuntimeError(f"SMTP HTTP error: {e}") from e
        if not resp.is_success:
            raise RuntimeError(f"SMTP responded {resp.status_code}: {resp.text[:200]}")
        logger.info("email relayed", extra={"to": to, "subject": subject})

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
