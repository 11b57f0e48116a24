from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import parse_qs, urlsplit

import httpx

from eventhub.client.custody import SessionCustody

logger = logging.getLogger(__name__)


class AuthApiError(RuntimeError):
    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class AuthClient:
    """
    Async client for the /auth API that keeps the issued token in a
    SessionCustody. Password logins go to the durable tier only when
    remember_me is set; codes verified after sign-up stay ephemeral.
    """

    def __init__(
        self,
        base_url: str,
        *,
        custody: SessionCustody | None = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self.custody = custody or SessionCustody()
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def _request(
        self, method: str, path: str, *, auth: bool = False, **kwargs: Any
    ) -> Any:
        headers: dict[str, str] = kwargs.pop("headers", {})
        if auth:
            token = self.custody.current_token()
            if not token:
                raise AuthApiError(401, "not logged in")
            headers["Authorization"] = f"Bearer {token}"

        try:
            resp = await self._client.request(
                method, f"{self._base_url}{path}", headers=headers, **kwargs
            )
        except httpx.HTTPError as e:
            raise AuthApiError(0, f"transport error: {e}") from e

        if not resp.is_success:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            raise AuthApiError(resp.status_code, str(detail)[:200])
        return resp.json()

    async def register(self, name: str, email: str, password: str) -> dict:
        return await self._request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password},
        )

    async def login(self, email: str, password: str, *, remember_me: bool = False) -> dict:
        data = await self._request(
            "POST",
            "/auth/login",
            json={"email": email, "password": password, "rememberMe": remember_me},
        )
        self.custody.persist(data["token"], data["user"], durable=remember_me)
        return data

    async def verify_otp(self, email: str, otp_code: str) -> dict:
        data = await self._request(
            "POST", "/auth/verify-otp", json={"email": email, "otpCode": otp_code}
        )
        if data.get("token"):
            self.custody.persist(data["token"], data["user"], durable=False)
        return data

    async def resend_otp(self, email: str) -> dict:
        return await self._request("GET", f"/auth/resend-otp/{email}")

    async def forgot_password(self, email: str) -> dict:
        return await self._request("POST", "/auth/forgot-password", json={"email": email})

    async def reset_password(self, email: str, otp_code: str, new_password: str) -> dict:
        return await self._request(
            "POST",
            "/auth/reset-password",
            json={"email": email, "otpCode": otp_code, "newPassword": new_password},
        )

    async def profile(self) -> dict:
        return await self._request("GET", "/auth/profile", auth=True)

    async def complete_oauth(self, callback_url: str) -> dict:
        """
        Take the frontend callback URL the OAuth flow redirected to, keep
        its token in the tier its remember flag selects, then fetch the
        profile and store it next to the token. A failed profile fetch
        leaves no session behind.
        """
        params = parse_qs(urlsplit(callback_url).query)
        if "error" in params:
            detail = params.get("error_description", params["error"])[0]
            raise AuthApiError(401, detail)
        token = params.get("token", [""])[0]
        if not token:
            raise AuthApiError(401, "callback carried no token")
        remember = params.get("remember", ["false"])[0] == "true"
        self.custody.persist(token, {}, durable=remember)

        try:
            user = await self.profile()
        except AuthApiError:
            self.custody.clear()
            raise
        self.custody.persist(token, user, durable=remember)
        return {"token": token, "user": user}

    async def logout(self) -> None:
        """Revoke server-side when possible; local custody is always wiped."""
        try:
            if self.custody.current_token():
                await self._request("POST", "/auth/logout", auth=True)
        except AuthApiError as e:
            logger.warning("server logout failed", extra={"status": e.status_code})
        finally:
            self.custody.clear()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
