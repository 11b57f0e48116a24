import json

import httpx
import pytest

from eventhub.client.api import AuthApiError, AuthClient
from eventhub.client.custody import DurableTier, EphemeralTier, SessionCustody

USER = {"id": "u1", "name": "Ann", "email": "ann@example.com", "isVerified": True}


class FakeServer:
    """Answers like the /auth API and records what it was sent."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.logout_status = 200
        self.profile_status = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/auth/login":
            body = json.loads(request.content)
            if body["password"] != "pw":
                return httpx.Response(401, json={"detail": "Invalid credentials"})
            return httpx.Response(200, json={"user": USER, "token": "tok-login"})
        if path == "/auth/verify-otp":
            return httpx.Response(
                200,
                json={"user": USER, "token": "tok-otp", "message": "ok"},
            )
        if path == "/auth/profile":
            if self.profile_status != 200:
                return httpx.Response(
                    self.profile_status, json={"detail": "Invalid or expired token"}
                )
            return httpx.Response(200, json=USER)
        if path == "/auth/logout":
            return httpx.Response(self.logout_status, json={"message": "Logged out"})
        if path.startswith("/auth/resend-otp/"):
            return httpx.Response(500, text="upstream exploded")
        return httpx.Response(200, json={"message": "ok"})


@pytest.fixture()
def server():
    return FakeServer()


@pytest.fixture()
async def api(server, tmp_path):
    custody = SessionCustody(EphemeralTier(), DurableTier(tmp_path / "session.json"))
    client = httpx.AsyncClient(transport=httpx.MockTransport(server))
    api = AuthClient("http://api.test/", custody=custody, client=client)
    yield api
    await api.aclose()
    await client.aclose()


async def test_login_without_remember_me_stays_ephemeral(api, server):
    await api.login("ann@example.com", "pw")

    assert json.loads(server.requests[-1].content)["rememberMe"] is False
    assert api.custody.ephemeral.load().token == "tok-login"
    assert api.custody.durable.load() is None


async def test_login_with_remember_me_is_durable(api):
    await api.login("ann@example.com", "pw", remember_me=True)

    assert api.custody.durable.load().token == "tok-login"
    assert api.custody.ephemeral.load() is None
    assert api.custody.current_user() == USER


async def test_failed_login_raises_with_server_detail(api):
    with pytest.raises(AuthApiError) as ei:
        await api.login("ann@example.com", "bad")

    assert ei.value.status_code == 401
    assert ei.value.detail == "Invalid credentials"
    assert not api.custody.is_authenticated()


async def test_non_json_error_body_becomes_detail(api):
    with pytest.raises(AuthApiError) as ei:
        await api.resend_otp("ann@example.com")
    assert ei.value.status_code == 500
    assert ei.value.detail == "upstream exploded"


async def test_verify_otp_keeps_token_ephemeral(api, server):
    await api.verify_otp("ann@example.com", "123456")

    assert json.loads(server.requests[-1].content) == {
        "email": "ann@example.com",
        "otpCode": "123456",
    }
    assert api.custody.ephemeral.load().token == "tok-otp"
    assert api.custody.durable.load() is None


async def test_profile_sends_bearer_token(api, server):
    await api.login("ann@example.com", "pw")

    assert await api.profile() == USER
    assert server.requests[-1].headers["Authorization"] == "Bearer tok-login"


async def test_profile_without_session_never_calls_server(api, server):
    with pytest.raises(AuthApiError) as ei:
        await api.profile()
    assert ei.value.status_code == 401
    assert server.requests == []


async def test_reset_password_payload(api, server):
    await api.reset_password("ann@example.com", "123456", "new-pass-1")

    assert server.requests[-1].url.path == "/auth/reset-password"
    assert json.loads(server.requests[-1].content) == {
        "email": "ann@example.com",
        "otpCode": "123456",
        "newPassword": "new-pass-1",
    }


async def test_logout_clears_custody_even_when_server_fails(api, server):
    await api.login("ann@example.com", "pw", remember_me=True)
    server.logout_status = 503

    await api.logout()

    assert server.requests[-1].url.path == "/auth/logout"
    assert not api.custody.is_authenticated()
    assert api.custody.durable.load() is None


async def test_transport_error_maps_to_status_zero(tmp_path):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    api = AuthClient(
        "http://api.test",
        custody=SessionCustody(durable=DurableTier(tmp_path / "s.json")),
        client=client,
    )
    with pytest.raises(AuthApiError) as ei:
        await api.forgot_password("ann@example.com")
    assert ei.value.status_code == 0
    await client.aclose()


async def test_complete_oauth_stores_token_with_profile(api, server):
    data = await api.complete_oauth(
        "http://front.test/auth/callback?token=tok-gh&provider=github&remember=true"
    )

    assert data == {"token": "tok-gh", "user": USER}
    assert server.requests[-1].url.path == "/auth/profile"
    assert server.requests[-1].headers["Authorization"] == "Bearer tok-gh"
    assert api.custody.durable.load().token == "tok-gh"
    assert api.custody.ephemeral.load() is None
    assert api.custody.current_user() == USER


async def test_complete_oauth_without_remember_stays_ephemeral(api):
    await api.complete_oauth(
        "http://front.test/auth/callback?token=tok-g&provider=google&remember=false"
    )

    assert api.custody.ephemeral.load().token == "tok-g"
    assert api.custody.ephemeral.load().user == USER
    assert api.custody.durable.load() is None


async def test_complete_oauth_failed_profile_leaves_no_session(api, server):
    server.profile_status = 401

    with pytest.raises(AuthApiError) as ei:
        await api.complete_oauth(
            "http://front.test/auth/callback?token=tok-gh&provider=github&remember=true"
        )

    assert ei.value.status_code == 401
    assert api.custody.ephemeral.load() is None
    assert api.custody.durable.load() is None


async def test_complete_oauth_error_redirect(api, server):
    with pytest.raises(AuthApiError) as ei:
        await api.complete_oauth(
            "http://front.test/auth/callback?error=auth_failed"
            "&error_description=Invalid+or+expired+login+attempt&provider=github"
        )
    assert ei.value.detail == "Invalid or expired login attempt"
    assert not api.custody.is_authenticated()
    assert server.requests == []
