from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from eventhub.domain.otp import OtpPolicy
from eventhub.infrastructure.email.dev_mailbox import DevMailbox
from eventhub.main import create_app
from eventhub.presentation.dependencies import (
    get_clock,
    get_dev_mailbox,
    get_dev_mode,
    get_email_port,
    get_frontend_url,
    get_hash_password,
    get_oauth_states,
    get_otp_policy,
    get_sessions,
    get_uow,
    get_verify_password,
)
from tests.fakes import FakeClock, FakeEmailOK, FakeOAuthStates, FakeSessions, FakeUoW


class Deps:
    """Handles on the fakes wired into the app, plus knobs tests can flip."""

    def __init__(self):
        self.uow = FakeUoW()
        self.clock = FakeClock()
        self.email = FakeEmailOK()
        self.sessions = FakeSessions()
        self.oauth_states = FakeOAuthStates()
        self.mailbox = DevMailbox(clock=self.clock)
        self.dev_mode = False
        self.policy = OtpPolicy()

    @property
    def users(self):
        return self.uow.db_users


@pytest.fixture()
def app_and_deps():
    app = create_app()
    deps = Deps()

    app.dependency_overrides[get_uow] = lambda: deps.uow
    app.dependency_overrides[get_clock] = lambda: deps.clock
    app.dependency_overrides[get_email_port] = lambda: deps.email
    app.dependency_overrides[get_sessions] = lambda: deps.sessions
    app.dependency_overrides[get_oauth_states] = lambda: deps.oauth_states
    app.dependency_overrides[get_dev_mailbox] = lambda: deps.mailbox
    app.dependency_overrides[get_dev_mode] = lambda: deps.dev_mode
    app.dependency_overrides[get_otp_policy] = lambda: deps.policy
    app.dependency_overrides[get_frontend_url] = lambda: "http://front.test"
    app.dependency_overrides[get_hash_password] = lambda: (
        lambda plain, **_: "hashed-" + plain
    )
    app.dependency_overrides[get_verify_password] = lambda: (
        lambda plain, hashed: hashed == "hashed-" + plain
    )

    try:
        yield app, deps
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def deps(app_and_deps):
    _, deps = app_and_deps
    return deps


@pytest.fixture()
def client(app_and_deps):
    app, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def long_lived_codes(deps):
    """Codes that outlive the lockout window."""
    deps.policy = OtpPolicy(ttl=timedelta(minutes=30))
    return deps.policy
