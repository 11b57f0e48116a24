import pytest

from eventhub.domain.otp import OtpService
from eventhub.infrastructure.memory.code_store import InMemoryCodeStore
from tests.fakes import FakeClock, FakeEmailOK, FakeSessions, FakeUoW


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store():
    return InMemoryCodeStore()


@pytest.fixture()
def otp(store, clock):
    return OtpService(store, clock=clock)


@pytest.fixture()
def uow():
    return FakeUoW()


@pytest.fixture()
def email_ok():
    return FakeEmailOK()


@pytest.fixture()
def sessions():
    return FakeSessions()


@pytest.fixture()
def hash_password_stub():
    return lambda p, **_: "hashed-" + p


@pytest.fixture()
def verify_password_stub():
    return lambda plain, hashed: hashed == "hashed-" + plain


@pytest.fixture(autouse=True)
def patch_code(monkeypatch):
    """
    Make issued codes deterministic in all tests.
    You can override in a specific test by re-monkeypatching.
    """
    from eventhub.domain import services as domain_services

    monkeypatch.setattr(domain_services, "generate_otp_code", lambda: "123456")
    yield
