import pytest

from eventhub.application.dev_tools import latest_dev_otp, recent_dev_emails
from eventhub.application.emails import verification_email
from eventhub.domain.entities import CodePurpose
from eventhub.domain.errors import DevModeDisabled
from eventhub.domain.otp import OtpService
from eventhub.infrastructure.email.dev_mailbox import DevMailbox

EMAIL = "ann@example.com"


@pytest.fixture()
def dev_otp(store, clock):
    return OtpService(store, clock=clock, dev_mode=True)


@pytest.fixture()
def mailbox(clock):
    return DevMailbox(clock=clock)


async def test_refused_outside_dev_mode(otp, mailbox):
    with pytest.raises(DevModeDisabled):
        await latest_dev_otp(otp, mailbox, email=EMAIL, dev_mode=False)
    with pytest.raises(DevModeDisabled):
        recent_dev_emails(mailbox, dev_mode=False)


async def test_live_verification_code_wins(dev_otp, mailbox):
    await dev_otp.issue(EMAIL, "111111", CodePurpose.VERIFICATION)
    await dev_otp.issue(EMAIL, "222222", CodePurpose.PASSWORD_RESET)
    mailbox.record(**vars(verification_email(EMAIL, "Ann", "333333", 10)))

    assert await latest_dev_otp(dev_otp, mailbox, email=EMAIL, dev_mode=True) == "111111"


async def test_falls_back_to_reset_code(dev_otp, mailbox):
    await dev_otp.issue(EMAIL, "222222", CodePurpose.PASSWORD_RESET)

    assert await latest_dev_otp(dev_otp, mailbox, email=EMAIL, dev_mode=True) == "222222"


async def test_falls_back_to_last_captured_email(dev_otp, mailbox, clock):
    await dev_otp.issue(EMAIL, "111111")
    mailbox.record(**vars(verification_email(EMAIL, "Ann", "111111", 10)))
    clock.advance(minutes=11)

    # code expired in the store, the mailbox still has it
    assert await latest_dev_otp(
        dev_otp, mailbox, email=EMAIL.upper(), dev_mode=True
    ) == "111111"


async def test_nothing_known(dev_otp, mailbox):
    assert await latest_dev_otp(dev_otp, mailbox, email=EMAIL, dev_mode=True) is None


def test_recent_emails_newest_first(mailbox):
    mailbox.record(to="a@x.com", subject="first", body="")
    mailbox.record(to="b@x.com", subject="second", body="")

    assert [m.subject for m in recent_dev_emails(mailbox, dev_mode=True)] == [
        "second",
        "first",
    ]
