from eventhub.application.emails import deliver, verification_email
from tests.fakes import FakeEmailDown, FakeEmailOK


def test_verification_email_escapes_name():
    msg = verification_email("a@x.com", "<b>Ann</b>", "123456", 10)
    assert "&lt;b&gt;Ann&lt;/b&gt;" in msg.body
    assert "<strong>123456</strong>" in msg.body
    assert "expire in 10 minutes" in msg.body


async def test_deliver_reports_outcome():
    message = verification_email("a@x.com", "Ann", "123456", 10)

    ok = FakeEmailOK()
    assert await deliver(ok, message) is True
    assert ok.last_code_for("a@x.com") == "123456"

    down = FakeEmailDown()
    assert await deliver(down, message) is False
    assert down.calls == 1
