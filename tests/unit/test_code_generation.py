from eventhub.domain.services import (
    generate_otp_code,
    normalize_email,
    secure_compare,
)


def test_generate_otp_code_format_and_range():
    for _ in range(200):
        c = generate_otp_code()
        assert len(c) == 6 and c.isdigit(), c
        assert 100000 <= int(c) <= 999999


def test_secure_compare_constant_api():
    assert secure_compare("123456", "123456")
    assert not secure_compare("123456", "123457")
    assert not secure_compare("123456", "12345")


def test_normalize_email_trims_and_lowercases():
    assert normalize_email("  Ann@Example.COM ") == "ann@example.com"
