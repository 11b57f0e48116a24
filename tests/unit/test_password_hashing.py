from eventhub.infrastructure.security.password import hash_password, verify_password


def test_password_hash_and_verify():
    h = hash_password("s3cret", rounds=4)
    assert h.startswith("$2b$") or h.startswith("$2a$")
    assert verify_password("s3cret", h)
    assert not verify_password("wrong", h)


def test_each_hash_is_salted():
    assert hash_password("s3cret", rounds=4) != hash_password("s3cret", rounds=4)


def test_malformed_hash_is_a_mismatch():
    assert verify_password("s3cret", "not-a-bcrypt-hash") is False
