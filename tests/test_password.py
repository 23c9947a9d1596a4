"""Password hashing tests."""

from gamegauge.auth.password import dummy_verify, hash_password, verify_password


def test_hash_is_not_plaintext():
    hashed = hash_password("password123")
    assert hashed != "password123"
    assert hashed.startswith("$2b$")


def test_same_password_hashes_differently():
    assert hash_password("password123") != hash_password("password123")


def test_verify_roundtrip():
    hashed = hash_password("password123")
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)


def test_verify_against_garbage_hash_is_false():
    assert not verify_password("password123", "not-a-bcrypt-hash")


def test_explicit_rounds_are_used():
    assert hash_password("password123", rounds=5).startswith("$2b$05$")


def test_dummy_verify_returns_nothing():
    assert dummy_verify("whatever") is None
