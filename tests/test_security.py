from datetime import timedelta

from utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_password_round_trip():
    hashed = hash_password("secret123", rounds=4)
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong-pass", hashed)


def test_long_passwords_truncated_to_72_bytes():
    hashed = hash_password("a" * 80, rounds=4)
    assert verify_password("a" * 72, hashed)


def test_malformed_hash_does_not_verify():
    assert not verify_password("secret123", "not-a-bcrypt-hash")


def test_token_subject():
    token = create_access_token("42", extra_claims={"role": "admin"})
    assert decode_access_token(token) == "42"


def test_expired_or_garbage_token_rejected():
    expired = create_access_token("42", expires_delta=timedelta(seconds=-1))
    assert decode_access_token(expired) is None
    assert decode_access_token("garbage") is None
