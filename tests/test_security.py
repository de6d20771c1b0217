"""Unit tests for password hashing, the password policy and the rate limiter."""

import pytest

from core.errors import TooManyRequestsError
from core.rate_limiter import RateLimiter
from core.security import (
    generate_token,
    hash_password,
    hash_token,
    password_policy_errors,
    verify_dummy_password,
    verify_password,
)


def test_hash_and_verify_password():
    stored = hash_password("Abc123!@")

    assert stored.startswith("$pbkdf2-sha256$")
    assert "Abc123!@" not in stored
    assert verify_password("Abc123!@", stored) is True
    assert verify_password("abc123!@", stored) is False


def test_verify_password_rejects_malformed_hash():
    assert verify_password("Abc123!@", "not-a-passlib-hash") is False


@pytest.mark.parametrize("password", ["Abc123!@", "xY9#ab", "Pass word 1?", "Pässw0rd!", "ÀBÇ12!é"])
def test_policy_accepts_strong_passwords(password):
    assert password_policy_errors(password) == []


@pytest.mark.parametrize(
    "password, expected",
    [
        ("Ab1!", "Password must be at least 6 characters"),
        ("abc123!@", "Password must contain at least one uppercase and one lowercase letter"),
        ("ABC123!@", "Password must contain at least one uppercase and one lowercase letter"),
        ("Abcdef!@", "Password must contain at least one number"),
        ("Abc12345", "Password must contain at least one symbol"),
        ("Abc123é", "Password must contain at least one symbol"),
        ("ÀBÇ12!É", "Password must contain at least one uppercase and one lowercase letter"),
    ],
)
def test_policy_reports_each_violation(password, expected):
    assert expected in password_policy_errors(password)


def test_accepted_passwords_have_every_character_class():
    for candidate in ["Abc123!@", "Abcdef", "abc1!x", "ABC1!X", "Abc1!", "Zz9$zz", "Abc123é", "Ñandú7x"]:
        if password_policy_errors(candidate):
            continue
        assert len(candidate) >= 6
        assert any(c.islower() for c in candidate)
        assert any(c.isupper() for c in candidate)
        assert any(c.isdigit() for c in candidate)
        assert any(not c.isalnum() for c in candidate)


def test_token_digest_is_deterministic_and_not_the_token():
    token = generate_token()

    assert hash_token(token) == hash_token(token)
    assert hash_token(token) != token
    assert len(hash_token(token)) == 64
    assert generate_token() != token


def test_rate_limiter_blocks_after_limit():
    limiter = RateLimiter()
    limiter.hit("login:1.2.3.4", limit=2, window_seconds=60)
    limiter.hit("login:1.2.3.4", limit=2, window_seconds=60)

    with pytest.raises(TooManyRequestsError):
        limiter.hit("login:1.2.3.4", limit=2, window_seconds=60)

    # other keys have their own window
    limiter.hit("login:5.6.7.8", limit=2, window_seconds=60)


def test_rate_limiter_reset_clears_windows():
    limiter = RateLimiter()
    limiter.hit("k", limit=1, window_seconds=60)
    limiter.reset()
    limiter.hit("k", limit=1, window_seconds=60)


def test_rate_limiter_drops_expired_windows():
    limiter = RateLimiter()
    limiter.hit("login:1.1.1.1", limit=5, window_seconds=0)
    limiter.hit("login:2.2.2.2", limit=5, window_seconds=0)

    # any later hit sweeps out windows that have already closed
    limiter.hit("login:3.3.3.3", limit=5, window_seconds=60)

    assert len(limiter) == 1


def test_rate_limiter_starts_a_new_window_after_expiry():
    limiter = RateLimiter()
    limiter.hit("k", limit=1, window_seconds=0)

    # the previous window has closed, so this is the first hit of a new one
    limiter.hit("k", limit=1, window_seconds=0)


def test_dummy_password_check_never_succeeds():
    assert verify_dummy_password("Abc123!@") is False
    assert verify_dummy_password("") is False
