"""Tests for the forgot-password / reset-password flow."""

from datetime import timedelta

from fastapi import BackgroundTasks

from core.config import settings
from core.security import verify_password
from core.utils import utcnow
from models.password_reset import PasswordResetToken
from models.user import User
from services import password_reset
from services.password_reset import ResetStatus

from helpers import PASSWORD, login, query_param

GENERIC = "If the email is registered, a password reset link has been sent to it"


def _forgot(client, email="alice@example.com"):
    return client.post("/forgot-password", json={"email": email})


def _reset(client, token, password="NewPass9#", confirm=None, email="alice@example.com"):
    return client.post(
        "/reset-password",
        json={
            "token": token,
            "email": email,
            "password": password,
            "confirm_password": confirm or password,
        },
    )


def test_forgot_password_unknown_email_looks_like_success(client, db, outbox):
    resp = _forgot(client, "nobody@example.com")

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": GENERIC, "data": None}
    assert db.query(PasswordResetToken).count() == 0
    assert outbox == []


def test_forgot_password_known_email_mails_token(client, db, make_user, outbox):
    make_user()

    resp = _forgot(client)

    assert resp.status_code == 200
    assert resp.json()["message"] == GENERIC
    assert len(outbox) == 1
    mail = outbox[0]
    assert mail["to"] == "alice@example.com"
    assert mail["text"].startswith("Reset your password: http://shop.test/reset-password?")
    token = query_param(mail, "token")
    record = db.get(PasswordResetToken, "alice@example.com")
    assert record is not None
    assert record.token_hash != token


def test_forgot_password_validates_email(client):
    resp = _forgot(client, "not-an-email")

    assert resp.status_code == 422
    assert "email" in resp.json()["data"]


def test_reset_password_swaps_hash_and_rotates_remember_token(client, db, make_user, outbox):
    make_user()
    _forgot(client)
    token = query_param(outbox[0], "token")

    resp = _reset(client, token)

    assert resp.status_code == 200
    assert resp.json()["message"] == "Your password has been reset."
    db.expire_all()
    user = db.query(User).filter(User.email == "alice@example.com").one()
    assert verify_password("NewPass9#", user.password_hash)
    assert user.remember_token != "initial"
    assert db.get(PasswordResetToken, "alice@example.com") is None
    assert outbox[-1]["subject"] == "Your password was changed"
    login(client, "alice@example.com", "NewPass9#")


def test_reset_token_is_single_use(client, make_user, outbox):
    make_user()
    _forgot(client)
    token = query_param(outbox[0], "token")

    assert _reset(client, token).status_code == 200
    second = _reset(client, token, password="Other9#x")

    assert second.status_code == 400
    assert second.json() == {"success": False, "message": "This password reset token is invalid."}


def test_reset_with_wrong_token(client, make_user, outbox):
    make_user()
    _forgot(client)

    resp = _reset(client, "not-the-token")

    assert resp.status_code == 400
    assert resp.json()["message"] == "This password reset token is invalid."
    login(client, "alice@example.com", PASSWORD)


def test_reset_with_expired_token(client, db, make_user, outbox):
    make_user()
    _forgot(client)
    token = query_param(outbox[0], "token")
    record = db.get(PasswordResetToken, "alice@example.com")
    record.created_at = utcnow() - timedelta(minutes=settings.password_reset_expire_minutes + 1)
    db.commit()

    resp = _reset(client, token)

    assert resp.status_code == 400
    assert resp.json()["message"] == "This password reset token has expired."
    db.expire_all()
    assert db.get(PasswordResetToken, "alice@example.com") is None


def test_reset_for_unknown_user(client):
    resp = _reset(client, "whatever", email="nobody@example.com")

    assert resp.status_code == 400
    assert resp.json()["message"] == "We can't find a user with that email address."


def test_reset_validates_password_and_confirmation(client):
    weak = _reset(client, "tok", password="weakpass")
    mismatch = _reset(client, "tok", password="NewPass9#", confirm="NewPass9$")

    assert weak.status_code == 422
    assert "password" in weak.json()["data"]
    assert mismatch.status_code == 422
    assert mismatch.json()["data"]["confirm_password"] == ["The password confirmation does not match"]


def test_second_request_inside_throttle_window_keeps_first_token(client, db, make_user, outbox):
    make_user()
    _forgot(client)
    first_hash = db.get(PasswordResetToken, "alice@example.com").token_hash

    resp = _forgot(client)

    assert resp.status_code == 200
    assert resp.json()["message"] == GENERIC
    assert len(outbox) == 1
    db.expire_all()
    assert db.get(PasswordResetToken, "alice@example.com").token_hash == first_hash


def test_new_request_after_throttle_replaces_prior_token(client, db, make_user, outbox):
    make_user()
    _forgot(client)
    old_token = query_param(outbox[0], "token")
    record = db.get(PasswordResetToken, "alice@example.com")
    record.created_at = utcnow() - timedelta(seconds=settings.password_reset_throttle_seconds + 1)
    db.commit()

    _forgot(client)

    assert len(outbox) == 2
    new_token = query_param(outbox[1], "token")
    assert new_token != old_token
    assert _reset(client, old_token).status_code == 400
    assert _reset(client, new_token).status_code == 200


def test_broker_statuses(db, make_user):
    make_user()
    tasks = BackgroundTasks()
    calls = []

    def _on_reset(user, password):
        calls.append((user.email, password))

    assert password_reset.send_reset_link(db, "nobody@example.com", tasks) is ResetStatus.INVALID_USER
    assert password_reset.send_reset_link(db, "alice@example.com", tasks) is ResetStatus.RESET_LINK_SENT
    assert password_reset.send_reset_link(db, "alice@example.com", tasks) is ResetStatus.RESET_THROTTLED

    token = query_param({"text": tasks.tasks[0].args[3]}, "token")
    assert password_reset.reset(db, "alice@example.com", token, "NewPass9#", _on_reset) is ResetStatus.PASSWORD_RESET
    assert password_reset.reset(db, "alice@example.com", token, "NewPass9#", _on_reset) is ResetStatus.INVALID_TOKEN
    assert calls == [("alice@example.com", "NewPass9#")]
