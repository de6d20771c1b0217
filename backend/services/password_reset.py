# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
Password reset broker.

Flow
----
1. :func:`send_reset_link` stores a fresh token digest for the email
   (replacing any earlier one) and mails the plaintext token.
2. :func:`reset` checks the pair (email, token), runs the caller's
   ``on_reset`` callback to swap the password, and deletes the token so it
   cannot be used twice.

Both return a :class:`ResetStatus`; its value is the message shown to the
client.
"""

import hmac
from datetime import timedelta
from enum import Enum
from typing import Callable

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from core.config import settings
from core.logger import logger
from core.security import generate_token, hash_token
from core.utils import as_utc, utcnow
from models.password_reset import PasswordResetToken
from models.user import User
from services import notifications


class ResetStatus(Enum):
    RESET_LINK_SENT = "We have emailed your password reset link."
    PASSWORD_RESET = "Your password has been reset."
    INVALID_USER = "We can't find a user with that email address."
    INVALID_TOKEN = "This password reset token is invalid."
    EXPIRED_TOKEN = "This password reset token has expired."
    RESET_THROTTLED = "Please wait before retrying."

    @property
    def message(self) -> str:
        return self.value


def _find_user(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()


def _is_expired(record: PasswordResetToken) -> bool:
    expires_at = as_utc(record.created_at) + timedelta(minutes=settings.password_reset_expire_minutes)
    return expires_at <= utcnow()


def _recently_created(record: PasswordResetToken) -> bool:
    window = timedelta(seconds=settings.password_reset_throttle_seconds)
    return as_utc(record.created_at) + window > utcnow()


def send_reset_link(db: Session, email: str, tasks: BackgroundTasks) -> ResetStatus:
    """Issue a reset token for *email* and queue the email carrying it."""
    user = _find_user(db, email)
    if not user:
        return ResetStatus.INVALID_USER

    record = db.get(PasswordResetToken, email)
    if record and _recently_created(record):
        return ResetStatus.RESET_THROTTLED

    plain = generate_token(48)
    if record:
        record.token_hash = hash_token(plain)
        record.created_at = utcnow()
    else:
        db.add(PasswordResetToken(email=email, token_hash=hash_token(plain), created_at=utcnow()))
    db.commit()

    notifications.send_reset_link(user, plain, tasks)
    logger.info("Password reset link issued for user_id=%d", user.id)
    return ResetStatus.RESET_LINK_SENT


def reset(
    db: Session,
    email: str,
    token: str,
    password: str,
    on_reset: Callable[[User, str], None],
) -> ResetStatus:
    """
    Consume the reset token for *email*.  On success ``on_reset(user,
    password)`` is called before the token is deleted and the session is
    committed, so the password swap and the token deletion land together.
    """
    user = _find_user(db, email)
    if not user:
        return ResetStatus.INVALID_USER

    record = db.get(PasswordResetToken, email)
    if not record:
        return ResetStatus.INVALID_TOKEN

    if _is_expired(record):
        db.delete(record)
        db.commit()
        return ResetStatus.EXPIRED_TOKEN

    if not hmac.compare_digest(record.token_hash, hash_token(token)):
        return ResetStatus.INVALID_TOKEN

    on_reset(user, password)
    db.delete(record)
    db.commit()
    logger.info("Password reset completed for user_id=%d", user.id)
    return ResetStatus.PASSWORD_RESET
