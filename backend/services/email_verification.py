# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
Signed email-verification links.

The ``signature`` query parameter is an HS256 JWT binding the user id, a
digest of the address the link was sent to, and an expiry.  Changing the
email or tampering with any part of the link invalidates it.
"""

import hashlib
import hmac
from datetime import timedelta
from typing import Optional
from urllib.parse import urlencode

import jwt as _jwt  # PyJWT
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import AuthenticationError, NotFoundError
from core.logger import logger
from core.utils import absolute_url, utcnow
from models.audit_log import AuditLog
from models.user import User

_PURPOSE = "verify_email"
INVALID_LINK = "Invalid or expired verification link"


def _email_digest(email: str) -> str:
    return hashlib.sha256(email.lower().encode("utf-8")).hexdigest()


def is_verified(user: User) -> bool:
    return user.has_verified_email()


def issue_link(user: User) -> str:
    """Return an absolute, signed verification URL for *user*."""
    expire = utcnow() + timedelta(minutes=settings.email_verification_expire_minutes)
    signature = _jwt.encode(
        {
            "sub": str(user.id),
            "hash": _email_digest(user.email),
            "purpose": _PURPOSE,
            "exp": expire,
        },
        settings.secret_key,
        algorithm="HS256",
    )
    query = urlencode({"signature": signature})
    return absolute_url(settings.app_url, f"/verify-email/{user.id}?{query}")


def verify(db: Session, user_id: int, signature: str, request_ip: Optional[str] = None) -> User:
    """
    Check *signature* for *user_id* and mark the account verified.

    Idempotent: an already verified account is returned untouched.
    Raises 401 for a bad / expired signature and 404 for an unknown user.
    """
    try:
        payload = _jwt.decode(signature, settings.secret_key, algorithms=["HS256"])
    except _jwt.InvalidTokenError:
        raise AuthenticationError(INVALID_LINK)

    if payload.get("purpose") != _PURPOSE or payload.get("sub") != str(user_id):
        raise AuthenticationError(INVALID_LINK)

    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    if not hmac.compare_digest(str(payload.get("hash", "")), _email_digest(user.email)):
        raise AuthenticationError(INVALID_LINK)

    if not is_verified(user):
        user.email_verified_at = utcnow()
        db.add(AuditLog(user_id=user.id, action="verify_email", request_ip=request_ip))
        db.commit()
        logger.info("Email verified for user_id=%d", user.id)

    return user
