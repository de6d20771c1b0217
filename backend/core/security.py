# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
Central security module.  All cryptographic primitives and auth guards live
here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. Password policy                          (shared by every schema)
3. Token digests                            (SHA-256 of opaque secrets)
4. FastAPI dependency guards                (get_auth_context, get_current_user,
                                             require_admin)
"""

import hashlib
import secrets
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from sqlalchemy.orm import Session

from core.config import settings
from core.errors import AuthorizationError
from database import get_db
from models.access_token import AccessToken
from models.user import User

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with PBKDF2-SHA256.  The salt is embedded in
    the returned passlib hash string.
    """
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time verification of a plaintext password against a
    pbkdf2_sha256 hash produced by :func:`hash_password`.
    """
    try:
        return _pbkdf2.verify(plain, stored_hash)
    except ValueError:
        # malformed / foreign hash string
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password(secrets.token_urlsafe(16))


def verify_dummy_password(plain: str) -> bool:
    """
    Spend the same hashing work as :func:`verify_password` when there is no
    stored hash to check, so a missing account answers as slowly as a wrong
    password.  Always returns False.
    """
    verify_password(plain, _dummy_hash())
    return False


# ---------------------------------------------------------------------------
# 2.  Password policy
# ---------------------------------------------------------------------------

PASSWORD_MIN_LENGTH = 6


def password_policy_errors(pw: str) -> list[str]:
    """
    Return every policy violation for *pw* (empty list when acceptable).

    Policy: >= 6 chars, at least one lowercase, one uppercase, one digit and
    one symbol.  Character classes are Unicode-aware, so ``é`` is a
    lowercase letter and never counts as a symbol.
    """
    errors = []
    if len(pw) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if not any(ch.islower() for ch in pw) or not any(ch.isupper() for ch in pw):
        errors.append("Password must contain at least one uppercase and one lowercase letter")
    if not any(ch.isdigit() for ch in pw):
        errors.append("Password must contain at least one number")
    # punctuation, symbols and separators – anything that is not a letter or number
    if not any(not ch.isalnum() for ch in pw):
        errors.append("Password must contain at least one symbol")
    return errors


# ---------------------------------------------------------------------------
# 3.  Opaque token helpers
# ---------------------------------------------------------------------------


def generate_token(nbytes: int = 40) -> str:
    return secrets.token_urlsafe(nbytes)


def hash_token(plain: str) -> str:
    """Digest stored in place of an opaque token.  Deterministic so it can be looked up."""
    return hashlib.sha256(plain.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# 4.  FastAPI dependency guards
# ---------------------------------------------------------------------------

# The tokenUrl here is only used by the auto-generated OpenAPI docs;
# the actual login endpoint is POST /login and takes a JSON body.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/login")


@dataclass
class AuthContext:
    """Request-scoped identity: who is calling, and with which token."""

    user: User
    token: AccessToken


def get_auth_context(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> AuthContext:
    """
    Dependency: resolve the bearer token to its row and owner.

    Raises 401 if the token is unknown, revoked or expired.
    """
    # Lazy import to avoid circular dependency at module load time
    from services.tokens import validate_token  # noqa: E402

    access_token = validate_token(db, token)
    return AuthContext(user=access_token.user, token=access_token)


def get_current_user(ctx: AuthContext = Depends(get_auth_context)):
    """Dependency: the authenticated User ORM instance."""
    return ctx.user


def require_admin(current_user=Depends(get_current_user)):
    """
    Dependency: wraps :func:`get_current_user` and additionally asserts
    ``role == 'admin'``.  Raises 403 otherwise.
    """
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required")
    return current_user


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request) -> Optional[str]:
    """
    Extract the client IP address from the request.

    X-Forwarded-For is only honoured when the direct peer is listed in
    ``settings.trusted_proxies``; otherwise any client could pick its own
    address and dodge the per-IP rate limit.
    """
    peer = request.client.host if request.client else None

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and peer in settings.trusted_proxies:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        return forwarded.split(",")[0].strip()

    return peer

