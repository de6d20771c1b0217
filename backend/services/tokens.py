# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
Bearer token issuer.

Tokens are opaque random strings.  Only their SHA-256 digest is stored, so
a leaked database dump cannot be replayed against the API.  Unlike a JWT a
token can be revoked individually (logout) by deleting its row.
"""

from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from core.config import settings
from core.errors import AuthenticationError
from core.logger import logger
from core.security import generate_token, hash_token
from core.utils import as_utc, utcnow
from models.access_token import AccessToken
from models.user import User

_UNAUTHENTICATED = "Unauthenticated"


def issue_token(
    db: Session,
    user: User,
    name: str = "auth_token",
    scopes: Optional[list[str]] = None,
    ttl: Optional[timedelta] = None,
) -> str:
    """
    Create a token row for *user* and return the plaintext value.

    The plaintext is not recoverable afterwards.  The caller commits.
    """
    plain = generate_token()
    lifetime = ttl or timedelta(minutes=settings.access_token_expire_minutes)
    db.add(
        AccessToken(
            user_id=user.id,
            name=name,
            token_hash=hash_token(plain),
            scopes=scopes or ["*"],
            expires_at=utcnow() + lifetime,
        )
    )
    return plain


def validate_token(db: Session, plain: str) -> AccessToken:
    """
    Resolve a plaintext bearer token to its row, stamping ``last_used_at``.

    Raises :class:`AuthenticationError` for unknown, revoked or expired
    tokens.  Expired rows are deleted on sight.
    """
    token = db.query(AccessToken).filter(AccessToken.token_hash == hash_token(plain)).first()
    if not token:
        raise AuthenticationError(_UNAUTHENTICATED)

    now = utcnow()
    if token.expires_at is not None and as_utc(token.expires_at) <= now:
        logger.info("Expired token %d for user_id=%d removed", token.id, token.user_id)
        db.delete(token)
        db.commit()
        raise AuthenticationError(_UNAUTHENTICATED)

    token.last_used_at = now
    db.commit()
    return token


def revoke_token(db: Session, token: AccessToken) -> None:
    """Delete *token*.  The caller commits."""
    db.delete(token)
