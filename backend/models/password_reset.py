# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""PasswordResetToken ORM model – at most one pending reset per email."""

from sqlalchemy import Column, String, DateTime

from database import Base


class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"

    email = Column(String(255), primary_key=True)
    # hex SHA-256 of the token mailed to the user
    token_hash = Column(String(64), nullable=False)
    # Set explicitly (not server_default) so expiry and throttling can be
    # evaluated without a refresh round-trip.
    created_at = Column(DateTime(timezone=True), nullable=False)
