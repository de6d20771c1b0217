# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""User ORM model."""

from sqlalchemy import Column, Integer, String, Enum, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    # passlib hash string; the salt is embedded in it
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(ROLE_ADMIN, ROLE_CUSTOMER, name="user_role"),
        nullable=False,
        default=ROLE_CUSTOMER,
    )
    # NULL until the signed verification link has been followed
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    # Rotated on every password reset
    remember_token = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    access_tokens = relationship(
        "AccessToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    orders = relationship("Order", back_populates="user", order_by="Order.id")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def has_verified_email(self) -> bool:
        return self.email_verified_at is not None

    def __repr__(self) -> str:
        return f"<User {self.email}>"
