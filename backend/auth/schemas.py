# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""Pydantic request / response models for the auth endpoints."""

from datetime import datetime
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, ValidationInfo, field_validator

from core.config import settings
from core.security import password_policy_errors


def _check_email(value: str, deliverable: bool) -> str:
    """Validate syntax (and optionally DNS) and return the lower-cased address."""
    try:
        result = validate_email(value.strip(), check_deliverability=deliverable)
    except EmailNotValidError as exc:
        raise ValueError(str(exc))
    return result.normalized.lower()


def _check_password(value: str) -> str:
    errors = password_policy_errors(value)
    if errors:
        raise ValueError(errors[0])
    return value


# -- Requests --------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def _name_length(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("The name must be at least 3 characters")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v, settings.email_check_deliverability)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _check_password(v)


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(min_length=1)
    password: str
    confirm_password: str

    @field_validator("password")
    @classmethod
    def _password(cls, v: str, info: ValidationInfo) -> str:
        _check_password(v)
        if v == info.data.get("old_password"):
            raise ValueError("The new password must be different from the old password")
        return v

    @field_validator("confirm_password")
    @classmethod
    def _confirm(cls, v: str, info: ValidationInfo) -> str:
        if "password" in info.data and v != info.data["password"]:
            raise ValueError("The password confirmation does not match")
        return v


class ForgotPasswordRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v, settings.email_check_deliverability)


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    email: str
    password: str
    confirm_password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v, False)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("confirm_password")
    @classmethod
    def _confirm(cls, v: str, info: ValidationInfo) -> str:
        if "password" in info.data and v != info.data["password"]:
            raise ValueError("The password confirmation does not match")
        return v


class ResendVerificationRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v, False)


# -- Responses -------------------------------------------------------------


class LoginData(BaseModel):
    id: int
    token_type: str  # always "Bearer"
    token: str
    role: str


class UserInfo(BaseModel):
    """Public view of a user – never carries the hash or remember token."""

    id: int
    name: str
    email: str
    role: str
    email_verified_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
