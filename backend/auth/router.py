# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – login, registration, logout, password change / reset and
email verification.

Security notes
--------------
* Login returns the *same* error message whether the email doesn't exist or
  the password is wrong.  The password is checked before any token is
  minted, so a failed login never leaves a live token behind.
* An account cannot log in until its email has been verified.
* forgot-password answers identically whether or not the address is
  registered, so it cannot be used to enumerate accounts.
* change-password verifies the old password before accepting the new one,
  so a stolen (but not yet expired) token alone cannot reset the password.
"""

import secrets
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from database import get_db
from core.config import settings
from core.errors import AuthenticationError, AuthorizationError, BadRequestError, NotFoundError, ValidationError
from core.logger import logger
from core.rate_limiter import rate_limited
from core.responses import Envelope
from core.security import (
    AuthContext,
    get_auth_context,
    get_client_ip,
    hash_password,
    verify_dummy_password,
    verify_password,
)
from core.utils import absolute_url
from models.audit_log import AuditLog
from models.user import ROLE_CUSTOMER, User
from services import email_verification, notifications, password_reset
from services.password_reset import ResetStatus
from services.tokens import issue_token, revoke_token
from auth.schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginData,
    LoginRequest,
    RegisterRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    UserInfo,
)

router = APIRouter(tags=["auth"])

# Generic message used for both "no such email" and "wrong password"
_LOGIN_FAIL = "Invalid email or password"
_FORGOT_SENT = "If the email is registered, a password reset link has been sent to it"


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post(
    "/login",
    response_model=Envelope[LoginData],
    dependencies=[Depends(rate_limited("login"))],
)
def login(body: LoginRequest, request: Request, db: Session = Depends(get_db)):
    """Authenticate and return a bearer token valid for 24 hours."""
    user = db.query(User).filter(User.email == body.email).first()

    # Unified failure path – no information leaks about whether the email exists,
    # and an unknown email costs the same hashing work as a wrong password
    if not user:
        verify_dummy_password(body.password)
        raise AuthenticationError(_LOGIN_FAIL)
    if not verify_password(body.password, user.password_hash):
        raise AuthenticationError(_LOGIN_FAIL)

    if not email_verification.is_verified(user):
        raise AuthorizationError("Your email address has not been verified")

    token = issue_token(db, user)
    db.add(AuditLog(user_id=user.id, action="user_login", request_ip=get_client_ip(request)))
    db.commit()
    logger.info("User %d logged in", user.id)

    return Envelope(
        message="Login success",
        data=LoginData(id=user.id, token_type="Bearer", token=token, role=user.role),
    )


# ---------------------------------------------------------------------------
# POST /register
# ---------------------------------------------------------------------------


@router.post(
    "/register",
    response_model=Envelope[UserInfo],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limited("register"))],
)
def register(
    body: RegisterRequest,
    request: Request,
    tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """
    Create a customer account.  No token is returned – the account must be
    verified through the emailed link before it can log in.
    """
    if db.query(User).filter(User.email == body.email).first():
        raise ValidationError({"email": ["The email has already been taken"]})

    user = User(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        remember_token=secrets.token_hex(8),
        role=ROLE_CUSTOMER,
    )
    db.add(user)
    db.flush()  # get user.id before commit
    db.add(AuditLog(user_id=user.id, action="register", request_ip=get_client_ip(request)))
    db.commit()
    db.refresh(user)
    logger.info("User %d registered", user.id)

    notifications.on_registered(user, tasks)

    return Envelope(message="Registration successful", data=UserInfo.model_validate(user))


# ---------------------------------------------------------------------------
# POST /logout
# ---------------------------------------------------------------------------


@router.post("/logout", response_model=Envelope[None])
def logout(
    request: Request,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Revoke the token used for this request.  Other devices stay signed in."""
    revoke_token(db, ctx.token)
    db.add(AuditLog(user_id=ctx.user.id, action="user_logout", request_ip=get_client_ip(request)))
    db.commit()
    return Envelope(message="Logged out successfully")


# ---------------------------------------------------------------------------
# POST /change-password
# ---------------------------------------------------------------------------


@router.post("/change-password", response_model=Envelope[None])
def change_password(
    body: ChangePasswordRequest,
    request: Request,
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """
    Change the authenticated user's password, then revoke the current
    token so the client has to log in again with the new one.
    """
    user = ctx.user
    if not verify_password(body.old_password, user.password_hash):
        raise AuthenticationError("The old password is incorrect")

    user.password_hash = hash_password(body.password)
    revoke_token(db, ctx.token)
    db.add(AuditLog(user_id=user.id, action="change_password", request_ip=get_client_ip(request)))
    db.commit()
    logger.info("User %d changed their password", user.id)

    return Envelope(message="Password changed successfully")


# ---------------------------------------------------------------------------
# POST /forgot-password
# ---------------------------------------------------------------------------


@router.post(
    "/forgot-password",
    response_model=Envelope[None],
    dependencies=[Depends(rate_limited("forgot-password"))],
)
def forgot_password(
    body: ForgotPasswordRequest,
    tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Email a reset link when the account exists.  The answer is the same either way."""
    result = password_reset.send_reset_link(db, body.email, tasks)
    if result is not ResetStatus.RESET_LINK_SENT:
        logger.info("Reset link not sent: %s", result.name)
    return Envelope(message=_FORGOT_SENT)


# ---------------------------------------------------------------------------
# POST /reset-password
# ---------------------------------------------------------------------------


@router.post(
    "/reset-password",
    response_model=Envelope[None],
    dependencies=[Depends(rate_limited("reset-password"))],
)
def reset_password(
    body: ResetPasswordRequest,
    request: Request,
    tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Swap the password using a token from the reset email."""
    request_ip = get_client_ip(request)

    def _apply(user: User, password: str) -> None:
        user.password_hash = hash_password(password)
        user.remember_token = secrets.token_urlsafe(45)
        db.add(AuditLog(user_id=user.id, action="reset_password", request_ip=request_ip))

    result = password_reset.reset(db, body.email, body.token, body.password, on_reset=_apply)
    if result is not ResetStatus.PASSWORD_RESET:
        raise BadRequestError(result.message)

    user = db.query(User).filter(User.email == body.email).one()
    notifications.on_password_reset(user, tasks)
    return Envelope(message=result.message)


# ---------------------------------------------------------------------------
# GET /verify-email/{user_id}
# ---------------------------------------------------------------------------


@router.get("/verify-email/{user_id}", response_class=RedirectResponse, status_code=status.HTTP_302_FOUND)
def verify_email(
    user_id: int,
    request: Request,
    signature: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Follow a signed verification link, then bounce the browser to the frontend login page."""
    if not signature:
        raise AuthenticationError(email_verification.INVALID_LINK)
    email_verification.verify(db, user_id, signature, request_ip=get_client_ip(request))
    return RedirectResponse(absolute_url(settings.frontend_url, "/login"), status_code=status.HTTP_302_FOUND)


# ---------------------------------------------------------------------------
# POST /resend-verification
# ---------------------------------------------------------------------------


@router.post(
    "/resend-verification",
    response_model=Envelope[None],
    dependencies=[Depends(rate_limited("resend-verification"))],
)
def resend_verification(
    body: ResendVerificationRequest,
    tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Send a fresh verification link to an account that is still unverified."""
    user = db.query(User).filter(User.email == body.email).first()
    if not user:
        raise NotFoundError("User not found")
    if email_verification.is_verified(user):
        raise BadRequestError("Your email address is already verified")

    notifications.send_verification_link(user, tasks)
    return Envelope(message="A new verification link has been sent to your email address")
