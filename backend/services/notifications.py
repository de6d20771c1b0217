# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
Account event dispatch.

Routers call these after their transaction has committed.  Each one builds
the outgoing message and queues it on the request's ``BackgroundTasks`` so
the HTTP response is not held up by SMTP.
"""

from urllib.parse import urlencode

from fastapi import BackgroundTasks

from core.config import settings
from core.logger import logger
from core.mailer import send_email
from core.utils import absolute_url
from models.user import User
from services import email_verification


def _button(url: str, label: str) -> str:
    return (
        f'<p><a href="{url}" style="background:#b45309;color:#fff;padding:12px 18px;'
        f'border-radius:8px;text-decoration:none;">{label}</a></p>'
        f'<p>If the button does not work, copy this link into your browser:</p>'
        f'<p><a href="{url}">{url}</a></p>'
    )


def send_verification_link(user: User, tasks: BackgroundTasks) -> None:
    url = email_verification.issue_link(user)
    html = (
        f"<p>Hi {user.name},</p>"
        f"<p>Please confirm your email address to activate your account.</p>"
        f"{_button(url, 'Verify email address')}"
        f"<p>This link expires in {settings.email_verification_expire_minutes} minutes.</p>"
    )
    tasks.add_task(send_email, "Verify your email address", user.email, html, f"Verify your email address: {url}")
    logger.info("Verification link queued for user_id=%d", user.id)


def on_registered(user: User, tasks: BackgroundTasks) -> None:
    send_verification_link(user, tasks)


def send_reset_link(user: User, token: str, tasks: BackgroundTasks) -> None:
    query = urlencode({"token": token, "email": user.email})
    url = absolute_url(settings.frontend_url, f"/reset-password?{query}")
    html = (
        f"<p>Hi {user.name},</p>"
        f"<p>We received a request to reset your password.</p>"
        f"{_button(url, 'Reset password')}"
        f"<p>This link expires in {settings.password_reset_expire_minutes} minutes. "
        f"If you did not request a reset, no further action is required.</p>"
    )
    tasks.add_task(send_email, "Reset your password", user.email, html, f"Reset your password: {url}")


def on_password_reset(user: User, tasks: BackgroundTasks) -> None:
    html = (
        f"<p>Hi {user.name},</p>"
        f"<p>The password for your account was just changed.  If this was not you, "
        f"contact us immediately.</p>"
    )
    tasks.add_task(send_email, "Your password was changed", user.email, html, None)
