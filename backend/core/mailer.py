# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
Outbound email over SMTP.

Port 465 uses implicit TLS, any other port upgrades with STARTTLS.  When
SMTP is not configured the message is logged and dropped so local
development works without a mail server.

Callers schedule :func:`send_email` on ``BackgroundTasks`` – it never
raises, so a mail outage cannot fail the request that triggered it.
"""

import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from core.config import settings
from core.logger import logger


def send_email(subject: str, to_email: str, html_body: str, text_body: Optional[str] = None) -> bool:
    """Send a multipart (text + HTML) message.  Returns True when handed to the server."""
    if not settings.smtp_host or not settings.mail_from:
        logger.warning("SMTP not configured – skipping mail '%s' to %s", subject, to_email)
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.mail_from
    msg["To"] = to_email
    msg.attach(MIMEText(text_body or html_body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))

    context = ssl.create_default_context()
    try:
        if settings.smtp_port == 465:
            with smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context) as server:
                if settings.smtp_user:
                    server.login(settings.smtp_user, settings.smtp_password)
                server.sendmail(settings.mail_from, [to_email], msg.as_string())
        else:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
                server.ehlo()
                server.starttls(context=context)
                if settings.smtp_user:
                    server.login(settings.smtp_user, settings.smtp_password)
                server.sendmail(settings.mail_from, [to_email], msg.as_string())
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send mail '%s' to %s", subject, to_email)
        return False

    logger.info("Mail '%s' sent to %s", subject, to_email)
    return True
