# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261018v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the first admin user.

Run once after the initial migration:
    python bin/seed_admin.py

The script reads FIRST_ADMIN_NAME, FIRST_ADMIN_EMAIL and FIRST_ADMIN_PASSWORD
from etc/app.conf.  After the row is inserted those values are no longer
used by the application.

The admin account is created already verified, so it can log in without
going through the email-verification link.
"""

import secrets
import sys
import os

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/seed_admin.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from core.config import settings                          # noqa: E402
from core.logger import logger                            # noqa: E402
from core.security import hash_password, password_policy_errors  # noqa: E402
from core.utils import utcnow                             # noqa: E402
from database import SessionLocal                         # noqa: E402
from models.user import ROLE_ADMIN, User                  # noqa: E402


def seed() -> int:
    if not settings.first_admin_email or not settings.first_admin_password:
        logger.warning("FIRST_ADMIN_EMAIL or FIRST_ADMIN_PASSWORD not set in etc/app.conf – nothing to do")
        return 0

    problems = password_policy_errors(settings.first_admin_password)
    if problems:
        logger.error("FIRST_ADMIN_PASSWORD rejected: %s", "; ".join(problems))
        return 1

    email = settings.first_admin_email.strip().lower()
    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == email).first():
            logger.info("Admin '%s' already exists – skipping", email)
            return 0

        db.add(
            User(
                name=settings.first_admin_name,
                email=email,
                password_hash=hash_password(settings.first_admin_password),
                role=ROLE_ADMIN,
                email_verified_at=utcnow(),
                remember_token=secrets.token_hex(8),
            )
        )
        db.commit()
        logger.info("Admin '%s' created", email)
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(seed())
