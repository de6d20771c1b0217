"""Shared pytest fixtures for the application tests."""

import os

# Settings are read at import time – configure the environment first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["PASSWORD_HASH_ROUNDS"] = "1000"
os.environ["EMAIL_CHECK_DELIVERABILITY"] = "false"
os.environ["AUTH_RATE_LIMIT"] = "1000"
os.environ["APP_URL"] = "http://api.test"
os.environ["FRONTEND_URL"] = "http://shop.test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import models  # noqa: E402,F401
from core.rate_limiter import limiter  # noqa: E402
from core.security import hash_password  # noqa: E402
from core.utils import utcnow  # noqa: E402
from database import Base, get_db  # noqa: E402
from main import app  # noqa: E402
from models.user import ROLE_CUSTOMER, User  # noqa: E402
from services import notifications  # noqa: E402

from helpers import PASSWORD  # noqa: E402


@pytest.fixture()
def session_factory():
    """A fresh in-memory database per test; every session shares one connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory):
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    limiter.reset()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Capture every email queued by the notification layer."""
    sent = []

    def _capture(subject, to_email, html_body, text_body=None):
        sent.append({"subject": subject, "to": to_email, "html": html_body, "text": text_body})
        return True

    monkeypatch.setattr(notifications, "send_email", _capture)
    return sent


@pytest.fixture()
def make_user(db):
    def _make(
        email="alice@example.com",
        password=PASSWORD,
        name="Alice",
        role=ROLE_CUSTOMER,
        verified=True,
    ) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
            email_verified_at=utcnow() if verified else None,
            remember_token="initial",
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make
