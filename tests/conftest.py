"""
Shared fixtures.

Tests run against an in-memory SQLite database with the scheduler and
outgoing mail switched off. Settings are read from the environment at
import time, so the variables below must be set before ``app`` is imported.
"""
import asyncio
import os
from datetime import datetime, timedelta, timezone

os.environ["DB_CONNECTION"] = "sqlite"
os.environ["DB_DATABASE"] = ":memory:"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["MAIL_ENABLED"] = "false"
os.environ["DEBUG"] = "false"
os.environ["RATE_LIMIT_DEFAULT"] = "1000/minute"

import pytest
from jose import jwt
from sqlalchemy.orm import sessionmaker

from app.core.actors import Actor
from app.core.config import settings
from app.core.database import Base, SessionLocal, build_engine, engine
from app.models import AdminUser, PaymentSubscription, Post, Report, User
from app.utils.email import EmailDeliveryError


class FakePhotoStorage:
    """Records uploads instead of touching the filesystem."""

    def __init__(self):
        self.uploads = []

    async def upload(self, owner_id, files):
        files = list(files or [])
        self.uploads.append((owner_id, len(files)))
        return [
            f"http://testserver/storage/posts/{owner_id}/photo-{i}.jpg"
            for i in range(len(files))
        ]


class FakeEmailSender:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def send(self, recipients, subject, summary, body):
        if self.fail:
            raise EmailDeliveryError("SMTP unavailable")
        self.sent.append((tuple(recipients), subject))


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def open_session(tmp_path):
    """
    Opens independent sessions on a file-backed database, for interleaving
    two requests against the same rows.
    """
    file_engine = build_engine(f"sqlite:///{tmp_path / 'concurrent.db'}")
    Base.metadata.create_all(bind=file_engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    sessions = []

    def _open():
        session = factory()
        sessions.append(session)
        return session

    try:
        yield _open
    finally:
        for session in sessions:
            session.close()
        file_engine.dispose()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(name=None, email=None, created_at=None, is_active=True):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"User {n}",
            email=email or f"user{n}@example.com",
            is_active=is_active,
        )
        if created_at is not None:
            user.created_at = created_at
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_post(db):
    counter = {"n": 0}

    def _make_post(owner, approved=True, active=True, created_at=None, **fields):
        counter["n"] += 1
        values = {
            "title": f"Listing {counter['n']}",
            "description": "Sunny room close to campus",
            "price": 500.0,
            "bed_count": 2,
            "bath_count": 1,
            "number_of_spots": 1,
            "city": "Austin",
            "state": "TX",
            "zip": "78701",
            "photos": [],
        }
        values.update(fields)
        post = Post(user_id=owner.id, approved=approved, active=active, **values)
        if created_at is not None:
            post.created_at = created_at
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    return _make_post


@pytest.fixture
def make_report(db):
    def _make_report(reporter, post, status="pending", reason="Looks like a scam"):
        report = Report(user_id=reporter.id, post_id=post.id, reason=reason, status=status)
        db.add(report)
        db.commit()
        db.refresh(report)
        return report

    return _make_report


@pytest.fixture
def owner(make_user):
    return make_user(name="Olivia Owner", email="owner@example.com")


@pytest.fixture
def reporter(make_user):
    return make_user(name="Rita Reporter", email="reporter@example.com")


@pytest.fixture
def admin(db):
    admin = AdminUser(first_name="Ada", last_name="Admin", email="admin@example.com")
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


@pytest.fixture
def admin_actor(admin):
    return Actor.for_admin(admin)


@pytest.fixture
def owner_actor(owner):
    return Actor.for_user(owner)


@pytest.fixture
def reporter_actor(reporter):
    return Actor.for_user(reporter)


@pytest.fixture
def add_subscription(db):
    def _add(user, status="active", end_date=None):
        sub = PaymentSubscription(
            user_id=user.id,
            status=status,
            end_date=end_date or datetime.now(timezone.utc) + timedelta(days=30),
        )
        db.add(sub)
        db.commit()
        return sub

    return _add


# ==================== HTTP ====================


def make_token(**claims):
    payload = {
        "type": "access",
        "iss": settings.jwt_issuer,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    payload.update(claims)
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient

    from app.core.database import get_db
    from main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def owner_headers(owner):
    return auth_header(make_token(user_id=owner.id))


@pytest.fixture
def reporter_headers(reporter):
    return auth_header(make_token(user_id=reporter.id))


@pytest.fixture
def admin_headers(admin):
    return auth_header(make_token(admin_id=admin.id, role="admin"))
