"""Shared fixtures: an in-memory database per test and a TestClient bound to it."""

import os
import sys
from datetime import datetime, timedelta, timezone

# Add parent dir to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Settings are read at import time, so configure before importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ADMIN_EMAILS", "admin@ucsb.edu")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.database import Base, get_db
from app.models.profile import Profile
from app.models.tutoring_session import TutoringSession
from app.models.user import User
from app.services.time_windows import to_storage


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name: str, role: str = "user") -> User:
        counter["n"] += 1
        user = User(
            email=f"{name.lower().replace(' ', '.')}{counter['n']}@ucsb.edu",
            password_hash="not-a-real-hash",
            name=name,
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def student(make_user):
    return make_user("Sam Student")


@pytest.fixture
def tutor(make_user):
    return make_user("Tara Tutor")


@pytest.fixture
def outsider(make_user):
    return make_user("Olly Outsider")


@pytest.fixture
def make_profile(db):
    def _make(user: User, role: str, credit_points: int = 0) -> Profile:
        profile = Profile(user_id=user.id, user_role=role, credit_points=credit_points)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make


@pytest.fixture
def make_session(db, now):
    """Insert a session directly in a given state, bypassing the booking guards."""

    def _make(student: User, tutor: User, status: str = "PENDING", starts_in=timedelta(days=5),
              length=timedelta(hours=1), **fields) -> TutoringSession:
        start = now + starts_in
        session = TutoringSession(
            student_id=student.id,
            tutor_id=tutor.id,
            course="CMPSC 130A - Data Structures and Algorithms I",
            start_time=to_storage(start),
            end_time=to_storage(start + length),
            status=status,
            **fields,
        )
        db.add(session)
        db.commit()
        db.refresh(session)
        return session

    return _make
