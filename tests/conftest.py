from datetime import timedelta
from pathlib import Path
import os
import sys

ROOT = Path(__file__).resolve().parents[1]
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-at-least-32-characters")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("VIEW_CACHE_URL", "")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from actions.common import ActionContext
from auth import create_access_token, get_password_hash
from database import Base
from models import Competition, Event, Identity, Profile, ProfileRole
from time_utils import now_utc
from views import MemoryViewCache


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def views():
    return MemoryViewCache(ttl_seconds=60)


@pytest.fixture
def make_user(db):
    def _make(email="member@example.com", role=ProfileRole.MEMBER, with_profile=True, password="secret123"):
        identity = Identity(
            email=email,
            hashed_password=get_password_hash(password),
            user_metadata={"name": "Test User", "batch": "2020"},
        )
        db.add(identity)
        db.commit()
        db.refresh(identity)
        profile = None
        if with_profile:
            profile = Profile(id=identity.id, email=email, name="Test User", role=role)
            db.add(profile)
            db.commit()
            db.refresh(profile)
        return identity, profile

    return _make


@pytest.fixture
def admin_ctx(db, views, make_user):
    identity, profile = make_user(email="admin@example.com", role=ProfileRole.ADMIN)
    return ActionContext(db=db, identity=identity, profile=profile, views=views)


@pytest.fixture
def member_ctx(db, views, make_user):
    identity, profile = make_user(email="member@example.com", role=ProfileRole.MEMBER)
    return ActionContext(db=db, identity=identity, profile=profile, views=views)


@pytest.fixture
def anon_ctx(db, views):
    return ActionContext(db=db, views=views)


@pytest.fixture
def make_event(db):
    def _make(title="Math Olympiad", is_published=True, days_ahead=10, deadline_days=5, created_by=None):
        event = Event(
            title=title,
            description="Annual olympiad",
            event_date=now_utc() + timedelta(days=days_ahead),
            registration_deadline=now_utc() + timedelta(days=deadline_days) if deadline_days is not None else None,
            venue="Main Hall",
            tags=["Olympiad"],
            is_published=is_published,
            created_by=created_by,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make


@pytest.fixture
def make_competition(db):
    def _make(event, title="Junior Round", display_order=None, is_published=True, fee=0):
        if display_order is None:
            display_order = db.query(Competition).filter(Competition.event_id == event.id).count()
        competition = Competition(
            event_id=event.id,
            title=title,
            fee=fee,
            display_order=display_order,
            is_published=is_published,
        )
        db.add(competition)
        db.commit()
        db.refresh(competition)
        return competition

    return _make


@pytest.fixture
def bearer():
    def _bearer(identity):
        return {"Authorization": f"Bearer {create_access_token({'sub': identity.id})}"}

    return _bearer
