import itertools
import os
import sys

import pytest

CURRENT_DIR = os.path.dirname(__file__)
SERVICE_ROOT = os.path.dirname(CURRENT_DIR)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from fastapi.testclient import TestClient
from workshop_service.domain.entities import identity_for
from workshop_service.infrastructure.db import Database, get_db
from workshop_service.infrastructure.models import ActivityORM, UserORM, WorkshopORM
from workshop_service.infrastructure.rate_limit import limiter
from workshop_service.infrastructure.repositories import user_to_domain
from workshop_service.interfaces.http.authz import get_current_identity
from workshop_service.interfaces.http.dependencies import get_notifier
from workshop_service.main import app

# Rate limiting is covered by slowapi itself
limiter.enabled = False

DEFAULT = object()


class RecordingNotifier:
    """Stands in for the email notifier; remembers every dispatch."""

    def __init__(self):
        self.sent = []

    def notify(self, user_id, subject, body):
        self.sent.append((user_id, subject, body))
        return True

    def sent_to(self, user_id):
        return [s for s in self.sent if s[0] == user_id]


@pytest.fixture
def database():
    db = Database("sqlite:///:memory:")
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def session(database):
    s = database.session()
    yield s
    s.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(database, notifier):
    def _get_db():
        db = database.session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(session):
    """Make every request run as the given user row."""
    def _login_as(user: UserORM):
        identity = identity_for(user_to_domain(user))
        app.dependency_overrides[get_current_identity] = lambda: identity
        return identity
    return _login_as


@pytest.fixture
def make_user(session):
    counter = itertools.count(1)

    def _make_user(role="learner", name=None, email=None, preferences=DEFAULT):
        n = next(counter)
        row = UserORM(
            name=name or f"{role.title()} Number {n}",
            email=email or f"{role}{n}@example.com",
            password_hash="not-a-real-hash",
            role=role,
        )
        session.add(row); session.commit()
        if preferences is not DEFAULT:
            row.notification_preferences = preferences
            session.commit()
        session.refresh(row)
        return row
    return _make_user


@pytest.fixture
def make_workshop(session):
    def _make_workshop(mentor: UserORM, title="Intro to Pottery", description="Hands-on clay basics"):
        row = WorkshopORM(title=title, description=description, mentor_id=mentor.id)
        session.add(row); session.commit(); session.refresh(row)
        return row
    return _make_workshop


@pytest.fixture
def make_activity(session):
    def _make_activity(workshop: WorkshopORM, title="Wheel throwing", description="Centering and pulling walls"):
        row = ActivityORM(title=title, description=description, workshop_id=workshop.id)
        session.add(row)
        workshop.activities.append(row)
        session.commit(); session.refresh(row)
        return row
    return _make_activity
