"""
Central pytest configuration for the vet clinic scheduling tests.

Provides the fixed clock, an in-memory SQL document store, the service
container built over it, and a Flask test client with signed tokens.
"""

import os
from datetime import datetime, timedelta

import pytest

# Set early so import-time configuration picks them up
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["TESTING"] = "true"
os.environ["TZ"] = "UTC"
os.environ["LOG_TO_FILE"] = "false"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-scheduling-suite")

from sqlalchemy.orm import sessionmaker  # noqa: E402

from tests.config.markers import pytest_configure  # noqa: E402,F401
from vetclinic.container import ServiceContainer  # noqa: E402
from vetclinic.core import config  # noqa: E402
from vetclinic.core.security import (  # noqa: E402
    ROLE_CLINIC_OWNER,
    ROLE_PET_OWNER,
    create_user_token,
)
from vetclinic.db.session import Base, build_engine  # noqa: E402
from vetclinic.repositories.clinic_repo import CLINICS  # noqa: E402
from vetclinic.repositories.document_store import SqlDocumentStore  # noqa: E402
from vetclinic.repositories.pet_repo import PETS  # noqa: E402

# 09:00 on the morning of the end-to-end scenario date
FIXED_NOW = datetime(2025, 7, 10, 9, 0, tzinfo=config.APP_TZ)

OWNER_ID = "owner-1"
OTHER_OWNER_ID = "owner-2"
CLINIC_OWNER_ID = "vet-1"


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store():
    """SqlDocumentStore over a private in-memory SQLite database."""
    import vetclinic.db.base  # noqa: F401  (registers the documents table)

    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield SqlDocumentStore(session_factory)
    engine.dispose()


@pytest.fixture
def services(store, clock) -> ServiceContainer:
    return ServiceContainer(store=store, clock=clock)


@pytest.fixture
def clinic_id(store) -> str:
    return store.create(
        CLINICS,
        {"owner_id": CLINIC_OWNER_ID, "name": "Happy Paws", "average_rating": 0, "review_count": 0},
    )["id"]


@pytest.fixture
def pet_id(store) -> str:
    return store.create(PETS, {"owner_id": OWNER_ID, "name": "Rex", "species": "dog"})["id"]


@pytest.fixture
def app(services):
    from vetclinic.main import create_app

    flask_app = create_app({"TESTING": True}, container=services)
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


def auth_headers(user_id: str, role: str) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user_id, role)}"}


@pytest.fixture
def owner_headers() -> dict:
    return auth_headers(OWNER_ID, ROLE_PET_OWNER)


@pytest.fixture
def other_owner_headers() -> dict:
    return auth_headers(OTHER_OWNER_ID, ROLE_PET_OWNER)


@pytest.fixture
def clinic_headers() -> dict:
    return auth_headers(CLINIC_OWNER_ID, ROLE_CLINIC_OWNER)
