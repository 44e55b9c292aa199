"""Shared fixtures: an in-memory database, callers and a seeded club."""

from __future__ import annotations

import pytest

import raffledesk.models  # noqa: F401
from raffledesk import create_app
from raffledesk.access import AccessPolicy, Role
from raffledesk.config import TestingConfig
from raffledesk.db import create_app_engine, create_session_factory
from raffledesk.models.base import Base
from raffledesk.services.entity_service import EntityService

# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    engine = create_app_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = create_session_factory(engine)()
    yield session
    session.rollback()
    session.close()


# =============================================================================
# Callers
# =============================================================================


@pytest.fixture
def admin() -> AccessPolicy:
    return AccessPolicy(user_id="u-admin", username="admin", role=Role.SUPERUSER)


@pytest.fixture
def entity(db, admin):
    return EntityService().create_entity(db, admin, name="ravens", display_name="Ravens Club")


@pytest.fixture
def other_entity(db, admin):
    return EntityService().create_entity(
        db,
        admin,
        name="owls",
        display_name="Owls Lounge",
        emoji="🦉",
        raffle_percentage=50,
    )


@pytest.fixture
def staff(entity) -> AccessPolicy:
    return AccessPolicy(
        user_id="u-staff",
        username="mira",
        role=Role.STAFF,
        entity_ids=frozenset({entity.id}),
    )


@pytest.fixture
def other_staff(entity) -> AccessPolicy:
    return AccessPolicy(
        user_id="u-staff-2",
        username="jonah",
        role=Role.STAFF,
        entity_ids=frozenset({entity.id}),
    )


@pytest.fixture
def outsider() -> AccessPolicy:
    return AccessPolicy(user_id="u-out", username="stranger", role=Role.STAFF)


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def app():
    return create_app(TestingConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-User-Id": "u-admin", "X-Username": "admin", "X-User-Role": "superuser"}
