"""
Shared test fixtures.

Documents are built as plain ORM instances (never flushed); repositories and
the email transport are patched per test.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.core.auth import CurrentUser
from app.core.events import event_bus
from app.modules.schools.models import DEFAULT_SCHOOL_SETTINGS, School, SubscriptionTier
from app.modules.users.models import AuthStatus, User, UserRole


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.delete = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def session_factory(mock_db):
    """Stand-in for async_session_maker yielding mock_db."""
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=mock_db)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


@pytest.fixture(autouse=True)
def isolated_event_bus():
    """Every test starts and ends without creation handlers registered."""
    event_bus.clear_handlers()
    yield event_bus
    event_bus.clear_handlers()


@pytest.fixture
def school_id():
    return str(uuid4())


@pytest.fixture
def school(school_id):
    now = datetime.now(UTC)
    return School(
        id=school_id,
        name="Lincoln High",
        email="office@lincoln.edu",
        phone=None,
        address=None,
        admin_id=school_id,
        settings=dict(DEFAULT_SCHOOL_SETTINGS),
        subscription_tier=SubscriptionTier.FREE,
        is_active=True,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def make_user(school_id):
    """Build a User document with sensible defaults."""

    def _make(role: UserRole = UserRole.STUDENT, **overrides) -> User:
        now = datetime.now(UTC)
        fields = {
            "id": str(uuid4()),
            "school_id": school_id,
            "email": f"{uuid4().hex[:8]}@lincoln.edu",
            "role": role,
            "profile": {"first_name": "Jane", "last_name": "Doe"},
            "class_id": None,
            "admission_number": None,
            "parent_ids": [],
            "children_ids": [],
            "employee_id": None,
            "is_active": True,
            "auth_status": AuthStatus.COMPLETE,
            "temp_password": None,
            "temp_password_sent": False,
            "error_log": None,
            "created_at": now,
            "updated_at": now,
        }
        fields.update(overrides)
        return User(**fields)

    return _make


@pytest.fixture
def make_actor(school_id):
    """Build a CurrentUser for the given role."""

    def _make(role: str = "school_admin", **overrides) -> CurrentUser:
        fields = {
            "id": str(uuid4()),
            "email": f"{role}@lincoln.edu",
            "role": role,
            "school_id": school_id,
            "name": "Alex Admin",
            "token_id": uuid4().hex,
            "expires_at": int(datetime.now(UTC).timestamp()) + 3600,
        }
        fields.update(overrides)
        return CurrentUser(**fields)

    return _make


@pytest.fixture
def admin(make_actor):
    return make_actor("school_admin")


@pytest.fixture
def teacher(make_actor):
    return make_actor("teacher", name="Terry Teacher")
