"""Pytest fixtures for Crisis Connect backend tests."""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from collections.abc import AsyncGenerator  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import crisisconnect.models  # noqa: E402,F401
from crisisconnect.auth import Caller  # noqa: E402
from crisisconnect.database import Base, get_db  # noqa: E402
from crisisconnect.main import app, limiter  # noqa: E402
from crisisconnect.models import Incident, User, VolunteerProfile  # noqa: E402
from crisisconnect.models.enums import (  # noqa: E402
    ApplicationStatus,
    IncidentStatus,
    Role,
)
from crisisconnect.services import EventDispatcher, NotificationChannel  # noqa: E402

# Test database URL - in-memory SQLite shared by every session of one test
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingTransport:
    """Realtime transport stand-in that records every emit."""

    def __init__(self):
        self.emitted: list[tuple[str, str | None, dict[str, Any]]] = []
        self.connection_count = 0

    async def emit(self, event: str, payload: dict[str, Any], room: str | None = None) -> int:
        self.emitted.append((event, room, payload))
        return 1

    @property
    def names(self) -> list[str]:
        return [event for event, _, _ in self.emitted]

    def rooms_for(self, event: str) -> list[str | None]:
        return [room for name, room, _ in self.emitted if name == event]


class FakeNotifier:
    """Notifier that records calls instead of sending anything."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.verified: list[tuple[list[str], Any]] = []
        self.claimed: list[tuple[Any, Any, Any]] = []

    async def notify_incident_verified(self, recipients, incident) -> bool:
        if self.fail:
            raise RuntimeError("SMTP unreachable")
        self.verified.append((list(recipients), incident))
        return True

    async def notify_request_claimed(self, civilian, volunteer, request) -> bool:
        if self.fail:
            raise RuntimeError("SMTP unreachable")
        self.claimed.append((civilian, volunteer, request))
        return True


@pytest_asyncio.fixture
async def async_engine():
    """Create async engine with the full schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    session_maker = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def dispatcher(transport) -> EventDispatcher:
    return EventDispatcher(transport)


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def notifications(notifier) -> NotificationChannel:
    return NotificationChannel(notifier)


@pytest.fixture
def failing_notifications() -> NotificationChannel:
    """Channel whose notifier raises on every delivery."""
    return NotificationChannel(FakeNotifier(fail=True))


async def _user(db: AsyncSession, name: str, role: Role, email: str | None = None) -> User:
    user = User(name=name, role=role, email=email, phone="+15550001111")
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def users(db_session) -> dict[str, User]:
    """One account per role, plus a second civilian and volunteer."""
    return {
        "admin": await _user(db_session, "Asha Admin", Role.ADMIN, "admin@example.org"),
        "civilian": await _user(db_session, "Carlos Civilian", Role.CIVILIAN, "carlos@example.org"),
        "civilian2": await _user(db_session, "Chen Civilian", Role.CIVILIAN, "chen@example.org"),
        "volunteer": await _user(db_session, "Vera Volunteer", Role.VOLUNTEER, "vera@example.org"),
        "volunteer2": await _user(
            db_session, "Victor Volunteer", Role.VOLUNTEER, "victor@example.org"
        ),
    }


@pytest.fixture
def callers(users) -> dict[str, Caller]:
    return {key: Caller(id=user.id, role=Role(user.role)) for key, user in users.items()}


@pytest_asyncio.fixture
async def profiles(db_session, users) -> dict[str, VolunteerProfile]:
    """Accepted profile for the first volunteer, pending for the second."""
    accepted = VolunteerProfile(
        user_id=users["volunteer"].id,
        skills=["First Aid", "Driving"],
        application_status=ApplicationStatus.ACCEPTED,
    )
    pending = VolunteerProfile(
        user_id=users["volunteer2"].id,
        skills=["Cooking"],
        application_status=ApplicationStatus.PENDING,
    )
    db_session.add_all([accepted, pending])
    await db_session.commit()
    return {"volunteer": accepted, "volunteer2": pending}


@pytest_asyncio.fixture
async def verified_incident(db_session, users) -> Incident:
    incident = Incident(
        location="Riverside Colony",
        type="Flood",
        severity=4,
        description="Water entering ground floor homes",
        status=IncidentStatus.VERIFIED,
        reported_by_id=users["civilian"].id,
        verified_by_id=users["admin"].id,
    )
    incident.place(28.6139, 77.2090)
    db_session.add(incident)
    await db_session.commit()
    return incident


def headers_for(user: User) -> dict[str, str]:
    """Identity headers the auth gateway would forward."""
    return {"X-User-Id": user.id, "X-User-Role": str(user.role)}


@pytest_asyncio.fixture
async def client(db_session, transport, notifier) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with database and realtime overrides."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    original_realtime = app.state.realtime
    original_notifications = app.state.notifications
    app.state.realtime = transport
    app.state.notifications = NotificationChannel(notifier)
    limiter.enabled = False

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    await app.state.notifications.drain()
    app.state.realtime = original_realtime
    app.state.notifications = original_notifications
    app.dependency_overrides.clear()


@pytest.fixture
def as_user(users):
    """Headers for one of the ``users`` fixture accounts, by key."""

    def _headers(key: str) -> dict[str, str]:
        return headers_for(users[key])

    return _headers
