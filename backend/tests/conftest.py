"""
Back-Office Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Services run against a real in-memory SQLite database (aiosqlite +
       StaticPool, tables from Base.metadata.create_all), fresh per test.
       HTTP tests drive the FastAPI app through httpx's ASGITransport with
       get_db_session overridden to use the same in-memory database.

Fixture Hierarchy:
    engine ─┬─ db_session ─┬─ user / other_user / admin   (Principals)
            │              └─ make_client / make_service / make_appointment
            └─ test_client (HTTP, one committed session per request)

SQLite does not enforce the PostgreSQL exclusion constraint, so the
scheduling tests exercise the service-level pre-check only.
"""

import os
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional

# Settings are read at import time; configure before importing backoffice
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-not-for-production"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backoffice.database import Base, get_db_session
from backoffice.models import Appointment, Client, Service, User, UserRole
from backoffice.models.user import ROLE_ADMIN
from backoffice.security import hash_password
from backoffice.services.access import Principal, effective_roles

TEST_PASSWORD = "correct-horse-battery"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    """A private in-memory database; StaticPool keeps it on one connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    One session per test, never committed.

    Services only flush, so everything a test writes stays visible to it
    and disappears with the engine.
    """
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Principals
# ══════════════════════════════════════════════════════════════════════════

async def create_account(
    session: AsyncSession, email: str, role: Optional[str] = None
) -> Principal:
    """Inserts an account (and a role row when given) and returns its Principal."""
    user = User(email=email, password_hash=hash_password(TEST_PASSWORD))
    session.add(user)
    await session.flush()
    if role is not None:
        session.add(UserRole(user_id=user.id, role=role))
        await session.flush()
    return Principal(
        user_id=user.id,
        email=email,
        roles=effective_roles([role] if role else []),
    )


@pytest_asyncio.fixture
async def user(db_session) -> Principal:
    """A regular account with no role row (implicit `user`)."""
    return await create_account(db_session, "owner@example.com")


@pytest_asyncio.fixture
async def other_user(db_session) -> Principal:
    return await create_account(db_session, "other@example.com")


@pytest_asyncio.fixture
async def admin(db_session) -> Principal:
    return await create_account(db_session, "admin@example.com", role=ROLE_ADMIN)


# ══════════════════════════════════════════════════════════════════════════
# Owned records
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def at():
    """Builds aware UTC datetimes on a fixed day: at(9) → 2026-03-02 09:00Z."""
    def build(hour: int, minute: int = 0, day: int = 2) -> datetime:
        return datetime(2026, 3, day, hour, minute, tzinfo=timezone.utc)
    return build


@pytest.fixture
def make_client(db_session):
    async def create(owner: Principal, name: str = "Ana Client") -> Client:
        client = Client(
            user_id=owner.user_id,
            name=name,
            email=f"{name.lower().replace(' ', '.')}@example.com",
            phone="+381 11 123 456",
        )
        db_session.add(client)
        await db_session.flush()
        return client
    return create


@pytest.fixture
def make_service(db_session):
    async def create(owner: Principal, name: str = "Haircut", duration: int = 60) -> Service:
        service = Service(
            user_id=owner.user_id, name=name, duration=duration, price=Decimal("25.00")
        )
        db_session.add(service)
        await db_session.flush()
        return service
    return create


@pytest.fixture
def make_appointment(db_session, make_client, make_service):
    async def create(
        owner: Principal,
        start: datetime,
        end: Optional[datetime] = None,
        status: str = "confirmed",
    ) -> Appointment:
        client = await make_client(owner)
        service = await make_service(owner)
        appointment = Appointment(
            user_id=owner.user_id,
            client_id=client.id,
            service_id=service.id,
            start_time=start,
            end_time=end or start + timedelta(hours=1),
            status=status,
        )
        db_session.add(appointment)
        await db_session.flush()
        return appointment
    return create


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app in-process.

    Each request gets its own session from the test engine, committed on
    success and rolled back on error, exactly like get_db_session.
    """
    from backoffice.main import app

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def register(test_client):
    """Registers an account through the API; returns the token payload plus auth headers."""
    async def create(email: str) -> dict:
        response = await test_client.post(
            "/api/auth/register", json={"email": email, "password": TEST_PASSWORD}
        )
        assert response.status_code == 201, response.text
        body = response.json()
        body["headers"] = {"Authorization": f"Bearer {body['access_token']}"}
        return body
    return create


@pytest.fixture
def grant_role(session_factory):
    """Writes a role row directly, as an operator would when bootstrapping the first admin."""
    async def grant(user_id: str, role: str = ROLE_ADMIN) -> None:
        async with session_factory() as session:
            session.add(UserRole(user_id=uuid.UUID(user_id), role=role))
            await session.commit()
    return grant
