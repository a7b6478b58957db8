"""
conftest.py — shared fixtures for the backend tests.

Strategy:
- Tests run against a throw-away SQLite file (aiosqlite). The environment is
  prepared before anything from ``workforce`` is imported so that the app's
  engine binds to that file.
- The schema is created once per session from the ORM metadata and every
  table is emptied after each test.
- "Now" is pinned through ``app.dependency_overrides[get_clock]``; tests move
  it by assigning ``clock.instant``.
- Users are created directly through a session, tokens are minted with
  ``create_access_token`` (the login flow has its own tests).
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

_DB_PATH = Path(tempfile.mkdtemp(prefix="workforce-tests-")) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["APPROVAL_WEBHOOK_URL"] = ""

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from workforce.core.clock import FixedClock, get_clock  # noqa: E402
from workforce.core.security import create_access_token, hash_password  # noqa: E402
from workforce.db.models import Base, Organization, User  # noqa: E402
from workforce.db.session import AsyncSessionLocal  # noqa: E402
from workforce.main import app  # noqa: E402

PASSWORD = "Secret123!"
_PASSWORD_HASH = hash_password(PASSWORD)

# Monday, late afternoon UTC: both a 09:xx check-in and a 17:xx check-out
# fall on the current working day and in the past.
NOW = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)

_sync_engine = create_engine(f"sqlite:///{_DB_PATH}")


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session", autouse=True)
def _schema():
    Base.metadata.create_all(_sync_engine)
    yield
    Base.metadata.drop_all(_sync_engine)
    _sync_engine.dispose()


@pytest.fixture(autouse=True)
def _clean_tables(_schema):
    yield
    with _sync_engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


# ---------------------------------------------------------------------------
# Clock + HTTP client
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clock() -> FixedClock:
    fixed = FixedClock(NOW)
    app.dependency_overrides[get_clock] = lambda: fixed
    yield fixed
    app.dependency_overrides.pop(get_clock, None)


@pytest_asyncio.fixture
async def client() -> AsyncClient:
    """Fresh HTTPX async client per test function."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db() -> AsyncSession:
    """Raw DB session for service calls and direct queries in tests."""
    async with AsyncSessionLocal() as session:
        yield session


# ---------------------------------------------------------------------------
# Organizations and users
# ---------------------------------------------------------------------------


async def _create_organization(name: str, tz: str = "UTC") -> Organization:
    async with AsyncSessionLocal() as session:
        org = Organization(name=name, timezone=tz)
        session.add(org)
        await session.commit()
        await session.refresh(org)
        return org


async def _create_user(
    username: str,
    role: str,
    organization: Organization | None = None,
    *,
    scheduled_start: str | None = None,
    is_active: bool = True,
) -> User:
    async with AsyncSessionLocal() as session:
        user = User(
            username=username,
            password_hash=_PASSWORD_HASH,
            role=role,
            full_name=username.replace("_", " ").title(),
            organization_id=organization.id if organization else None,
            scheduled_start=scheduled_start,
            is_active=is_active,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


def _auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest_asyncio.fixture
async def org() -> Organization:
    return await _create_organization("Acme")


@pytest_asyncio.fixture
async def other_org() -> Organization:
    return await _create_organization("Globex")


@pytest_asyncio.fixture
async def admin_user() -> User:
    return await _create_user("root_admin", "admin")


@pytest_asyncio.fixture
async def client_user(org: Organization) -> User:
    return await _create_user("acme_manager", "client", org)


@pytest_asyncio.fixture
async def employee(org: Organization) -> User:
    return await _create_user("acme_employee", "employee", org)


@pytest_asyncio.fixture
async def contractor(org: Organization) -> User:
    return await _create_user("acme_contractor", "contractor", org)


@pytest_asyncio.fixture
async def outsider(other_org: Organization) -> User:
    return await _create_user("globex_employee", "employee", other_org)


@pytest_asyncio.fixture
async def other_client(other_org: Organization) -> User:
    return await _create_user("globex_manager", "client", other_org)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return _auth_headers(admin_user)


@pytest.fixture
def client_headers(client_user: User) -> dict:
    return _auth_headers(client_user)


@pytest.fixture
def employee_headers(employee: User) -> dict:
    return _auth_headers(employee)


# ---------------------------------------------------------------------------
# Factories for tests that need more than the stock users
# ---------------------------------------------------------------------------


@pytest.fixture
def make_organization():
    return _create_organization


@pytest.fixture
def make_user():
    return _create_user


@pytest.fixture
def headers_for():
    return _auth_headers


@pytest.fixture
def password() -> str:
    """Plain-text password of every fixture-created user."""
    return PASSWORD
