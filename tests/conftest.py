"""
Shared test fixtures for the Streamline API test suite.

Every test gets its own in-memory aiosqlite database; the app's ``get_db``
dependency is pointed at it for the duration of the test.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ.pop("RESEND_API_KEY", None)

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from streamline.api.v1.deps import get_db
from streamline.core.security import create_access_token, get_password_hash
from streamline.db.base import Base
from streamline.db.session import build_engine
from streamline.main import app, seed_plans
from streamline.models.company import CompanyMember
from streamline.models.user import User

API = "/api/v1"
PASSWORD = "password123"


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh schema (with seeded plans) per test, wired into the app."""
    engine = build_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        pool_pre_ping=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await seed_plans(session)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ── Helpers ─────────────────────────────────────────────────────────
async def _make_user(db: AsyncSession, email: str, full_name: str = "Test User", **kwargs) -> User:
    user = User(
        email=email,
        hashed_password=get_password_hash(PASSWORD),
        full_name=full_name,
        **kwargs,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def _auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


async def _add_member(
    db: AsyncSession, company_id: int, user: User, role: str = "staff", pay_rate: float = 20.0
) -> CompanyMember:
    member = CompanyMember(
        company_id=company_id,
        user_id=user.id,
        role=role,
        pay_rate=pay_rate,
        pay_period="hourly",
    )
    db.add(member)
    await db.commit()
    return member


ONBOARDING = {
    "company_name": "Acme Builders",
    "industry": "Construction",
    "company_size": "6-25",
    "address": "1 Main St",
    "city": "Austin",
    "state": "TX",
    "postal_code": "73301",
    "country": "US",
    "full_name": "Alice Admin",
    "job_title": "owner",
    "default_pay_rate": 18.5,
}


# ── Actors ──────────────────────────────────────────────────────────
@pytest.fixture
async def admin_user(db_session) -> User:
    return await _make_user(db_session, "alice@acme.test", "Alice Admin")


@pytest.fixture
def admin_headers(admin_user) -> dict[str, str]:
    return _auth_headers(admin_user)


@pytest.fixture
async def company(async_client, admin_headers) -> dict:
    """A company onboarded through the API, with Alice as its admin."""
    resp = await async_client.post(f"{API}/companies", json=ONBOARDING, headers=admin_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["company"]


@pytest.fixture
async def staff_user(db_session, company) -> User:
    user = await _make_user(db_session, "bob@acme.test", "Bob Builder")
    await _add_member(db_session, company["id"], user, pay_rate=20.0)
    return user


@pytest.fixture
def staff_headers(staff_user) -> dict[str, str]:
    return _auth_headers(staff_user)


# ── Factories ───────────────────────────────────────────────────────
@pytest.fixture
def make_user(db_session):
    """``await make_user(email, full_name, **fields)`` creates a user with PASSWORD."""

    async def _factory(email: str, full_name: str = "Test User", **kwargs) -> User:
        return await _make_user(db_session, email, full_name, **kwargs)

    return _factory


@pytest.fixture
def add_member(db_session):
    """``await add_member(company_id, user, role=..., pay_rate=...)``."""

    async def _factory(company_id: int, user: User, role: str = "staff", pay_rate: float = 20.0):
        return await _add_member(db_session, company_id, user, role, pay_rate)

    return _factory


@pytest.fixture
def headers_for():
    """Bearer headers for an arbitrary user."""
    return _auth_headers
