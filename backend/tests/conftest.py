"""
Pytest fixtures for test database, client, and authentication.

Each test gets its own SQLite file so concurrent-session tests behave like
separate connections to one database. Redis is disabled.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ADMISSION_STRATEGY", "local")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from datetime import date, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from ludus.main import app
from ludus.db.base import Base
from ludus.db.session import get_db
from ludus.core.security import create_access_token, hash_password
from ludus.models import User, Vendor, Activity

FUTURE_DATE = date.today() + timedelta(days=30)


@pytest_asyncio.fixture
async def engine(tmp_path):
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ludus_test.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(db: AsyncSession, email: str, role: str = "user", **kwargs) -> User:
    user = User(
        email=email,
        first_name=kwargs.pop("first_name", "Test"),
        last_name=kwargs.pop("last_name", "User"),
        hashed_password=hash_password("testpassword123"),
        role=role,
        **kwargs,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "test@example.com", first_name="Noura", last_name="Saleh")


@pytest_asyncio.fixture
async def vendor_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "vendor@example.com", role="vendor")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "admin@example.com", role="admin")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    return headers_for(test_user)


@pytest_asyncio.fixture
async def vendor_headers(vendor_user: User) -> dict:
    return headers_for(vendor_user)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


@pytest_asyncio.fixture
async def test_vendor(db_session: AsyncSession, vendor_user: User) -> Vendor:
    vendor = Vendor(
        owner_id=vendor_user.id,
        business_name="Red Sea Divers",
        slug="red-sea-divers",
        description="Diving trips in Jeddah",
        contact_email="hello@redseadivers.sa",
        contact_phone="+966500000001",
        city="Jeddah",
    )
    db_session.add(vendor)
    await db_session.commit()
    await db_session.refresh(vendor)
    return vendor


async def make_activity(db: AsyncSession, vendor: Vendor, **overrides) -> Activity:
    values = dict(
        vendor_id=vendor.id,
        created_by=vendor.owner_id,
        title="Coral Reef Dive",
        slug=f"coral-reef-dive-{overrides.get('title', 'default').lower().replace(' ', '-')}",
        description="Guided dive over the reef",
        short_description="Reef dive",
        category="outdoor",
        city="Jeddah",
        base_price=100.0,
        currency="SAR",
        price_type="per_person",
        min_participants=1,
        max_participants=10,
        is_active=True,
        status="active",
    )
    values.update(overrides)
    activity = Activity(**values)
    db.add(activity)
    await db.commit()
    await db.refresh(activity)
    return activity


@pytest_asyncio.fixture
async def test_activity(db_session: AsyncSession, test_vendor: Vendor) -> Activity:
    """Activity with capacity for 10 participants per date."""
    return await make_activity(db_session, test_vendor)


@pytest_asyncio.fixture
async def inactive_activity(db_session: AsyncSession, test_vendor: Vendor) -> Activity:
    return await make_activity(
        db_session, test_vendor, title="Closed Dive", is_active=False,
    )
