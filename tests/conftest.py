"""
Pytest configuration and fixtures for backend testing
"""

import os
from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)
from sqlalchemy.pool import NullPool

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ.setdefault("ADMIN_EMAILS", "boss@jumpstudy.org")
os.environ.setdefault("AUTH_HOOK_SECRET", "test-hook-secret")

from jumpstudy.main import app
from jumpstudy.db.config import get_session
from jumpstudy.models.enums import Role
from jumpstudy.models.persisted import Base, User
from jumpstudy.services.catalog import invalidate_catalog


@pytest.fixture
async def session_factory(tmp_path):
    """Throwaway SQLite database per test"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        future=True,
        poolclass=NullPool,
    )
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield factory

    await engine.dispose()


@pytest.fixture
async def test_app(session_factory):
    async def override_session():
        async with session_factory() as session:  # type: ignore
            yield session

    app.dependency_overrides[get_session] = override_session
    invalidate_catalog()

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app):
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def make_user(session_factory):
    """Insert a user directly and return its id"""
    async def _make_user(
        role: Role = Role.STUDENT,
        email: str = None,
        organization_id: str = None,
        name: str = "Test User",
    ) -> str:
        async with session_factory() as session:
            user = User(
                email=email or f"{role.value.lower()}-{os.urandom(4).hex()}@example.com",
                name=name,
                role=role.value,
                organization_id=organization_id,
            )
            session.add(user)
            await session.commit()
            return user.id

    return _make_user


@pytest.fixture
async def admin_id(make_user):
    return await make_user(Role.PLATFORM_ADMIN, email="admin@example.com")


@pytest.fixture
async def organization(client, admin_id):
    r = await client.post(
        "/api/organizations",
        json=organization_payload(),
        headers=auth(admin_id),
    )
    assert r.status_code == 201, r.text
    return r.json()


# Helper functions for tests
def auth(user_id: str) -> dict:
    return {"X-User-Id": user_id}


def auth_hook() -> dict:
    return {"X-Auth-Hook-Secret": os.environ["AUTH_HOOK_SECRET"]}


def organization_payload(**overrides) -> dict:
    payload = {
        "name": "Bright Futures",
        "description": "Youth learning center in Yangon.",
        "phone": "0912345678",
        "email": "info@brightfutures.org",
        "address": "123 Pyay Road",
        "latitude": "16.84",
        "longitude": "96.17",
    }
    payload.update(overrides)
    return payload


def course_payload(**overrides) -> dict:
    start = datetime.utcnow() + timedelta(days=10)
    payload = {
        "title": "Intro to Coding",
        "subtitle": "Learn Python basics",
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(days=30)).isoformat(),
        "duration": 30,
        "schedule": "Weekends 9-12",
        "feeAmount": 0,
        "ageMin": 15,
        "ageMax": 22,
        "availableDays": [True, False, False, False, False, False, True],
        "badges": [{"text": "Free", "color": "#fff", "backgroundColor": "#0a0"}],
        "faq": [
            {"question": "Is it free?", "answer": "Yes"},
            {"question": "", "answer": "skipped"},
        ],
        "imageUrls": ["https://cdn.example.com/a.png"],
    }
    payload.update(overrides)
    return payload


def assert_response_success(response, expected_status=200):
    """Assert that response is successful"""
    assert response.status_code == expected_status, f"Expected {expected_status}, got {response.status_code}: {response.text}"
