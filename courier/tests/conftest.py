"""
Centralized Test Configuration.
"""

import pytest
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient, ASGITransport
from jose import jwt
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from courier.app.main import app
from courier.app.core.config import settings
from courier.app.db.session import get_db, Base
from courier.app.domain.quoting.geo import GeoPoint
from courier.app.domain.quoting.models import QuoteRequest
from courier.app.models.parcel_enums import WeightCategory

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def override_get_db():
    async with TestingSessionLocal() as session:
        yield session

app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


def make_token(user_id: int, username: str = "customer") -> str:
    """Sign a token the way the auth service does."""
    payload = {
        "sub": username,
        "user_id": user_id,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=30),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


@pytest.fixture
def owner_headers():
    return {"Authorization": f"Bearer {make_token(1, 'alice')}"}


@pytest.fixture
def other_owner_headers():
    return {"Authorization": f"Bearer {make_token(2, 'bob')}"}


@pytest.fixture
def nairobi_to_mombasa():
    """Default coordinates used by the booking wizard."""
    return {
        "pickup_address": "Kenyatta Avenue, Nairobi",
        "destination_address": "Moi Avenue, Mombasa",
        "pickup_lat": -1.2921,
        "pickup_lng": 36.8219,
        "destination_lat": -4.0435,
        "destination_lng": 39.6682,
        "weight_category": "medium",
    }


def make_request(category=WeightCategory.SMALL, pickup_address="1 Pickup Rd", destination_address="2 Drop St"):
    return QuoteRequest(
        pickup_address=pickup_address,
        destination_address=destination_address,
        pickup=GeoPoint(-1.2921, 36.8219),
        destination=GeoPoint(-4.0435, 39.6682),
        weight_category=category,
    )


@pytest.fixture
def request_factory():
    return make_request
