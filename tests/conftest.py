"""Shared fixtures: in-memory database, API client and auth headers."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from collections.abc import AsyncGenerator
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.middleware import booking_update_limiter
from app.core.security import create_access_token
from app.database import Base, get_db
from app.main import app
from app.models.booking import Booking
from app.schemas.booking import BookingCreate
from app.services.booking_service import booking_service

OWNER_ID = "owner-uid-1"
RENTER_ID = "renter-uid-1"
STRANGER_ID = "stranger-uid-1"


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def no_rate_limit() -> None:
        return None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[booking_update_limiter] = no_rate_limit
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


@pytest.fixture
def owner_headers() -> dict[str, str]:
    return auth_headers(OWNER_ID)


@pytest.fixture
def renter_headers() -> dict[str, str]:
    return auth_headers(RENTER_ID)


@pytest.fixture
def stranger_headers() -> dict[str, str]:
    return auth_headers(STRANGER_ID)


@pytest.fixture
def booking_request() -> BookingCreate:
    return BookingCreate(
        listing_id="listing-tent-42",
        owner_id=OWNER_ID,
        start_date=date(2026, 7, 1),
        end_date=date(2026, 7, 3),
        daily_rate=2500,
        upfront_fee=1000,
        security_deposit=5000,
        upfront_payment_id="pi_upfront_123",
        renter_notes="Picking up Friday morning",
    )


@pytest_asyncio.fixture
async def pending_booking(db, booking_request) -> Booking:
    return await booking_service.create_booking(db, RENTER_ID, booking_request)
