"""
MoveMate Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the whole suite.

Fixture Hierarchy (all function-scoped):
    ├── make_request / make_estimate / make_candidate:
    │       factories for transient ORM objects used by service tests
    ├── eligibility: a SEOUL / SMALL driver
    ├── mock_repository: AsyncMock standing in for DriverRequestRepository
    ├── db_session: AsyncSession on a fresh in-memory aiosqlite database
    ├── mock_service: AsyncMock standing in for DriverRequestService
    └── test_client: HTTPX AsyncClient against a fresh app, with the
                     service and current-user dependencies overridden
"""

import os

# Must run before any movemate import: the settings singleton and the engine
# are created at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import itertools
from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import movemate.models  # noqa: F401
from movemate.auth import get_current_user_id
from movemate.database import Base
from movemate.models import Estimate, EstimateStatus, MovingRequest, MovingType, RegionCode
from movemate.repositories.driver_request_repository import (
    CandidateRequest,
    DriverRequestRepository,
)
from movemate.routes.driver_requests import get_driver_request_service
from movemate.services.driver_eligibility import DriverEligibility
from movemate.services.driver_request_service import DriverRequestService

BASE_TIME = datetime(2026, 3, 1, 9, 0, 0)
TEST_USER_ID = "11111111-1111-1111-1111-111111111111"


# ══════════════════════════════════════════════════════════════════════════
# Object factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_request():
    """
    Build a transient MovingRequest. Defaults describe a SMALL move out of
    Seoul; `day` shifts both moving_date and created_at by whole days.
    """
    ids = itertools.count(1)

    def _make(
        id=None,
        moving_type=MovingType.SMALL,
        origin="서울시 강남구 테헤란로 1",
        destination="서울시 마포구 월드컵로 2",
        moving_day=10,
        created_day=0,
        user_id="requester-1",
    ):
        return MovingRequest(
            id=id if id is not None else next(ids),
            user_id=user_id,
            moving_type=moving_type,
            moving_date=BASE_TIME + timedelta(days=moving_day),
            origin=origin,
            destination=destination,
            created_at=BASE_TIME + timedelta(days=created_day),
            updated_at=BASE_TIME + timedelta(days=created_day),
        )

    return _make


@pytest.fixture
def make_estimate():
    ids = itertools.count(100)

    def _make(
        request_id=1,
        driver_id=7,
        status=EstimateStatus.PENDING,
        price=0,
        request_reason="reason",
        is_request=False,
    ):
        return Estimate(
            id=next(ids),
            request_id=request_id,
            driver_id=driver_id,
            status=status,
            price=price,
            request_reason=request_reason,
            is_request=is_request,
            created_at=BASE_TIME,
            updated_at=BASE_TIME,
        )

    return _make


@pytest.fixture
def make_candidate():
    def _make(request, estimates=None, requester_name="Kim"):
        return CandidateRequest(
            request=request,
            estimates=list(estimates or []),
            requester_name=requester_name,
        )

    return _make


@pytest.fixture
def eligibility():
    return DriverEligibility(
        driver_id=7,
        service_categories=[MovingType.SMALL],
        regions=[RegionCode.SEOUL],
    )


# ══════════════════════════════════════════════════════════════════════════
# Repository / database
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_repository():
    """AsyncMock with the repository's interface; set return values per test."""
    return AsyncMock(spec=DriverRequestRepository)


@pytest_asyncio.fixture
async def db_session():
    """
    A session on a private in-memory SQLite database.

    StaticPool keeps the single in-memory connection alive for the whole
    test; every test gets a fresh schema.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_service():
    return AsyncMock(spec=DriverRequestService)


@pytest_asyncio.fixture
async def test_client(mock_service):
    """
    HTTPX AsyncClient talking to a freshly built app.

    The caller is always TEST_USER_ID and every route gets `mock_service`.
    Tests that exercise authentication remove the user override.
    """
    from movemate.main import create_app

    app = create_app()
    app.dependency_overrides[get_driver_request_service] = lambda: mock_service
    app.dependency_overrides[get_current_user_id] = lambda: TEST_USER_ID

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client.app = app
        yield client
