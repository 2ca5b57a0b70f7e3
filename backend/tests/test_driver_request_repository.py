"""
MoveMate Backend — Driver Request Repository Tests
===================================================

How:   Real SQL against an in-memory aiosqlite database (db_session fixture).

What we test:
    ✅ Driver profile: soft-deleted rows ignored, duplicates collapsed
    ✅ Candidate query: categories, explicit type, request id, designation
    ✅ Candidate ordering and per-request estimates newest first
    ✅ Unique (driver, request) insert returns None on conflict
    ✅ CAS update succeeds once, then reports the stale status
    ✅ Rejected listing: only direct rejections, newest first, paged
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio

from movemate.models import (
    Driver,
    Estimate,
    EstimateStatus,
    MovingRequest,
    MovingType,
    Region,
    RegionCode,
    Role,
    Service,
    User,
)
from movemate.repositories.driver_request_repository import DriverRequestRepository
from movemate.schemas.driver_request import DriverRequestFilters

T0 = datetime(2026, 3, 1, 9, 0, 0)


@pytest_asyncio.fixture
async def seeded(db_session):
    """
    One customer, one Seoul driver offering SMALL and HOME, three requests:
        r1  SMALL  moves day 20, created day 2
        r2  HOME   moves day 5,  created day 0
        r3  OFFICE moves day 1,  created day 1
    Seed rows are committed so a rolled-back write only undoes itself.
    """
    customer = User(id="customer", email="c@example.com", name="Customer", role=Role.USER)
    driver_user = User(id="driver-user", email="d@example.com", name="Driver", role=Role.DRIVER)
    db_session.add_all([customer, driver_user])
    await db_session.flush()

    driver = Driver(user_id="driver-user", nickname="fast-mover")
    db_session.add_all(
        [
            driver,
            Driver(user_id="driver-user", nickname="old", is_deleted=True),
            Service(user_id="driver-user", category=MovingType.SMALL),
            Service(user_id="driver-user", category=MovingType.HOME),
            Service(user_id="driver-user", category=MovingType.SMALL),
            Service(user_id="driver-user", category=MovingType.OFFICE, is_deleted=True),
            Region(user_id="driver-user", region=RegionCode.SEOUL),
        ]
    )

    def _request(moving_type, moving_day, created_day):
        return MovingRequest(
            user_id="customer",
            moving_type=moving_type,
            moving_date=T0 + timedelta(days=moving_day),
            origin="서울시 강남구",
            destination="서울시 송파구",
            created_at=T0 + timedelta(days=created_day),
            updated_at=T0 + timedelta(days=created_day),
        )

    r1 = _request(MovingType.SMALL, 20, 2)
    r2 = _request(MovingType.HOME, 5, 0)
    r3 = _request(MovingType.OFFICE, 1, 1)
    db_session.add_all([r1, r2, r3])
    await db_session.commit()

    return {"driver": driver, "requests": (r1, r2, r3)}


def _estimate(driver_id, request_id, status, created_day=0, is_request=True):
    return Estimate(
        driver_id=driver_id,
        request_id=request_id,
        status=status,
        price=0,
        request_reason="reason",
        is_request=is_request,
        created_at=T0 + timedelta(days=created_day),
        updated_at=T0 + timedelta(days=created_day),
    )


class TestFindDriverProfile:

    @pytest.mark.asyncio
    async def test_profile(self, db_session, seeded):
        profile = await DriverRequestRepository(db_session).find_driver_profile("driver-user")

        assert profile.role == Role.DRIVER
        assert profile.driver_id == seeded["driver"].id
        assert profile.service_categories == [MovingType.SMALL, MovingType.HOME]
        assert profile.regions == [RegionCode.SEOUL]

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session, seeded):
        assert await DriverRequestRepository(db_session).find_driver_profile("nobody") is None

    @pytest.mark.asyncio
    async def test_soft_deleted_user(self, db_session, seeded):
        db_session.add(
            User(id="gone", email="g@example.com", name="Gone", role=Role.DRIVER, is_deleted=True)
        )
        await db_session.flush()

        assert await DriverRequestRepository(db_session).find_driver_profile("gone") is None

    @pytest.mark.asyncio
    async def test_customer_has_no_driver_row(self, db_session, seeded):
        profile = await DriverRequestRepository(db_session).find_driver_profile("customer")

        assert profile.role == Role.USER
        assert profile.driver_id is None
        assert profile.service_categories == []


class TestFindCandidateRequests:

    @pytest.mark.asyncio
    async def test_driver_categories_soonest(self, db_session, seeded):
        r1, r2, _ = seeded["requests"]
        repo = DriverRequestRepository(db_session)

        candidates = await repo.find_candidate_requests(
            seeded["driver"].id,
            DriverRequestFilters(),
            [MovingType.SMALL, MovingType.HOME],
        )

        assert [c.request.id for c in candidates] == [r2.id, r1.id]
        assert candidates[0].requester_name == "Customer"
        assert all(c.estimates == [] for c in candidates)

    @pytest.mark.asyncio
    async def test_recent_sort(self, db_session, seeded):
        r1, r2, _ = seeded["requests"]

        candidates = await DriverRequestRepository(db_session).find_candidate_requests(
            seeded["driver"].id,
            DriverRequestFilters(sort="recent"),
            [MovingType.SMALL, MovingType.HOME],
        )

        assert [c.request.id for c in candidates] == [r1.id, r2.id]

    @pytest.mark.asyncio
    async def test_explicit_moving_type_and_request_id(self, db_session, seeded):
        r1, r2, _ = seeded["requests"]
        repo = DriverRequestRepository(db_session)
        driver_id = seeded["driver"].id
        categories = [MovingType.SMALL, MovingType.HOME]

        by_type = await repo.find_candidate_requests(
            driver_id, DriverRequestFilters(moving_type=MovingType.SMALL), categories
        )
        by_id = await repo.find_candidate_requests(
            driver_id, DriverRequestFilters(request_id=r2.id), categories
        )

        assert [c.request.id for c in by_type] == [r1.id]
        assert [c.request.id for c in by_id] == [r2.id]

    @pytest.mark.asyncio
    async def test_designation_filter_and_estimates(self, db_session, seeded):
        r1, r2, _ = seeded["requests"]
        driver_id = seeded["driver"].id
        db_session.add(_estimate(driver_id, r1.id, EstimateStatus.ACCEPTED))
        await db_session.flush()
        repo = DriverRequestRepository(db_session)
        categories = [MovingType.SMALL, MovingType.HOME]

        designated = await repo.find_candidate_requests(
            driver_id, DriverRequestFilters(is_designated=True), categories
        )
        undesignated = await repo.find_candidate_requests(
            driver_id, DriverRequestFilters(is_designated=False), categories
        )

        assert [c.request.id for c in designated] == [r1.id]
        assert designated[0].latest_estimate.status == EstimateStatus.ACCEPTED
        assert [c.request.id for c in undesignated] == [r2.id]


class TestEstimateWrites:

    @pytest.mark.asyncio
    async def test_create_then_duplicate_returns_none(self, db_session, seeded):
        r1 = seeded["requests"][0]
        driver_id = seeded["driver"].id
        repo = DriverRequestRepository(db_session)

        first = await repo.create_estimate(
            driver_id, r1.id, EstimateStatus.ACCEPTED, "ok", 1000, True
        )
        first_id = first.id
        await db_session.commit()

        second = await repo.create_estimate(
            driver_id, r1.id, EstimateStatus.REJECTED, "no", 0, True
        )

        assert first_id is not None
        assert second is None
        latest = await repo.find_latest_estimate(driver_id, r1.id)
        assert latest.id == first_id
        assert latest.status == EstimateStatus.ACCEPTED

    @pytest.mark.asyncio
    async def test_conflict_keeps_rest_of_transaction(self, db_session, seeded):
        """A duplicate insert rolls back to its savepoint only."""
        r1, r2, _ = seeded["requests"]
        driver_id = seeded["driver"].id
        repo = DriverRequestRepository(db_session)
        await repo.create_estimate(driver_id, r1.id, EstimateStatus.ACCEPTED, "ok", 1000, True)
        pending = await repo.create_estimate(
            driver_id, r2.id, EstimateStatus.REJECTED, "far", 0, True
        )

        duplicate = await repo.create_estimate(
            driver_id, r1.id, EstimateStatus.REJECTED, "no", 0, True
        )

        assert duplicate is None
        # Loaded instances are still usable without a reload
        assert r1.id is not None
        assert pending.status == EstimateStatus.REJECTED
        kept = await repo.find_latest_estimate(driver_id, r2.id)
        assert kept.id == pending.id
        first = await repo.find_latest_estimate(driver_id, r1.id)
        assert first.status == EstimateStatus.ACCEPTED

    @pytest.mark.asyncio
    async def test_compare_and_swap_update(self, db_session, seeded):
        r1 = seeded["requests"][0]
        driver_id = seeded["driver"].id
        db_session.add(_estimate(driver_id, r1.id, EstimateStatus.PENDING))
        await db_session.flush()
        repo = DriverRequestRepository(db_session)
        existing = await repo.find_latest_estimate(driver_id, r1.id)

        updated = await repo.update_estimate(
            existing.id, EstimateStatus.PENDING, EstimateStatus.ACCEPTED, "ok", 5000, True
        )
        stale = await repo.update_estimate(
            existing.id, EstimateStatus.PENDING, EstimateStatus.REJECTED, "no", 0, True
        )

        assert updated.status == EstimateStatus.ACCEPTED
        assert updated.price == 5000
        assert stale is None
        latest = await repo.find_latest_estimate(driver_id, r1.id)
        assert latest.status == EstimateStatus.ACCEPTED

    @pytest.mark.asyncio
    async def test_find_latest_none(self, db_session, seeded):
        repo = DriverRequestRepository(db_session)
        r2 = seeded["requests"][1]

        assert await repo.find_latest_estimate(seeded["driver"].id, r2.id) is None


class TestFindRejectedEstimates:

    @pytest.mark.asyncio
    async def test_direct_rejections_newest_first(self, db_session, seeded):
        r1, r2, r3 = seeded["requests"]
        driver_id = seeded["driver"].id
        db_session.add_all(
            [
                _estimate(driver_id, r1.id, EstimateStatus.REJECTED, created_day=0),
                _estimate(driver_id, r2.id, EstimateStatus.REJECTED, created_day=3),
                _estimate(driver_id, r3.id, EstimateStatus.REJECTED, is_request=False),
            ]
        )
        await db_session.flush()
        repo = DriverRequestRepository(db_session)

        total, page_one = await repo.find_rejected_estimates(driver_id, 1, 1)
        _, page_two = await repo.find_rejected_estimates(driver_id, 2, 1)

        assert total == 2
        assert [e.request_id for e in page_one] == [r2.id]
        assert [e.request_id for e in page_two] == [r1.id]
        assert page_one[0].request.moving_type == MovingType.HOME
