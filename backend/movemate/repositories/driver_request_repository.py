"""
MoveMate Backend — Driver Request Repository
=============================================

What:  All SQL issued by the driver request/estimate core.
Why:   Keeps query construction in one place. The matcher, decision engine
       and eligibility resolver receive an instance of this class and never
       touch the session, so they can be tested with an AsyncMock instead.
How:   Wraps the per-request AsyncSession from get_db_session(). Writes are
       flushed, not committed; the session dependency commits at the end of
       the HTTP request.

Error translation:
    SQLAlchemy errors become DatabaseError (generic 500 to the client,
    details in the log). Two write conflicts are expected and reported as
    a None return instead:
      - create_estimate() hits uq_estimates_driver_request
      - update_estimate() finds the row no longer in the expected status
    The decision engine turns both into "already decided".
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy import exists, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from movemate.exceptions import DatabaseError
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
from movemate.schemas.driver_request import DriverRequestFilters

logger = logging.getLogger(__name__)


@dataclass
class DriverProfile:
    """Everything the eligibility check needs about one user."""

    user_id: str
    role: Role
    driver_id: Optional[int]
    service_categories: List[MovingType] = field(default_factory=list)
    regions: List[RegionCode] = field(default_factory=list)


@dataclass
class CandidateRequest:
    """
    A moving request plus this driver's estimates on it, newest first.

    `estimates` is empty for requests the driver has not acted on.
    """

    request: MovingRequest
    estimates: List[Estimate] = field(default_factory=list)
    requester_name: Optional[str] = None

    @property
    def latest_estimate(self) -> Optional[Estimate]:
        return self.estimates[0] if self.estimates else None


@contextmanager
def _database_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
        raise DatabaseError(
            message="Could not complete the request. Please try again.",
            context={"operation": operation, "error_type": type(e).__name__},
        ) from e


class DriverRequestRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ── Driver profile ────────────────────────────────────────────────────

    async def find_driver_profile(self, user_id: str) -> Optional[DriverProfile]:
        """
        Load a user's role, live driver row, categories and regions.

        Returns None when the user does not exist or is soft-deleted. A user
        of any role is returned so the caller can tell "not a driver" apart
        from "driver without configuration".
        """
        with _database_errors("find_driver_profile"):
            user = (
                await self.db.execute(
                    select(User).where(User.id == user_id, User.is_deleted.is_(False))
                )
            ).scalar_one_or_none()
            if user is None:
                return None

            driver_id = (
                await self.db.execute(
                    select(Driver.id)
                    .where(Driver.user_id == user_id, Driver.is_deleted.is_(False))
                    .order_by(Driver.id)
                    .limit(1)
                )
            ).scalar_one_or_none()

            categories = (
                await self.db.execute(
                    select(Service.category)
                    .where(Service.user_id == user_id, Service.is_deleted.is_(False))
                    .order_by(Service.id)
                )
            ).scalars().all()

            regions = (
                await self.db.execute(
                    select(Region.region)
                    .where(Region.user_id == user_id, Region.is_deleted.is_(False))
                    .order_by(Region.id)
                )
            ).scalars().all()

        return DriverProfile(
            user_id=user.id,
            role=user.role,
            driver_id=driver_id,
            service_categories=list(dict.fromkeys(categories)),
            regions=list(dict.fromkeys(regions)),
        )

    # ── Request pool ──────────────────────────────────────────────────────

    async def find_candidate_requests(
        self,
        driver_id: int,
        filters: DriverRequestFilters,
        service_categories: Sequence[MovingType],
    ) -> List[CandidateRequest]:
        """
        Fetch every request matching the database-expressible filters.

        Region is deliberately absent here: origins are free text and are
        classified in memory by the matcher. Pagination is absent for the
        same reason, since the page can only be cut after that filter.

        Query plan:
            SELECT ... FROM requests
            WHERE moving_type IN (:categories)          -- or = :moving_type
              [AND id = :request_id]
              [AND [NOT] EXISTS (SELECT 1 FROM estimates
                                 WHERE request_id = requests.id
                                   AND driver_id = :driver_id)]
            ORDER BY moving_date ASC                    -- or created_at DESC
        followed by one query for this driver's estimates on those ids.
        """
        query = select(MovingRequest).options(selectinload(MovingRequest.user))

        if filters.request_id is not None:
            query = query.where(MovingRequest.id == filters.request_id)

        if filters.moving_type is not None:
            query = query.where(MovingRequest.moving_type == filters.moving_type)
        else:
            query = query.where(MovingRequest.moving_type.in_(list(service_categories)))

        if filters.is_designated is not None:
            has_estimate = exists().where(
                Estimate.request_id == MovingRequest.id,
                Estimate.driver_id == driver_id,
            )
            query = query.where(has_estimate if filters.is_designated else ~has_estimate)

        if filters.sort == "recent":
            query = query.order_by(MovingRequest.created_at.desc(), MovingRequest.id.desc())
        else:
            query = query.order_by(MovingRequest.moving_date.asc(), MovingRequest.id.asc())

        with _database_errors("find_candidate_requests"):
            requests = list((await self.db.execute(query)).scalars().all())
            estimates_by_request = await self._estimates_by_request(
                driver_id, [r.id for r in requests]
            )

        return [
            CandidateRequest(
                request=request,
                estimates=estimates_by_request.get(request.id, []),
                requester_name=request.user.name if request.user else None,
            )
            for request in requests
        ]

    async def _estimates_by_request(
        self, driver_id: int, request_ids: List[int]
    ) -> Dict[int, List[Estimate]]:
        if not request_ids:
            return {}
        result = await self.db.execute(
            select(Estimate)
            .where(Estimate.driver_id == driver_id, Estimate.request_id.in_(request_ids))
            .order_by(Estimate.created_at.desc(), Estimate.id.desc())
        )
        grouped: Dict[int, List[Estimate]] = {}
        for estimate in result.scalars().all():
            grouped.setdefault(estimate.request_id, []).append(estimate)
        return grouped

    # ── Estimates ─────────────────────────────────────────────────────────

    async def find_latest_estimate(self, driver_id: int, request_id: int) -> Optional[Estimate]:
        with _database_errors("find_latest_estimate"):
            result = await self.db.execute(
                select(Estimate)
                .where(Estimate.driver_id == driver_id, Estimate.request_id == request_id)
                .order_by(Estimate.created_at.desc(), Estimate.id.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def create_estimate(
        self,
        driver_id: int,
        request_id: int,
        status: EstimateStatus,
        request_reason: str,
        price: int,
        is_request: bool,
    ) -> Optional[Estimate]:
        """
        Insert a new estimate. Returns None if another estimate for the same
        (driver, request) pair was inserted first.
        """
        estimate = Estimate(
            driver_id=driver_id,
            request_id=request_id,
            status=status,
            request_reason=request_reason,
            price=price,
            is_request=is_request,
        )
        with _database_errors("create_estimate"):
            # Savepoint: a conflict undoes this insert only, not the request's transaction
            try:
                async with self.db.begin_nested():
                    self.db.add(estimate)
                    await self.db.flush()
            except IntegrityError:
                logger.warning(
                    "Concurrent estimate insert for driver=%s request=%s",
                    driver_id,
                    request_id,
                )
                return None
        return estimate

    async def update_estimate(
        self,
        estimate_id: int,
        expected_status: Optional[EstimateStatus],
        status: EstimateStatus,
        request_reason: str,
        price: int,
        is_request: bool,
    ) -> Optional[Estimate]:
        """
        Compare-and-swap update of one estimate.

        The row is only changed if its status is still `expected_status`
        (pass None to skip the check). Returns the refreshed estimate, or
        None if the row moved on since it was read.
        """
        stmt = update(Estimate).where(Estimate.id == estimate_id)
        if expected_status is not None:
            stmt = stmt.where(Estimate.status == expected_status)
        stmt = stmt.values(
            status=status,
            request_reason=request_reason,
            price=price,
            is_request=is_request,
            updated_at=datetime.now(timezone.utc),
        ).execution_options(synchronize_session=False)

        with _database_errors("update_estimate"):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                return None
            refreshed = await self.db.execute(
                select(Estimate)
                .where(Estimate.id == estimate_id)
                .execution_options(populate_existing=True)
            )
            return refreshed.scalar_one()

    async def find_rejected_estimates(
        self, driver_id: int, page: int, page_size: int
    ) -> Tuple[int, List[Estimate]]:
        """
        Count and fetch one page of the driver's direct rejections, newest
        first, with their requests loaded. Both reads share this session.
        """
        conditions = (
            Estimate.driver_id == driver_id,
            Estimate.status == EstimateStatus.REJECTED,
            Estimate.is_request.is_(True),
        )
        with _database_errors("find_rejected_estimates"):
            total = (
                await self.db.execute(select(func.count(Estimate.id)).where(*conditions))
            ).scalar() or 0
            result = await self.db.execute(
                select(Estimate)
                .where(*conditions)
                .options(selectinload(Estimate.request))
                .order_by(Estimate.created_at.desc(), Estimate.id.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            estimates = list(result.scalars().all())
        return total, estimates
