"""
MoveMate Backend — Estimate Decision Engine
============================================

What:  Accept / reject state machine for one (driver, request) pair.
Who:   Called by DriverRequestService after the eligibility gate.

State Machine (per driver, per request, read from the latest estimate):

    ┌────────────┬─────────────────────────┬─────────────────────────┐
    │ latest     │ accept                  │ reject                  │
    ├────────────┼─────────────────────────┼─────────────────────────┤
    │ none       │ create ACCEPTED         │ create REJECTED         │
    │ PENDING    │ update → ACCEPTED       │ update → REJECTED       │
    │ ACCEPTED   │ BadRequest              │ BadRequest              │
    │ REJECTED   │ update → ACCEPTED       │ BadRequest              │
    └────────────┴─────────────────────────┴─────────────────────────┘
    (BadRequest = "already decided"; REJECTED → ACCEPTED is a reversal)

Every transition is exactly one write. Updates are compare-and-swap on the
status that was read, and inserts are guarded by uq_estimates_driver_request,
so two concurrent decisions on the same pair cannot both succeed.
"""

import logging
from typing import Optional, Union

from movemate.exceptions import BadRequestError, NotFoundError
from movemate.models.enums import EstimateStatus
from movemate.models.estimate import Estimate
from movemate.repositories.driver_request_repository import DriverRequestRepository
from movemate.schemas.driver_request import (
    AcceptDecision,
    DriverRequestFilters,
    RejectDecision,
)
from movemate.services.driver_eligibility import DriverEligibility
from movemate.services.request_matcher import RequestMatcher

logger = logging.getLogger(__name__)

# Price stored on every rejection.
REJECT_PRICE = 0

ALREADY_DECIDED = "This request has already been decided"


class EstimateDecisionEngine:
    def __init__(self, repository: DriverRequestRepository, matcher: RequestMatcher):
        self.repository = repository
        self.matcher = matcher

    async def ensure_request_accessible(
        self, eligibility: DriverEligibility, request_id: int
    ) -> None:
        """
        Raise NotFoundError unless the request is in the driver's pool.

        Runs the full matcher (categories and regions) restricted to one id,
        so a request outside the driver's scope looks the same as a missing one.
        """
        filters = DriverRequestFilters(
            request_id=request_id, page=1, page_size=1, sort="soonest"
        )
        result = await self.matcher.find_requests(
            eligibility.driver_id,
            filters,
            eligibility.service_categories,
            eligibility.regions,
        )
        if not result.requests:
            logger.warning(
                "Driver %s tried to decide inaccessible request %s",
                eligibility.driver_id,
                request_id,
            )
            raise NotFoundError(resource="Request", resource_id=str(request_id))

    async def accept(
        self,
        eligibility: DriverEligibility,
        request_id: int,
        reason: str,
        price: Optional[int] = None,
    ) -> Estimate:
        await self.ensure_request_accessible(eligibility, request_id)
        driver_id = eligibility.driver_id
        price = price if price is not None else 0

        existing = await self.repository.find_latest_estimate(driver_id, request_id)
        if existing is None:
            estimate = await self.repository.create_estimate(
                driver_id=driver_id,
                request_id=request_id,
                status=EstimateStatus.ACCEPTED,
                request_reason=reason,
                price=price,
                is_request=True,
            )
        elif existing.status == EstimateStatus.ACCEPTED:
            raise BadRequestError(
                message=ALREADY_DECIDED,
                context={"request_id": request_id, "status": existing.status.value},
            )
        else:
            # PENDING, or a REJECTED estimate being reversed
            estimate = await self.repository.update_estimate(
                estimate_id=existing.id,
                expected_status=existing.status,
                status=EstimateStatus.ACCEPTED,
                request_reason=reason,
                price=price,
                is_request=True,
            )

        estimate = self._require_written(estimate, request_id)
        logger.info(
            "Driver %s accepted request %s (estimate=%s, price=%s)",
            driver_id,
            request_id,
            estimate.id,
            price,
        )
        return estimate

    async def reject(
        self,
        eligibility: DriverEligibility,
        request_id: int,
        reason: str,
    ) -> Estimate:
        await self.ensure_request_accessible(eligibility, request_id)
        driver_id = eligibility.driver_id

        existing = await self.repository.find_latest_estimate(driver_id, request_id)
        if existing is None:
            estimate = await self.repository.create_estimate(
                driver_id=driver_id,
                request_id=request_id,
                status=EstimateStatus.REJECTED,
                request_reason=reason,
                price=REJECT_PRICE,
                is_request=True,
            )
        elif existing.status in (EstimateStatus.ACCEPTED, EstimateStatus.REJECTED):
            raise BadRequestError(
                message=ALREADY_DECIDED,
                context={"request_id": request_id, "status": existing.status.value},
            )
        else:
            estimate = await self.repository.update_estimate(
                estimate_id=existing.id,
                expected_status=existing.status,
                status=EstimateStatus.REJECTED,
                request_reason=reason,
                price=REJECT_PRICE,
                is_request=True,
            )

        estimate = self._require_written(estimate, request_id)
        logger.info(
            "Driver %s rejected request %s (estimate=%s)", driver_id, request_id, estimate.id
        )
        return estimate

    async def apply_decision(
        self,
        eligibility: DriverEligibility,
        decision: Union[AcceptDecision, RejectDecision],
    ) -> Estimate:
        """
        Overwrite the decision on the driver's existing estimate.

        Unlike accept()/reject() this never creates a row, and any current
        status may be overwritten.

        Raises:
            NotFoundError: request outside the pool, or no estimate on it yet
            BadRequestError: the estimate changed since it was read
        """
        request_id = decision.request_id
        await self.ensure_request_accessible(eligibility, request_id)

        existing = await self.repository.find_latest_estimate(
            eligibility.driver_id, request_id
        )
        if existing is None:
            raise NotFoundError(
                resource="Estimate",
                context={"request_id": request_id, "driver_id": eligibility.driver_id},
            )

        if isinstance(decision, AcceptDecision):
            status, price = EstimateStatus.ACCEPTED, decision.price
        else:
            status, price = EstimateStatus.REJECTED, REJECT_PRICE

        estimate = await self.repository.update_estimate(
            estimate_id=existing.id,
            expected_status=existing.status,
            status=status,
            request_reason=decision.request_reason,
            price=price,
            is_request=True,
        )
        estimate = self._require_written(estimate, request_id)
        logger.info(
            "Driver %s changed estimate %s on request %s: %s -> %s",
            eligibility.driver_id,
            estimate.id,
            request_id,
            existing.status.value,
            status.value,
        )
        return estimate

    @staticmethod
    def _require_written(estimate: Optional[Estimate], request_id: int) -> Estimate:
        # None means a concurrent decision won the insert or the CAS update
        if estimate is None:
            raise BadRequestError(message=ALREADY_DECIDED, context={"request_id": request_id})
        return estimate
