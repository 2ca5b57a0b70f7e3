"""
MoveMate Backend — Driver Request Service (Facade)
===================================================

What:  The six driver-facing operations exposed over HTTP.
Why:   Routes stay thin; every operation runs the same gate first and the
       response shaping lives in one place.
How:   Built per HTTP request around a DriverRequestRepository (see
       routes.driver_requests.get_driver_request_service), then composes:

           resolve eligibility ──▶ validate filters ──▶ match ──▶ assemble
           resolve eligibility ──▶ decision engine (accept / reject / update)

Design Decision:
    No module-level singleton. The service owns a repository bound to one
    AsyncSession, so two concurrent HTTP requests never share state, and
    tests can pass an AsyncMock repository straight to the constructor.
"""

import logging
from typing import Optional, Union

from movemate.models.estimate import Estimate
from movemate.repositories.driver_request_repository import DriverRequestRepository
from movemate.schemas.driver_request import (
    AcceptDecision,
    DriverRequestFilters,
    DriverRequestListResponse,
    EstimateActionResponse,
    RejectDecision,
    RejectedEstimateItem,
    RejectedEstimateListResponse,
    RejectedEstimateRequestSummary,
)
from movemate.services import result_assembler
from movemate.services.driver_eligibility import DriverEligibilityResolver
from movemate.services.estimate_decision import EstimateDecisionEngine
from movemate.services.pagination import normalize, total_pages
from movemate.services.request_matcher import RequestMatcher, validate_filters

logger = logging.getLogger(__name__)


def _estimate_response(estimate: Estimate) -> EstimateActionResponse:
    return EstimateActionResponse(
        estimate_id=estimate.id,
        request_id=estimate.request_id,
        driver_id=estimate.driver_id,
        status=estimate.status,
        request_reason=estimate.request_reason or "",
        is_request=estimate.is_request,
        price=estimate.price,
        created_at=estimate.created_at,
        updated_at=estimate.updated_at,
    )


def _rejected_item(estimate: Estimate) -> RejectedEstimateItem:
    request = estimate.request
    summary = None
    if request is not None:
        summary = RejectedEstimateRequestSummary(
            moving_type=request.moving_type,
            moving_date=request.moving_date,
            origin=request.origin,
            destination=request.destination,
        )
    return RejectedEstimateItem(
        **_estimate_response(estimate).model_dump(),
        request=summary,
    )


class DriverRequestService:
    """
    Driver-side request listing and estimate decisions.

    Every public method starts with DriverEligibilityResolver.resolve(), so
    a caller who is not a configured driver never reaches a query or write.
    """

    def __init__(self, repository: DriverRequestRepository):
        self.repository = repository
        self.eligibility = DriverEligibilityResolver(repository)
        self.matcher = RequestMatcher(repository)
        self.decisions = EstimateDecisionEngine(repository, self.matcher)

    # ── Listings ──────────────────────────────────────────────────────────

    async def get_driver_request_list(
        self, user_id: str, filters: DriverRequestFilters
    ) -> DriverRequestListResponse:
        """
        List the requests in the driver's pool.

        Raises:
            ForbiddenError: not a driver, or a filter outside the driver's scope
            BadRequestError: driver has no categories or regions configured
        """
        eligibility = await self.eligibility.resolve(user_id)
        validate_filters(filters, eligibility.service_categories, eligibility.regions)

        page = normalize(filters.page, filters.page_size)
        result = await self.matcher.find_requests(
            eligibility.driver_id,
            filters.model_copy(update={"page": page.page, "page_size": page.page_size}),
            eligibility.service_categories,
            eligibility.regions,
        )
        return result_assembler.assemble(
            page.page, page.page_size, result.total_items, result.requests
        )

    async def get_driver_designated_request_list(
        self, user_id: str, filters: DriverRequestFilters
    ) -> DriverRequestListResponse:
        """Same as get_driver_request_list, limited to requests with an estimate."""
        return await self.get_driver_request_list(
            user_id, filters.model_copy(update={"is_designated": True})
        )

    async def get_driver_rejected_estimates(
        self,
        user_id: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> RejectedEstimateListResponse:
        """Page through the estimates this driver rejected directly, newest first."""
        normalized = normalize(page, page_size)
        eligibility = await self.eligibility.resolve(user_id)

        total, estimates = await self.repository.find_rejected_estimates(
            eligibility.driver_id, normalized.page, normalized.page_size
        )
        return RejectedEstimateListResponse(
            items=[_rejected_item(e) for e in estimates],
            page=normalized.page,
            page_size=normalized.page_size,
            total_items=total,
            total_pages=total_pages(total, normalized.page_size),
        )

    # ── Decisions ─────────────────────────────────────────────────────────

    async def create_estimate_and_approve(
        self,
        user_id: str,
        request_id: int,
        request_reason: str,
        price: Optional[int] = None,
    ) -> EstimateActionResponse:
        eligibility = await self.eligibility.resolve(user_id)
        estimate = await self.decisions.accept(eligibility, request_id, request_reason, price)
        return _estimate_response(estimate)

    async def create_estimate_and_reject(
        self, user_id: str, request_id: int, request_reason: str
    ) -> EstimateActionResponse:
        eligibility = await self.eligibility.resolve(user_id)
        estimate = await self.decisions.reject(eligibility, request_id, request_reason)
        return _estimate_response(estimate)

    async def update_estimate_decision(
        self, user_id: str, decision: Union[AcceptDecision, RejectDecision]
    ) -> EstimateActionResponse:
        eligibility = await self.eligibility.resolve(user_id)
        estimate = await self.decisions.apply_decision(eligibility, decision)
        return _estimate_response(estimate)
