"""
MoveMate Backend — Request Filter & Matcher
============================================

What:  Builds a driver's visible request pool.
Who:   Used by DriverRequestService for listings and by the
       EstimateDecisionEngine to check a single request is accessible.

Matching Flow:
    ┌────────────────────┐   ┌──────────────────────┐   ┌──────────────┐
    │  DB candidates     │──▶│  Region post-filter  │──▶│  Sort, page  │
    │  type / designated │   │  classify(origin)    │   │  and count   │
    │  / request id      │   │  ∈ driver regions    │   │              │
    └────────────────────┘   └──────────────────────┘   └──────────────┘

    The region filter cannot be pushed into SQL because origins are free
    text. Every candidate of the right type is therefore fetched and
    classified in memory, and total_items is counted after that filter.
    Persisting a derived region column on write would remove this step.

    Sorting happens here as well as in SQL, so ordering does not depend on
    the repository implementation.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from movemate.exceptions import ForbiddenError
from movemate.models.enums import MovingType, RegionCode
from movemate.repositories.driver_request_repository import (
    CandidateRequest,
    DriverRequestRepository,
)
from movemate.schemas.driver_request import DriverRequestFilters
from movemate.services.pagination import normalize
from movemate.services.region_classifier import is_in_regions

logger = logging.getLogger(__name__)


@dataclass
class MatchResult:
    total_items: int
    requests: List[CandidateRequest]


def validate_filters(
    filters: DriverRequestFilters,
    service_categories: Sequence[MovingType],
    regions: Sequence[RegionCode],
) -> None:
    """
    Reject filters that reach outside the driver's own scope.

    Raises:
        ForbiddenError: moving_type not offered, or region not served, by
            this driver.
    """
    if filters.moving_type is not None and filters.moving_type not in service_categories:
        raise ForbiddenError(
            message=f"Moving type {filters.moving_type.value} is outside your service categories",
            context={"moving_type": filters.moving_type.value},
        )
    if filters.region is not None and filters.region not in regions:
        raise ForbiddenError(
            message=f"Region {filters.region.value} is outside your service regions",
            context={"region": filters.region.value},
        )


def _origin_matches(
    candidate: CandidateRequest,
    regions: Sequence[RegionCode],
    region: Optional[RegionCode] = None,
) -> bool:
    origin = candidate.request.origin
    if not is_in_regions(origin, regions):
        return False
    if region is not None:
        return is_in_regions(origin, [region])
    return True


class RequestMatcher:
    def __init__(self, repository: DriverRequestRepository):
        self.repository = repository

    async def find_requests(
        self,
        driver_id: int,
        filters: DriverRequestFilters,
        service_categories: Sequence[MovingType],
        regions: Sequence[RegionCode],
    ) -> MatchResult:
        """
        Return the driver's filtered, sorted pool and the requested page of it.

        Args:
            driver_id: Driver profile id (estimates are keyed by it)
            filters: Listing filters; page/page_size are normalized here
            service_categories: The driver's configured moving types
            regions: The driver's configured regions

        Returns:
            MatchResult with the post-filter total and the page slice.
        """
        page = normalize(filters.page, filters.page_size)

        candidates = await self.repository.find_candidate_requests(
            driver_id, filters, service_categories
        )
        matched = [c for c in candidates if _origin_matches(c, regions, filters.region)]

        if filters.sort == "recent":
            matched.sort(key=lambda c: c.request.created_at, reverse=True)
        else:
            matched.sort(key=lambda c: c.request.moving_date)

        logger.debug(
            "Driver %s pool: %d candidates, %d after region filter",
            driver_id,
            len(candidates),
            len(matched),
        )

        return MatchResult(
            total_items=len(matched),
            requests=matched[page.offset:page.offset + page.page_size],
        )
