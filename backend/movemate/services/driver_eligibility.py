"""
MoveMate Backend — Driver Eligibility Resolver
===============================================

What:  The authorization gate for every driver listing and decision.
How:   Loads the caller's profile through the repository and checks, in order:
         1. the user exists and is not soft-deleted         → else Forbidden
         2. the user's role is DRIVER                       → else Forbidden
         3. a live driver profile row exists                → else Forbidden
         4. at least one service category and one region    → else BadRequest

There is no row-level ACL beyond this: a driver only ever sees requests in
their own scope and only ever writes their own estimates.
"""

import logging
from dataclasses import dataclass
from typing import List

from movemate.exceptions import BadRequestError, ForbiddenError
from movemate.models.enums import MovingType, RegionCode, Role
from movemate.repositories.driver_request_repository import DriverRequestRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriverEligibility:
    driver_id: int
    service_categories: List[MovingType]
    regions: List[RegionCode]


class DriverEligibilityResolver:
    def __init__(self, repository: DriverRequestRepository):
        self.repository = repository

    async def resolve(self, user_id: str) -> DriverEligibility:
        profile = await self.repository.find_driver_profile(user_id)

        if profile is None or profile.role != Role.DRIVER:
            logger.warning("User %s is not an active driver", user_id)
            raise ForbiddenError(
                message="Only drivers can access this resource",
                context={"user_id": user_id},
            )

        if profile.driver_id is None:
            logger.warning("Driver %s has no driver profile", user_id)
            raise ForbiddenError(
                message="Register a driver profile first",
                context={"user_id": user_id},
            )

        if not profile.service_categories or not profile.regions:
            raise BadRequestError(
                message="Configure at least one service category and one region",
                context={
                    "service_categories": len(profile.service_categories),
                    "regions": len(profile.regions),
                },
            )

        return DriverEligibility(
            driver_id=profile.driver_id,
            service_categories=list(profile.service_categories),
            regions=list(profile.regions),
        )
