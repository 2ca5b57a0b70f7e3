"""ORM models. Importing this package registers every table on Base.metadata."""

from movemate.models.enums import EstimateStatus, MovingType, RegionCode, Role
from movemate.models.estimate import Estimate
from movemate.models.moving_request import MovingRequest
from movemate.models.user import Driver, Region, Service, User

__all__ = [
    "Driver",
    "Estimate",
    "EstimateStatus",
    "MovingRequest",
    "MovingType",
    "Region",
    "RegionCode",
    "Role",
    "Service",
    "User",
]
