"""
MoveMate Backend — Driver Request/Estimate Schemas
===================================================

What:  Pydantic models for the driver request API: query filters, decision
       payloads and paginated responses.
How:   Field names are snake_case in Python and camelCase on the wire
       (alias_generator=to_camel). FastAPI serializes response models by
       alias, and request bodies are accepted under either name.

Decision payloads:
    Accept and reject carry different required fields (only an accept has
    a price). The PATCH endpoint therefore takes a discriminated union on
    `status` instead of one object with optional fields:

        {"status": "ACCEPTED", "requestId": 1, "requestReason": "...", "price": 120000}
        {"status": "REJECTED", "requestId": 1, "requestReason": "..."}
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel
from pydantic.alias_generators import to_camel

from movemate.models.enums import EstimateStatus, MovingType, RegionCode

SortOrder = Literal["soonest", "recent"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Query Models (built from URL params by the route dependencies)
# ══════════════════════════════════════════════════════════════════════════


class DriverRequestFilters(CamelModel):
    """
    Filters for the driver's request pool.

    page / page_size are optional here; the service normalizes them, so
    internal callers may leave them unset.

    is_designated:
        True  → only requests this driver already has an estimate on
        False → only requests without one
        None  → no designation filter
    """

    page: Optional[int] = None
    page_size: Optional[int] = None
    moving_type: Optional[MovingType] = None
    region: Optional[RegionCode] = None
    is_designated: Optional[bool] = None
    sort: SortOrder = "soonest"
    request_id: Optional[int] = None


# ══════════════════════════════════════════════════════════════════════════
# Request Bodies
# ══════════════════════════════════════════════════════════════════════════


class EstimateAcceptRequest(CamelModel):
    """Body of POST /estimate/accept. A missing price is stored as 0."""

    request_id: int = Field(description="Moving request to accept")
    request_reason: str = Field(min_length=1, description="Message to the requester")
    price: Optional[int] = Field(default=None, ge=0, description="Quoted price in won")


class EstimateRejectRequest(CamelModel):
    """Body of POST /estimate/reject."""

    request_id: int = Field(description="Moving request to reject")
    request_reason: str = Field(min_length=1, description="Reason for rejecting")


class AcceptDecision(CamelModel):
    status: Literal["ACCEPTED"]
    request_id: int
    request_reason: str = Field(min_length=1)
    price: int = Field(ge=0)


class RejectDecision(CamelModel):
    status: Literal["REJECTED"]
    request_id: int
    request_reason: str = Field(min_length=1)


EstimateDecision = Annotated[
    Union[AcceptDecision, RejectDecision],
    Field(discriminator="status"),
]


class EstimateDecisionBody(RootModel[EstimateDecision]):
    """Body of PATCH /estimate; `.root` is an AcceptDecision or RejectDecision."""


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class DriverRequestListItem(CamelModel):
    """
    One moving request in the driver's pool, with the driver's own latest
    estimate on it (if any).
    """

    request_id: int
    moving_type: MovingType
    moving_date: datetime
    origin: str
    destination: str
    is_designated: bool = Field(description="Driver already has an estimate on this request")
    estimate_id: Optional[int] = None
    estimate_status: Optional[EstimateStatus] = None
    estimate_price: Optional[int] = None
    user_id: str = Field(description="Requesting user")
    user_name: Optional[str] = None
    request_created_at: datetime
    request_updated_at: datetime


class DriverRequestListResponse(CamelModel):
    """
    Paginated driver request pool.

    total_items counts requests that survived the region filter, not the
    raw database candidates. designated_count covers the current page only.
    """

    items: List[DriverRequestListItem]
    designated_count: int
    page: int
    page_size: int
    total_items: int
    total_pages: int


class EstimateActionResponse(CamelModel):
    """The estimate row written by an accept, reject or decision update."""

    estimate_id: int
    request_id: int
    driver_id: int
    status: EstimateStatus
    request_reason: str
    is_request: bool
    price: int
    created_at: datetime
    updated_at: datetime


class RejectedEstimateRequestSummary(CamelModel):
    moving_type: MovingType
    moving_date: datetime
    origin: str
    destination: str


class RejectedEstimateItem(EstimateActionResponse):
    request: Optional[RejectedEstimateRequestSummary] = None


class RejectedEstimateListResponse(CamelModel):
    items: List[RejectedEstimateItem]
    page: int
    page_size: int
    total_items: int
    total_pages: int
