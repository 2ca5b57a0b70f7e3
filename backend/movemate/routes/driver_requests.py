"""
MoveMate Backend — Driver Request Route Handlers
=================================================

What:  HTTP surface of the driver request / estimate core.
How:   Thin handlers. Each one resolves the caller via get_current_user_id,
       gets a DriverRequestService bound to this request's DB session, and
       returns a pydantic response model (serialized in camelCase).

Route Inventory (prefix /api/requests/driver):
    GET   /list                  driver's request pool
    GET   /estimate/list         pool limited to requests with an estimate
    POST  /estimate/accept       accept a request            → 201
    POST  /estimate/reject       reject a request            → 201
    PATCH /estimate              overwrite an existing decision
    GET   /estimate/rejected     requests this driver rejected

Query parameters are parsed here; non-integer or unknown enum values are a
422 from FastAPI. Out-of-range page numbers are clamped by the service.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from movemate.auth import get_current_user_id
from movemate.database import get_db_session
from movemate.models.enums import MovingType, RegionCode
from movemate.repositories.driver_request_repository import DriverRequestRepository
from movemate.schemas.common import ErrorResponse
from movemate.schemas.driver_request import (
    DriverRequestFilters,
    DriverRequestListResponse,
    EstimateAcceptRequest,
    EstimateActionResponse,
    EstimateDecisionBody,
    EstimateRejectRequest,
    RejectedEstimateListResponse,
    SortOrder,
)
from movemate.services.driver_request_service import DriverRequestService

router = APIRouter(prefix="/api/requests/driver", tags=["Driver Requests"])

ERROR_RESPONSES = {
    400: {"description": "Driver not configured or already decided", "model": ErrorResponse},
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    403: {"description": "Not a driver, or filter outside own scope", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}


# ── Dependencies ──────────────────────────────────────────────────────────


async def get_driver_request_service(
    db: AsyncSession = Depends(get_db_session),
) -> DriverRequestService:
    """One service per HTTP request, bound to that request's session."""
    return DriverRequestService(DriverRequestRepository(db))


def get_request_filters(
    page: Optional[int] = Query(default=None, description="1-based page, default 1"),
    page_size: Optional[int] = Query(
        default=None, alias="pageSize", description="Items per page, default 10, max 100"
    ),
    moving_type: Optional[MovingType] = Query(default=None, alias="movingType"),
    region: Optional[RegionCode] = Query(default=None),
    is_designated: Optional[Literal["true", "false"]] = Query(
        default=None,
        alias="isDesignated",
        description="true: only requests with an estimate; false: only without",
    ),
    sort: SortOrder = Query(
        default="soonest",
        description="soonest: moving date ascending; recent: created newest first",
    ),
    request_id: Optional[int] = Query(default=None, alias="requestId"),
) -> DriverRequestFilters:
    return DriverRequestFilters(
        page=page,
        page_size=page_size,
        moving_type=moving_type,
        region=region,
        is_designated=None if is_designated is None else is_designated == "true",
        sort=sort,
        request_id=request_id,
    )


# ── Listings ──────────────────────────────────────────────────────────────


@router.get(
    "/list",
    response_model=DriverRequestListResponse,
    responses=ERROR_RESPONSES,
    summary="List moving requests matching the driver's categories and regions",
)
async def list_driver_requests(
    filters: DriverRequestFilters = Depends(get_request_filters),
    user_id: str = Depends(get_current_user_id),
    service: DriverRequestService = Depends(get_driver_request_service),
) -> DriverRequestListResponse:
    return await service.get_driver_request_list(user_id, filters)


@router.get(
    "/estimate/list",
    response_model=DriverRequestListResponse,
    responses=ERROR_RESPONSES,
    summary="List requests the driver already has an estimate on",
)
async def list_designated_requests(
    filters: DriverRequestFilters = Depends(get_request_filters),
    user_id: str = Depends(get_current_user_id),
    service: DriverRequestService = Depends(get_driver_request_service),
) -> DriverRequestListResponse:
    return await service.get_driver_designated_request_list(user_id, filters)


@router.get(
    "/estimate/rejected",
    response_model=RejectedEstimateListResponse,
    responses=ERROR_RESPONSES,
    summary="List estimates the driver rejected, newest first",
)
async def list_rejected_estimates(
    page: Optional[int] = Query(default=None),
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    user_id: str = Depends(get_current_user_id),
    service: DriverRequestService = Depends(get_driver_request_service),
) -> RejectedEstimateListResponse:
    return await service.get_driver_rejected_estimates(user_id, page, page_size)


# ── Decisions ─────────────────────────────────────────────────────────────

DECISION_RESPONSES = {
    **ERROR_RESPONSES,
    404: {"description": "Request not in the driver's pool", "model": ErrorResponse},
    429: {"description": "Too many decisions", "model": ErrorResponse},
}


@router.post(
    "/estimate/accept",
    response_model=EstimateActionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=DECISION_RESPONSES,
    summary="Accept a moving request",
)
async def accept_request(
    body: EstimateAcceptRequest,
    user_id: str = Depends(get_current_user_id),
    service: DriverRequestService = Depends(get_driver_request_service),
) -> EstimateActionResponse:
    return await service.create_estimate_and_approve(
        user_id, body.request_id, body.request_reason, body.price
    )


@router.post(
    "/estimate/reject",
    response_model=EstimateActionResponse,
    status_code=status.HTTP_201_CREATED,
    responses=DECISION_RESPONSES,
    summary="Reject a moving request",
)
async def reject_request(
    body: EstimateRejectRequest,
    user_id: str = Depends(get_current_user_id),
    service: DriverRequestService = Depends(get_driver_request_service),
) -> EstimateActionResponse:
    return await service.create_estimate_and_reject(
        user_id, body.request_id, body.request_reason
    )


@router.patch(
    "/estimate",
    response_model=EstimateActionResponse,
    responses=DECISION_RESPONSES,
    summary="Overwrite the decision on an existing estimate",
)
async def update_estimate_decision(
    body: EstimateDecisionBody,
    user_id: str = Depends(get_current_user_id),
    service: DriverRequestService = Depends(get_driver_request_service),
) -> EstimateActionResponse:
    return await service.update_estimate_decision(user_id, body.root)
