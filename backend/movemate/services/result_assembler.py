"""Turns matched candidate requests into the paginated listing response."""

from typing import Sequence

from movemate.repositories.driver_request_repository import CandidateRequest
from movemate.schemas.driver_request import DriverRequestListItem, DriverRequestListResponse
from movemate.services.pagination import total_pages


def _to_item(candidate: CandidateRequest) -> DriverRequestListItem:
    request = candidate.request
    latest = candidate.latest_estimate
    return DriverRequestListItem(
        request_id=request.id,
        moving_type=request.moving_type,
        moving_date=request.moving_date,
        origin=request.origin,
        destination=request.destination,
        is_designated=bool(candidate.estimates),
        estimate_id=latest.id if latest else None,
        estimate_status=latest.status if latest else None,
        estimate_price=latest.price if latest else None,
        user_id=request.user_id,
        user_name=candidate.requester_name,
        request_created_at=request.created_at,
        request_updated_at=request.updated_at,
    )


def assemble(
    page: int,
    page_size: int,
    total_items: int,
    requests: Sequence[CandidateRequest],
) -> DriverRequestListResponse:
    items = [_to_item(c) for c in requests]
    return DriverRequestListResponse(
        items=items,
        designated_count=sum(1 for item in items if item.is_designated),
        page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages(total_items, page_size),
    )
