"""API routes for help requests."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from crisisconnect.config import get_settings
from crisisconnect.dependencies import CurrentCaller, get_help_request_service
from crisisconnect.models.enums import HelpRequestCategory, HelpRequestStatus, Priority
from crisisconnect.schemas.common import DeletedOut, NoteIn
from crisisconnect.schemas.help_request import (
    HelpRequestCreateIn,
    HelpRequestMapOut,
    HelpRequestOut,
    HelpRequestsResponse,
    HelpRequestUpdateIn,
)
from crisisconnect.services.help_requests import HelpRequestService
from crisisconnect.services.queries import RequestFilters

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/requests", tags=["requests"])
settings = get_settings()

Service = Annotated[HelpRequestService, Depends(get_help_request_service)]


def _listing(requests) -> HelpRequestsResponse:
    return HelpRequestsResponse(
        requests=[HelpRequestOut.model_validate(request) for request in requests],
        total=len(requests),
    )


@router.post("", response_model=HelpRequestOut, status_code=201)
async def create_request(
    data: HelpRequestCreateIn, caller: CurrentCaller, service: Service
) -> HelpRequestOut:
    """
    Create a help request.

    Civilians only. Status starts pending and unclaimed whatever the body says.
    """
    result = await service.create(caller, data)
    return HelpRequestOut.model_validate(result.entity)


@router.get("", response_model=HelpRequestsResponse)
async def list_requests(
    caller: CurrentCaller,
    service: Service,
    search: str | None = Query(None, max_length=200),
    category: HelpRequestCategory | None = None,
    priority: Priority | None = None,
    status: HelpRequestStatus | None = None,
    start_date: date | None = Query(None, description="Inclusive (YYYY-MM-DD)"),
    end_date: date | None = Query(None, description="Inclusive (YYYY-MM-DD)"),
    limit: int = Query(500, ge=1, le=1000),
) -> HelpRequestsResponse:
    """
    List help requests visible to the caller.

    Civilians see their own requests; volunteers and admins see all.
    """
    filters = RequestFilters(
        search=search,
        category=category,
        priority=priority,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )
    return _listing(await service.list_visible(caller, filters, limit=limit))


@router.get("/map-data", response_model=list[HelpRequestMapOut])
async def request_map_data(caller: CurrentCaller, service: Service) -> list[HelpRequestMapOut]:
    requests = await service.map_data()
    return [HelpRequestMapOut.model_validate(request) for request in requests]


@router.get("/available", response_model=HelpRequestsResponse)
async def available_requests(caller: CurrentCaller, service: Service) -> HelpRequestsResponse:
    """Pending, unclaimed requests, newest first."""
    return _listing(await service.available(caller))


@router.get("/nearby", response_model=HelpRequestsResponse)
async def nearby_requests(
    caller: CurrentCaller,
    service: Service,
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius_km: float | None = Query(None, ge=0, description="0 disables the radius filter"),
) -> HelpRequestsResponse:
    """
    Available requests sorted by distance from the given point.

    Each result carries distance_km rounded to one decimal.
    """
    if radius_km is None:
        radius_km = settings.nearby_default_radius_km
    ranked = await service.nearby(caller, latitude, longitude, radius_km)
    requests = [
        HelpRequestOut.model_validate(request).model_copy(
            update={"distance_km": round(distance, 1)}
        )
        for request, distance in ranked
    ]
    return HelpRequestsResponse(requests=requests, total=len(requests))


@router.get("/{request_id}", response_model=HelpRequestOut)
async def get_request(request_id: str, caller: CurrentCaller, service: Service) -> HelpRequestOut:
    return HelpRequestOut.model_validate(await service.get(caller, request_id))


@router.put("/{request_id}", response_model=HelpRequestOut)
async def update_request(
    request_id: str, patch: HelpRequestUpdateIn, caller: CurrentCaller, service: Service
) -> HelpRequestOut:
    """
    Patch a help request.

    Owners may edit their own requests, claimants may move the status of
    requests they claimed, admins may edit anything.
    """
    result = await service.update(caller, request_id, patch)
    return HelpRequestOut.model_validate(result.entity)


@router.post("/{request_id}/claim", response_model=HelpRequestOut)
async def claim_request(
    request_id: str, caller: CurrentCaller, service: Service
) -> HelpRequestOut:
    """
    Claim a pending request.

    Volunteers only. Returns 409 if another volunteer claimed it first.
    """
    result = await service.claim(caller, request_id)
    return HelpRequestOut.model_validate(result.entity)


@router.post("/{request_id}/notes", response_model=HelpRequestOut)
async def add_request_note(
    request_id: str, note: NoteIn, caller: CurrentCaller, service: Service
) -> HelpRequestOut:
    result = await service.add_note(caller, request_id, note)
    return HelpRequestOut.model_validate(result.entity)


@router.delete("/{request_id}", response_model=DeletedOut)
async def delete_request(request_id: str, caller: CurrentCaller, service: Service) -> DeletedOut:
    await service.delete(caller, request_id)
    return DeletedOut(id=request_id, message="Help request deleted")
