"""API routes for volunteer claim history."""

from typing import Annotated

from fastapi import APIRouter, Depends

from crisisconnect.dependencies import CurrentCaller, get_help_request_service
from crisisconnect.schemas.help_request import (
    HelpRequestOut,
    HelpRequestsResponse,
    VolunteerStatsOut,
)
from crisisconnect.services.help_requests import HelpRequestService

router = APIRouter(prefix="/volunteers", tags=["volunteers"])

Service = Annotated[HelpRequestService, Depends(get_help_request_service)]


@router.get("/stats", response_model=VolunteerStatsOut)
async def volunteer_stats(caller: CurrentCaller, service: Service) -> VolunteerStatsOut:
    """Claim counts for the calling volunteer."""
    return VolunteerStatsOut(**await service.stats_for(caller))


@router.get("/{user_id}/claims", response_model=HelpRequestsResponse)
async def volunteer_claims(
    user_id: str, caller: CurrentCaller, service: Service
) -> HelpRequestsResponse:
    requests = await service.claims_for(caller, user_id)
    return HelpRequestsResponse(
        requests=[HelpRequestOut.model_validate(request) for request in requests],
        total=len(requests),
    )
