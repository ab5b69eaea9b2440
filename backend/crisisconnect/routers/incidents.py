"""API routes for incidents."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from crisisconnect.dependencies import CurrentCaller, get_incident_service
from crisisconnect.schemas.incident import (
    IncidentMapOut,
    IncidentOut,
    IncidentReportIn,
    IncidentsResponse,
)
from crisisconnect.services.incidents import IncidentService
from crisisconnect.services.queries import IncidentFilters

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/incidents", tags=["incidents"])

Service = Annotated[IncidentService, Depends(get_incident_service)]


def _listing(incidents) -> IncidentsResponse:
    return IncidentsResponse(
        incidents=[IncidentOut.model_validate(incident) for incident in incidents],
        total=len(incidents),
    )


@router.post("/report", response_model=IncidentOut, status_code=201)
async def report_incident(
    data: IncidentReportIn, caller: CurrentCaller, service: Service
) -> IncidentOut:
    """
    Report an incident.

    Civilians only. The incident always starts Pending regardless of input.
    """
    result = await service.report(caller, data)
    return IncidentOut.model_validate(result.entity)


@router.get("", response_model=IncidentsResponse)
async def list_incidents(
    caller: CurrentCaller,
    service: Service,
    search: str | None = Query(None, max_length=200),
    category: str | None = Query(None, description="Incident type"),
    severity: int | None = Query(None, ge=1, le=5),
    status: int | None = Query(None, ge=0, le=3, description="0 pending .. 3 completed"),
    start_date: date | None = Query(None, description="Inclusive (YYYY-MM-DD)"),
    end_date: date | None = Query(None, description="Inclusive (YYYY-MM-DD)"),
    limit: int = Query(500, ge=1, le=1000),
) -> IncidentsResponse:
    """
    List incidents visible to the caller.

    Civilians see their own reports; volunteers and admins see all.
    """
    filters = IncidentFilters(
        search=search,
        category=category,
        severity=severity,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )
    return _listing(await service.list_visible(caller, filters, limit=limit))


@router.get("/pending", response_model=IncidentsResponse)
async def pending_incidents(caller: CurrentCaller, service: Service) -> IncidentsResponse:
    """Admin review queue, most severe first."""
    return _listing(await service.pending_queue(caller))


@router.get("/verified", response_model=IncidentsResponse)
async def verified_incidents(caller: CurrentCaller, service: Service) -> IncidentsResponse:
    return _listing(await service.verified(caller))


@router.get("/mine", response_model=IncidentsResponse)
async def my_incidents(caller: CurrentCaller, service: Service) -> IncidentsResponse:
    return _listing(await service.mine(caller))


@router.get("/map-data", response_model=list[IncidentMapOut])
async def incident_map_data(caller: CurrentCaller, service: Service) -> list[IncidentMapOut]:
    """Reduced projection of every incident for map markers."""
    incidents = await service.map_data()
    return [IncidentMapOut.model_validate(incident) for incident in incidents]


@router.get("/{incident_id}", response_model=IncidentOut)
async def get_incident(incident_id: str, caller: CurrentCaller, service: Service) -> IncidentOut:
    return IncidentOut.model_validate(await service.get(caller, incident_id))


@router.put("/{incident_id}/verify", response_model=IncidentOut)
async def verify_incident(
    incident_id: str, caller: CurrentCaller, service: Service
) -> IncidentOut:
    """
    Verify a pending incident.

    Admins only. Accepted volunteers are notified by email in the background.
    """
    result = await service.verify(caller, incident_id)
    return IncidentOut.model_validate(result.entity)


@router.put("/{incident_id}/ongoing", response_model=IncidentOut)
async def mark_incident_ongoing(
    incident_id: str, caller: CurrentCaller, service: Service
) -> IncidentOut:
    result = await service.mark_ongoing(caller, incident_id)
    return IncidentOut.model_validate(result.entity)


@router.put("/{incident_id}/complete", response_model=IncidentOut)
async def mark_incident_completed(
    incident_id: str, caller: CurrentCaller, service: Service
) -> IncidentOut:
    result = await service.mark_completed(caller, incident_id)
    return IncidentOut.model_validate(result.entity)
