"""API routes for alerts."""

from typing import Annotated

from fastapi import APIRouter, Depends

from crisisconnect.dependencies import CurrentCaller, get_alert_service
from crisisconnect.schemas.alert import AlertIn, AlertOut, AlertsResponse, AlertUpdateIn
from crisisconnect.schemas.common import DeletedOut
from crisisconnect.services.alerts import AlertService

router = APIRouter(prefix="/alerts", tags=["alerts"])

Service = Annotated[AlertService, Depends(get_alert_service)]


def _listing(alerts) -> AlertsResponse:
    return AlertsResponse(
        alerts=[AlertOut.model_validate(alert) for alert in alerts], total=len(alerts)
    )


@router.get("", response_model=AlertsResponse)
async def active_alerts(caller: CurrentCaller, service: Service) -> AlertsResponse:
    """Latest active alerts for the caller's audience."""
    return _listing(await service.active_for(caller))


# Must be registered before /{alert_id}
@router.get("/all", response_model=AlertsResponse)
async def all_alerts(caller: CurrentCaller, service: Service) -> AlertsResponse:
    return _listing(await service.list_all(caller))


@router.get("/{alert_id}", response_model=AlertOut)
async def get_alert(alert_id: str, caller: CurrentCaller, service: Service) -> AlertOut:
    return AlertOut.model_validate(await service.get(alert_id))


@router.post("", response_model=AlertOut, status_code=201)
async def create_alert(data: AlertIn, caller: CurrentCaller, service: Service) -> AlertOut:
    result = await service.create(caller, data)
    return AlertOut.model_validate(result.entity)


@router.put("/{alert_id}", response_model=AlertOut)
async def update_alert(
    alert_id: str, patch: AlertUpdateIn, caller: CurrentCaller, service: Service
) -> AlertOut:
    result = await service.update(caller, alert_id, patch)
    return AlertOut.model_validate(result.entity)


@router.delete("/{alert_id}", response_model=DeletedOut)
async def delete_alert(alert_id: str, caller: CurrentCaller, service: Service) -> DeletedOut:
    await service.delete(caller, alert_id)
    return DeletedOut(id=alert_id, message="Alert deactivated")
