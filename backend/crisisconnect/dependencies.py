"""FastAPI dependencies wiring services to the request."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from crisisconnect.auth import Caller, get_caller
from crisisconnect.database import get_db
from crisisconnect.services import (
    AlertService,
    EventDispatcher,
    HelpRequestService,
    IncidentService,
    NotificationChannel,
    ResourceService,
    TaskService,
    VolunteerProfileService,
)

DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentCaller = Annotated[Caller, Depends(get_caller)]


def get_dispatcher(request: Request) -> EventDispatcher:
    """Dispatcher bound to the app's realtime transport."""
    return EventDispatcher(request.app.state.realtime)


def get_notifications(request: Request) -> NotificationChannel:
    return request.app.state.notifications


Dispatcher = Annotated[EventDispatcher, Depends(get_dispatcher)]
Notifications = Annotated[NotificationChannel, Depends(get_notifications)]


def get_incident_service(
    db: DbSession, dispatcher: Dispatcher, notifications: Notifications
) -> IncidentService:
    return IncidentService(db, dispatcher, notifications)


def get_help_request_service(
    db: DbSession, dispatcher: Dispatcher, notifications: Notifications
) -> HelpRequestService:
    return HelpRequestService(db, dispatcher, notifications)


def get_task_service(db: DbSession, dispatcher: Dispatcher) -> TaskService:
    return TaskService(db, dispatcher)


def get_volunteer_profile_service(db: DbSession) -> VolunteerProfileService:
    return VolunteerProfileService(db)


def get_alert_service(db: DbSession, dispatcher: Dispatcher) -> AlertService:
    return AlertService(db, dispatcher)


def get_resource_service(db: DbSession, dispatcher: Dispatcher) -> ResourceService:
    return ResourceService(db, dispatcher)
