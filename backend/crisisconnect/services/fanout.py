"""
Event fanout.

Each named transition builds its events explicitly with the helpers below;
EventDispatcher hands them to the realtime transport. Delivery is
best-effort and at-most-once: clients heal missed events by refetching.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from crisisconnect.schemas.alert import AlertOut
from crisisconnect.schemas.help_request import HelpRequestOut
from crisisconnect.schemas.incident import IncidentOut
from crisisconnect.schemas.resource import ResourceOut
from crisisconnect.schemas.task import TaskOut

logger = logging.getLogger(__name__)

VOLUNTEERS_ROOM = "volunteers"

NEW_INCIDENT = "new-incident"
INCIDENT_VERIFIED = "incident-verified"
INCIDENT_UPDATED = "incident-updated"
NEW_REQUEST = "new-request"
REQUEST_CLAIMED = "request-claimed"
REQUEST_UPDATED = "request-updated"
REQUEST_DELETED = "request-deleted"
NEW_TASK_ASSIGNED = "new-task-assigned"
TASK_ASSIGNED = "task-assigned"
TASK_STATUS_UPDATED = "task-status-updated"
NEW_ALERT = "new-alert"
ALERT_UPDATED = "alert-updated"
ALERT_DELETED = "alert-deleted"
NEW_RESOURCE = "new-resource"
RESOURCE_UPDATED = "resource-updated"
RESOURCE_DELETED = "resource-deleted"


def volunteer_room(profile_id: str) -> str:
    """Room addressing every session of one volunteer."""
    return f"volunteer-{profile_id}"


@dataclass(frozen=True)
class Event:
    """
    One state-change notification.

    ``rooms`` are named subscription channels; ``broadcast`` additionally
    sends to every connected session.
    """

    name: str
    payload: dict[str, Any]
    rooms: tuple[str, ...] = ()
    broadcast: bool = True

    @property
    def audience(self) -> list[str | None]:
        """Rooms to emit to, with None meaning broadcast."""
        targets: list[str | None] = list(self.rooms)
        if self.broadcast:
            targets.append(None)
        return targets


class RealtimeTransport(Protocol):
    async def emit(self, event: str, payload: dict[str, Any], room: str | None = None) -> int:
        """Send to a room, or to everyone when room is None. Returns sessions reached."""
        ...


class EventDispatcher:
    """Hands committed events to the realtime transport."""

    def __init__(self, transport: RealtimeTransport):
        self.transport = transport

    async def publish(self, events: Iterable[Event]) -> None:
        for event in events:
            for room in event.audience:
                try:
                    delivered = await self.transport.emit(event.name, event.payload, room=room)
                except Exception as e:
                    # The transition is already committed; clients recover on refetch
                    logger.error(f"Failed to emit {event.name} to {room or 'broadcast'}: {e}")
                    continue
                logger.debug(
                    f"Emitted {event.name} to {room or 'broadcast'} ({delivered} sessions)"
                )


# Event builders, one per catalogue entry


def _dump(schema, entity) -> dict[str, Any]:
    return schema.model_validate(entity).model_dump(mode="json")


def new_incident(incident) -> Event:
    return Event(NEW_INCIDENT, _dump(IncidentOut, incident))


def incident_verified(incident) -> Event:
    return Event(INCIDENT_VERIFIED, _dump(IncidentOut, incident))


def incident_updated(incident) -> Event:
    return Event(INCIDENT_UPDATED, _dump(IncidentOut, incident))


def new_request(request) -> Event:
    payload = _dump(HelpRequestOut, request)
    payload["claimed_by"] = None
    return Event(NEW_REQUEST, payload, rooms=(VOLUNTEERS_ROOM,))


def request_claimed(request) -> Event:
    return Event(REQUEST_CLAIMED, _dump(HelpRequestOut, request), rooms=(VOLUNTEERS_ROOM,))


def request_updated(request) -> Event:
    return Event(REQUEST_UPDATED, _dump(HelpRequestOut, request), rooms=(VOLUNTEERS_ROOM,))


def request_deleted(request_id: str) -> Event:
    return Event(REQUEST_DELETED, {"id": request_id})


def task_assigned(task) -> list[Event]:
    """Personal notice to the volunteer's room plus a general-audience copy."""
    payload = _dump(TaskOut, task)
    return [
        Event(
            NEW_TASK_ASSIGNED,
            payload,
            rooms=(volunteer_room(task.volunteer_id),),
            broadcast=False,
        ),
        Event(TASK_ASSIGNED, payload),
    ]


def task_status_updated(task) -> Event:
    return Event(TASK_STATUS_UPDATED, _dump(TaskOut, task))


def new_alert(alert) -> Event:
    return Event(NEW_ALERT, _dump(AlertOut, alert))


def alert_updated(alert) -> Event:
    return Event(ALERT_UPDATED, _dump(AlertOut, alert))


def alert_deleted(alert_id: str) -> Event:
    return Event(ALERT_DELETED, {"id": alert_id})


def new_resource(resource) -> Event:
    return Event(NEW_RESOURCE, _dump(ResourceOut, resource))


def resource_updated(resource) -> Event:
    return Event(RESOURCE_UPDATED, _dump(ResourceOut, resource))


def resource_deleted(resource_id: str) -> Event:
    return Event(RESOURCE_DELETED, {"id": resource_id})
