"""
Status state machines for incidents, help requests and tasks.

Each table maps a status to the set of statuses it may move to. Terminal
statuses map to an empty set. Transition functions in the entity services
consult these tables and then perform the write as a compare-and-set on the
source status.
"""

from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from crisisconnect.errors import InvalidStateError
from crisisconnect.models.enums import (
    HelpRequestStatus,
    IncidentStatus,
    TaskStatus,
    VolunteerTaskStatus,
)
from crisisconnect.services.fanout import Event

EntityT = TypeVar("EntityT")

INCIDENT_TRANSITIONS: Mapping[IncidentStatus, frozenset[IncidentStatus]] = {
    IncidentStatus.PENDING: frozenset({IncidentStatus.VERIFIED}),
    IncidentStatus.VERIFIED: frozenset({IncidentStatus.ONGOING}),
    IncidentStatus.ONGOING: frozenset({IncidentStatus.COMPLETED}),
    IncidentStatus.COMPLETED: frozenset(),
}

HELP_REQUEST_TRANSITIONS: Mapping[HelpRequestStatus, frozenset[HelpRequestStatus]] = {
    HelpRequestStatus.PENDING: frozenset(
        {HelpRequestStatus.CLAIMED, HelpRequestStatus.CANCELLED}
    ),
    HelpRequestStatus.CLAIMED: frozenset(
        {
            HelpRequestStatus.IN_PROGRESS,
            HelpRequestStatus.RESOLVED,
            HelpRequestStatus.CANCELLED,
        }
    ),
    HelpRequestStatus.IN_PROGRESS: frozenset(
        {HelpRequestStatus.RESOLVED, HelpRequestStatus.CANCELLED}
    ),
    HelpRequestStatus.RESOLVED: frozenset(),
    HelpRequestStatus.CANCELLED: frozenset(),
}

TASK_TRANSITIONS: Mapping[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.ASSIGNED: frozenset({TaskStatus.ACCEPTED, TaskStatus.REJECTED}),
    TaskStatus.ACCEPTED: frozenset({TaskStatus.COMPLETED}),
    TaskStatus.REJECTED: frozenset(),
    TaskStatus.COMPLETED: frozenset(),
}

# Statuses a volunteer may answer an assignment with
TASK_DECISIONS = frozenset({TaskStatus.ACCEPTED, TaskStatus.REJECTED})

# claimed_by is set exactly in these statuses
CLAIMANT_STATUSES = frozenset(
    {HelpRequestStatus.CLAIMED, HelpRequestStatus.IN_PROGRESS, HelpRequestStatus.RESOLVED}
)

_TASK_PROJECTION = {
    TaskStatus.ASSIGNED: VolunteerTaskStatus.ASSIGNED,
    TaskStatus.ACCEPTED: VolunteerTaskStatus.ACCEPTED,
    # Rejection frees the volunteer immediately
    TaskStatus.REJECTED: VolunteerTaskStatus.AVAILABLE,
    TaskStatus.COMPLETED: VolunteerTaskStatus.COMPLETED,
}


def can_transition(
    table: Mapping[Hashable, frozenset], current: Hashable, target: Hashable
) -> bool:
    return target in table.get(current, frozenset())


def require_transition(
    table: Mapping[Hashable, frozenset], current: Hashable, target: Hashable, entity: str
) -> None:
    """Raise InvalidStateError unless ``current -> target`` is legal."""
    if not can_transition(table, current, target):
        raise InvalidStateError(
            f"{entity} cannot move from {status_label(current)} to {status_label(target)}"
        )


def project_task_status(status: TaskStatus | int) -> VolunteerTaskStatus:
    """VolunteerProfile.task_status implied by a Task status."""
    return _TASK_PROJECTION[TaskStatus(status)]


def status_label(status: Hashable) -> str:
    if isinstance(status, HelpRequestStatus):
        return status.value
    name = getattr(status, "name", None)
    return name.lower() if name else str(status)


@dataclass
class TransitionResult(Generic[EntityT]):
    """Committed entity plus the events its transition produced."""

    entity: EntityT
    events: list[Event] = field(default_factory=list)

    @property
    def event_names(self) -> list[str]:
        return [event.name for event in self.events]
