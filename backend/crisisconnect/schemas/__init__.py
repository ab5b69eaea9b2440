"""Pydantic schemas for API request/response validation."""

from crisisconnect.schemas.alert import AlertIn, AlertOut, AlertsResponse, AlertUpdateIn
from crisisconnect.schemas.common import DeletedOut, NoteIn, UserRef
from crisisconnect.schemas.help_request import (
    HelpRequestCreateIn,
    HelpRequestMapOut,
    HelpRequestOut,
    HelpRequestsResponse,
    HelpRequestUpdateIn,
    VolunteerStatsOut,
)
from crisisconnect.schemas.incident import (
    IncidentMapOut,
    IncidentOut,
    IncidentReportIn,
    IncidentsResponse,
)
from crisisconnect.schemas.resource import (
    ResourceIn,
    ResourceOut,
    ResourcesResponse,
    ResourceUpdateIn,
)
from crisisconnect.schemas.task import TaskAssignIn, TaskDecisionIn, TaskOut, TasksResponse
from crisisconnect.schemas.volunteer_profile import (
    ApplicationStatusIn,
    SkillsIn,
    VolunteerApplicationIn,
    VolunteerProfileOut,
    VolunteerProfilesResponse,
    VolunteerProfileUpdateIn,
)

__all__ = [
    "AlertIn",
    "AlertOut",
    "AlertUpdateIn",
    "AlertsResponse",
    "ApplicationStatusIn",
    "DeletedOut",
    "HelpRequestCreateIn",
    "HelpRequestMapOut",
    "HelpRequestOut",
    "HelpRequestUpdateIn",
    "HelpRequestsResponse",
    "IncidentMapOut",
    "IncidentOut",
    "IncidentReportIn",
    "IncidentsResponse",
    "NoteIn",
    "ResourceIn",
    "ResourceOut",
    "ResourceUpdateIn",
    "ResourcesResponse",
    "SkillsIn",
    "TaskAssignIn",
    "TaskDecisionIn",
    "TaskOut",
    "TasksResponse",
    "UserRef",
    "VolunteerApplicationIn",
    "VolunteerProfileOut",
    "VolunteerProfileUpdateIn",
    "VolunteerProfilesResponse",
    "VolunteerStatsOut",
]
