"""Pydantic schemas for tasks."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from crisisconnect.models.enums import IncidentStatus, TaskStatus
from crisisconnect.schemas.common import UserRef
from crisisconnect.schemas.volunteer_profile import VolunteerProfileOut


class TaskAssignIn(BaseModel):
    """Task assignment created by an admin."""

    model_config = ConfigDict(str_strip_whitespace=True)

    task_type: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    volunteer_id: str = Field(..., min_length=1)
    incident_id: str | None = None
    extra_details: dict[str, Any] = {}


class TaskDecisionIn(BaseModel):
    """Volunteer decision: 2 accepts, 3 rejects."""

    status: Literal[2, 3]


class TaskIncidentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    location: str
    type: str
    severity: int
    description: str
    latitude: float
    longitude: float
    status: IncidentStatus


class TaskOut(BaseModel):
    """Task response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    task_type: str
    description: str
    status: TaskStatus

    incident: TaskIncidentOut | None = None
    volunteer: VolunteerProfileOut
    assigned_by: UserRef | None = None

    assigned_at: datetime
    accepted_at: datetime | None = None
    completed_at: datetime | None = None

    extra_details: dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime


class TasksResponse(BaseModel):
    tasks: list[TaskOut]
    total: int
