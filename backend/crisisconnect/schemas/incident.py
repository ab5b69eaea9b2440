"""Pydantic schemas for incidents."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from crisisconnect.models.enums import IncidentStatus
from crisisconnect.schemas.common import UserRef


class IncidentReportIn(BaseModel):
    """
    Incident report submitted by a civilian.

    Every field is required. Any status supplied by the client is ignored.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    location: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=100)
    severity: int = Field(..., ge=1, le=5)
    description: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class IncidentOut(BaseModel):
    """Incident response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    location: str
    type: str
    severity: int
    description: str
    latitude: float
    longitude: float
    coordinates: list[float] | None = None
    status: IncidentStatus

    reported_by: UserRef | None = None
    verified_by: UserRef | None = None
    verified_at: datetime | None = None

    created_at: datetime
    updated_at: datetime


class IncidentMapOut(BaseModel):
    """Reduced projection for map markers."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    location: str
    latitude: float
    longitude: float
    severity: int
    status: IncidentStatus
    created_at: datetime
    reported_by: UserRef | None = None


class IncidentsResponse(BaseModel):
    """List response for incidents."""

    incidents: list[IncidentOut]
    total: int
