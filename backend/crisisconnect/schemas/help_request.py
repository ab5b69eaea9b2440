"""Pydantic schemas for help requests."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from crisisconnect.models.enums import HelpRequestCategory, HelpRequestStatus, Priority
from crisisconnect.schemas.common import NoteOut, UserRef


class LocationIn(BaseModel):
    """Captured position of a help request."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def reject_uncaptured(self) -> "LocationIn":
        # (0, 0) is the unset default on clients, not a real capture
        if self.latitude == 0 and self.longitude == 0:
            raise ValueError("Location coordinates were not captured")
        return self


class LocationOut(BaseModel):
    latitude: float
    longitude: float
    address: str | None = None
    coordinates: list[float] | None = None


class HelpRequestCreateIn(BaseModel):
    """
    Help request submitted by a civilian.

    Status and claimant are always server-assigned; client values are ignored.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    location: LocationIn
    category: HelpRequestCategory = HelpRequestCategory.OTHER
    priority: Priority = Priority.MEDIUM


class HelpRequestUpdateIn(BaseModel):
    """Partial update. Only fields present in the body are applied."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1)
    location: LocationIn | None = None
    category: HelpRequestCategory | None = None
    priority: Priority | None = None
    status: HelpRequestStatus | None = None
    is_verified: bool | None = None


class HelpRequestOut(BaseModel):
    """Help request response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    location: LocationOut
    category: HelpRequestCategory
    priority: Priority
    status: HelpRequestStatus

    civilian: UserRef | None = None
    claimed_by: UserRef | None = None
    is_verified: bool
    verified_by: UserRef | None = None
    notes: list[NoteOut] = []

    created_at: datetime
    updated_at: datetime

    # Only populated by distance-ranked queries
    distance_km: float | None = None


class HelpRequestMapOut(BaseModel):
    """Reduced projection for map markers."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    category: HelpRequestCategory
    priority: Priority
    status: HelpRequestStatus
    latitude: float
    longitude: float
    created_at: datetime
    civilian: UserRef | None = None


class HelpRequestsResponse(BaseModel):
    """List response for help requests."""

    requests: list[HelpRequestOut]
    total: int


class VolunteerStatsOut(BaseModel):
    total_claims: int
    active_claims: int
    resolved_claims: int
