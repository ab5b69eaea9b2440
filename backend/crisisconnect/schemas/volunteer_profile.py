"""Pydantic schemas for volunteer profiles."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from crisisconnect.models.enums import ApplicationStatus, VolunteerTaskStatus
from crisisconnect.schemas.common import UserRef


class VolunteerApplicationIn(BaseModel):
    skills: list[str] = []
    id_proof: str | None = Field(None, max_length=512)
    experience_certificate: str | None = Field(None, max_length=512)
    bio: str | None = None
    availability: bool = True


class VolunteerProfileUpdateIn(BaseModel):
    skills: list[str] | None = None
    bio: str | None = None
    availability: bool | None = None


class ApplicationStatusIn(BaseModel):
    application_status: ApplicationStatus


class SkillsIn(BaseModel):
    skills: list[str]


class VolunteerProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    user: UserRef | None = None
    skills: list[str]
    id_proof: str | None = None
    experience_certificate: str | None = None
    application_status: ApplicationStatus
    task_status: VolunteerTaskStatus
    bio: str | None = None
    availability: bool
    created_at: datetime
    updated_at: datetime


class VolunteerProfilesResponse(BaseModel):
    profiles: list[VolunteerProfileOut]
    total: int
