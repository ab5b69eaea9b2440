"""Pydantic schemas for resources."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from crisisconnect.models.enums import ResourceType
from crisisconnect.schemas.common import UserRef


class ResourceLocation(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str | None = Field(None, max_length=255)


class ResourceContact(BaseModel):
    phone: str | None = Field(None, max_length=32)
    email: str | None = Field(None, max_length=255)


class ResourceIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    type: ResourceType
    description: str | None = None
    location: ResourceLocation
    capacity: int | None = Field(None, ge=0)
    current_occupancy: int = Field(0, ge=0)
    contact: ResourceContact = ResourceContact()


class ResourceUpdateIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=200)
    type: ResourceType | None = None
    description: str | None = None
    location: ResourceLocation | None = None
    capacity: int | None = Field(None, ge=0)
    current_occupancy: int | None = Field(None, ge=0)
    contact: ResourceContact | None = None
    is_active: bool | None = None


class ResourceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: ResourceType
    description: str | None = None
    location: ResourceLocation
    capacity: int | None = None
    current_occupancy: int
    contact: ResourceContact
    is_active: bool
    created_by: UserRef | None = None
    created_at: datetime
    updated_at: datetime


class ResourcesResponse(BaseModel):
    resources: list[ResourceOut]
    total: int
