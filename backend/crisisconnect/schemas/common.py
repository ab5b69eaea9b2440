"""Shared pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserRef(BaseModel):
    """Populated projection of a referenced user."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    role: str | None = None


class Coordinates(BaseModel):
    """Geographic coordinates."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class NoteIn(BaseModel):
    """Note appended to a help request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    text: str = Field(..., min_length=1, max_length=2000)
    # Optimistic concurrency: reject if the request changed since this timestamp
    expected_updated_at: datetime | None = None


class NoteOut(BaseModel):
    text: str
    author_id: str
    added_at: datetime


class DeletedOut(BaseModel):
    """Acknowledgement for delete operations."""

    id: str
    message: str
