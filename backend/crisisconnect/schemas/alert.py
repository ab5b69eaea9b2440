"""Pydantic schemas for alerts."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from crisisconnect.models.enums import AlertAudience, AlertType
from crisisconnect.schemas.common import UserRef


class AlertIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: AlertType = AlertType.INFO
    target_audience: AlertAudience = AlertAudience.ALL


class AlertUpdateIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(None, min_length=1, max_length=200)
    message: str | None = Field(None, min_length=1)
    type: AlertType | None = None
    target_audience: AlertAudience | None = None
    is_active: bool | None = None


class AlertOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    message: str
    type: AlertType
    target_audience: AlertAudience
    is_active: bool
    created_by: UserRef | None = None
    created_at: datetime
    updated_at: datetime


class AlertsResponse(BaseModel):
    alerts: list[AlertOut]
    total: int
